"""Data models for hashcommit."""

from hashcommit.models.opening import Opening

__all__ = ["Opening"]

"""Shared fixtures."""

import os

import pytest


@pytest.fixture
def clean_env():
    """Strip HASHCOMMIT_* variables before and after a test."""
    def _strip() -> None:
        for name in [k for k in os.environ if k.startswith("HASHCOMMIT_")]:
            del os.environ[name]

    _strip()
    yield
    _strip()

"""Cryptographic primitives — canonical encoding, hash commitments, anchoring."""

from hashcommit.crypto.encoding import EncodingError, FixedBytes, encode
from hashcommit.crypto.commitment import (
    HashCommitmentScheme,
    Sha256Commitment,
    forge_commitment,
)

__all__ = [
    "EncodingError",
    "FixedBytes",
    "encode",
    "HashCommitmentScheme",
    "Sha256Commitment",
    "forge_commitment",
]

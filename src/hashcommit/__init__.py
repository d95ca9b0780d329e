"""hashcommit — SHA-256 hash commitments over canonically encoded secrets."""

from hashcommit.crypto.commitment import (
    DIGEST_SIZE,
    HashCommitmentScheme,
    Sha256Commitment,
    commit,
    verify,
)
from hashcommit.crypto.encoding import EncodingError, FixedBytes, encode

__version__ = "0.1.0"

__all__ = [
    "DIGEST_SIZE",
    "EncodingError",
    "FixedBytes",
    "HashCommitmentScheme",
    "Sha256Commitment",
    "commit",
    "encode",
    "verify",
]

"""Hash commitment scheme — commit to a secret now, open it later.

Commit phase: the prover hides a secret s with a random nonce r and
publishes C = SHA-256(encode(s) || r).

Open phase: the prover reveals s and r.

Verification phase: the verifier recomputes the digest from the revealed
s and r and compares it with the published C. A mismatch means the
commitment was not honoured; it is an ordinary outcome, not an error.

Both phases go through forge_commitment, so commit and verify can never
drift apart in encoding or concatenation order.
"""

from __future__ import annotations

import abc
import hashlib
import hmac
import logging
from typing import Any, Generic, TypeVar

from hashcommit.crypto.encoding import Encoder, EncodingError, encode


logger = logging.getLogger(__name__)

T = TypeVar("T")

# SHA-256 digest length in bytes.
DIGEST_SIZE = 32

_BytesLike = (bytes, bytearray, memoryview)


class HashCommitmentScheme(abc.ABC, Generic[T]):
    """A party in a hash commitment scheme.

    Each implementation is responsible for one dedicated hash function.
    """

    @abc.abstractmethod
    def commit(self) -> bytes:
        """Return the commitment for the party's own secret and nonce."""

    @abc.abstractmethod
    def verify(self, com: bytes, s: T, r: bytes) -> bool:
        """Return True iff com opens to the supplied secret and nonce."""


class Sha256Commitment(HashCommitmentScheme[T]):
    """SHA-256 commitment party bound to one (secret, nonce) pair.

    The secret is held by reference and never mutated. The nonce is
    copied into immutable bytes. Callers must not mutate the secret
    while a commit call is in flight.

    The party can be used as a context manager to bound its lifetime:

        with Sha256Commitment(secret, nonce) as party:
            com = party.commit()

    After the block exits (or release() is called) the stored values are
    dropped and commit() raises RuntimeError. verify() only uses the
    values passed to it and stays available.
    """

    def __init__(
        self,
        secret: T,
        nonce: bytes,
        encoder: Encoder = encode,
        constant_time: bool = True,
    ) -> None:
        self._secret = secret
        self._nonce = _as_nonce(nonce)
        self._encoder = encoder
        self._constant_time = constant_time
        self._released = False

    def __enter__(self) -> Sha256Commitment[T]:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.release()

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Drop the references to the secret and nonce."""
        self._secret = None  # type: ignore[assignment]
        self._nonce = b""
        self._released = True

    def commit(self) -> bytes:
        if self._released:
            raise RuntimeError("Commitment party already released. Create a new party.")
        return forge_commitment(self._secret, self._nonce, self._encoder)

    def verify(self, com: bytes, s: T, r: bytes) -> bool:
        return verify(
            com, s, r,
            encoder=self._encoder,
            constant_time=self._constant_time,
        )


def forge_commitment(secret: Any, nonce: bytes, encoder: Encoder = encode) -> bytes:
    """Compute SHA-256(encoder(secret) || nonce).

    Encoding happens before any hashing; an EncodingError raised by the
    encoder propagates unchanged.
    """
    encoded = encoder(secret)
    if not isinstance(encoded, _BytesLike):
        raise EncodingError(
            f"Encoder returned {type(encoded).__name__}, expected bytes"
        )
    h = hashlib.sha256()
    h.update(encoded)
    h.update(_as_nonce(nonce))
    return h.digest()


def commit(secret: Any, nonce: bytes, encoder: Encoder = encode) -> bytes:
    """Return the 32-byte commitment to secret under nonce."""
    return forge_commitment(secret, nonce, encoder)


def verify(
    commitment: bytes,
    secret: Any,
    nonce: bytes,
    encoder: Encoder = encode,
    constant_time: bool = True,
) -> bool:
    """Check that commitment opens to (secret, nonce).

    Returns False on any mismatch, including a commitment of the wrong
    length. Raises EncodingError only if the secret cannot be encoded.
    """
    expected = forge_commitment(secret, nonce, encoder)
    if not isinstance(commitment, _BytesLike):
        raise TypeError(
            f"Commitment must be bytes-like, got {type(commitment).__name__}"
        )
    supplied = bytes(commitment)
    if len(supplied) != DIGEST_SIZE:
        logger.debug("Commitment has length %d, expected %d", len(supplied), DIGEST_SIZE)
        return False

    if constant_time:
        matched = hmac.compare_digest(expected, supplied)
    else:
        matched = expected == supplied
    if not matched:
        logger.debug("Commitment %s does not match the opening", supplied.hex())
    return matched


def _as_nonce(nonce: Any) -> bytes:
    if not isinstance(nonce, _BytesLike):
        raise TypeError(f"Nonce must be bytes-like, got {type(nonce).__name__}")
    return bytes(nonce)

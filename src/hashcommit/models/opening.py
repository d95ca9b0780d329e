"""Opening model — what the prover reveals during the open phase.

An opening bundles the published commitment with the secret and nonce
that produced it. It serializes to a flat JSON object of hex strings so
it can be handed from prover to verifier as a file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from hashcommit.crypto.encoding import FixedBytes


@dataclass(frozen=True)
class Opening:
    """A commitment together with the values that open it.

    ``secret`` is either raw bytes or text. ``fixed`` marks a byte
    secret that is committed as a fixed-size array (no length prefix).
    """
    commitment: bytes
    secret: Union[bytes, str]
    nonce: bytes
    fixed: bool = False

    def __post_init__(self) -> None:
        if self.fixed and not isinstance(self.secret, bytes):
            raise ValueError("Only byte secrets can be committed as fixed arrays")

    def secret_value(self) -> Union[bytes, str, FixedBytes]:
        """Return the secret in the form it was committed."""
        if self.fixed:
            return FixedBytes(self.secret)  # type: ignore[arg-type]
        return self.secret

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "commitment": self.commitment.hex(),
            "nonce": self.nonce.hex(),
            "fixed": self.fixed,
        }
        if isinstance(self.secret, bytes):
            data["secret_hex"] = self.secret.hex()
        else:
            data["secret_text"] = self.secret
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Opening:
        """Rebuild an opening from to_dict() output.

        Raises ValueError on missing keys, malformed hex, or fields of
        the wrong JSON type.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Opening must be a JSON object, got {type(data).__name__}")
        try:
            commitment = bytes.fromhex(data["commitment"])
            nonce = bytes.fromhex(data["nonce"])
        except KeyError as exc:
            raise ValueError(f"Opening is missing field: {exc.args[0]}") from exc
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Opening contains malformed hex: {exc}") from exc

        secret: Union[bytes, str]
        if "secret_hex" in data:
            try:
                secret = bytes.fromhex(data["secret_hex"])
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Opening contains malformed hex: {exc}") from exc
        elif "secret_text" in data:
            secret = data["secret_text"]
            if not isinstance(secret, str):
                raise ValueError(
                    f"Opening secret_text must be a string, got {type(secret).__name__}"
                )
        else:
            raise ValueError("Opening is missing field: secret_hex or secret_text")

        fixed = data.get("fixed", False)
        if not isinstance(fixed, bool):
            raise ValueError(f"Opening fixed must be a boolean, got {type(fixed).__name__}")

        return cls(commitment=commitment, secret=secret, nonce=nonce, fixed=fixed)

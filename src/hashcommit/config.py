"""Runtime settings loaded from the environment.

Values come from environment variables, optionally seeded from a .env
file. Only the CLI and the anchoring path read settings; the commitment
routines take everything they need as arguments.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from hashcommit.crypto.anchor import SEPOLIA_CHAIN_ID


# Shortest nonce the CLI will generate; below this hiding is not credible.
MIN_NONCE_BYTES = 16

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class ConfigError(Exception):
    """Raised when a setting is missing or malformed."""


@dataclass(frozen=True)
class Settings:
    """Resolved configuration."""
    nonce_bytes: int = 32
    constant_time: bool = True
    rpc_url: Optional[str] = None
    private_key: Optional[str] = None
    chain_id: int = SEPOLIA_CHAIN_ID
    gas: int = 30_000
    gas_price_gwei: str = "2"
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.nonce_bytes < MIN_NONCE_BYTES:
            raise ConfigError(
                f"HASHCOMMIT_NONCE_BYTES must be at least {MIN_NONCE_BYTES}, "
                f"got {self.nonce_bytes}"
            )
        if logging.getLevelName(self.log_level) == f"Level {self.log_level}":
            raise ConfigError(f"Unknown HASHCOMMIT_LOG_LEVEL: {self.log_level}")

    @classmethod
    def from_env(
        cls,
        env_file: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> Settings:
        """Build settings from a .env file and the process environment.

        Without env_file, the nearest .env at or above the working
        directory is used. Variables already present in the environment
        win over the file.
        """
        if environ is None:
            load_dotenv(env_file if env_file is not None else find_dotenv(usecwd=True))
            environ = os.environ

        return cls(
            nonce_bytes=_int(environ, "HASHCOMMIT_NONCE_BYTES", 32),
            constant_time=_bool(environ, "HASHCOMMIT_CONSTANT_TIME", True),
            rpc_url=environ.get("HASHCOMMIT_RPC_URL") or None,
            private_key=environ.get("HASHCOMMIT_PRIVATE_KEY") or None,
            chain_id=_int(environ, "HASHCOMMIT_CHAIN_ID", SEPOLIA_CHAIN_ID),
            gas=_int(environ, "HASHCOMMIT_GAS", 30_000),
            gas_price_gwei=environ.get("HASHCOMMIT_GAS_PRICE_GWEI", "2"),
            log_level=environ.get("HASHCOMMIT_LOG_LEVEL", "WARNING").upper(),
        )

    def require_anchor(self) -> tuple[str, str]:
        """Return (rpc_url, private_key) or raise if either is missing."""
        if not self.rpc_url or not self.private_key:
            raise ConfigError(
                "Missing HASHCOMMIT_RPC_URL and/or HASHCOMMIT_PRIVATE_KEY"
            )
        return self.rpc_url, self.private_key


def _int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def _bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")

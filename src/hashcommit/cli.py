"""hashcommit CLI — commit to secrets and check openings from the shell.

Usage:
    python -m hashcommit.cli commit --secret-text "heads" --out opening.json
    python -m hashcommit.cli commit --secret-hex 34323432 --fixed --nonce-hex 32343234
    python -m hashcommit.cli verify --opening opening.json
    python -m hashcommit.cli verify --commitment <hex> --secret-text "heads" --nonce-hex <hex>
    python -m hashcommit.cli anchor --commitment <hex>
"""

from __future__ import annotations

import argparse
import json
import logging
import secrets
import sys
from pathlib import Path
from typing import Union

from hashcommit.config import ConfigError, Settings
from hashcommit.crypto.anchor import anchor_commitment
from hashcommit.crypto.commitment import commit, verify
from hashcommit.crypto.encoding import EncodingError, FixedBytes
from hashcommit.models.opening import Opening


logger = logging.getLogger(__name__)


def _load_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env(env_file=args.env_file)
    logging.basicConfig(level=settings.log_level)
    return settings


def _parse_hex(value: str, what: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError as exc:
        raise ValueError(f"Invalid hex for {what}: {value!r}") from exc


def _secret_from_args(args: argparse.Namespace) -> Union[bytes, str]:
    if args.secret_hex is not None:
        return _parse_hex(args.secret_hex, "secret")
    if args.fixed:
        raise ValueError("--fixed requires --secret-hex")
    return args.secret_text


def cmd_commit(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    secret = _secret_from_args(args)
    if args.nonce_hex is not None:
        nonce = _parse_hex(args.nonce_hex, "nonce")
    else:
        nonce = secrets.token_bytes(settings.nonce_bytes)

    com = commit(FixedBytes(secret) if args.fixed else secret, nonce)
    opening = Opening(commitment=com, secret=secret, nonce=nonce, fixed=args.fixed)

    if args.out is not None:
        args.out.write_text(json.dumps(opening.to_dict(), indent=2), encoding="utf-8")
        logger.info("Wrote opening to %s", args.out)

    print(json.dumps({"commitment": com.hex(), "nonce": nonce.hex()}, indent=2))
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    settings = _load_settings(args)
    if args.opening is not None:
        data = json.loads(args.opening.read_text(encoding="utf-8"))
        opening = Opening.from_dict(data)
    else:
        if args.commitment is None or args.nonce_hex is None:
            raise ValueError("verify requires --opening or --commitment and --nonce-hex")
        if args.secret_hex is None and args.secret_text is None:
            raise ValueError("verify requires --secret-hex or --secret-text")
        opening = Opening(
            commitment=_parse_hex(args.commitment, "commitment"),
            secret=_secret_from_args(args),
            nonce=_parse_hex(args.nonce_hex, "nonce"),
            fixed=args.fixed,
        )

    valid = verify(
        opening.commitment,
        opening.secret_value(),
        opening.nonce,
        constant_time=settings.constant_time,
    )
    print("valid" if valid else "invalid")
    return 0 if valid else 1


def cmd_anchor(args: argparse.Namespace) -> int:
    from web3.exceptions import Web3Exception

    settings = _load_settings(args)
    rpc_url, private_key = settings.require_anchor()
    try:
        record = anchor_commitment(
            _parse_hex(args.commitment, "commitment"),
            rpc_url=rpc_url,
            private_key=private_key,
            chain_id=settings.chain_id,
            gas=settings.gas,
            gas_price_gwei=settings.gas_price_gwei,
        )
    except Web3Exception as exc:
        print(f"Failed: anchoring did not complete: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(record.to_dict(), indent=2))
    return 0


def _add_secret_args(p: argparse.ArgumentParser, required: bool) -> None:
    group = p.add_mutually_exclusive_group(required=required)
    group.add_argument("--secret-hex", help="Secret as hex-encoded bytes")
    group.add_argument("--secret-text", help="Secret as UTF-8 text")
    p.add_argument(
        "--fixed", action="store_true",
        help="Commit a hex secret as a fixed-size array (no length prefix)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hashcommit",
        description="SHA-256 hash commitments",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file with HASHCOMMIT_* settings",
    )
    sub = parser.add_subparsers(dest="command")

    # commit
    p_commit = sub.add_parser("commit", help="Commit to a secret")
    _add_secret_args(p_commit, required=True)
    p_commit.add_argument("--nonce-hex", help="Nonce as hex (default: random)")
    p_commit.add_argument("--out", type=Path, help="Write the opening JSON here")

    # verify
    p_verify = sub.add_parser("verify", help="Verify an opening against a commitment")
    p_verify.add_argument("--opening", type=Path, help="Opening JSON written by commit --out")
    p_verify.add_argument("--commitment", help="Commitment as hex")
    _add_secret_args(p_verify, required=False)
    p_verify.add_argument("--nonce-hex", help="Nonce as hex")

    # anchor
    p_anchor = sub.add_parser("anchor", help="Publish a commitment on-chain")
    p_anchor.add_argument("--commitment", required=True, help="Commitment as hex")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "commit": cmd_commit,
        "verify": cmd_verify,
        "anchor": cmd_anchor,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    try:
        return handler(args)
    except (ConfigError, EncodingError, ValueError, OSError) as exc:
        print(f"Failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

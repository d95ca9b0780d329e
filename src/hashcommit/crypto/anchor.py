"""Blockchain anchoring — publishes a commitment on Ethereum.

A commitment has to be public before it is opened, otherwise the prover
could quietly swap it. Anchoring embeds the 32 commitment bytes in the
data field of a 0-ETH self-send transaction, giving a timestamped,
publicly verifiable record that the commitment existed before the
opening was revealed.

This is NOT a smart contract. No code executes on-chain.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any

from hashcommit.crypto.commitment import DIGEST_SIZE


logger = logging.getLogger(__name__)

SEPOLIA_CHAIN_ID = 11155111
SEPOLIA_EXPLORER = "https://sepolia.etherscan.io/tx/"


@dataclass(frozen=True)
class AnchorRecord:
    """A record of a successful blockchain anchor."""
    commitment: str
    tx_hash: str
    block_number: int
    chain_id: int
    timestamp_utc: str
    explorer_url: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_anchor_transaction(
    commitment: bytes,
    address: str,
    nonce: int,
    chain_id: int,
    gas: int,
    gas_price_wei: int,
) -> dict[str, Any]:
    """Build the unsigned self-send transaction carrying a commitment."""
    if len(commitment) != DIGEST_SIZE:
        raise ValueError(
            f"Commitment must be {DIGEST_SIZE} bytes, got {len(commitment)}"
        )
    return {
        "to": address,  # self-send, 0 ETH
        "value": 0,
        "gas": gas,
        "gasPrice": gas_price_wei,
        "nonce": nonce,
        "chainId": chain_id,
        "data": bytes(commitment),
    }


def anchor_commitment(
    commitment: bytes,
    rpc_url: str,
    private_key: str,
    chain_id: int = SEPOLIA_CHAIN_ID,
    gas: int = 30_000,
    gas_price_gwei: str = "2",
    timeout: int = 300,
    explorer_base: str = SEPOLIA_EXPLORER,
) -> AnchorRecord:
    """Anchor a commitment by embedding it in a transaction.

    Waits for 1 confirmation. Returns a complete AnchorRecord.

    Args:
        commitment: The 32-byte commitment to publish.
        rpc_url: Ethereum RPC endpoint URL.
        private_key: Hex-encoded private key for signing.
        chain_id: Network chain ID (default: 11155111 = Sepolia).
        gas: Gas limit for the transaction.
        gas_price_gwei: Gas price in gwei.
        timeout: Seconds to wait for the receipt.
        explorer_base: Prefix for the block explorer link.
    """
    from web3 import Web3, HTTPProvider
    from eth_account import Account

    w3 = Web3(HTTPProvider(rpc_url))
    acct = Account.from_key(private_key)

    tx = build_anchor_transaction(
        commitment,
        address=acct.address,
        nonce=w3.eth.get_transaction_count(acct.address),
        chain_id=chain_id,
        gas=gas,
        gas_price_wei=w3.to_wei(gas_price_gwei, "gwei"),
    )

    signed = acct.sign_transaction(tx)
    tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
    logger.info("Sent anchor tx %s, waiting for confirmation", tx_hash.hex())

    receipt = w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
    logger.info("Anchor confirmed in block %d", receipt.blockNumber)

    return AnchorRecord(
        commitment=bytes(commitment).hex(),
        tx_hash=tx_hash.hex(),
        block_number=receipt.blockNumber,
        chain_id=chain_id,
        timestamp_utc=datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        explorer_url=f"{explorer_base}{tx_hash.hex()}",
    )

"""
Sign and submit instruction lists via solana-py RPC Client.

Keypairs load from a base58 secret or a JSON array of 64 bytes (Solana CLI
format). RPC responses are read from `.value`; any RPC failure surfaces as
TransactionSubmitError. No retry here: the caller decides.
"""

from __future__ import annotations

import json
from typing import Any

import base58
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from backend_givefi.core.exceptions import TransactionSubmitError, ValidationError
from backend_givefi.givefi_logging import get_logger
from backend_givefi.utils.wallet_utils import short_wallet

logger = get_logger(__name__)

KEYPAIR_LENGTH = 64


def load_keypair(private_key: str) -> Keypair:
    """Load Keypair from base58 string or JSON array of 64 bytes."""
    raw = (private_key or "").strip()
    if not raw:
        raise ValidationError("private key must be non-empty")
    if raw.startswith("["):
        try:
            arr = json.loads(raw)
            secret = bytes(arr[:64])
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            raise ValidationError("Invalid keypair JSON array") from e
    else:
        try:
            secret = base58.b58decode(raw)
        except ValueError as e:
            raise ValidationError("Invalid base58 private key") from e
    if len(secret) != KEYPAIR_LENGTH:
        raise ValidationError(f"Keypair must be {KEYPAIR_LENGTH} bytes, got {len(secret)}")
    try:
        return Keypair.from_bytes(secret)
    except ValueError as e:
        logger.warning("keypair_load_failed", error=str(e))
        raise ValidationError("Invalid private key") from e


def make_client(rpc_url: str) -> Any:
    from solana.rpc.api import Client

    return Client(rpc_url)


def _value(resp: Any) -> Any:
    return getattr(resp, "value", None)


def get_balance_lamports(client: Any, pubkey: Pubkey) -> int:
    """Balance of pubkey in lamports. Raises TransactionSubmitError on RPC failure."""
    try:
        value = _value(client.get_balance(pubkey))
    except Exception as e:
        logger.warning("rpc_get_balance_failed", wallet=short_wallet(str(pubkey)), error=str(e))
        raise TransactionSubmitError(f"Cannot read balance: {e}") from e
    if value is None:
        raise TransactionSubmitError("Cannot read balance: empty RPC response")
    return int(value)


def build_signed_transaction(signer: Keypair, instructions: list[Instruction], recent_blockhash: Any) -> Transaction:
    message = Message.new_with_blockhash(instructions, signer.pubkey(), recent_blockhash)
    return Transaction([signer], message, recent_blockhash)


def send_instructions(client: Any, signer: Keypair, instructions: list[Instruction], *, label: str = "transfer") -> str:
    """
    Sign instructions into one transaction with the latest blockhash and send.
    Returns the signature string; raises TransactionSubmitError on failure.
    """
    if not instructions:
        raise ValidationError("no instructions to send")
    try:
        blockhash_resp = _value(client.get_latest_blockhash())
        recent_blockhash = getattr(blockhash_resp, "blockhash", None)
        if recent_blockhash is None:
            raise RuntimeError("No blockhash")
        tx = build_signed_transaction(signer, instructions, recent_blockhash)
        sig = _value(client.send_transaction(tx))
        if not sig:
            raise RuntimeError("RPC returned no signature")
    except Exception as e:
        logger.warning("tx_send_failed", label=label, error=str(e))
        raise TransactionSubmitError(f"{label} transaction failed: {e}") from e
    signature = str(sig)
    logger.info(
        "tx_sent",
        label=label,
        signature=signature,
        instruction_count=len(instructions),
        payer=short_wallet(str(signer.pubkey())),
    )
    return signature

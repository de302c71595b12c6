"""
Jupiter v6 quote and swap API.

- GET {base}/quote with inputMint/outputMint/amount (lamports)/slippageBps.
- POST {base}/swap with the quote and the user's public key; the response
  carries a base64 serialized VersionedTransaction for the wallet to sign.
Failures raise SwapServiceError; there is no retry.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import requests
from solders.transaction import VersionedTransaction

from backend_givefi.config import get_settings
from backend_givefi.core.exceptions import SwapServiceError
from backend_givefi.givefi_logging import get_logger
from backend_givefi.utils.wallet_utils import parse_wallet, short_wallet, sol_to_lamports

logger = get_logger(__name__)

SOL_MINT = "So11111111111111111111111111111111111111112"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
SLIPPAGE_BPS = 100
USDC_DECIMALS = 6
SOL_DECIMALS = 9


@dataclass(frozen=True)
class JupiterQuote:
    """Quote converted to display units; quote_response is passed back to /swap unchanged."""

    usdc_amount: Decimal
    fee: Decimal
    quote_response: dict[str, Any]


def _request(method: str, url: str, *, timeout: float, **kwargs: Any) -> dict[str, Any]:
    try:
        r = requests.request(method, url, timeout=timeout, **kwargs)
    except requests.RequestException as e:
        logger.error("jupiter_request_failed", url=url, error=str(e))
        raise SwapServiceError(f"Jupiter API error: {e}") from e
    if not r.ok:
        logger.error("jupiter_http_error", url=url, status_code=r.status_code, reason=r.reason)
        raise SwapServiceError(f"Jupiter API error: {r.status_code} {r.reason}")
    try:
        data = r.json()
    except ValueError as e:
        raise SwapServiceError("Jupiter API returned invalid JSON") from e
    if not isinstance(data, dict):
        raise SwapServiceError("Jupiter API returned unexpected payload")
    return data


def _parse_quote(quote_response: dict[str, Any]) -> JupiterQuote:
    try:
        out_amount = Decimal(str(quote_response["outAmount"]))
        in_amount = Decimal(str(quote_response.get("inAmount", 0)))
        threshold = quote_response.get("otherAmountThreshold")
    except (KeyError, ArithmeticError) as e:
        raise SwapServiceError(f"Malformed Jupiter quote: {e}") from e
    usdc_amount = out_amount / (10 ** USDC_DECIMALS)
    fee = Decimal(0)
    if threshold:
        fee = (in_amount - Decimal(str(threshold))) / (10 ** SOL_DECIMALS)
    return JupiterQuote(usdc_amount=usdc_amount, fee=fee, quote_response=quote_response)


def get_jupiter_quote(
    sol_amount: object,
    from_mint: str = SOL_MINT,
    to_mint: str = USDC_MINT,
    *,
    slippage_bps: int = SLIPPAGE_BPS,
    api_base: str | None = None,
) -> JupiterQuote:
    """Fetch a Jupiter quote for sol_amount (SOL) from from_mint to to_mint."""
    settings = get_settings()
    base = (api_base or settings.jupiter_api_base).rstrip("/")
    params = {
        "inputMint": from_mint,
        "outputMint": to_mint,
        "amount": sol_to_lamports(sol_amount),
        "slippageBps": slippage_bps,
    }
    data = _request("GET", f"{base}/quote", params=params, timeout=settings.request_timeout_sec)
    quote = _parse_quote(data)
    logger.info(
        "jupiter_quote",
        in_lamports=params["amount"],
        usdc_amount=str(quote.usdc_amount),
        fee=str(quote.fee),
    )
    return quote


def create_jupiter_swap_transaction(
    user_public_key: str,
    sol_amount: object,
    *,
    slippage_bps: int = SLIPPAGE_BPS,
    api_base: str | None = None,
) -> VersionedTransaction:
    """
    Quote, then request the serialized swap transaction for user_public_key.
    Returns the unsigned VersionedTransaction (wallet signs and submits).
    """
    settings = get_settings()
    parse_wallet(user_public_key, "user public key")
    base = (api_base or settings.jupiter_api_base).rstrip("/")
    quote = get_jupiter_quote(sol_amount, slippage_bps=slippage_bps, api_base=base)
    body = {
        "quoteResponse": quote.quote_response,
        "userPublicKey": user_public_key,
        "wrapAndUnwrapSol": True,
    }
    data = _request("POST", f"{base}/swap", json=body, timeout=settings.request_timeout_sec)
    encoded = data.get("swapTransaction")
    if not encoded:
        raise SwapServiceError("Jupiter swap response missing swapTransaction")
    try:
        tx = VersionedTransaction.from_bytes(base64.b64decode(encoded))
    except Exception as e:  # binascii.Error or solders bincode error
        raise SwapServiceError(f"Cannot decode Jupiter swap transaction: {e}") from e
    logger.info("jupiter_swap_transaction", user=short_wallet(user_public_key))
    return tx

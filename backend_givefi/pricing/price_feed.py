"""
SOL/USD price from CoinGecko simple/price.

Any request or payload failure falls back to the last good price, or to the
configured fallback (134.21) when no price has been seen yet. Never raises to
the caller: a missing price must not break the swap flow.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import requests

from backend_givefi.config import get_settings
from backend_givefi.core.exceptions import PriceFeedError, ValidationError
from backend_givefi.givefi_logging import get_logger
from backend_givefi.utils.wallet_utils import to_decimal

logger = get_logger(__name__)

CENT = Decimal("0.01")


def _parse_price(data: Any) -> Decimal:
    """Extract solana.usd from the CoinGecko payload. Raises PriceFeedError if absent or non-positive."""
    try:
        raw = data["solana"]["usd"]
    except (KeyError, TypeError) as e:
        raise PriceFeedError(f"price payload missing solana.usd: {data!r}") from e
    try:
        price = to_decimal(raw, "price")
    except ValidationError as e:
        raise PriceFeedError(str(e)) from e
    if price <= 0:
        raise PriceFeedError(f"non-positive price: {price}")
    return price


def fetch_solana_price(
    url: str | None = None,
    timeout: float | None = None,
    session: requests.Session | None = None,
) -> Decimal:
    """Fetch SOL/USD. Raises PriceFeedError on any failure."""
    settings = get_settings()
    url = url or settings.price_api_url
    timeout = timeout if timeout is not None else settings.request_timeout_sec
    http = session or requests
    try:
        r = http.get(url, params={"ids": "solana", "vs_currencies": "usd"}, timeout=timeout)
        r.raise_for_status()
        data = r.json()
    except (requests.RequestException, ValueError) as e:
        raise PriceFeedError(f"price request failed: {e}") from e
    return _parse_price(data)


class PriceFeed:
    """
    Price source with fallback. Remembers the last good price so a failed
    poll keeps showing the previous value instead of the hardcoded one.
    """

    def __init__(
        self,
        fallback_price: Decimal | None = None,
        url: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        settings = get_settings()
        self._fallback = fallback_price if fallback_price is not None else settings.fallback_sol_price
        self._url = url
        self._session = session
        self._last_price: Decimal | None = None

    @property
    def last_price(self) -> Decimal | None:
        return self._last_price

    @property
    def current_price(self) -> Decimal:
        """Last good price, or the fallback when none has been fetched."""
        return self._last_price if self._last_price is not None else self._fallback

    def get_price(self) -> Decimal:
        try:
            price = fetch_solana_price(url=self._url, session=self._session)
        except PriceFeedError as e:
            fallback = self.current_price
            logger.warning("price_feed_fallback", error=str(e), price=str(fallback))
            return fallback
        self._last_price = price
        logger.debug("price_feed_updated", price=str(price))
        return price


def get_solana_price() -> Decimal:
    """Current SOL price in USD, or the configured fallback if the API fails."""
    return PriceFeed().get_price()


def calculate_usd_value(sol_amount: object, sol_price: object) -> str:
    """USD value with 2 decimals; '0.00' when either side is missing or zero."""
    if not sol_amount or not sol_price:
        return "0.00"
    try:
        value = to_decimal(sol_amount) * to_decimal(sol_price, "price")
    except ValidationError:
        return "0.00"
    return str(value.quantize(CENT, rounding=ROUND_HALF_UP))

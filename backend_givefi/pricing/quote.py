"""
Swap quote: SOL amount at a reference USD price, minus a fixed percentage fee.

Arithmetic runs on Decimal and both outputs are rounded half-up to cents, so
1 SOL at 134.21 with a 0.5% fee gives fee 0.67 and output 133.54.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from backend_givefi.config import get_settings
from backend_givefi.core.exceptions import ValidationError
from backend_givefi.givefi_logging import get_logger
from backend_givefi.utils.wallet_utils import to_decimal

logger = get_logger(__name__)

USD_PRECISION = Decimal("0.01")


@dataclass(frozen=True)
class SwapQuote:
    """Estimated USDC output and fee for a SOL amount."""

    usdc_amount: Decimal
    fee: Decimal
    price: Decimal
    fee_rate: Decimal

    @property
    def gross(self) -> Decimal:
        return self.usdc_amount + self.fee


def resolve_price(price: object, fallback: Decimal) -> Decimal:
    """Return price as Decimal, or fallback when it is missing, non-numeric or non-positive."""
    if price is None:
        logger.warning("quote_price_missing", fallback=str(fallback))
        return fallback
    try:
        value = to_decimal(price, "price")
    except ValidationError:
        logger.warning("quote_price_invalid", price=str(price), fallback=str(fallback))
        return fallback
    if value <= 0:
        logger.warning("quote_price_non_positive", price=str(value), fallback=str(fallback))
        return fallback
    return value


def get_swap_quote(
    sol_amount: object,
    sol_price: object,
    fee_rate: object | None = None,
    *,
    fallback_price: Decimal | None = None,
) -> SwapQuote:
    """
    Compute the USDC output and fee for sol_amount at sol_price.

    Raises ValidationError for a negative or non-numeric amount. A bad price
    never raises: the fallback price is used instead.
    """
    settings = get_settings()
    amount = to_decimal(sol_amount)
    if amount < 0:
        raise ValidationError("amount must be non-negative")
    rate = to_decimal(fee_rate if fee_rate is not None else settings.swap_fee_rate, "fee_rate")
    if rate < 0 or rate >= 1:
        raise ValidationError("fee_rate must be in [0, 1)")
    price = resolve_price(
        sol_price,
        fallback_price if fallback_price is not None else settings.fallback_sol_price,
    )

    exact = amount * price
    fee = (exact * rate).quantize(USD_PRECISION, rounding=ROUND_HALF_UP)
    usdc_amount = (exact * (1 - rate)).quantize(USD_PRECISION, rounding=ROUND_HALF_UP)
    return SwapQuote(usdc_amount=usdc_amount, fee=fee, price=price, fee_rate=rate)

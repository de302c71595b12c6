"""
Tests for the swap quote calculator and USD value formatting.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from backend_givefi.core.exceptions import ValidationError
from backend_givefi.pricing.price_feed import calculate_usd_value
from backend_givefi.pricing.quote import get_swap_quote, resolve_price

CENT = Decimal("0.01")


def test_quote_example_one_sol():
    """1 SOL at 134.21 with 0.5% fee -> fee 0.67, output 133.54."""
    q = get_swap_quote(1, 134.21, Decimal("0.005"))
    assert q.fee == Decimal("0.67")
    assert q.usdc_amount == Decimal("133.54")
    assert q.gross == Decimal("134.21")


@pytest.mark.parametrize(
    "amount,price",
    [
        ("0.5", "134.21"),
        ("2.333", "98.765"),
        ("10", "150"),
        ("0.000001", "200.5"),
        ("123.456789", "0.37"),
        ("7", "1"),
    ],
)
def test_output_plus_fee_matches_gross(amount, price):
    """output + fee equals amount * price within one cent; fee is amount * price * rate rounded."""
    rate = Decimal("0.005")
    q = get_swap_quote(amount, price, rate)
    exact = Decimal(amount) * Decimal(price)
    assert abs((q.usdc_amount + q.fee) - exact) <= CENT
    assert abs(q.fee - exact * rate) <= Decimal("0.005")


def test_quote_zero_amount():
    q = get_swap_quote(0, 134.21)
    assert q.usdc_amount == Decimal("0.00")
    assert q.fee == Decimal("0.00")


def test_quote_negative_amount_rejected():
    with pytest.raises(ValidationError):
        get_swap_quote(-1, 134.21)


def test_quote_non_numeric_amount_rejected():
    with pytest.raises(ValidationError):
        get_swap_quote("abc", 134.21)


@pytest.mark.parametrize("bad_price", [None, 0, -5, "n/a"])
def test_quote_bad_price_uses_fallback(bad_price):
    """Missing or non-positive price never fails: the fallback price is used."""
    q = get_swap_quote(1, bad_price, Decimal("0.005"), fallback_price=Decimal("100"))
    assert q.price == Decimal("100")
    assert q.fee == Decimal("0.50")
    assert q.usdc_amount == Decimal("99.50")


def test_resolve_price_keeps_valid_price():
    assert resolve_price("142.5", Decimal("1")) == Decimal("142.5")


def test_quote_uses_configured_fee_rate_by_default():
    q = get_swap_quote(2, 100)
    assert q.fee_rate == Decimal("0.005")
    assert q.fee == Decimal("1.00")
    assert q.usdc_amount == Decimal("199.00")


def test_fee_rate_out_of_range_rejected():
    with pytest.raises(ValidationError):
        get_swap_quote(1, 100, Decimal("1"))


def test_calculate_usd_value():
    assert calculate_usd_value(1.5, 134.21) == "201.32"
    assert calculate_usd_value(0, 134.21) == "0.00"
    assert calculate_usd_value(1, None) == "0.00"

"""
Tests for address validation, lamport conversion and display formatting.
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from solders.keypair import Keypair

from backend_givefi.core.exceptions import ValidationError
from backend_givefi.utils.wallet_utils import (
    format_sol,
    format_sol_balance,
    is_valid_wallet,
    lamports_to_sol,
    parse_wallet,
    sol_to_lamports,
    truncate_address,
)

VALID_WALLET = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"


def test_valid_address_passes():
    assert is_valid_wallet(VALID_WALLET)
    assert is_valid_wallet(str(Keypair().pubkey()))
    assert str(parse_wallet(VALID_WALLET)) == VALID_WALLET


@pytest.mark.parametrize(
    "bad",
    [
        VALID_WALLET[:32],  # truncated: decodes to fewer than 32 bytes
        VALID_WALLET[:-1],
        "not-a-valid-pubkey",
        "0OIl0OIl0OIl0OIl0OIl0OIl0OIl0OIl0OIl0OI",  # not base58
        "",
    ],
)
def test_malformed_address_fails(bad):
    assert not is_valid_wallet(bad)
    with pytest.raises(ValidationError):
        parse_wallet(bad)


def test_sol_to_lamports_floors_on_decimal():
    assert sol_to_lamports("0.01") == 10_000_000
    assert sol_to_lamports(0.01) == 10_000_000
    assert sol_to_lamports(1) == 1_000_000_000
    assert sol_to_lamports(0.1 + 0.2) == 300_000_000
    assert sol_to_lamports("0.0000000019") == 1


def test_sol_to_lamports_rejects_bad_input():
    with pytest.raises(ValidationError):
        sol_to_lamports(-1)
    with pytest.raises(ValidationError):
        sol_to_lamports("ten")


def test_sol_to_lamports_rejects_amounts_beyond_u64():
    assert sol_to_lamports("18446744073.709551615") == 2**64 - 1
    with pytest.raises(ValidationError, match="too large"):
        sol_to_lamports("18446744073.709551616")
    with pytest.raises(ValidationError, match="too large"):
        sol_to_lamports("100000000000")
    with pytest.raises(ValidationError, match="too large"):
        sol_to_lamports("1e999999")


def test_lamports_to_sol():
    assert lamports_to_sol(1_500_000_000) == Decimal("1.5")


def test_format_sol_balance():
    assert format_sol_balance(0) == "0"
    assert format_sol_balance("0.0005") == "<0.001"
    assert format_sol_balance("1.23456") == "1.235"


def test_format_sol():
    assert format_sol(Decimal("0.01")) == "0.01"
    assert format_sol(1) == "1.00"
    assert format_sol("1234.5") == "1,234.50"
    assert format_sol("0.1234567") == "0.123457"


def test_truncate_address():
    assert truncate_address(VALID_WALLET) == "9QCfNu...VUrka"
    assert truncate_address("short") == "short"
    assert truncate_address("") == ""

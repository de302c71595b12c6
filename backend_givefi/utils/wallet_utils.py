"""Wallet validation and display utilities."""

from __future__ import annotations

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

from solders.pubkey import Pubkey

from backend_givefi.core.exceptions import ValidationError

LAMPORTS_PER_SOL = 1_000_000_000
# System Program transfer amounts are u64
MAX_LAMPORTS = 2**64 - 1


def is_valid_wallet(w: str) -> bool:
    """Return True if w is a valid Solana wallet (Pubkey) address."""
    try:
        Pubkey.from_string((w or "").strip())
        return True
    except ValueError:
        return False


def parse_wallet(w: str, field_name: str = "address") -> Pubkey:
    """Parse a base58 wallet into a Pubkey. Raises ValidationError if malformed or not 32 bytes."""
    wallet = (w or "").strip()
    if not wallet:
        raise ValidationError(f"{field_name} must be non-empty")
    try:
        return Pubkey.from_string(wallet)
    except ValueError as e:
        raise ValidationError(f"Invalid Solana {field_name}: {wallet[:16]}") from e


def short_wallet(w: str) -> str:
    """Wallet prefix for log fields."""
    return w[:16] + "..." if len(w) > 16 else w


def truncate_address(address: str, start_chars: int = 6, end_chars: int = 5) -> str:
    """Display form: first 6 and last 5 characters joined by '...'."""
    if not address:
        return ""
    if len(address) <= start_chars + end_chars:
        return address
    return f"{address[:start_chars]}...{address[-end_chars:]}"


def to_decimal(value: object, field_name: str = "amount") -> Decimal:
    """Convert int/float/str/Decimal to Decimal via its string form. Raises ValidationError if not numeric."""
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be numeric")
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            d = Decimal(str(value).strip())
        except (ArithmeticError, ValueError) as e:
            raise ValidationError(f"{field_name} must be numeric") from e
    if not d.is_finite():
        raise ValidationError(f"{field_name} must be finite")
    return d


def sol_to_lamports(amount: object) -> int:
    """floor(amount * 10^9) on Decimal, so 0.01 SOL is exactly 10_000_000 lamports."""
    d = to_decimal(amount)
    if d < 0:
        raise ValidationError("amount must be non-negative")
    try:
        lamports = int((d * LAMPORTS_PER_SOL).to_integral_value(rounding=ROUND_FLOOR))
    except ArithmeticError as e:
        raise ValidationError("amount is too large") from e
    if lamports > MAX_LAMPORTS:
        raise ValidationError("amount is too large")
    return lamports


def lamports_to_sol(lamports: int) -> Decimal:
    return Decimal(int(lamports)) / LAMPORTS_PER_SOL


def format_sol_balance(balance: object) -> str:
    """'0' for zero, '<0.001' below a thousandth, otherwise three decimals."""
    d = to_decimal(balance, "balance")
    if d == 0:
        return "0"
    if d < Decimal("0.001"):
        return "<0.001"
    return str(d.quantize(Decimal("0.001"), rounding=ROUND_HALF_UP))


def format_sol(amount: object) -> str:
    """Between 2 and 6 decimals, trailing zeros beyond the second dropped."""
    d = to_decimal(amount).quantize(Decimal("0.000001"), rounding=ROUND_HALF_UP)
    text = f"{d:,.6f}".rstrip("0")
    whole, _, frac = text.partition(".")
    return f"{whole}.{frac.ljust(2, '0')}"

"""
Compose System Program transfers for a swap with an optional charity donation.

The primary transfer and the donation transfer are built as independent
instruction lists so they can be signed and submitted as separate
transactions: a failed donation never affects the primary transfer.
add_donation_to_instructions covers callers that want a single combined
transaction instead.

All addresses are validated before anything touches the network.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from solders.instruction import Instruction
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer

from backend_givefi.config import get_settings
from backend_givefi.core.exceptions import InsufficientBalanceError, ValidationError
from backend_givefi.givefi_logging import get_logger
from backend_givefi.utils.wallet_utils import (
    format_sol_balance,
    lamports_to_sol,
    parse_wallet,
    short_wallet,
    sol_to_lamports,
    to_decimal,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class DonationOptions:
    """Donation toggle with the fixed amount (SOL) and recipient."""

    enabled: bool = False
    amount_sol: Decimal = field(default_factory=lambda: get_settings().donation_amount_sol)
    recipient: str = field(default_factory=lambda: get_settings().donation_recipient)

    @property
    def lamports(self) -> int:
        return sol_to_lamports(self.amount_sol) if self.enabled else 0


@dataclass(frozen=True)
class ComposedTransfers:
    """Primary transfer and, when donating, the separate donation transfer."""

    payer: Pubkey
    primary: list[Instruction]
    primary_lamports: int
    donation: list[Instruction] | None = None
    donation_lamports: int = 0

    @property
    def total_lamports(self) -> int:
        return self.primary_lamports + self.donation_lamports


def _as_pubkey(value: Pubkey | str, field_name: str) -> Pubkey:
    if isinstance(value, Pubkey):
        return value
    return parse_wallet(value, field_name)


def _positive_amount(amount: object) -> Decimal:
    d = to_decimal(amount)
    if d <= 0:
        raise ValidationError("Please enter a valid SOL amount")
    return d


def build_transfer_instruction(
    from_pubkey: Pubkey | str,
    to_pubkey: Pubkey | str,
    amount_sol: object,
) -> Instruction:
    """System Program transfer of floor(amount_sol * 10^9) lamports."""
    src = _as_pubkey(from_pubkey, "payer address")
    dst = _as_pubkey(to_pubkey, "recipient address")
    lamports = sol_to_lamports(_positive_amount(amount_sol))
    if lamports == 0:
        raise ValidationError("amount is below one lamport")
    return transfer(TransferParams(from_pubkey=src, to_pubkey=dst, lamports=lamports))


def build_donation_instruction(from_pubkey: Pubkey | str, donation: DonationOptions) -> Instruction:
    """Transfer of the fixed donation amount to the donation recipient."""
    return build_transfer_instruction(from_pubkey, donation.recipient, donation.amount_sol)


def add_donation_to_instructions(
    instructions: list[Instruction],
    from_pubkey: Pubkey | str,
    donation: DonationOptions,
) -> list[Instruction]:
    """Return instructions with the donation transfer appended; unchanged copy when not donating."""
    out = list(instructions)
    if not donation.enabled:
        return out
    out.append(build_donation_instruction(from_pubkey, donation))
    logger.info(
        "donation_instruction_added",
        amount_sol=str(donation.amount_sol),
        recipient=short_wallet(donation.recipient),
    )
    return out


def compose_transfers(
    payer: Pubkey | str,
    recipient: Pubkey | str,
    amount_sol: object,
    donation: DonationOptions | None = None,
) -> ComposedTransfers:
    """
    Build the primary transfer and, if donation.enabled, a second independent
    donation transfer. Raises ValidationError for any bad address or amount.
    """
    payer_key = _as_pubkey(payer, "payer address")
    recipient_key = _as_pubkey(recipient, "recipient address")
    primary = build_transfer_instruction(payer_key, recipient_key, amount_sol)
    primary_lamports = sol_to_lamports(amount_sol)
    if donation is None or not donation.enabled:
        return ComposedTransfers(payer=payer_key, primary=[primary], primary_lamports=primary_lamports)
    donation_ix = build_donation_instruction(payer_key, donation)
    return ComposedTransfers(
        payer=payer_key,
        primary=[primary],
        primary_lamports=primary_lamports,
        donation=[donation_ix],
        donation_lamports=donation.lamports,
    )


def required_lamports(
    amount_sol: object,
    donation: DonationOptions | None = None,
    fee_buffer_sol: Decimal | None = None,
) -> int:
    """amount + donation (if enabled) + network-fee buffer, in lamports."""
    buffer = fee_buffer_sol if fee_buffer_sol is not None else get_settings().fee_buffer_sol
    total = sol_to_lamports(amount_sol) + sol_to_lamports(buffer)
    if donation is not None:
        total += donation.lamports
    return total


def check_sufficient_balance(
    balance_lamports: int,
    amount_sol: object,
    donation: DonationOptions | None = None,
    fee_buffer_sol: Decimal | None = None,
) -> int:
    """Return the lamports needed; raise InsufficientBalanceError when balance is short."""
    needed = required_lamports(amount_sol, donation, fee_buffer_sol)
    if needed > balance_lamports:
        needed_sol = lamports_to_sol(needed).quantize(Decimal("0.001"))
        message = (
            f"You need {needed_sol} SOL (including fees) but your balance is "
            f"{format_sol_balance(lamports_to_sol(balance_lamports))} SOL"
        )
        logger.info("insufficient_balance", needed_lamports=needed, balance_lamports=balance_lamports)
        raise InsufficientBalanceError(needed, balance_lamports, message)
    return needed

"""
Swap submission flow with an optional charity donation.

Order of operations:
1. Parse amount and validate addresses (no network yet).
2. Read payer balance; require amount + donation + fee buffer.
3. Send the primary transfer as its own transaction.
4. When donating, send the donation as a second transaction and record it
   in the ledger. Donation and ledger failures only add notices; the
   primary result is never changed by them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from solders.keypair import Keypair

from backend_givefi.config import get_settings
from backend_givefi.config.env import explorer_tx_url
from backend_givefi.core.exceptions import (
    InsufficientBalanceError,
    TransactionSubmitError,
    ValidationError,
)
from backend_givefi.givefi_logging import get_logger
from backend_givefi.transactions.composer import check_sufficient_balance, compose_transfers
from backend_givefi.transactions.submitter import get_balance_lamports, send_instructions
from backend_givefi.utils.wallet_utils import format_sol, parse_wallet, short_wallet, sol_to_lamports, to_decimal
from backend_givefi.widget.context import DonationContext
from backend_givefi.widget.notices import Notice, error_notice

logger = get_logger(__name__)


@dataclass(frozen=True)
class TransferResult:
    label: str
    lamports: int
    signature: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.signature is not None


@dataclass
class SwapOutcome:
    """Primary and donation results are reported separately."""

    primary: TransferResult | None = None
    donation: TransferResult | None = None
    notices: list[Notice] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.primary is not None and self.primary.ok


def parse_amount(text: object) -> Decimal:
    """User-entered SOL amount; must be a positive number worth at least one lamport and fit a u64 transfer."""
    try:
        amount = to_decimal(text)
    except ValidationError as e:
        raise ValidationError("Please enter a valid SOL amount") from e
    if amount <= 0:
        raise ValidationError("Please enter a valid SOL amount")
    if sol_to_lamports(amount) == 0:
        raise ValidationError("Amount is below one lamport")
    return amount


class SwapFlow:
    """
    Submit a swap (modelled as a transfer to the swap recipient) for the
    signer's wallet, plus the donation configured in the DonationContext.
    """

    def __init__(
        self,
        client: Any,
        signer: Keypair,
        context: DonationContext,
        swap_recipient: str | None = None,
        fee_buffer_sol: Decimal | None = None,
    ) -> None:
        settings = get_settings()
        self._client = client
        self._signer = signer
        self._context = context
        self._swap_recipient = swap_recipient or settings.swap_recipient
        self._fee_buffer_sol = fee_buffer_sol if fee_buffer_sol is not None else settings.fee_buffer_sol
        self.sol_balance_lamports: int | None = None

    @property
    def payer(self) -> str:
        return str(self._signer.pubkey())

    def submit(self, amount_text: object) -> SwapOutcome:
        outcome = SwapOutcome()
        try:
            amount = parse_amount(amount_text)
        except ValidationError as e:
            outcome.notices.append(error_notice("Invalid Amount", str(e)))
            return outcome

        donation = self._context.options()
        try:
            parse_wallet(self._swap_recipient, "recipient address")
            if donation.enabled:
                parse_wallet(donation.recipient, "donation recipient")
            composed = compose_transfers(self._signer.pubkey(), self._swap_recipient, amount, donation)
        except ValidationError as e:
            outcome.notices.append(error_notice("Invalid Address", str(e)))
            return outcome

        try:
            balance = get_balance_lamports(self._client, composed.payer)
            self.sol_balance_lamports = balance
            check_sufficient_balance(balance, amount, donation, self._fee_buffer_sol)
        except InsufficientBalanceError as e:
            outcome.notices.append(error_notice("Insufficient Balance", str(e)))
            return outcome
        except TransactionSubmitError as e:
            outcome.notices.append(error_notice("Balance Unavailable", str(e)))
            return outcome

        try:
            sig = send_instructions(self._client, self._signer, composed.primary, label="swap")
        except TransactionSubmitError as e:
            outcome.primary = TransferResult("swap", composed.primary_lamports, error=str(e))
            outcome.notices.append(error_notice("Transaction Failed", str(e)))
            logger.warning("swap_failed", payer=short_wallet(self.payer), error=str(e))
            return outcome
        outcome.primary = TransferResult("swap", composed.primary_lamports, signature=sig)
        logger.info("swap_submitted", payer=short_wallet(self.payer), signature=sig, lamports=composed.primary_lamports)

        if composed.donation:
            outcome.donation = self._send_donation(composed.donation, composed.donation_lamports, outcome)

        self._refresh_balance()
        donated = outcome.donation is not None and outcome.donation.ok
        description = (
            f"Swap and donation completed! Sent {format_sol(amount)} SOL + {format_sol(donation.amount_sol)} SOL donation"
            if donated
            else f"Swap completed! Sent {format_sol(amount)} SOL"
        )
        outcome.notices.append(Notice("Transaction Submitted", description, link=explorer_tx_url(sig)))
        return outcome

    def _send_donation(self, instructions: list, lamports: int, outcome: SwapOutcome) -> TransferResult:
        try:
            sig = send_instructions(self._client, self._signer, instructions, label="donation")
        except TransactionSubmitError as e:
            logger.warning("donation_failed", payer=short_wallet(self.payer), error=str(e))
            outcome.notices.append(
                error_notice("Donation Failed", "Your swap was successful, but the donation failed to send.")
            )
            return TransferResult("donation", lamports, error=str(e))
        outcome.notices.append(
            Notice(
                "Donation Sent",
                f"Your {format_sol(self._context.donation_amount)} SOL donation has been sent successfully!",
            )
        )
        recorded = self._context.record_donation_transaction(self.payer, sig)
        if recorded is not None:
            outcome.notices.append(recorded)
        return TransferResult("donation", lamports, signature=sig)

    def _refresh_balance(self) -> None:
        try:
            self.sol_balance_lamports = get_balance_lamports(self._client, self._signer.pubkey())
        except TransactionSubmitError as e:
            logger.debug("balance_refresh_failed", error=str(e))

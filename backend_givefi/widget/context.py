"""
Donation context: the shared donation state a widget host passes around.

Holds the donating toggle, the fixed donation amount and recipient, and the
latest ledger stats. Recording a donation is fire-and-forget: a ledger failure
becomes a notice, never an exception, because the on-chain transfer already
happened.
"""

from __future__ import annotations

import threading
from decimal import Decimal

from solders.instruction import Instruction
from solders.pubkey import Pubkey

from backend_givefi.config import get_settings
from backend_givefi.core.exceptions import LedgerServiceError, ValidationError
from backend_givefi.givefi_logging import get_logger
from backend_givefi.transactions.composer import DonationOptions, add_donation_to_instructions
from backend_givefi.utils.wallet_utils import format_sol, parse_wallet, sol_to_lamports, to_decimal
from backend_givefi.widget.ledger_client import LedgerClient
from backend_givefi.widget.notices import Notice, error_notice

logger = get_logger(__name__)


class DonationContext:
    def __init__(
        self,
        ledger: LedgerClient | None = None,
        default_amount: Decimal | None = None,
        default_recipient: str | None = None,
    ) -> None:
        settings = get_settings()
        self._ledger = ledger or LedgerClient()
        self.is_donating = False
        self._amount = default_amount if default_amount is not None else settings.donation_amount_sol
        recipient = default_recipient or settings.donation_recipient
        parse_wallet(recipient, "donation recipient")
        self._recipient = recipient
        self._lock = threading.Lock()
        self.total_donations = 0
        self.total_amount = 0

    @property
    def donation_amount(self) -> Decimal:
        return self._amount

    def set_donation_amount(self, amount: object) -> None:
        value = to_decimal(amount, "donation amount")
        if value <= 0:
            raise ValidationError("donation amount must be positive")
        if sol_to_lamports(value) == 0:
            raise ValidationError("donation amount is below one lamport")
        self._amount = value

    @property
    def donation_recipient(self) -> str:
        return self._recipient

    def set_donation_recipient(self, address: str) -> None:
        """Validate before accepting; the previous recipient stays on failure."""
        parse_wallet(address, "donation recipient")
        self._recipient = address.strip()

    def options(self) -> DonationOptions:
        return DonationOptions(enabled=self.is_donating, amount_sol=self._amount, recipient=self._recipient)

    def add_donation_to_instructions(self, instructions: list[Instruction], payer: Pubkey | str) -> list[Instruction]:
        """Append the donation transfer when donating; otherwise return the instructions unchanged."""
        return add_donation_to_instructions(instructions, payer, self.options())

    def record_donation_transaction(self, payer: str, signature: str) -> Notice | None:
        """Record a sent donation in the ledger. Returns the notice to show, None when not donating."""
        if not self.is_donating:
            return None
        try:
            self._ledger.record_donation(payer, self._recipient, self._amount, signature)
        except LedgerServiceError as e:
            logger.warning("donation_record_failed", signature=signature, error=str(e))
            return error_notice(
                "Donation Recording Error",
                "Failed to record your donation. The transaction was still processed.",
            )
        return Notice(
            title="Donation Recorded",
            description=f"Thank you for donating {format_sol(self._amount)} SOL to charity!",
        )

    def refresh_stats(self) -> bool:
        """Pull ledger stats; keep the previous values on failure. Returns True on success."""
        try:
            stats = self._ledger.get_stats()
        except LedgerServiceError as e:
            logger.warning("donation_stats_refresh_failed", error=str(e))
            return False
        with self._lock:
            self.total_donations = int(stats.get("totalDonations", 0))
            self.total_amount = int(stats.get("totalAmount", 0))
        return True

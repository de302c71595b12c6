"""
Widget display state and the periodic refreshers that feed it.

Price refreshes every 60 s, the wallet balance every 15 s, the charity
balance every 30 s and ledger stats every 60 s. Each poller runs on its own
daemon thread with no coordination or backoff; a failed refresh is logged and
the previous value is kept.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable

from backend_givefi.config import get_settings
from backend_givefi.core.exceptions import GiveFiError, TransactionSubmitError, ValidationError
from backend_givefi.givefi_logging import get_logger
from backend_givefi.pricing.price_feed import PriceFeed
from backend_givefi.pricing.quote import SwapQuote, get_swap_quote
from backend_givefi.transactions.submitter import get_balance_lamports
from backend_givefi.utils.wallet_utils import parse_wallet
from backend_givefi.widget.context import DonationContext

logger = get_logger(__name__)


@dataclass
class WidgetState:
    sol_price: Decimal = field(default_factory=lambda: get_settings().fallback_sol_price)
    sol_balance_lamports: int | None = None
    charity_balance_lamports: int | None = None

    def refresh_price(self, feed: PriceFeed) -> None:
        self.sol_price = feed.get_price()

    def refresh_balance(self, client: Any, wallet: str) -> None:
        try:
            self.sol_balance_lamports = get_balance_lamports(client, parse_wallet(wallet, "wallet"))
        except TransactionSubmitError as e:
            logger.warning("wallet_balance_refresh_failed", error=str(e))

    def refresh_charity_balance(self, client: Any, recipient: str) -> None:
        try:
            self.charity_balance_lamports = get_balance_lamports(client, parse_wallet(recipient, "donation recipient"))
        except TransactionSubmitError as e:
            logger.warning("charity_balance_refresh_failed", error=str(e))

    def estimate(self, amount_text: object) -> SwapQuote | None:
        """Quote for the entered amount at the current price; None when the amount is not a valid number."""
        try:
            return get_swap_quote(amount_text, self.sol_price)
        except ValidationError:
            return None


def run_periodic(
    task: Callable[[], None],
    interval_sec: float,
    stop_event: threading.Event,
    name: str,
) -> None:
    """Run task every interval_sec until stop_event is set. Task errors are logged, never fatal."""
    logger.info("poller_started", poller=name, interval_sec=interval_sec)
    while not stop_event.is_set():
        try:
            task()
        except GiveFiError as e:
            logger.warning("poller_tick_failed", poller=name, error=str(e))
        except Exception as e:
            logger.exception("poller_tick_crashed", poller=name, error=str(e))
        deadline = time.monotonic() + interval_sec
        while not stop_event.is_set() and time.monotonic() < deadline:
            stop_event.wait(timeout=min(1.0, max(0.0, deadline - time.monotonic())))
    logger.info("poller_stopped", poller=name)


def start_pollers(
    state: WidgetState,
    feed: PriceFeed,
    client: Any,
    wallet: str | None,
    context: DonationContext,
) -> tuple[threading.Event, list[threading.Thread]]:
    """Start the refresh threads. Set the returned event to stop them all."""
    settings = get_settings()
    stop = threading.Event()
    jobs: list[tuple[str, Callable[[], None], float]] = [
        ("price", lambda: state.refresh_price(feed), settings.price_poll_interval_sec),
        (
            "charity_balance",
            lambda: state.refresh_charity_balance(client, context.donation_recipient),
            settings.charity_poll_interval_sec,
        ),
        ("donation_stats", context.refresh_stats, settings.price_poll_interval_sec),
    ]
    if wallet:
        jobs.append(("wallet_balance", lambda: state.refresh_balance(client, wallet), settings.balance_poll_interval_sec))
    threads: list[threading.Thread] = []
    for name, task, interval in jobs:
        t = threading.Thread(target=run_periodic, args=(task, interval, stop, name), name=f"poller-{name}", daemon=True)
        t.start()
        threads.append(t)
    return stop, threads

"""
Quote and submit a swap from the command line, optionally with a donation.

Signs with PAYER_PRIVATE_KEY (base58 or JSON byte array). Prints each notice
the widget would show.

    python -m backend_givefi.tools.swap_with_donation 0.5 --donate
    python -m backend_givefi.tools.swap_with_donation 0.5 --quote-only
"""

from __future__ import annotations

import argparse
import sys

from backend_givefi.config import get_settings
from backend_givefi.core.exceptions import ValidationError
from backend_givefi.pricing.price_feed import PriceFeed
from backend_givefi.transactions.submitter import load_keypair, make_client
from backend_givefi.widget.context import DonationContext
from backend_givefi.widget.flow import SwapFlow
from backend_givefi.widget.pollers import WidgetState


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Swap SOL with an optional charity donation.")
    parser.add_argument("amount", help="SOL amount to swap")
    parser.add_argument("--donate", action="store_true", help="Add the fixed donation transfer")
    parser.add_argument("--donation-recipient", default=None, help="Override donation recipient")
    parser.add_argument("--quote-only", action="store_true", help="Print the quote and exit")
    args = parser.parse_args(argv)

    settings = get_settings()
    state = WidgetState()
    state.refresh_price(PriceFeed())
    quote = state.estimate(args.amount)
    if quote is None:
        print("Invalid amount:", args.amount)
        return 2
    print(f"price={quote.price} USD  output~{quote.usdc_amount} USDC  fee={quote.fee} USDC")
    if args.quote_only:
        return 0

    try:
        signer = load_keypair(settings.payer_private_key)
        context = DonationContext(default_recipient=args.donation_recipient)
    except ValidationError as e:
        print("Config error:", e)
        return 2
    context.is_donating = args.donate
    flow = SwapFlow(make_client(settings.solana_rpc_url), signer, context)
    outcome = flow.submit(args.amount)
    for notice in outcome.notices:
        line = f"[{notice.variant}] {notice.title}: {notice.description}"
        if notice.link:
            line += f" ({notice.link})"
        print(line)
    return 0 if outcome.succeeded else 1


if __name__ == "__main__":
    sys.exit(main())

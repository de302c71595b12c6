"""
SOL/USD price feed and swap quote calculation.
"""

from backend_givefi.pricing.price_feed import PriceFeed, calculate_usd_value, get_solana_price
from backend_givefi.pricing.quote import SwapQuote, get_swap_quote

__all__ = [
    "PriceFeed",
    "SwapQuote",
    "calculate_usd_value",
    "get_solana_price",
    "get_swap_quote",
]

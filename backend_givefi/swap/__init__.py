"""Jupiter v6 swap API client (SOL -> USDC)."""

from backend_givefi.swap.jupiter import (
    JupiterQuote,
    create_jupiter_swap_transaction,
    get_jupiter_quote,
)

__all__ = ["JupiterQuote", "create_jupiter_swap_transaction", "get_jupiter_quote"]

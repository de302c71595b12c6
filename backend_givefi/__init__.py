"""
Backend GiveFi: donation add-on for Solana swap flows.

Computes swap quotes with a fixed fee, composes the primary transfer and the
optional charity transfer, and records donations in a small REST ledger.
"""

__version__ = "0.1.0"

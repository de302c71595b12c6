"""
Transfer composition and submission: primary transfer plus optional donation.
"""

from backend_givefi.transactions.composer import (
    ComposedTransfers,
    DonationOptions,
    add_donation_to_instructions,
    build_donation_instruction,
    build_transfer_instruction,
    check_sufficient_balance,
    compose_transfers,
    required_lamports,
)
from backend_givefi.transactions.submitter import get_balance_lamports, load_keypair, send_instructions

__all__ = [
    "ComposedTransfers",
    "DonationOptions",
    "add_donation_to_instructions",
    "build_donation_instruction",
    "build_transfer_instruction",
    "check_sufficient_balance",
    "compose_transfers",
    "get_balance_lamports",
    "load_keypair",
    "required_lamports",
    "send_instructions",
]

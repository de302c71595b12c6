"""
Application-level exceptions.

Validation errors are raised before any network call and are user-correctable.
Service errors wrap failures of external collaborators (price feed, Jupiter,
ledger API, Solana RPC) and are scoped to the single user action.
"""

from __future__ import annotations


class GiveFiError(Exception):
    """Base class for all GiveFi errors."""


class ValidationError(GiveFiError, ValueError):
    """Bad input (address, amount) rejected before any network call."""


class InsufficientBalanceError(ValidationError):
    """Payer balance does not cover amount + donation + fee buffer."""

    def __init__(self, needed_lamports: int, balance_lamports: int, message: str) -> None:
        super().__init__(message)
        self.needed_lamports = needed_lamports
        self.balance_lamports = balance_lamports


class ServiceError(GiveFiError):
    """An external service call failed."""


class PriceFeedError(ServiceError):
    """Price API unavailable or returned an unusable payload."""


class SwapServiceError(ServiceError):
    """Jupiter quote or swap API failed."""


class LedgerServiceError(ServiceError):
    """Donation ledger API failed."""


class TransactionSubmitError(ServiceError):
    """Solana RPC rejected or failed to accept a transaction."""

"""
Request and response models for the donation ledger API.

JSON uses camelCase (recipientAddress, lastDonated, transactionIds);
Python attributes are snake_case.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, field_validator
from pydantic.alias_generators import to_camel

from backend_givefi.database import MAX_AMOUNT_LAMPORTS
from backend_givefi.utils.wallet_utils import is_valid_wallet


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DonationMetadata(CamelModel):
    """Free-form blob; label, description and transactionIds are the known keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    label: str | None = None
    description: str | None = None
    transaction_ids: list[str] | None = None


class CreateDonationRequest(CamelModel):
    """POST /api/donations body."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    recipient_address: str = Field(..., min_length=32, max_length=64, description="Recipient wallet (base58)")
    amount: StrictInt = Field(..., gt=0, le=MAX_AMOUNT_LAMPORTS, description="Amount in lamports")
    enabled: StrictBool = False
    metadata: DonationMetadata | None = None
    user_id: StrictInt | None = None

    @field_validator("recipient_address")
    @classmethod
    def _check_address(cls, v: str) -> str:
        v = v.strip()
        if not is_valid_wallet(v):
            raise ValueError("Invalid Solana wallet address")
        return v


class PatchDonationRequest(CamelModel):
    """
    PATCH /api/donations/{id} body. amount and recipientAddress are accepted
    only so the ledger can reject them with a clear message.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    enabled: StrictBool | None = None
    metadata: DonationMetadata | None = None
    last_donated: str | None = None
    user_id: StrictInt | None = None
    amount: Any = None
    recipient_address: Any = None

    @field_validator("enabled")
    @classmethod
    def _enabled_not_null(cls, v: bool | None) -> bool:
        # omitted means unchanged; an explicit null is not a valid state
        if v is None:
            raise ValueError("enabled must be true or false")
        return v

    def changes(self) -> dict[str, Any]:
        """Fields present in the request body, snake_case, metadata as a plain dict."""
        out = self.model_dump(exclude_unset=True, by_alias=False)
        if "metadata" in out and self.metadata is not None:
            out["metadata"] = self.metadata.model_dump(by_alias=True, exclude_none=True)
        return out


class DonationResponse(CamelModel):
    id: int
    user_id: int | None = None
    recipient_address: str
    amount: int
    enabled: bool
    last_donated: str | None = None
    metadata: dict[str, Any] | None = None


class DonationStatsResponse(CamelModel):
    total_donations: int = Field(..., description="Number of enabled donations")
    total_amount: int = Field(..., description="Sum of enabled donation amounts (lamports)")

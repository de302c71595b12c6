"""
FastAPI server: donation ledger API.

GET /api/donations/stats, GET /api/donations/{id}, GET /api/users/{user_id}/donations,
POST /api/donations, PATCH /api/donations/{id}. Request validation failures
return 400; unexpected storage failures return 500 and are logged.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend_givefi import __version__
from backend_givefi import database as ledger
from backend_givefi.api_server.schemas import (
    CreateDonationRequest,
    DonationResponse,
    DonationStatsResponse,
    PatchDonationRequest,
)
from backend_givefi.core.exceptions import ValidationError
from backend_givefi.givefi_logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    ledger.init_db()
    yield


app = FastAPI(
    title="Backend GiveFi API",
    description="Donation ledger: record donations and aggregate enabled totals.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in (os.getenv("CORS_ORIGINS") or "*").split(",") if o.strip()],
    allow_methods=["GET", "POST", "PATCH"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request_validation_failed", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


def _to_response(record: dict[str, Any]) -> DonationResponse:
    return DonationResponse.model_validate(record)


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness probe: API is up."""
    return {"status": "ok"}


@app.get("/api/donations/stats", response_model=DonationStatsResponse)
def donation_stats() -> DonationStatsResponse:
    """Count and lamport sum over enabled donations."""
    try:
        stats = ledger.get_stats()
    except Exception as e:
        logger.exception("donation_stats_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch donation statistics") from e
    return DonationStatsResponse.model_validate(stats)


@app.get("/api/donations/{donation_id}", response_model=DonationResponse)
def get_donation(donation_id: int) -> DonationResponse:
    try:
        record = ledger.get_donation(donation_id)
    except Exception as e:
        logger.exception("donation_get_failed", donation_id=donation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch donation") from e
    if record is None:
        raise HTTPException(status_code=404, detail="Donation not found")
    return _to_response(record)


@app.get("/api/users/{user_id}/donations", response_model=list[DonationResponse])
def get_user_donations(user_id: int) -> list[DonationResponse]:
    try:
        records = ledger.get_donations_by_user(user_id)
    except Exception as e:
        logger.exception("user_donations_failed", user_id=user_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch user donations") from e
    return [_to_response(r) for r in records]


@app.post("/api/donations", response_model=DonationResponse, status_code=201)
def create_donation(body: CreateDonationRequest) -> DonationResponse:
    """Record a donation. Returns 201 with the generated id."""
    metadata = body.metadata.model_dump(by_alias=True, exclude_none=True) if body.metadata else None
    try:
        record = ledger.create_donation(
            recipient_address=body.recipient_address,
            amount=body.amount,
            enabled=body.enabled,
            metadata=metadata,
            user_id=body.user_id,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        logger.exception("donation_create_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to create donation") from e
    return _to_response(record)


@app.patch("/api/donations/{donation_id}", response_model=DonationResponse)
def patch_donation(donation_id: int, body: PatchDonationRequest) -> DonationResponse:
    """Patch enabled, metadata, lastDonated or userId. amount and recipientAddress are immutable."""
    try:
        record = ledger.update_donation(donation_id, body.changes())
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        logger.exception("donation_update_failed", donation_id=donation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to update donation") from e
    if record is None:
        raise HTTPException(status_code=404, detail="Donation not found")
    return _to_response(record)

"""
HTTP client for the donation ledger API (what the widget calls).

Converts SOL to lamports before posting, so the ledger only sees integers.
Every failure raises LedgerServiceError; no retry.
"""

from __future__ import annotations

from typing import Any

import requests

from backend_givefi.config import get_settings
from backend_givefi.core.exceptions import LedgerServiceError
from backend_givefi.givefi_logging import get_logger
from backend_givefi.utils.wallet_utils import short_wallet, sol_to_lamports

logger = get_logger(__name__)


class LedgerClient:
    def __init__(
        self,
        base_url: str | None = None,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        settings = get_settings()
        self._base_url = (base_url or settings.ledger_api_url).rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout if timeout is not None else settings.request_timeout_sec

    def _call(self, method: str, path: str, json: dict[str, Any] | None = None) -> Any:
        url = f"{self._base_url}{path}"
        try:
            r = self._session.request(method, url, json=json, timeout=self._timeout)
            r.raise_for_status()
            return r.json()
        except requests.RequestException as e:
            logger.warning("ledger_request_failed", method=method, path=path, error=str(e))
            raise LedgerServiceError(f"{method} {path} failed: {e}") from e
        except ValueError as e:
            raise LedgerServiceError(f"{method} {path} returned invalid JSON") from e

    def record_donation(
        self,
        wallet_address: str,
        recipient_address: str,
        amount_sol: object,
        transaction_id: str | None = None,
    ) -> dict[str, Any]:
        """POST a donation of amount_sol (converted to lamports) as enabled."""
        body: dict[str, Any] = {
            "recipientAddress": recipient_address,
            "amount": sol_to_lamports(amount_sol),
            "enabled": True,
        }
        if transaction_id:
            body["metadata"] = {"transactionIds": [transaction_id]}
        record = self._call("POST", "/api/donations", json=body)
        logger.info(
            "ledger_donation_recorded",
            wallet=short_wallet(wallet_address),
            donation_id=record.get("id") if isinstance(record, dict) else None,
        )
        return record

    def get_stats(self) -> dict[str, int]:
        return self._call("GET", "/api/donations/stats")

    def get_user_donations(self, user_id: int) -> list[dict[str, Any]]:
        return self._call("GET", f"/api/users/{int(user_id)}/donations")

    def update_donation(self, donation_id: int, data: dict[str, Any]) -> dict[str, Any]:
        return self._call("PATCH", f"/api/donations/{int(donation_id)}", json=data)

"""
structlog setup for the ledger API, the swap flow and the pollers.

Every record carries event_type, level, timestamp and the logger name. Call
sites pass a snake_case event plus keyword fields:

    logger.info("donation_recorded", donation_id=12, amount=10_000_000)
    logger.warning("donation_failed", payer=short_wallet(payer), error=str(e))

Full wallet addresses never reach the output: the wallet-bearing keys in
WALLET_FIELDS are cut to a prefix before rendering.

Only imports the stdlib and structlog so any backend_givefi module can import it.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)

# json (default) for the API server; anything else renders for a terminal
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

WALLET_FIELDS = ("wallet", "payer", "recipient", "user")
WALLET_PREFIX_LEN = 16


def _shorten(value: str) -> str:
    return value[:WALLET_PREFIX_LEN] + "..." if len(value) > WALLET_PREFIX_LEN else value


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """UTC ISO 8601 timestamp unless the call site supplied one."""
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _truncate_wallet_fields(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    for key in WALLET_FIELDS:
        value = event_dict.get(key)
        if isinstance(value, str):
            event_dict[key] = _shorten(value)
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog's 'event' becomes event_type; message mirrors it when absent."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "message" not in event_dict and "event_type" in event_dict:
        event_dict["message"] = str(event_dict["event_type"])
    return event_dict


def configure_structlog() -> None:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
        _truncate_wallet_fields,
        _normalize_event,
    ]
    if LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL_VALUE),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """Logger bound to the module name, e.g. {"event_type": "swap_submitted", "logger": "backend_givefi.widget.flow", ...}."""
    return structlog.get_logger(name).bind(logger=name)


def bind_wallet(wallet: str) -> structlog.BoundLogger:
    """Logger with the (truncated) wallet attached to every subsequent call."""
    return get_logger("backend_givefi").bind(wallet=_shorten(wallet))

"""
Test that givefi_logging can be imported without circular import and logger works.
"""

from __future__ import annotations


def test_logging_import():
    """Import get_logger from givefi_logging and use the logger."""
    from backend_givefi.givefi_logging import bind_wallet, get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    logger.info("test_message", key="value")

    wallet_logger = bind_wallet("9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka")
    wallet_logger.info("test_wallet_message")


def test_wallet_fields_truncated():
    from backend_givefi.givefi_logging.logger import _truncate_wallet_fields

    wallet = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
    out = _truncate_wallet_fields(None, "info", {"event": "x", "payer": wallet, "amount": 5, "user": 3})
    assert out["payer"] == wallet[:16] + "..."
    assert out["amount"] == 5
    assert out["user"] == 3

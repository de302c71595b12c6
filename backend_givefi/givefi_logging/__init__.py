"""
Structured logging for Backend GiveFi.

Use get_logger(__name__) in every module.
"""

from backend_givefi.givefi_logging.logger import bind_wallet, get_logger

__all__ = ["bind_wallet", "get_logger"]

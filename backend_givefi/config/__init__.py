"""
Configuration management for Backend GiveFi.

Loads settings from environment variables (and .env when present).
"""

from backend_givefi.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings"]

"""
Application settings.

Typed settings for the ledger API, the Solana RPC, the external price and swap
APIs, and the donation defaults. Values come from the environment at
construction time; get_settings() caches one instance per process.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from decimal import Decimal

from backend_givefi.config.env import (
    env_float,
    env_int,
    env_str,
    get_solana_network,
    get_solana_rpc_url,
)

DEFAULT_DONATION_RECIPIENT = "BivYS3FohCDzhNCV52Qkf59crbzmqkjUQqnCkQ9Bqpcx"
DEFAULT_SWAP_RECIPIENT = "qtSJb5syrrzpahukEEsBmw6C2VipBc8breXNAQGBdQ1"
DEFAULT_DONATION_AMOUNT_SOL = "0.01"
DEFAULT_SWAP_FEE_RATE = "0.005"
DEFAULT_FALLBACK_SOL_PRICE = "134.21"
DEFAULT_FEE_BUFFER_SOL = "0.001"
DEFAULT_PRICE_API_URL = "https://api.coingecko.com/api/v3/simple/price"
DEFAULT_JUPITER_API_BASE = "https://quote-api.jup.ag/v6"
DEFAULT_LEDGER_API_URL = "http://localhost:8000"
DEFAULT_DATABASE_URL = "sqlite:///givefi.db"


def _decimal_env(name: str, default: str) -> Decimal:
    return Decimal(env_str(name, default))


@dataclass(frozen=True)
class Settings:
    """Process-wide settings. Construct directly in tests to override values."""

    database_url: str = field(default_factory=lambda: env_str("DATABASE_URL", DEFAULT_DATABASE_URL))
    solana_network: str = field(default_factory=get_solana_network)
    solana_rpc_url: str = field(default_factory=get_solana_rpc_url)
    donation_recipient: str = field(default_factory=lambda: env_str("DONATION_RECIPIENT", DEFAULT_DONATION_RECIPIENT))
    swap_recipient: str = field(default_factory=lambda: env_str("SWAP_RECIPIENT", DEFAULT_SWAP_RECIPIENT))
    donation_amount_sol: Decimal = field(default_factory=lambda: _decimal_env("DONATION_AMOUNT_SOL", DEFAULT_DONATION_AMOUNT_SOL))
    swap_fee_rate: Decimal = field(default_factory=lambda: _decimal_env("SWAP_FEE_RATE", DEFAULT_SWAP_FEE_RATE))
    fallback_sol_price: Decimal = field(default_factory=lambda: _decimal_env("FALLBACK_SOL_PRICE", DEFAULT_FALLBACK_SOL_PRICE))
    fee_buffer_sol: Decimal = field(default_factory=lambda: _decimal_env("FEE_BUFFER_SOL", DEFAULT_FEE_BUFFER_SOL))
    price_api_url: str = field(default_factory=lambda: env_str("PRICE_API_URL", DEFAULT_PRICE_API_URL))
    jupiter_api_base: str = field(default_factory=lambda: env_str("JUPITER_API_BASE", DEFAULT_JUPITER_API_BASE))
    ledger_api_url: str = field(default_factory=lambda: env_str("LEDGER_API_URL", DEFAULT_LEDGER_API_URL))
    payer_private_key: str = field(default_factory=lambda: env_str("PAYER_PRIVATE_KEY"))
    api_host: str = field(default_factory=lambda: env_str("API_HOST", "0.0.0.0"))
    api_port: int = field(default_factory=lambda: env_int("API_PORT", 8000))
    price_poll_interval_sec: float = field(default_factory=lambda: env_float("PRICE_POLL_INTERVAL_SEC", 60.0))
    balance_poll_interval_sec: float = field(default_factory=lambda: env_float("BALANCE_POLL_INTERVAL_SEC", 15.0))
    charity_poll_interval_sec: float = field(default_factory=lambda: env_float("CHARITY_POLL_INTERVAL_SEC", 30.0))
    request_timeout_sec: float = field(default_factory=lambda: env_float("REQUEST_TIMEOUT_SEC", 15.0))


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the current application settings (cached)."""
    return Settings()

"""
Environment variable loading for GiveFi.

- SOLANA_NETWORK: devnet | mainnet (default: devnet)
- SOLANA_RPC_URL: RPC endpoint (overrides the network default)
- DATABASE_URL: SQLAlchemy URL for the donation ledger
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is backend_givefi/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEVNET_RPC_URL = "https://api.devnet.solana.com"
MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
EXPLORER_TX_URL_TEMPLATE = "https://explorer.solana.com/tx/{signature}?cluster={cluster}"


def load_givefi_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides set variables."""
    load_dotenv(_ENV_PATH)


def env_str(name: str, default: str = "") -> str:
    load_givefi_env()
    return (os.getenv(name) or "").strip() or default


def env_float(name: str, default: float) -> float:
    raw = env_str(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def env_int(name: str, default: int) -> int:
    raw = env_str(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def get_solana_network() -> str:
    """Return SOLANA_NETWORK from env: devnet | mainnet. Default: devnet."""
    raw = env_str("SOLANA_NETWORK", "devnet").lower()
    if raw in ("mainnet", "mainnet-beta"):
        return "mainnet"
    return "devnet"


def get_solana_rpc_url() -> str:
    """Order: SOLANA_RPC_URL > devnet/mainnet default."""
    url = env_str("SOLANA_RPC_URL")
    if url:
        return url
    return DEVNET_RPC_URL if get_solana_network() == "devnet" else MAINNET_RPC_URL


def explorer_tx_url(signature: str) -> str:
    """Explorer link for a transaction signature on the configured network."""
    cluster = "devnet" if get_solana_network() == "devnet" else "mainnet-beta"
    return EXPLORER_TX_URL_TEMPLATE.format(signature=signature, cluster=cluster)

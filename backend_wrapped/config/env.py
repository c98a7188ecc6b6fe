"""
Environment variable loading for Backend Wrapped.

- SUI_NETWORK: mainnet | testnet | devnet (default: mainnet)
- SUI_RPC_URL: JSON-RPC fullnode endpoint (overrides SUI_NETWORK default)
- WRAPPED_YEAR: reporting year (default: 2025)
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is backend_wrapped/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

MAINNET_RPC_URL = "https://fullnode.mainnet.sui.io:443"
TESTNET_RPC_URL = "https://fullnode.testnet.sui.io:443"
DEVNET_RPC_URL = "https://fullnode.devnet.sui.io:443"

_NETWORK_RPC_URLS = {
    "mainnet": MAINNET_RPC_URL,
    "testnet": TESTNET_RPC_URL,
    "devnet": DEVNET_RPC_URL,
}

DEFAULT_WRAPPED_YEAR = 2025


def load_wrapped_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides real env vars."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH, override=False)


def get_data_dir() -> Path:
    """Return path to the packaged data directory (registries, allow-lists)."""
    return _BACKEND_DIR / "data"


def get_sui_network() -> str:
    """
    Return SUI_NETWORK from env: mainnet | testnet | devnet.
    Default: mainnet. Unknown values fall back to mainnet.
    """
    load_wrapped_env()
    raw = (os.getenv("SUI_NETWORK") or "mainnet").strip().lower()
    return raw if raw in _NETWORK_RPC_URLS else "mainnet"


def get_sui_rpc_url() -> str:
    """
    Resolve Sui JSON-RPC URL from env.
    Order: SUI_RPC_URL > public fullnode for SUI_NETWORK.
    """
    load_wrapped_env()
    url = (os.getenv("SUI_RPC_URL") or "").strip()
    if url:
        return url
    return _NETWORK_RPC_URLS[get_sui_network()]


def env_int(name: str, default: int) -> int:
    """Read an int env var; blank or malformed values fall back to default."""
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    """Read a float env var; blank or malformed values fall back to default."""
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default

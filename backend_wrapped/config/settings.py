"""
Application settings.

Responsibilities:
- Build typed settings from environment variables and the .env file.
- Provide defaults for every optional setting (RPC URL, reporting year,
  cache TTL, pagination bounds, API host/port).
- Pagination bounds (page size, inter-page delay, wall-clock budget, NFT page
  cap) are ledger-client configuration and are read from here only.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from backend_wrapped.config.env import (
    DEFAULT_WRAPPED_YEAR,
    env_float,
    env_int,
    get_sui_rpc_url,
    load_wrapped_env,
)


@dataclass(frozen=True)
class Settings:
    """Typed service configuration."""

    sui_rpc_url: str
    wrapped_year: int = DEFAULT_WRAPPED_YEAR
    cache_ttl_sec: float = 3600.0
    rpc_timeout_sec: float = 30.0
    page_size: int = 50
    page_delay_sec: float = 0.025
    max_fetch_sec: float = 55.0
    nft_max_pages: int = 10
    nft_page_delay_sec: float = 0.05
    api_host: str = "0.0.0.0"
    api_port: int = 8000


def load_settings() -> Settings:
    """Read Settings from the current environment (no caching)."""
    load_wrapped_env()
    return Settings(
        sui_rpc_url=get_sui_rpc_url(),
        wrapped_year=env_int("WRAPPED_YEAR", DEFAULT_WRAPPED_YEAR),
        cache_ttl_sec=env_float("WRAPPED_CACHE_TTL_SEC", 3600.0),
        rpc_timeout_sec=env_float("SUI_RPC_TIMEOUT_SEC", 30.0),
        page_size=max(1, env_int("SUI_PAGE_SIZE", 50)),
        page_delay_sec=max(0.0, env_float("SUI_PAGE_DELAY_SEC", 0.025)),
        max_fetch_sec=env_float("SUI_MAX_FETCH_SEC", 55.0),
        nft_max_pages=max(1, env_int("NFT_MAX_PAGES", 10)),
        nft_page_delay_sec=max(0.0, env_float("NFT_PAGE_DELAY_SEC", 0.05)),
        api_host=(os.getenv("API_HOST") or "0.0.0.0").strip(),
        api_port=env_int("API_PORT", 8000),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, read once from env."""
    return load_settings()

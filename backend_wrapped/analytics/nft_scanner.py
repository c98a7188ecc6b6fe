"""
NFT holdings scanner for Wrapped.

Walks the address's owned objects (bounded by max_pages), keeps objects that
expose Display metadata (name or image_url) and are not coins, and groups them
by collection (the type's package::module path). Sui has no universal NFT flag,
so Display presence is the collectible heuristic. Collections whose type starts
with an allow-listed prefix are flagged bluechip.

A failed page fetch stops the scan; whatever was collected so far is returned.
"""

from __future__ import annotations

import json
import os
import time
from functools import lru_cache
from pathlib import Path
from typing import Callable, Iterable

from backend_wrapped.analytics.models import NftHolding, NftHoldings
from backend_wrapped.config.env import get_data_dir
from backend_wrapped.core.exceptions import LedgerRpcError
from backend_wrapped.ledger.client import SuiLedgerClient
from backend_wrapped.ledger.models import OwnedObject
from backend_wrapped.wrapped_logging import get_logger, short_address

logger = get_logger(__name__)

DEFAULT_MAX_PAGES = 10
DEFAULT_PAGE_DELAY_SEC = 0.05
DEFAULT_BLUECHIP_PATH = get_data_dir() / "bluechip_collections.json"
UNKNOWN_COLLECTION = "unknown"

COIN_TYPE_MARKERS = ("::coin::", "::sui::")


def _load_bluechip_prefixes(path: Path) -> frozenset[str]:
    """Load bluechip type prefixes from JSON. Returns empty set on failure."""
    if not path.is_file():
        logger.warning("nft_scanner_bluechip_list_missing", path=str(path))
        return frozenset()
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("nft_scanner_bluechip_list_load_failed", path=str(path), error=str(e))
        return frozenset()
    prefixes = data.get("prefixes") if isinstance(data, dict) else data
    if not isinstance(prefixes, list):
        return frozenset()
    return frozenset(str(p).strip().lower() for p in prefixes if p)


@lru_cache(maxsize=1)
def get_bluechip_prefixes() -> frozenset[str]:
    """Process-wide allow-list (WRAPPED_BLUECHIP_COLLECTIONS_PATH overrides the packaged file)."""
    override = (os.getenv("WRAPPED_BLUECHIP_COLLECTIONS_PATH") or "").strip()
    return _load_bluechip_prefixes(Path(override) if override else DEFAULT_BLUECHIP_PATH)


def _base_type(type_str: str) -> str:
    """Type without generic parameters: 0xa::m::S<0x2::sui::SUI> -> 0xa::m::S."""
    return type_str.split("<", 1)[0]


def is_collectible(obj: OwnedObject) -> bool:
    if not obj.type:
        return False
    base = _base_type(obj.type)
    if any(marker in base for marker in COIN_TYPE_MARKERS):
        return False
    return bool(obj.display.get("name") or obj.display.get("image_url"))


def collection_key(type_str: str) -> tuple[str, str]:
    """Return (package::module key, display name) for an object type."""
    parts = _base_type(type_str).split("::")
    if len(parts) < 2 or not parts[0].startswith("0x") or not parts[1]:
        return UNKNOWN_COLLECTION, "Unknown"
    module = parts[1]
    display = " ".join(word[:1].upper() + word[1:] for word in module.split("_") if word)
    return f"{parts[0].lower()}::{module}", display or "Unknown"


def is_bluechip(type_str: str, prefixes: Iterable[str]) -> bool:
    lowered = type_str.lower()
    return any(lowered.startswith(p) for p in prefixes)


def summarize_holdings(objects: Iterable[OwnedObject], prefixes: Iterable[str]) -> NftHoldings:
    """Group collectible objects by collection; bluechip first, then count desc."""
    prefixes = tuple(prefixes)
    holdings: dict[str, NftHolding] = {}
    total = 0
    for obj in objects:
        if not is_collectible(obj):
            continue
        total += 1
        key, display_name = collection_key(obj.type)
        holding = holdings.get(key)
        if holding is None:
            holding = NftHolding(
                collection=key,
                display_name=display_name,
                is_bluechip=is_bluechip(obj.type, prefixes),
            )
            holdings[key] = holding
        holding.count += 1
        image_url = obj.display.get("image_url")
        if holding.image_url is None and image_url:
            holding.image_url = str(image_url)

    ordered = sorted(
        holdings.values(),
        key=lambda h: (not h.is_bluechip, -h.count, h.collection),
    )
    return NftHoldings(
        holdings=ordered,
        total_count=total,
        bluechip_count=sum(1 for h in ordered if h.is_bluechip),
    )


def scan_nft_holdings(
    address: str,
    client: SuiLedgerClient,
    *,
    max_pages: int = DEFAULT_MAX_PAGES,
    page_delay_sec: float = DEFAULT_PAGE_DELAY_SEC,
    bluechip_prefixes: Iterable[str] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> NftHoldings:
    """
    Scan owned objects page by page until the last page or max_pages.
    Upstream errors end the scan early with partial results; never raises LedgerRpcError.
    """
    prefixes = get_bluechip_prefixes() if bluechip_prefixes is None else bluechip_prefixes
    objects: list[OwnedObject] = []
    cursor: str | None = None
    pages = 0

    while pages < max_pages:
        try:
            page = client.get_owned_objects(address, cursor=cursor)
        except LedgerRpcError as e:
            logger.warning(
                "nft_scanner_page_failed",
                address=short_address(address),
                pages=pages,
                objects=len(objects),
                error=str(e),
            )
            break
        pages += 1
        objects.extend(page.items)
        if not page.has_next_page or not page.next_cursor:
            break
        cursor = page.next_cursor
        if page_delay_sec > 0:
            sleep(page_delay_sec)

    result = summarize_holdings(objects, prefixes)
    logger.info(
        "nft_scanner_done",
        address=short_address(address),
        pages=pages,
        total_nfts=result.total_count,
        collections=len(result.holdings),
        bluechip=result.bluechip_count,
    )
    return result

"""
Wrapped pipeline: one address, one calendar year -> WrappedAggregate.

validate -> fetch year window -> sort ascending -> lifetime first tx
-> aggregate -> NFT scan -> persona -> assemble.

Single entrypoint for the API and CLI is get_wrapped(), which memoizes
generate_wrapped() in the process-wide result cache keyed by (address, year).
"""

from __future__ import annotations

import time
from datetime import datetime, timezone

from backend_wrapped.analytics.aggregator import aggregate_transactions
from backend_wrapped.analytics.models import WrappedAggregate
from backend_wrapped.analytics.nft_scanner import scan_nft_holdings
from backend_wrapped.analytics.persona_scorer import PersonaStats, score_persona
from backend_wrapped.analytics.registry import ProtocolRegistry
from backend_wrapped.cache.result_cache import ResultCache, get_result_cache
from backend_wrapped.config.settings import Settings, get_settings
from backend_wrapped.core.exceptions import (
    GenerationFailedError,
    LedgerRpcError,
    NoTransactionsError,
)
from backend_wrapped.ledger.client import SuiLedgerClient
from backend_wrapped.utils.wallet_utils import normalize_sui_address
from backend_wrapped.wrapped_logging import get_logger, short_address

logger = get_logger(__name__)


def year_window_ms(year: int) -> tuple[int, int]:
    """Inclusive UTC bounds: Jan 1 00:00:00.000 through Dec 31 23:59:59.999."""
    start = datetime(year, 1, 1, tzinfo=timezone.utc)
    end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    return int(start.timestamp() * 1000), int(end.timestamp() * 1000) - 1


def _now_ms() -> int:
    return int(time.time() * 1000)


def generate_wrapped(
    address: str,
    year: int | None = None,
    *,
    client: SuiLedgerClient | None = None,
    registry: ProtocolRegistry | None = None,
    settings: Settings | None = None,
    now_ms: int | None = None,
) -> WrappedAggregate:
    """
    Run the full pipeline for one address and year. No caching.

    Raises InvalidAddressError before any I/O, NoTransactionsError when the
    window is empty, GenerationFailedError when the first history page fails.
    """
    address = normalize_sui_address(address)
    settings = settings or get_settings()
    year = year if year is not None else settings.wrapped_year
    start_ms, end_ms = year_window_ms(year)
    owns_client = client is None
    client = client or SuiLedgerClient.from_settings(settings)

    logger.info("wrapped_pipeline_start", address=short_address(address), year=year)
    try:
        try:
            transactions = client.fetch_transaction_history(address, start_ms, end_ms)
        except LedgerRpcError as e:
            logger.error(
                "wrapped_pipeline_fetch_failed",
                address=short_address(address),
                year=year,
                code=e.code,
                error=str(e),
            )
            raise GenerationFailedError(f"Failed to fetch transactions: {e.message}", code=e.code) from e

        if not transactions:
            logger.info("wrapped_pipeline_no_transactions", address=short_address(address), year=year)
            raise NoTransactionsError(f"No transactions found for {year}")

        transactions = sorted(transactions, key=lambda tx: (tx.timestamp_ms, tx.digest))
        lifetime_first = client.get_lifetime_first_transaction(address)
        if lifetime_first is not None and not 0 < lifetime_first.timestamp_ms <= transactions[0].timestamp_ms:
            # Missing timestamp or later than the window: fall back to the window's first.
            lifetime_first = None

        activity = aggregate_transactions(transactions, lifetime_first=lifetime_first, registry=registry)
        holdings = scan_nft_holdings(
            address,
            client,
            max_pages=settings.nft_max_pages,
            page_delay_sec=settings.nft_page_delay_sec,
        )
        activity.nft_metrics.collections_interacted = len(holdings.holdings)
        persona = score_persona(PersonaStats.from_activity(activity))
    finally:
        if owns_client:
            client.close()

    result = WrappedAggregate(
        address=address,
        year=year,
        activity=activity,
        nft_holdings=holdings,
        persona=persona,
        generated_at=now_ms if now_ms is not None else _now_ms(),
    )
    logger.info(
        "wrapped_pipeline_done",
        address=short_address(address),
        year=year,
        total_transactions=activity.total_transactions,
        unique_protocols=len(activity.unique_protocols),
        persona=persona.persona,
    )
    return result


def get_wrapped(
    address: str,
    year: int | None = None,
    *,
    cache: ResultCache | None = None,
    **kwargs,
) -> WrappedAggregate:
    """Cached generate_wrapped. Failures propagate and are not cached."""
    address = normalize_sui_address(address)
    if year is None:
        settings = kwargs.get("settings") or get_settings()
        year = settings.wrapped_year
    cache = cache or get_result_cache()
    return cache.get_or_compute(
        (address, year),
        lambda: generate_wrapped(address, year, **kwargs),
    )

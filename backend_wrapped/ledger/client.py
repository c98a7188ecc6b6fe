"""
Sui JSON-RPC ledger client.

Wraps the three fullnode calls the Wrapped pipeline needs:
  - suix_queryTransactionBlocks (FromAddress filter, paginated by digest cursor)
  - suix_getOwnedObjects (showType + showDisplay, paginated by object cursor)
  - suix_getBalance

Pages are fetched strictly sequentially with a small fixed delay between them.
Pagination bounds (page size, delay, wall-clock budget) are constructor
configuration taken from Settings. No automatic retries: a failed request
raises LedgerRpcError and the caller decides whether partial results are usable.
"""

from __future__ import annotations

import itertools
import time
from typing import Any, Callable

import httpx

from backend_wrapped.config.settings import Settings, get_settings
from backend_wrapped.core.exceptions import ERROR_CODES, LedgerRpcError
from backend_wrapped.ledger.models import (
    ObjectPage,
    OwnedObject,
    TransactionPage,
    TransactionRecord,
)
from backend_wrapped.wrapped_logging import get_logger, short_address

logger = get_logger(__name__)

SUI_COIN_TYPE = "0x2::sui::SUI"

METHOD_QUERY_TRANSACTIONS = "suix_queryTransactionBlocks"
METHOD_GET_OWNED_OBJECTS = "suix_getOwnedObjects"
METHOD_GET_BALANCE = "suix_getBalance"


class SuiLedgerClient:
    """Synchronous Sui fullnode client. Safe to share per request; not shared across threads."""

    def __init__(
        self,
        rpc_url: str | None = None,
        *,
        timeout_sec: float | None = None,
        page_size: int | None = None,
        page_delay_sec: float | None = None,
        max_fetch_sec: float | None = None,
        http_client: httpx.Client | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        settings = get_settings()
        self.rpc_url = rpc_url or settings.sui_rpc_url
        self.page_size = page_size if page_size is not None else settings.page_size
        self.page_delay_sec = page_delay_sec if page_delay_sec is not None else settings.page_delay_sec
        self.max_fetch_sec = max_fetch_sec if max_fetch_sec is not None else settings.max_fetch_sec
        timeout = timeout_sec if timeout_sec is not None else settings.rpc_timeout_sec
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout)
        self._clock = clock
        self._sleep = sleep
        self._ids = itertools.count(1)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "SuiLedgerClient":
        return cls(
            settings.sui_rpc_url,
            timeout_sec=settings.rpc_timeout_sec,
            page_size=settings.page_size,
            page_delay_sec=settings.page_delay_sec,
            max_fetch_sec=settings.max_fetch_sec,
            **kwargs,
        )

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "SuiLedgerClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Raw JSON-RPC
    # -------------------------------------------------------------------------

    def _rpc(self, method: str, params: list[Any]) -> Any:
        body = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            resp = self._http.post(self.rpc_url, json=body)
        except httpx.HTTPError as e:
            raise LedgerRpcError(f"{method} request failed: {e}") from e
        if resp.status_code == 429:
            raise LedgerRpcError(
                f"{method} rate limited by fullnode",
                code=ERROR_CODES["RATE_LIMITED"],
                status_code=429,
            )
        if resp.status_code >= 400:
            raise LedgerRpcError(
                f"{method} failed with HTTP {resp.status_code}",
                status_code=resp.status_code,
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise LedgerRpcError(f"{method} returned malformed JSON") from e
        if not isinstance(data, dict):
            raise LedgerRpcError(f"{method} returned malformed response")
        err = data.get("error")
        if err:
            raise LedgerRpcError(f"{method} RPC error: {err}")
        if "result" not in data:
            raise LedgerRpcError(f"{method} response has no result")
        return data["result"]

    # -------------------------------------------------------------------------
    # Single-page queries
    # -------------------------------------------------------------------------

    def query_transaction_blocks(
        self,
        address: str,
        cursor: str | None = None,
        limit: int | None = None,
        descending: bool = True,
        with_details: bool = True,
    ) -> TransactionPage:
        """One page of transactions sent by `address`."""
        query = {
            "filter": {"FromAddress": address},
            "options": {
                "showInput": with_details,
                "showEffects": with_details,
                "showEvents": False,
            },
        }
        result = self._rpc(
            METHOD_QUERY_TRANSACTIONS,
            [query, cursor, limit or self.page_size, descending],
        )
        if not isinstance(result, dict):
            raise LedgerRpcError(f"{METHOD_QUERY_TRANSACTIONS} returned malformed page")
        items = _parse_items(METHOD_QUERY_TRANSACTIONS, result, TransactionRecord.from_rpc_item)
        return TransactionPage(
            items=items,
            next_cursor=result.get("nextCursor"),
            has_next_page=bool(result.get("hasNextPage")),
        )

    def get_owned_objects(
        self,
        address: str,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> ObjectPage:
        """One page of objects owned by `address`, with type and Display data."""
        query = {"filter": None, "options": {"showType": True, "showDisplay": True}}
        result = self._rpc(
            METHOD_GET_OWNED_OBJECTS,
            [address, query, cursor, limit or self.page_size],
        )
        if not isinstance(result, dict):
            raise LedgerRpcError(f"{METHOD_GET_OWNED_OBJECTS} returned malformed page")
        items = _parse_items(METHOD_GET_OWNED_OBJECTS, result, OwnedObject.from_rpc_item)
        return ObjectPage(
            items=items,
            next_cursor=result.get("nextCursor"),
            has_next_page=bool(result.get("hasNextPage")),
        )

    def get_balance(self, address: str, coin_type: str = SUI_COIN_TYPE) -> int:
        """Total balance of `coin_type` in its smallest unit (MIST for SUI)."""
        result = self._rpc(METHOD_GET_BALANCE, [address, coin_type])
        if not isinstance(result, dict):
            raise LedgerRpcError(f"{METHOD_GET_BALANCE} returned malformed response")
        try:
            return int(result.get("totalBalance") or 0)
        except (TypeError, ValueError) as e:
            raise LedgerRpcError(f"{METHOD_GET_BALANCE} returned non-integer balance") from e

    # -------------------------------------------------------------------------
    # Paginated history
    # -------------------------------------------------------------------------

    def fetch_transaction_history(
        self,
        address: str,
        start_ms: int,
        end_ms: int,
    ) -> list[TransactionRecord]:
        """
        All transactions sent by `address` with start_ms <= timestamp <= end_ms, newest first.

        Walks pages newest-to-oldest and stops at the first transaction older than
        start_ms. Stops early, keeping what was collected, when max_fetch_sec elapses.
        A failure on the first page raises LedgerRpcError; a later failure is
        logged and the partial list is returned.
        """
        transactions: list[TransactionRecord] = []
        seen: set[str] = set()
        cursor: str | None = None
        started = self._clock()
        pages = 0

        while True:
            if pages > 0 and self._clock() - started > self.max_fetch_sec:
                logger.warning(
                    "ledger_fetch_time_budget_reached",
                    address=short_address(address),
                    pages=pages,
                    count=len(transactions),
                    max_fetch_sec=self.max_fetch_sec,
                )
                break
            try:
                page = self.query_transaction_blocks(address, cursor=cursor)
            except LedgerRpcError as e:
                if pages == 0:
                    raise
                logger.warning(
                    "ledger_fetch_page_failed",
                    address=short_address(address),
                    pages=pages,
                    count=len(transactions),
                    error=str(e),
                )
                break
            pages += 1

            reached_start = False
            for tx in page.items:
                if tx.timestamp_ms < start_ms:
                    reached_start = True
                    break
                if tx.timestamp_ms > end_ms or tx.digest in seen:
                    continue
                seen.add(tx.digest)
                transactions.append(tx)

            if reached_start or not page.has_next_page or not page.next_cursor:
                break
            cursor = page.next_cursor
            if self.page_delay_sec > 0:
                self._sleep(self.page_delay_sec)

        logger.info(
            "ledger_fetch_history_done",
            address=short_address(address),
            pages=pages,
            count=len(transactions),
        )
        return transactions

    def get_lifetime_first_transaction(self, address: str) -> TransactionRecord | None:
        """Oldest transaction ever sent by `address`, or None (including on failure)."""
        try:
            page = self.query_transaction_blocks(
                address,
                limit=1,
                descending=False,
                with_details=False,
            )
        except LedgerRpcError as e:
            logger.warning(
                "ledger_lifetime_first_failed",
                address=short_address(address),
                error=str(e),
            )
            return None
        return page.items[0] if page.items else None


def _parse_items(method: str, result: dict[str, Any], parse: Callable[[dict[str, Any]], Any]) -> list[Any]:
    """Parse a page's data items; a malformed item fails the whole page as LedgerRpcError."""
    data = result.get("data") or []
    if not isinstance(data, list):
        raise LedgerRpcError(f"{method} returned malformed page data")
    try:
        return [parse(item) for item in data if isinstance(item, dict)]
    except (AttributeError, TypeError, ValueError) as e:
        raise LedgerRpcError(f"{method} returned malformed item: {e}") from e

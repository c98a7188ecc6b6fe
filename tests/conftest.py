"""
Pytest fixtures for Wrapped tests.

Network is replaced by httpx.MockTransport backed by FakeSuiNode, which serves
canned suix_queryTransactionBlocks / suix_getOwnedObjects / suix_getBalance
responses and records every JSON-RPC request it receives.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pytest

ADDRESS = "0x" + "ab" * 32
RPC_URL = "http://fullnode.test"

CETUS_PACKAGE = "0x1eabed72c53feb3805120a081dc15963c204dc8d091542592abaf7a35689b2fb"
SCALLOP_PACKAGE = "0xefe8b36d5b2e43728cc323298626b83177803521d195cfb11e15b910e892fdd0"
NAVI_PACKAGE = "0xd899cf7d2b5db716bd2cf55599fb0d5ee38a3061e7b6bb6eebf73fa5bc4c81ca"
HAEDAL_PACKAGE = "0xbde4ba4c2e274a60ce15c1cfff9e5c42e136930ee74d84b6ec3b054e2ad1c0b7"
UNKNOWN_PACKAGE = "0x" + "12" * 32


def ms(year: int, month: int = 1, day: int = 1, hour: int = 0) -> int:
    """UTC datetime -> epoch milliseconds."""
    return int(datetime(year, month, day, hour, tzinfo=timezone.utc).timestamp() * 1000)


def make_tx_item(
    digest: str,
    timestamp_ms: int,
    *,
    calls: tuple[tuple[str, str, str], ...] = (),
    checkpoint: int = 1,
    computation: int = 1_000_000,
    storage: int = 500_000,
    rebate: int = 200_000,
    status: str = "success",
) -> dict:
    """One SuiTransactionBlockResponse item (showInput + showEffects)."""
    commands = [
        {"MoveCall": {"package": p, "module": m, "function": f, "arguments": []}}
        for p, m, f in calls
    ]
    if not commands:
        commands = [{"TransferObjects": [[{"Input": 0}], {"Input": 1}]}]
    return {
        "digest": digest,
        "timestampMs": str(timestamp_ms),
        "checkpoint": str(checkpoint),
        "transaction": {
            "data": {
                "transaction": {
                    "kind": "ProgrammableTransaction",
                    "inputs": [],
                    "transactions": commands,
                }
            }
        },
        "effects": {
            "status": {"status": status},
            "gasUsed": {
                "computationCost": str(computation),
                "storageCost": str(storage),
                "storageRebate": str(rebate),
                "nonRefundableStorageFee": "0",
            },
        },
    }


def make_object_item(object_id: str, type_: str | None, display: dict | None = None) -> dict:
    """One SuiObjectResponse item (showType + showDisplay)."""
    data: dict = {"objectId": object_id, "version": "1", "digest": "d"}
    if type_ is not None:
        data["type"] = type_
    data["display"] = {"data": display, "error": None}
    return {"data": data}


class FakeSuiNode:
    """
    In-memory Sui fullnode. Pages are lists of items; cursors are "tx-<n>" / "obj-<n>".
    Pages listed in fail_tx_pages / fail_object_pages answer HTTP 500.
    """

    def __init__(self) -> None:
        self.tx_pages: list[list[dict]] = []
        self.first_tx: dict | None = None
        self.object_pages: list[list[dict]] = []
        self.balance = "0"
        self.fail_tx_pages: set[int] = set()
        self.fail_object_pages: set[int] = set()
        self.fail_first_tx = False
        self.requests: list[dict] = []

    def set_transactions(self, items: list[dict], page_size: int = 50) -> None:
        """Serve items newest first, split into pages."""
        ordered = sorted(items, key=lambda i: int(i["timestampMs"]), reverse=True)
        self.tx_pages = [ordered[i:i + page_size] for i in range(0, len(ordered), page_size)] or [[]]

    def methods(self) -> list[str]:
        return [r["method"] for r in self.requests]

    def _paged(self, body: dict, pages: list[list[dict]], cursor: str | None, prefix: str) -> httpx.Response:
        idx = 0 if cursor is None else int(cursor.split("-")[1])
        data = pages[idx] if idx < len(pages) else []
        has_next = idx + 1 < len(pages)
        return _result(body, {
            "data": data,
            "nextCursor": f"{prefix}-{idx + 1}" if has_next else None,
            "hasNextPage": has_next,
        })

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        method, params = body["method"], body["params"]

        if method == "suix_queryTransactionBlocks":
            descending = params[3]
            if not descending:
                if self.fail_first_tx:
                    return httpx.Response(500, json={"error": "boom"})
                data = [self.first_tx] if self.first_tx else []
                return _result(body, {"data": data, "nextCursor": None, "hasNextPage": False})
            cursor = params[1]
            idx = 0 if cursor is None else int(cursor.split("-")[1])
            if idx in self.fail_tx_pages:
                return httpx.Response(500, json={"error": "boom"})
            return self._paged(body, self.tx_pages, cursor, "tx")

        if method == "suix_getOwnedObjects":
            cursor = params[2]
            idx = 0 if cursor is None else int(cursor.split("-")[1])
            if idx in self.fail_object_pages:
                return httpx.Response(500, json={"error": "boom"})
            return self._paged(body, self.object_pages, cursor, "obj")

        if method == "suix_getBalance":
            return _result(body, {"coinType": params[1], "coinObjectCount": 1, "totalBalance": self.balance})

        return httpx.Response(200, json={
            "jsonrpc": "2.0",
            "id": body["id"],
            "error": {"code": -32601, "message": f"Method not found: {method}"},
        })


def _result(body: dict, result: dict) -> httpx.Response:
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch):
    """Fresh settings and result cache per test; no real fullnode URL leaks in."""
    monkeypatch.setenv("SUI_RPC_URL", RPC_URL)
    from backend_wrapped.cache.result_cache import reset_result_cache
    from backend_wrapped.config.settings import get_settings

    get_settings.cache_clear()
    reset_result_cache()
    yield
    get_settings.cache_clear()
    reset_result_cache()


@pytest.fixture
def sui_node():
    return FakeSuiNode()


@pytest.fixture
def test_settings():
    from backend_wrapped.config.settings import Settings

    return Settings(sui_rpc_url=RPC_URL, page_delay_sec=0.0, nft_page_delay_sec=0.0)


@pytest.fixture
def ledger_client(sui_node):
    """SuiLedgerClient talking to FakeSuiNode with no inter-page delay."""
    from backend_wrapped.ledger.client import SuiLedgerClient

    http = httpx.Client(transport=httpx.MockTransport(sui_node.handler))
    client = SuiLedgerClient(RPC_URL, page_size=50, page_delay_sec=0.0, max_fetch_sec=55.0, http_client=http)
    yield client
    http.close()

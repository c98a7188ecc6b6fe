"""
Tests for SuiLedgerClient: request shapes, response parsing, error mapping,
history pagination (window bounds, dedupe, time budget, partial results).
"""

from __future__ import annotations

import httpx
import pytest

from conftest import ADDRESS, CETUS_PACKAGE, RPC_URL, make_tx_item, ms

from backend_wrapped.core.exceptions import ERROR_CODES, LedgerRpcError
from backend_wrapped.ledger.client import SuiLedgerClient

START, END = ms(2025), ms(2026) - 1


def _client_with(handler, **kwargs) -> SuiLedgerClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    kwargs.setdefault("page_delay_sec", 0.0)
    return SuiLedgerClient(RPC_URL, http_client=http, **kwargs)


def test_query_transaction_blocks_parses_records(sui_node, ledger_client):
    sui_node.set_transactions([
        make_tx_item(
            "dig1",
            ms(2025, 2, 1),
            calls=((CETUS_PACKAGE, "pool_script", "swap_a2b"), ("0x2", "coin", "join")),
            checkpoint=1234,
            computation=750_000,
            storage=2_000_000,
            rebate=1_900_000,
        )
    ])
    page = ledger_client.query_transaction_blocks(ADDRESS)

    assert page.has_next_page is False
    tx = page.items[0]
    assert tx.digest == "dig1"
    assert tx.timestamp_ms == ms(2025, 2, 1)
    assert tx.checkpoint == 1234
    assert tx.net_gas_mist == 850_000
    assert tx.status == "success"
    assert tx.kind == "ProgrammableTransaction"
    assert [c.function for c in tx.calls] == ["swap_a2b", "join"]
    assert tx.command_count == 2

    req = sui_node.requests[0]
    assert req["method"] == "suix_queryTransactionBlocks"
    query, cursor, limit, descending = req["params"]
    assert query["filter"] == {"FromAddress": ADDRESS}
    assert query["options"]["showInput"] and query["options"]["showEffects"]
    assert (cursor, limit, descending) == (None, 50, True)


def test_non_move_commands_are_not_calls(sui_node, ledger_client):
    sui_node.set_transactions([make_tx_item("t", ms(2025, 1, 1))])
    tx = ledger_client.query_transaction_blocks(ADDRESS).items[0]
    assert tx.calls == ()
    assert tx.command_count == 1


def test_fetch_history_stops_at_window_start(sui_node, ledger_client):
    items = [
        make_tx_item("future", ms(2026, 1, 2)),
        make_tx_item("dec", ms(2025, 12, 31, 23)),
        make_tx_item("jun", ms(2025, 6, 1)),
        make_tx_item("jan", ms(2025, 1, 1)),
        make_tx_item("old1", ms(2024, 12, 31, 23)),
        make_tx_item("old2", ms(2024, 6, 1)),
        make_tx_item("old3", ms(2024, 1, 1)),
    ]
    sui_node.set_transactions(items, page_size=2)

    txs = ledger_client.fetch_transaction_history(ADDRESS, START, END)

    assert [t.digest for t in txs] == ["dec", "jun", "jan"]
    # Pages: [future, dec], [jun, jan], [old1, old2] -> stops there; page 4 never fetched.
    assert sui_node.methods().count("suix_queryTransactionBlocks") == 3


def test_fetch_history_dedupes_by_digest(sui_node, ledger_client):
    a = make_tx_item("same", ms(2025, 5, 1))
    b = make_tx_item("other", ms(2025, 4, 1))
    sui_node.tx_pages = [[a], [a, b]]

    txs = ledger_client.fetch_transaction_history(ADDRESS, START, END)
    assert [t.digest for t in txs] == ["same", "other"]


def test_fetch_history_first_page_failure_raises(sui_node, ledger_client):
    sui_node.set_transactions([make_tx_item("a", ms(2025, 5, 1))])
    sui_node.fail_tx_pages = {0}
    with pytest.raises(LedgerRpcError) as exc:
        ledger_client.fetch_transaction_history(ADDRESS, START, END)
    assert exc.value.status_code == 500


def test_fetch_history_later_failure_keeps_partial(sui_node, ledger_client):
    sui_node.set_transactions(
        [make_tx_item(f"t{i}", ms(2025, 6, 1 + i)) for i in range(6)],
        page_size=2,
    )
    sui_node.fail_tx_pages = {1}

    txs = ledger_client.fetch_transaction_history(ADDRESS, START, END)
    assert [t.digest for t in txs] == ["t5", "t4"]


def test_malformed_item_fails_page(sui_node, ledger_client):
    item = make_tx_item("bad", ms(2025, 5, 1))
    item["effects"] = "garbled"
    sui_node.tx_pages = [[item]]
    with pytest.raises(LedgerRpcError) as exc:
        ledger_client.query_transaction_blocks(ADDRESS)
    assert exc.value.code == ERROR_CODES["UPSTREAM_ERROR"]
    assert "malformed" in exc.value.message


def test_fetch_history_malformed_later_page_keeps_partial(sui_node, ledger_client):
    sui_node.set_transactions(
        [make_tx_item(f"t{i}", ms(2025, 6, 1 + i)) for i in range(3)],
        page_size=2,
    )
    sui_node.tx_pages[1][0]["effects"] = "garbled"

    txs = ledger_client.fetch_transaction_history(ADDRESS, START, END)
    assert [t.digest for t in txs] == ["t2", "t1"]


def test_fetch_history_time_budget(sui_node):
    sui_node.set_transactions(
        [make_tx_item(f"t{i}", ms(2025, 6, 1 + i)) for i in range(6)],
        page_size=2,
    )
    ticks = iter([0.0, 1.0, 100.0])
    client = _client_with(sui_node.handler, max_fetch_sec=55.0, clock=lambda: next(ticks))

    txs = client.fetch_transaction_history(ADDRESS, START, END)

    assert len(txs) == 4
    assert sui_node.methods().count("suix_queryTransactionBlocks") == 2


def test_fetch_history_sleeps_between_pages(sui_node):
    sui_node.set_transactions(
        [make_tx_item(f"t{i}", ms(2025, 6, 1 + i)) for i in range(5)],
        page_size=2,
    )
    delays: list[float] = []
    client = _client_with(sui_node.handler, page_delay_sec=0.025, sleep=delays.append)

    assert len(client.fetch_transaction_history(ADDRESS, START, END)) == 5
    assert delays == [0.025, 0.025]


def test_lifetime_first_transaction(sui_node, ledger_client):
    sui_node.first_tx = make_tx_item("genesis", ms(2023, 6, 1))
    tx = ledger_client.get_lifetime_first_transaction(ADDRESS)

    assert tx.digest == "genesis"
    query, cursor, limit, descending = sui_node.requests[-1]["params"]
    assert (cursor, limit, descending) == (None, 1, False)


def test_lifetime_first_transaction_none_on_error_or_empty(sui_node, ledger_client):
    assert ledger_client.get_lifetime_first_transaction(ADDRESS) is None
    sui_node.fail_first_tx = True
    assert ledger_client.get_lifetime_first_transaction(ADDRESS) is None


def test_get_balance(sui_node, ledger_client):
    sui_node.balance = "12345678901234567890"
    assert ledger_client.get_balance(ADDRESS) == 12345678901234567890
    assert sui_node.requests[-1]["params"] == [ADDRESS, "0x2::sui::SUI"]


def test_rate_limit_maps_to_rate_limited_code():
    client = _client_with(lambda request: httpx.Response(429, text="slow down"))
    with pytest.raises(LedgerRpcError) as exc:
        client.query_transaction_blocks(ADDRESS)
    assert exc.value.code == ERROR_CODES["RATE_LIMITED"]
    assert exc.value.status_code == 429


def test_rpc_error_object_raises():
    def handler(request):
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "bad"}})

    with pytest.raises(LedgerRpcError) as exc:
        _client_with(handler).get_balance(ADDRESS)
    assert exc.value.code == ERROR_CODES["UPSTREAM_ERROR"]


def test_malformed_json_raises():
    client = _client_with(lambda request: httpx.Response(200, text="<html>"))
    with pytest.raises(LedgerRpcError):
        client.get_owned_objects(ADDRESS)


def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(LedgerRpcError):
        _client_with(handler).get_balance(ADDRESS)

"""
Tests for the FastAPI surface: success envelope and caching header, error code to
HTTP status mapping, year query parameter.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from conftest import ADDRESS

from backend_wrapped.core.exceptions import (
    GenerationFailedError,
    InvalidAddressError,
    LedgerRpcError,
    NoTransactionsError,
)


@pytest.fixture
def client():
    """FastAPI TestClient over a fresh app."""
    from fastapi.testclient import TestClient

    from backend_wrapped.api_server.server import create_app

    return TestClient(create_app())


def _aggregate(payload: dict) -> MagicMock:
    result = MagicMock()
    result.to_dict.return_value = payload
    return result


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_wrapped_success(client):
    payload = {"address": ADDRESS, "year": 2025, "total_transactions": 3}
    with patch("backend_wrapped.api_server.server.get_wrapped", return_value=_aggregate(payload)) as get_wrapped:
        r = client.get(f"/api/wrapped/{ADDRESS}", params={"year": 2025})

    assert r.status_code == 200
    assert r.json() == {"success": True, "data": payload}
    assert r.headers["cache-control"] == "public, s-maxage=3600, stale-while-revalidate=86400"
    get_wrapped.assert_called_once_with(ADDRESS, 2025)


def test_year_defaults_to_none(client):
    with patch("backend_wrapped.api_server.server.get_wrapped", return_value=_aggregate({})) as get_wrapped:
        client.get(f"/api/wrapped/{ADDRESS}")
    get_wrapped.assert_called_once_with(ADDRESS, None)


def test_invalid_address_is_400_without_upstream_calls(client):
    """Real pipeline path: validation fails before any I/O."""
    r = client.get("/api/wrapped/0x123")
    assert r.status_code == 400
    assert r.json() == {
        "success": False,
        "error": {"code": "INVALID_ADDRESS", "message": "Invalid Sui address format"},
    }
    assert "cache-control" not in r.headers


@pytest.mark.parametrize(
    "error,status,code",
    [
        (InvalidAddressError("Invalid Sui address format"), 400, "INVALID_ADDRESS"),
        (NoTransactionsError("No transactions found for 2025"), 404, "NO_TRANSACTIONS"),
        (GenerationFailedError("Failed to fetch transactions"), 500, "GENERATION_FAILED"),
        (LedgerRpcError("rate limited", code="RATE_LIMITED", status_code=429), 500, "RATE_LIMITED"),
    ],
)
def test_error_mapping(client, error, status, code):
    with patch("backend_wrapped.api_server.server.get_wrapped", side_effect=error):
        r = client.get(f"/api/wrapped/{ADDRESS}")
    assert r.status_code == status
    body = r.json()
    assert body["success"] is False
    assert body["error"]["code"] == code
    assert body["error"]["message"] == error.message


def test_unexpected_error_is_generation_failed(client):
    with patch("backend_wrapped.api_server.server.get_wrapped", side_effect=RuntimeError("bug")):
        r = client.get(f"/api/wrapped/{ADDRESS}")
    assert r.status_code == 500
    assert r.json()["error"]["code"] == "GENERATION_FAILED"


def test_year_out_of_range_rejected(client):
    with patch("backend_wrapped.api_server.server.get_wrapped") as get_wrapped:
        r = client.get(f"/api/wrapped/{ADDRESS}", params={"year": 1999})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["error"]["code"] == "INVALID_REQUEST"
    assert "year" in body["error"]["message"]
    get_wrapped.assert_not_called()


def test_non_numeric_year_rejected(client):
    r = client.get(f"/api/wrapped/{ADDRESS}", params={"year": "latest"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "INVALID_REQUEST"


def test_app_module_exports_app():
    from fastapi import FastAPI

    from backend_wrapped.api_server.app import app

    assert isinstance(app, FastAPI)

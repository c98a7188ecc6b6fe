"""
Application-level exceptions.

Every error that crosses the pipeline boundary is a WrappedError carrying a
discriminated `code`; the API maps codes to HTTP statuses.
"""

from __future__ import annotations

ERROR_CODES = {
    "INVALID_ADDRESS": "INVALID_ADDRESS",
    "INVALID_REQUEST": "INVALID_REQUEST",
    "NO_TRANSACTIONS": "NO_TRANSACTIONS",
    "GENERATION_FAILED": "GENERATION_FAILED",
    "UPSTREAM_ERROR": "UPSTREAM_ERROR",
    "RATE_LIMITED": "RATE_LIMITED",
}


class WrappedError(Exception):
    """Base error with a stable code and a human-readable message."""

    code = ERROR_CODES["GENERATION_FAILED"]

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class InvalidAddressError(WrappedError):
    """Address is not a 0x-prefixed 64-hex-digit Sui address. Raised before any I/O."""

    code = ERROR_CODES["INVALID_ADDRESS"]


class NoTransactionsError(WrappedError):
    """Address has no transactions in the reporting window."""

    code = ERROR_CODES["NO_TRANSACTIONS"]


class GenerationFailedError(WrappedError):
    """Any other failure while building the report."""

    code = ERROR_CODES["GENERATION_FAILED"]


class LedgerRpcError(WrappedError):
    """Remote fullnode unreachable, rate-limited, or returned a malformed/error response."""

    code = ERROR_CODES["UPSTREAM_ERROR"]

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None):
        super().__init__(message, code=code)
        self.status_code = status_code

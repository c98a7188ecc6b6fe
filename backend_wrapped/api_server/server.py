"""
FastAPI server: Wrapped report API.

Exposes GET /api/wrapped/{address}?year= returning the cached WrappedAggregate.
Errors map to {"success": false, "error": {code, message}}:
INVALID_ADDRESS and INVALID_REQUEST -> 400, NO_TRANSACTIONS -> 404, everything else -> 500.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from backend_wrapped import __version__
from backend_wrapped.analytics.wrapped_pipeline import get_wrapped
from backend_wrapped.core.exceptions import ERROR_CODES, WrappedError
from backend_wrapped.wrapped_logging import get_logger, short_address

logger = get_logger(__name__)

CACHE_CONTROL = "public, s-maxage=3600, stale-while-revalidate=86400"

STATUS_BY_CODE = {
    ERROR_CODES["INVALID_ADDRESS"]: 400,
    ERROR_CODES["INVALID_REQUEST"]: 400,
    ERROR_CODES["NO_TRANSACTIONS"]: 404,
}


# -----------------------------------------------------------------------------
# Response models
# -----------------------------------------------------------------------------


class ErrorBody(BaseModel):
    code: str = Field(..., description="Machine-readable error code, e.g. INVALID_ADDRESS")
    message: str = Field(..., description="Human-readable error message")


class ErrorResponse(BaseModel):
    success: bool = Field(False, description="Always false for errors")
    error: ErrorBody


class WrappedResponse(BaseModel):
    """GET /api/wrapped/{address} response."""

    success: bool = Field(True, description="Always true for successful responses")
    data: dict[str, Any] = Field(..., description="Serialised WrappedAggregate")


def status_for_code(code: str) -> int:
    return STATUS_BY_CODE.get(code, 500)


def error_response(code: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=ErrorBody(code=code, message=message))
    return JSONResponse(status_code=status_for_code(code), content=body.model_dump())


# -----------------------------------------------------------------------------
# App
# -----------------------------------------------------------------------------


def create_app() -> FastAPI:
    app = FastAPI(
        title="Sui Wrapped API",
        description="Yearly on-chain activity summary for Sui addresses.",
        version=__version__,
    )

    @app.exception_handler(RequestValidationError)
    def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Query/path validation failures use the same error envelope as pipeline errors."""
        errors = exc.errors()
        loc = ".".join(str(part) for part in errors[0].get("loc", ())) if errors else "request"
        msg = errors[0].get("msg", "invalid value") if errors else "invalid request"
        return error_response(ERROR_CODES["INVALID_REQUEST"], f"{loc}: {msg}")

    @app.get("/health")
    def health() -> dict[str, str]:
        """Liveness check: API is up."""
        return {"status": "ok"}

    @app.get(
        "/api/wrapped/{address}",
        response_model=WrappedResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    def wrapped(
        address: str,
        year: int | None = Query(None, ge=2023, le=2100, description="Calendar year (UTC); defaults to WRAPPED_YEAR"),
    ) -> JSONResponse:
        try:
            result = get_wrapped(address, year)
        except WrappedError as e:
            logger.info(
                "api_wrapped_error",
                address=short_address(address),
                code=e.code,
                error=e.message,
            )
            return error_response(e.code, e.message)
        except Exception as e:
            logger.exception("api_wrapped_failed", address=short_address(address), error=str(e))
            return error_response(ERROR_CODES["GENERATION_FAILED"], "Failed to generate Wrapped report")

        body = WrappedResponse(data=result.to_dict())
        return JSONResponse(
            content=body.model_dump(),
            headers={"Cache-Control": CACHE_CONTROL},
        )

    return app


app = create_app()

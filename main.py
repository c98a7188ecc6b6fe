"""
Main entrypoint: Wrapped API server.

Env: SUI_RPC_URL or SUI_NETWORK, WRAPPED_YEAR, WRAPPED_CACHE_TTL_SEC, API_HOST, API_PORT, etc.

Equivalent: uvicorn backend_wrapped.api_server.app:app --host 0.0.0.0 --port 8000
"""

import os

# Configure structured JSON logging before other imports that may log
from backend_wrapped.wrapped_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Run the FastAPI server in the main thread."""
    import uvicorn

    from backend_wrapped.config import get_settings

    settings = get_settings()
    logger.info(
        "main_api_starting",
        host=settings.api_host,
        port=settings.api_port,
        sui_rpc_url=settings.sui_rpc_url,
        wrapped_year=settings.wrapped_year,
    )
    uvicorn.run(
        "backend_wrapped.api_server.app:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()

"""
Generate one Wrapped report from the command line and print it as JSON.

Usage:
  python -m backend_wrapped.tools.generate_wrapped 0x<64 hex> [--year 2025] [--no-cache]

Exit codes: 0 ok, 1 no transactions or generation failure, 2 invalid address.
"""

from __future__ import annotations

import argparse
import json
import sys

from backend_wrapped.analytics.wrapped_pipeline import generate_wrapped, get_wrapped
from backend_wrapped.core.exceptions import InvalidAddressError, WrappedError
from backend_wrapped.wrapped_logging import get_logger

logger = get_logger(__name__)


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Generate a Sui Wrapped report for one address.")
    ap.add_argument("address", help="Sui address (0x + 64 hex digits)")
    ap.add_argument("--year", type=int, default=None, help="Calendar year (UTC); defaults to WRAPPED_YEAR")
    ap.add_argument("--no-cache", dest="no_cache", action="store_true", help="Bypass the result cache")
    args = ap.parse_args(argv)

    try:
        if args.no_cache:
            result = generate_wrapped(args.address, args.year)
        else:
            result = get_wrapped(args.address, args.year)
    except InvalidAddressError as e:
        print(json.dumps({"success": False, "error": e.to_dict()}), file=sys.stderr)
        return 2
    except WrappedError as e:
        logger.warning("generate_wrapped_cli_failed", code=e.code, error=e.message)
        print(json.dumps({"success": False, "error": e.to_dict()}), file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

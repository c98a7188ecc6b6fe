"""Sui address validation utilities."""

from __future__ import annotations

import re

from backend_wrapped.core.exceptions import InvalidAddressError

# 32-byte address: 0x + 64 hex chars
SUI_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{64}$")


def is_valid_sui_address(address: str | None) -> bool:
    """Return True if address is a full-length 0x-prefixed Sui address."""
    if not isinstance(address, str):
        return False
    return bool(SUI_ADDRESS_RE.match(address.strip()))


def normalize_sui_address(address: str | None) -> str:
    """
    Validate and return the canonical (stripped, lowercase) form of an address.
    Raises InvalidAddressError on malformed input.
    """
    if not is_valid_sui_address(address):
        raise InvalidAddressError("Invalid Sui address format")
    return address.strip().lower()


def normalize_object_id(object_id: str) -> str:
    """
    Expand a package/object id to its full 64-hex-digit lowercase form
    (0xdee9 -> 0x000...dee9). Non-hex input is returned lowercased unchanged.
    """
    raw = (object_id or "").strip().lower()
    body = raw[2:] if raw.startswith("0x") else raw
    if not body or len(body) > 64 or any(c not in "0123456789abcdef" for c in body):
        return raw
    return "0x" + body.rjust(64, "0")

"""
Static protocol registry for transaction classification.

Loaded once per process from a versioned JSON file (data/protocol_registry.json,
or WRAPPED_PROTOCOL_REGISTRY_PATH). Holds three lookup tables:
  - package id -> protocol (many-to-one: versioned deployments share a protocol)
  - module name -> protocol (protocol-specific module names only)
  - ordered function-name keyword -> action kind
Package ids are stored in their full 64-hex-digit form so short ids (0xdee9)
and padded ids resolve to the same entry.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from backend_wrapped.config.env import get_data_dir
from backend_wrapped.utils.wallet_utils import normalize_object_id
from backend_wrapped.wrapped_logging import get_logger

logger = get_logger(__name__)

CATEGORY_DEX = "dex"
CATEGORY_LENDING = "lending"
CATEGORY_LST = "lst"
CATEGORY_NFT = "nft"
CATEGORY_BRIDGE = "bridge"
CATEGORY_OTHER = "other"

CATEGORIES = (
    CATEGORY_DEX,
    CATEGORY_LENDING,
    CATEGORY_LST,
    CATEGORY_NFT,
    CATEGORY_BRIDGE,
    CATEGORY_OTHER,
)

DEFAULT_REGISTRY_PATH = get_data_dir() / "protocol_registry.json"


@dataclass(frozen=True)
class ProtocolInfo:
    name: str
    display_name: str
    category: str
    website: str = ""


@dataclass(frozen=True)
class ProtocolRegistry:
    """Immutable lookup tables; build with load_registry() or from_dict()."""

    version: int
    protocols: Mapping[str, ProtocolInfo]
    packages: Mapping[str, ProtocolInfo]
    modules: Mapping[str, ProtocolInfo]
    action_keywords: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def lookup_package(self, package_id: str) -> ProtocolInfo | None:
        return self.packages.get(normalize_object_id(package_id))

    def lookup_module(self, module_name: str) -> ProtocolInfo | None:
        return self.modules.get((module_name or "").strip().lower())

    def display_name(self, protocol: str) -> str:
        """Registered display name, else the name title-cased with underscores as spaces."""
        info = self.protocols.get(protocol)
        if info is not None:
            return info.display_name
        if not protocol:
            return ""
        return protocol[:1].upper() + protocol[1:].replace("_", " ")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProtocolRegistry":
        """
        Parse the registry JSON structure. Raises ValueError on unknown categories
        or on a package/module id claimed by two different protocols.
        """
        protocols: dict[str, ProtocolInfo] = {}
        packages: dict[str, ProtocolInfo] = {}
        modules: dict[str, ProtocolInfo] = {}

        for name, entry in (data.get("protocols") or {}).items():
            category = (entry.get("category") or "").strip().lower()
            if category not in CATEGORIES:
                raise ValueError(f"protocol {name!r} has unknown category {category!r}")
            info = ProtocolInfo(
                name=name,
                display_name=entry.get("display_name") or name,
                category=category,
                website=entry.get("website") or "",
            )
            protocols[name] = info
            for raw_id in entry.get("package_ids") or []:
                _register(packages, normalize_object_id(raw_id), info, "package")
            for raw_module in entry.get("modules") or []:
                _register(modules, str(raw_module).strip().lower(), info, "module")

        keywords: list[tuple[str, str]] = []
        for pair in data.get("action_keywords") or []:
            keyword, action = pair
            keywords.append((str(keyword).lower(), str(action)))

        return cls(
            version=int(data.get("version") or 0),
            protocols=MappingProxyType(protocols),
            packages=MappingProxyType(packages),
            modules=MappingProxyType(modules),
            action_keywords=tuple(keywords),
        )


def _register(table: dict[str, ProtocolInfo], key: str, info: ProtocolInfo, kind: str) -> None:
    existing = table.get(key)
    if existing is not None and existing.name != info.name:
        raise ValueError(f"{kind} {key!r} mapped to both {existing.name!r} and {info.name!r}")
    table[key] = info


def load_registry(path: str | Path | None = None) -> ProtocolRegistry:
    """Load and validate a registry file."""
    path = Path(path) if path else DEFAULT_REGISTRY_PATH
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    registry = ProtocolRegistry.from_dict(data)
    logger.info(
        "protocol_registry_loaded",
        path=str(path),
        version=registry.version,
        protocols=len(registry.protocols),
        packages=len(registry.packages),
        modules=len(registry.modules),
    )
    return registry


@lru_cache(maxsize=1)
def get_registry() -> ProtocolRegistry:
    """Process-wide registry (WRAPPED_PROTOCOL_REGISTRY_PATH overrides the packaged file)."""
    override = (os.getenv("WRAPPED_PROTOCOL_REGISTRY_PATH") or "").strip()
    return load_registry(override or None)

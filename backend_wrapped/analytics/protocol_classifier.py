"""
Protocol classification for Wrapped analytics.

Maps a transaction's Move calls to (protocol, category, action). Order of checks matters:
  1. exact package id match (highest confidence)
  2. protocol-specific module name match (fallback)
Calls are tried in command order; the first call that matches either table wins.
The action is derived from that call's function name by ordered keyword
substring test. Anything unmatched is (unknown, other, unknown).

Pure function of the transaction and the static registry: never raises, never does I/O.
"""

from __future__ import annotations

from dataclasses import dataclass

from backend_wrapped.analytics.registry import (
    CATEGORY_OTHER,
    ProtocolInfo,
    ProtocolRegistry,
    get_registry,
)
from backend_wrapped.ledger.models import ContractCallDescriptor, TransactionRecord

PROTOCOL_UNKNOWN = "unknown"
ACTION_UNKNOWN = "unknown"
ACTION_OTHER = "other"


@dataclass(frozen=True)
class Classification:
    protocol: str
    category: str
    action: str

    @property
    def is_known(self) -> bool:
        return self.protocol != PROTOCOL_UNKNOWN


UNKNOWN_CLASSIFICATION = Classification(PROTOCOL_UNKNOWN, CATEGORY_OTHER, ACTION_UNKNOWN)


def classify_action(function_name: str, registry: ProtocolRegistry | None = None) -> str:
    """First keyword contained in the lowercased function name wins; default 'other'."""
    registry = registry or get_registry()
    func = (function_name or "").lower()
    for keyword, action in registry.action_keywords:
        if keyword in func:
            return action
    return ACTION_OTHER


def _match_call(call: ContractCallDescriptor, registry: ProtocolRegistry) -> ProtocolInfo | None:
    info = registry.lookup_package(call.package)
    if info is not None:
        return info
    return registry.lookup_module(call.module)


def classify_transaction(
    tx: TransactionRecord,
    registry: ProtocolRegistry | None = None,
) -> Classification:
    """
    Classify one transaction. Zero calls (plain transfer) or no registry hit
    returns UNKNOWN_CLASSIFICATION.
    """
    registry = registry or get_registry()
    for call in tx.calls:
        info = _match_call(call, registry)
        if info is not None:
            return Classification(
                protocol=info.name,
                category=info.category,
                action=classify_action(call.function, registry),
            )
    return UNKNOWN_CLASSIFICATION

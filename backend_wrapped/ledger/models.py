"""
Data models for Sui ledger client output.

Responsibilities:
- Define immutable records for finalized transactions, their Move calls,
  and owned objects.
- Build them from Sui JSON-RPC response items (suix_queryTransactionBlocks,
  suix_getOwnedObjects). Missing numeric fields default to 0.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

STATUS_SUCCESS = "success"
STATUS_FAILURE = "failure"
STATUS_UNKNOWN = "unknown"

KIND_PROGRAMMABLE = "ProgrammableTransaction"


def _to_int(value: Any) -> int:
    """Parse an RPC numeric field (often a decimal string) to int; None/garbage -> 0."""
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class ContractCallDescriptor:
    """One Move call inside a programmable transaction block."""

    package: str
    module: str
    function: str

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "ContractCallDescriptor":
        """Build from the body of a {"MoveCall": {...}} command."""
        return cls(
            package=str(item.get("package") or ""),
            module=str(item.get("module") or ""),
            function=str(item.get("function") or ""),
        )


@dataclass(frozen=True)
class TransactionRecord:
    """
    One finalized transaction sent by the queried address.

    Gas fields are in MIST (1 SUI = 10^9 MIST) and kept as exact Python ints.
    """

    digest: str
    timestamp_ms: int
    checkpoint: int
    computation_cost: int = 0
    storage_cost: int = 0
    storage_rebate: int = 0
    status: str = STATUS_UNKNOWN
    kind: str = STATUS_UNKNOWN
    calls: tuple[ContractCallDescriptor, ...] = field(default_factory=tuple)

    @property
    def net_gas_mist(self) -> int:
        """Signed gas contribution; negative when the storage rebate exceeds the cost."""
        return self.computation_cost + self.storage_cost - self.storage_rebate

    @property
    def command_count(self) -> int:
        """Number of Move calls, floored at 1 (a plain transfer is still one command)."""
        return max(len(self.calls), 1)

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "TransactionRecord":
        """Build from a SuiTransactionBlockResponse (showInput + showEffects)."""
        effects = item.get("effects") or {}
        gas_used = effects.get("gasUsed") or {}
        status = (effects.get("status") or {}).get("status") or STATUS_UNKNOWN
        tx_data = ((item.get("transaction") or {}).get("data") or {}).get("transaction") or {}
        kind = tx_data.get("kind") or STATUS_UNKNOWN
        return cls(
            digest=str(item.get("digest") or ""),
            timestamp_ms=_to_int(item.get("timestampMs")),
            checkpoint=_to_int(item.get("checkpoint")),
            computation_cost=_to_int(gas_used.get("computationCost")),
            storage_cost=_to_int(gas_used.get("storageCost")),
            storage_rebate=_to_int(gas_used.get("storageRebate")),
            status=str(status),
            kind=str(kind),
            calls=_move_calls_from_tx_data(tx_data),
        )


def _move_calls_from_tx_data(tx_data: dict[str, Any]) -> tuple[ContractCallDescriptor, ...]:
    """Extract MoveCall commands of a programmable transaction, in command order."""
    if tx_data.get("kind") != KIND_PROGRAMMABLE:
        return ()
    calls: list[ContractCallDescriptor] = []
    for cmd in tx_data.get("transactions") or []:
        if not isinstance(cmd, dict):
            continue
        move_call = cmd.get("MoveCall")
        if isinstance(move_call, dict):
            calls.append(ContractCallDescriptor.from_rpc_item(move_call))
    return tuple(calls)


@dataclass(frozen=True)
class OwnedObject:
    """An object owned by the address (showType + showDisplay)."""

    object_id: str
    type: str | None
    display: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "OwnedObject":
        data = item.get("data") or {}
        display = (data.get("display") or {}).get("data")
        return cls(
            object_id=str(data.get("objectId") or ""),
            type=data.get("type"),
            display=display if isinstance(display, dict) else {},
        )


@dataclass(frozen=True)
class TransactionPage:
    items: list[TransactionRecord]
    next_cursor: str | None
    has_next_page: bool


@dataclass(frozen=True)
class ObjectPage:
    items: list[OwnedObject]
    next_cursor: str | None
    has_next_page: bool

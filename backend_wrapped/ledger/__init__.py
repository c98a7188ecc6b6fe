"""
Ledger client: Sui JSON-RPC access (transactions, owned objects, balances).

Pure I/O; normalises RPC responses into immutable records for the analytics layer.
"""

from backend_wrapped.ledger.client import SuiLedgerClient
from backend_wrapped.ledger.models import (
    ContractCallDescriptor,
    ObjectPage,
    OwnedObject,
    TransactionPage,
    TransactionRecord,
)

__all__ = [
    "SuiLedgerClient",
    "ContractCallDescriptor",
    "ObjectPage",
    "OwnedObject",
    "TransactionPage",
    "TransactionRecord",
]

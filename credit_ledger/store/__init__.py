"""Record store contract, in-memory store and the cached ledger snapshot."""

from credit_ledger.store.base import (
    CLIENTS,
    COLLECTIONS,
    LEADS,
    SALES,
    AuthProvider,
    RecordStore,
    StaticAuthProvider,
    collection_path,
)
from credit_ledger.store.memory import InMemoryRecordStore
from credit_ledger.store.snapshot import LedgerSnapshot

__all__ = [
    "AuthProvider",
    "CLIENTS",
    "COLLECTIONS",
    "InMemoryRecordStore",
    "LEADS",
    "LedgerSnapshot",
    "RecordStore",
    "SALES",
    "StaticAuthProvider",
    "collection_path",
]

"""Installment-sales credit ledger."""

from credit_ledger.config import LedgerConfig
from credit_ledger.dates import DateCalendar
from credit_ledger.generators.plan import InstallmentPlanGenerator
from credit_ledger.session import LedgerSession
from credit_ledger.store import InMemoryRecordStore, StaticAuthProvider

__all__ = [
    "DateCalendar",
    "InMemoryRecordStore",
    "InstallmentPlanGenerator",
    "LedgerConfig",
    "LedgerSession",
    "StaticAuthProvider",
]

__version__ = "0.1.0"

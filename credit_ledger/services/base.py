"""Shared plumbing for ledger services."""

from __future__ import annotations

from credit_ledger.dates import DateCalendar
from credit_ledger.logging import ledger_extra
from credit_ledger.store.base import RecordStore, collection_path
from credit_ledger.store.snapshot import LedgerSnapshot


class LedgerService:
    """Base class for services writing to one user's collections.

    Reads come from ``snapshot``; writes go to ``store`` and reach the
    snapshot through its subscription.
    """

    def __init__(
        self,
        store: RecordStore,
        user_id: str,
        snapshot: LedgerSnapshot,
        calendar: DateCalendar,
    ) -> None:
        self.store = store
        self.user_id = user_id
        self.snapshot = snapshot
        self.calendar = calendar

    def _path(self, name: str) -> str:
        return collection_path(self.user_id, name)

    def _log_extra(self, **ids: str | None) -> dict[str, dict[str, str]]:
        return ledger_extra(user_id=self.user_id, **ids)

"""In-memory record store."""

from __future__ import annotations

import copy
import itertools
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable

from credit_ledger.exceptions import EntityNotFoundError, RemoteUnavailableError
from credit_ledger.models import ChangeEvent, ChangeKind
from credit_ledger.store.base import (
    ChangeListener,
    RecordStore,
    SnapshotCallback,
    Unsubscribe,
)

logger = logging.getLogger(__name__)


class InMemoryRecordStore(RecordStore):
    """Dict-backed :class:`RecordStore` with synchronous change delivery.

    Subscribers are notified before the write coroutine returns, so a caller
    awaiting a write sees the refreshed snapshot immediately.

    Parameters
    ----------
    id_factory : Callable[[], str] | None
        Identifier source for created records (random UUID hex by default).
    """

    def __init__(self, id_factory: Callable[[], str] | None = None) -> None:
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._collections: dict[str, dict[str, dict]] = {}
        self._sequence: dict[str, int] = {}
        self._counter = itertools.count()
        self._subscribers: dict[str, list[SnapshotCallback]] = {}
        self._listeners: list[ChangeListener] = []
        self.available = True

    def _check_available(self, operation: str, collection: str) -> None:
        if not self.available:
            raise RemoteUnavailableError(f"Store unavailable: {operation} {collection}")

    def _snapshot(self, collection: str) -> list[dict]:
        records = self._collections.get(collection, {})
        ordered = sorted(
            records.items(),
            key=lambda item: (str(item[1].get("created_at", "")), self._sequence[item[0]]),
            reverse=True,
        )
        return [{"id": record_id, **copy.deepcopy(data)} for record_id, data in ordered]

    def _notify(self, collection: str, kind: ChangeKind, record_id: str, data: dict) -> None:
        if self._subscribers.get(collection):
            snapshot = self._snapshot(collection)
            for callback in list(self._subscribers[collection]):
                callback(copy.deepcopy(snapshot))

        name = collection.rsplit("/", 1)[-1]
        event = ChangeEvent(
            event_id=uuid.uuid4().hex,
            event_type=f"{name}.{kind.value}",
            event_time=datetime.now(timezone.utc),
            collection=collection,
            kind=kind,
            subject=record_id,
            data=copy.deepcopy(data),
        )
        for listener in list(self._listeners):
            listener(event)

    async def list(self, collection: str) -> list[dict]:
        self._check_available("list", collection)
        return self._snapshot(collection)

    async def create(self, collection: str, record: dict) -> str:
        self._check_available("create", collection)
        record_id = self._id_factory()
        self._collections.setdefault(collection, {})[record_id] = copy.deepcopy(record)
        self._sequence[record_id] = next(self._counter)
        logger.debug("Created %s/%s", collection, record_id)
        self._notify(collection, ChangeKind.CREATED, record_id, record)
        return record_id

    async def update(self, collection: str, record_id: str, partial: dict) -> None:
        self._check_available("update", collection)
        records = self._collections.get(collection, {})
        if record_id not in records:
            raise EntityNotFoundError(f"Record {collection}/{record_id} not found")
        records[record_id].update(copy.deepcopy(partial))
        logger.debug("Updated %s/%s fields=%s", collection, record_id, sorted(partial))
        self._notify(collection, ChangeKind.UPDATED, record_id, records[record_id])

    async def delete(self, collection: str, record_id: str) -> None:
        self._check_available("delete", collection)
        records = self._collections.get(collection, {})
        if records.pop(record_id, None) is None:
            logger.debug("Delete of missing record %s/%s ignored", collection, record_id)
            return
        self._sequence.pop(record_id, None)
        logger.debug("Deleted %s/%s", collection, record_id)
        self._notify(collection, ChangeKind.DELETED, record_id, {})

    def subscribe(self, collection: str, callback: SnapshotCallback) -> Unsubscribe:
        self._check_available("subscribe", collection)
        self._subscribers.setdefault(collection, []).append(callback)
        callback(self._snapshot(collection))

        def unsubscribe() -> None:
            if callback in self._subscribers.get(collection, []):
                self._subscribers[collection].remove(callback)

        return unsubscribe

    def add_listener(self, listener: ChangeListener) -> Unsubscribe:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def summary(self) -> dict[str, int]:
        """Return record counts per collection."""
        return {name: len(records) for name, records in self._collections.items()}

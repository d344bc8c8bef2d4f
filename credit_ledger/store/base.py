"""Record store and auth contracts consumed by the ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from credit_ledger.models import ChangeEvent

CLIENTS = "clients"
SALES = "sales"
LEADS = "leads"
COLLECTIONS = (CLIENTS, SALES, LEADS)

# A snapshot is the full collection, newest first; every record carries "id".
SnapshotCallback = Callable[[list[dict]], None]
ChangeListener = Callable[[ChangeEvent], None]
Unsubscribe = Callable[[], None]


def collection_path(user_id: str, name: str) -> str:
    """Per-user collection path, e.g. ``users/u1/sales``."""
    return f"users/{user_id}/{name}"


class RecordStore(ABC):
    """Document store with live collection subscriptions.

    Writes are acknowledged asynchronously; subscribers receive the new
    collection snapshot after each acknowledged change. Implementations
    raise :class:`~credit_ledger.exceptions.RemoteUnavailableError` when the
    backend cannot be reached and never retry on their own.
    """

    @abstractmethod
    async def list(self, collection: str) -> list[dict]:
        """Return all records of ``collection`` ordered by creation time, newest first."""

    @abstractmethod
    async def create(self, collection: str, record: dict) -> str:
        """Store ``record`` and return its new identifier."""

    @abstractmethod
    async def update(self, collection: str, record_id: str, partial: dict) -> None:
        """Merge ``partial`` into an existing record."""

    @abstractmethod
    async def delete(self, collection: str, record_id: str) -> None:
        """Delete a record."""

    @abstractmethod
    def subscribe(self, collection: str, callback: SnapshotCallback) -> Unsubscribe:
        """Push the current snapshot now and after every change."""

    @abstractmethod
    def add_listener(self, listener: ChangeListener) -> Unsubscribe:
        """Receive a :class:`ChangeEvent` for every record change."""


class AuthProvider(ABC):
    """Source of the signed-in user's identifier."""

    @abstractmethod
    def current_user_id(self) -> str | None:
        """Stable user identifier, or None when nobody is signed in."""


class StaticAuthProvider(AuthProvider):
    """Auth provider returning a fixed user, for scripts and tests."""

    def __init__(self, user_id: str | None) -> None:
        self.user_id = user_id

    def current_user_id(self) -> str | None:
        return self.user_id

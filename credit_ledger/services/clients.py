"""Client registry with cascade delete of dependent sales."""

from __future__ import annotations

import copy
import logging

from credit_ledger.exceptions import (
    EntityNotFoundError,
    LedgerError,
    PartialCascadeFailure,
    ValidationError,
)
from credit_ledger.models import Client
from credit_ledger.serialization import to_document
from credit_ledger.services.base import LedgerService
from credit_ledger.store.base import CLIENTS, SALES

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "Unknown"


class ClientRegistry(LedgerService):
    """CRUD over clients."""

    EDITABLE_FIELDS = frozenset({"name", "phone", "address", "notes"})

    async def add_client(
        self,
        name: str,
        phone: str = "",
        address: str = "",
        notes: str | None = None,
    ) -> Client:
        """Register a client and return it with its store identifier."""
        if not name or not name.strip():
            raise ValidationError("Client name is required")

        client = Client(
            client_id="",
            name=name.strip(),
            phone=phone,
            address=address,
            created_at=self.calendar.now(),
            notes=notes,
        )
        client.client_id = await self.store.create(self._path(CLIENTS), to_document(client))
        logger.info(
            "Client %s added: %s",
            client.client_id,
            client.name,
            extra=self._log_extra(client_id=client.client_id),
        )
        return client

    async def update_client(self, client_id: str, **changes: str | None) -> Client:
        """Update contact fields of a client."""
        client = copy.deepcopy(self.get_client(client_id))
        unknown = set(changes) - self.EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update client fields: {', '.join(sorted(unknown))}")
        if "name" in changes and not (changes["name"] or "").strip():
            raise ValidationError("Client name is required")

        await self.store.update(self._path(CLIENTS), client_id, dict(changes))
        for key, value in changes.items():
            setattr(client, key, value)
        logger.info(
            "Client %s updated: %s",
            client_id,
            sorted(changes),
            extra=self._log_extra(client_id=client_id),
        )
        return client

    async def delete_client(self, client_id: str) -> None:
        """Delete a client and every sale that references it.

        The client goes first; sale deletions follow one by one. Sales that
        could not be deleted are reported through
        :class:`PartialCascadeFailure`.
        """
        self.get_client(client_id)
        sale_ids = [sale.sale_id for sale in self.snapshot.get_client_sales(client_id)]

        await self.store.delete(self._path(CLIENTS), client_id)
        logger.info(
            "Client %s deleted; removing %d sale(s)",
            client_id,
            len(sale_ids),
            extra=self._log_extra(client_id=client_id),
        )

        orphans: list[str] = []
        last_error: LedgerError | None = None
        for sale_id in sale_ids:
            try:
                await self.store.delete(self._path(SALES), sale_id)
            except LedgerError as exc:
                logger.error(
                    "Failed to delete sale %s of client %s: %s",
                    sale_id,
                    client_id,
                    exc,
                    extra=self._log_extra(client_id=client_id, sale_id=sale_id),
                )
                orphans.append(sale_id)
                last_error = exc

        if orphans:
            raise PartialCascadeFailure(client_id, orphans) from last_error

    def get_client(self, client_id: str) -> Client:
        client = self.snapshot.clients.get(client_id)
        if client is None:
            raise EntityNotFoundError(f"Client {client_id} not found")
        return client

    def list_clients(self) -> list[Client]:
        """Clients newest first."""
        return list(self.snapshot.clients.values())

    def client_name(self, client_id: str) -> str:
        client = self.snapshot.clients.get(client_id)
        return client.name if client else UNKNOWN_CLIENT

    def search(self, text: str) -> list[Client]:
        """Clients whose name, phone or address contains ``text``."""
        needle = text.strip().lower()
        return [
            c
            for c in self.snapshot.clients.values()
            if needle in c.name.lower() or needle in c.phone.lower() or needle in c.address.lower()
        ]

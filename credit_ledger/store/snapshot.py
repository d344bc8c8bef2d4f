"""Locally cached view of a user's ledger, fed by store subscriptions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from credit_ledger.models import Client, Lead, Sale
from credit_ledger.serialization import (
    client_from_document,
    lead_from_document,
    sale_from_document,
)
from credit_ledger.store.base import (
    CLIENTS,
    LEADS,
    SALES,
    RecordStore,
    Unsubscribe,
    collection_path,
)

logger = logging.getLogger(__name__)


@dataclass
class LedgerSnapshot:
    """In-memory ledger state with client-to-sale relationship tracking.

    Collections keep the order pushed by the store (newest first). The
    snapshot may lag a write issued from elsewhere; it is replaced wholesale
    on every push.
    """

    clients: dict[str, Client] = field(default_factory=dict)
    sales: dict[str, Sale] = field(default_factory=dict)
    leads: dict[str, Lead] = field(default_factory=dict)

    # Relationship index
    _client_sales: dict[str, list[str]] = field(default_factory=dict)
    _unsubscribers: list[Unsubscribe] = field(default_factory=list)

    def load_clients(self, records: list[dict]) -> None:
        """Replace the client collection."""
        self.clients = {r["id"]: client_from_document(r["id"], r) for r in records}

    def load_sales(self, records: list[dict]) -> None:
        """Replace the sale collection and rebuild the client index."""
        self.sales = {r["id"]: sale_from_document(r["id"], r) for r in records}
        self._client_sales = {}
        for sale in self.sales.values():
            self._client_sales.setdefault(sale.client_id, []).append(sale.sale_id)

    def load_leads(self, records: list[dict]) -> None:
        """Replace the lead collection."""
        self.leads = {r["id"]: lead_from_document(r["id"], r) for r in records}

    def attach(self, store: RecordStore, user_id: str) -> None:
        """Subscribe to the user's collections."""
        self.detach()
        self._unsubscribers = [
            store.subscribe(collection_path(user_id, CLIENTS), self.load_clients),
            store.subscribe(collection_path(user_id, SALES), self.load_sales),
            store.subscribe(collection_path(user_id, LEADS), self.load_leads),
        ]
        logger.debug("Snapshot attached for user %s", user_id)

    def detach(self) -> None:
        """Stop receiving pushes."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    def clear(self) -> None:
        self.clients.clear()
        self.sales.clear()
        self.leads.clear()
        self._client_sales.clear()

    # Query methods
    def get_client_sales(self, client_id: str) -> list[Sale]:
        """Get all sales for a client."""
        sale_ids = self._client_sales.get(client_id, [])
        return [self.sales[sid] for sid in sale_ids]

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "clients": len(self.clients),
            "sales": len(self.sales),
            "installments": sum(len(s.installments) for s in self.sales.values()),
            "leads": len(self.leads),
        }

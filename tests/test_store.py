"""Tests for the in-memory record store, snapshot and session wiring."""

from typing import Callable

import pytest

from credit_ledger.dates import DateCalendar
from credit_ledger.exceptions import (
    AuthenticationError,
    EntityNotFoundError,
    RemoteUnavailableError,
)
from credit_ledger.models import ChangeEvent, ChangeKind, Client, SaleTerms
from credit_ledger.session import LedgerSession
from credit_ledger.store import (
    CLIENTS,
    InMemoryRecordStore,
    LedgerSnapshot,
    StaticAuthProvider,
    collection_path,
)

COLLECTION = "users/u1/clients"


def _ids() -> Callable[[], str]:
    counter = iter(range(1, 1000))
    return lambda: f"rec-{next(counter):03d}"


class TestInMemoryRecordStore:
    """Tests for InMemoryRecordStore."""

    @pytest.mark.asyncio
    async def test_create_and_list(self) -> None:
        store = InMemoryRecordStore(id_factory=_ids())

        record_id = await store.create(COLLECTION, {"name": "Ana", "created_at": "2024-01-10T10:00:00"})

        assert record_id == "rec-001"
        assert await store.list(COLLECTION) == [
            {"id": "rec-001", "name": "Ana", "created_at": "2024-01-10T10:00:00"}
        ]
        assert store.summary() == {COLLECTION: 1}

    @pytest.mark.asyncio
    async def test_list_newest_first(self) -> None:
        store = InMemoryRecordStore(id_factory=_ids())
        await store.create(COLLECTION, {"name": "Old", "created_at": "2024-01-01T00:00:00"})
        await store.create(COLLECTION, {"name": "New", "created_at": "2024-01-05T00:00:00"})
        await store.create(COLLECTION, {"name": "Same time, later", "created_at": "2024-01-05T00:00:00"})

        names = [r["name"] for r in await store.list(COLLECTION)]

        assert names == ["Same time, later", "New", "Old"]

    @pytest.mark.asyncio
    async def test_records_are_copied(self) -> None:
        store = InMemoryRecordStore()
        record = {"name": "Ana", "tags": ["vip"]}
        record_id = await store.create(COLLECTION, record)
        record["tags"].append("changed")

        listed = await store.list(COLLECTION)
        listed[0]["tags"].append("mutated")

        assert (await store.list(COLLECTION))[0]["tags"] == ["vip"]
        assert listed[0]["id"] == record_id

    @pytest.mark.asyncio
    async def test_update_merges(self) -> None:
        store = InMemoryRecordStore(id_factory=_ids())
        await store.create(COLLECTION, {"name": "Ana", "phone": "1"})

        await store.update(COLLECTION, "rec-001", {"phone": "2"})

        assert (await store.list(COLLECTION))[0] == {"id": "rec-001", "name": "Ana", "phone": "2"}

    @pytest.mark.asyncio
    async def test_update_missing_record(self) -> None:
        store = InMemoryRecordStore()

        with pytest.raises(EntityNotFoundError):
            await store.update(COLLECTION, "missing", {"phone": "2"})

    @pytest.mark.asyncio
    async def test_delete_missing_record_is_noop(self) -> None:
        store = InMemoryRecordStore(id_factory=_ids())
        await store.create(COLLECTION, {"name": "Ana"})

        await store.delete(COLLECTION, "missing")
        await store.delete(COLLECTION, "rec-001")

        assert await store.list(COLLECTION) == []

    @pytest.mark.asyncio
    async def test_unavailable_store_raises(self) -> None:
        store = InMemoryRecordStore()
        store.available = False

        with pytest.raises(RemoteUnavailableError):
            await store.create(COLLECTION, {"name": "Ana"})
        with pytest.raises(RemoteUnavailableError):
            await store.list(COLLECTION)
        with pytest.raises(RemoteUnavailableError):
            store.subscribe(COLLECTION, lambda records: None)

    @pytest.mark.asyncio
    async def test_subscribe_pushes_snapshots(self) -> None:
        store = InMemoryRecordStore(id_factory=_ids())
        pushes: list[list[dict]] = []

        unsubscribe = store.subscribe(COLLECTION, pushes.append)
        await store.create(COLLECTION, {"name": "Ana"})
        await store.update(COLLECTION, "rec-001", {"name": "Ana Maria"})
        unsubscribe()
        await store.delete(COLLECTION, "rec-001")

        assert pushes == [
            [],
            [{"id": "rec-001", "name": "Ana"}],
            [{"id": "rec-001", "name": "Ana Maria"}],
        ]

    @pytest.mark.asyncio
    async def test_subscription_scoped_to_collection(self) -> None:
        store = InMemoryRecordStore()
        pushes: list[list[dict]] = []
        store.subscribe("users/u2/clients", pushes.append)

        await store.create(COLLECTION, {"name": "Ana"})

        assert pushes == [[]]

    @pytest.mark.asyncio
    async def test_listener_receives_change_events(self) -> None:
        store = InMemoryRecordStore(id_factory=_ids())
        events: list[ChangeEvent] = []

        remove = store.add_listener(events.append)
        await store.create("users/u1/sales", {"total_amount": "1000"})
        await store.delete("users/u1/sales", "rec-001")
        remove()
        await store.create("users/u1/sales", {"total_amount": "500"})

        assert [e.kind for e in events] == [ChangeKind.CREATED, ChangeKind.DELETED]
        assert events[0].event_type == "sales.created"
        assert events[0].subject == "rec-001"
        assert events[0].data == {"total_amount": "1000"}
        assert events[1].collection == "users/u1/sales"


class TestLedgerSnapshot:
    """Tests for LedgerSnapshot."""

    def _sale_doc(self, record_id: str, client_id: str) -> dict:
        return {
            "id": record_id,
            "client_id": client_id,
            "product": {"name": "TV", "cost_price": "400", "sale_price": "800"},
            "total_amount": "800",
            "remaining_amount": "800",
            "frequency": "MONTHLY",
            "payment_method": "CASH",
            "start_date": "2024-01-10",
            "status": "ACTIVE",
            "created_at": "2024-01-10T10:00:00-03:00",
            "installments": [],
        }

    def test_load_sales_builds_client_index(self) -> None:
        snapshot = LedgerSnapshot()

        snapshot.load_sales([
            self._sale_doc("s-2", "c-1"),
            self._sale_doc("s-1", "c-1"),
            self._sale_doc("s-3", "c-2"),
        ])

        assert [s.sale_id for s in snapshot.get_client_sales("c-1")] == ["s-2", "s-1"]
        assert [s.sale_id for s in snapshot.get_client_sales("c-2")] == ["s-3"]
        assert snapshot.get_client_sales("c-9") == []

    def test_load_replaces_collection(self) -> None:
        snapshot = LedgerSnapshot()
        snapshot.load_sales([self._sale_doc("s-1", "c-1")])

        snapshot.load_sales([self._sale_doc("s-2", "c-2")])

        assert list(snapshot.sales) == ["s-2"]
        assert snapshot.get_client_sales("c-1") == []

    @pytest.mark.asyncio
    async def test_attach_and_detach(self) -> None:
        store = InMemoryRecordStore()
        snapshot = LedgerSnapshot()
        path = collection_path("u1", CLIENTS)

        snapshot.attach(store, "u1")
        await store.create(path, {"name": "Ana", "phone": "", "address": "", "created_at": "2024-01-10T10:00:00"})
        assert snapshot.summary()["clients"] == 1

        snapshot.detach()
        await store.create(path, {"name": "Bruno", "phone": "", "address": "", "created_at": "2024-01-10T10:00:00"})
        assert snapshot.summary()["clients"] == 1

    def test_clear(self) -> None:
        snapshot = LedgerSnapshot()
        snapshot.load_sales([self._sale_doc("s-1", "c-1")])

        snapshot.clear()

        assert snapshot.summary() == {"clients": 0, "sales": 0, "installments": 0, "leads": 0}


class TestLedgerSession:
    """Tests for LedgerSession."""

    def test_open_requires_user(self, store: InMemoryRecordStore) -> None:
        with pytest.raises(AuthenticationError):
            LedgerSession.open(store, StaticAuthProvider(None))

    def test_collections_are_per_user(self) -> None:
        assert collection_path("u1", CLIENTS) == "users/u1/clients"

    @pytest.mark.asyncio
    async def test_users_are_isolated(
        self,
        store: InMemoryRecordStore,
        calendar: DateCalendar,
        session: LedgerSession,
        client: Client,
    ) -> None:
        other = LedgerSession.open(store, StaticAuthProvider("user-test-002"), calendar=calendar)

        assert other.clients.list_clients() == []
        assert [c.client_id for c in session.clients.list_clients()] == [client.client_id]

    @pytest.mark.asyncio
    async def test_refresh_reloads_from_store(
        self,
        session: LedgerSession,
        client: Client,
        make_terms: Callable[..., SaleTerms],
    ) -> None:
        sale = await session.sales.create_sale(make_terms(client.client_id))
        session.snapshot.clear()

        await session.refresh()

        assert session.sales.get_sale(sale.sale_id).remaining_amount == sale.remaining_amount
        assert session.clients.get_client(client.client_id).name == "Ana Gomez"

    @pytest.mark.asyncio
    async def test_close_stops_updates(self, session: LedgerSession, client: Client) -> None:
        session.close()

        await session.clients.add_client("Bruno Diaz")

        assert session.snapshot.summary()["clients"] == 0

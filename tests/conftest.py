"""Pytest configuration and fixtures."""

from datetime import date, datetime
from decimal import Decimal
from typing import Callable

import pytest
import pytest_asyncio

from credit_ledger.config import LedgerConfig
from credit_ledger.dates import DateCalendar
from credit_ledger.models import Client, Frequency, Product, SaleTerms
from credit_ledger.session import LedgerSession
from credit_ledger.store import InMemoryRecordStore, StaticAuthProvider

# Wednesday, 10:00 in Buenos Aires
FIXED_NOW = datetime(2024, 1, 10, 10, 0)
TODAY = date(2024, 1, 10)


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def sample_user_id() -> str:
    """Sample signed-in user ID."""
    return "user-test-001"


@pytest.fixture
def calendar() -> DateCalendar:
    """Calendar frozen at FIXED_NOW."""
    return DateCalendar(clock=lambda: FIXED_NOW)


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def session(
    store: InMemoryRecordStore,
    calendar: DateCalendar,
    sample_user_id: str,
    seed: int,
) -> LedgerSession:
    """Open session over an empty in-memory store."""
    return LedgerSession.open(
        store,
        StaticAuthProvider(sample_user_id),
        config=LedgerConfig(seed=seed),
        calendar=calendar,
    )


@pytest_asyncio.fixture
async def client(session: LedgerSession) -> Client:
    """Registered client."""
    return await session.clients.add_client("Ana Gomez", phone="11-5555-0001", address="Belgrano 123")


@pytest.fixture
def make_terms() -> Callable[..., SaleTerms]:
    """Factory of sale terms, daily 3 x 1000 starting today by default."""

    def _make(
        client_id: str,
        sale_price: str = "1000",
        cost_price: str = "600",
        installments_count: int = 3,
        frequency: Frequency = Frequency.DAILY,
        start_date: date = TODAY,
        name: str = "Heladera",
        **kwargs,
    ) -> SaleTerms:
        return SaleTerms(
            client_id=client_id,
            product=Product(name=name, cost_price=Decimal(cost_price), sale_price=Decimal(sale_price)),
            frequency=frequency,
            installments_count=installments_count,
            start_date=start_date,
            **kwargs,
        )

    return _make

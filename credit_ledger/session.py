"""Wiring of store, auth and services for one signed-in user."""

from __future__ import annotations

import logging

from credit_ledger.config import LedgerConfig
from credit_ledger.dates import DateCalendar
from credit_ledger.exceptions import AuthenticationError
from credit_ledger.generators.plan import InstallmentPlanGenerator
from credit_ledger.services import (
    ClientRegistry,
    LeadBook,
    PortfolioAggregator,
    SaleLedger,
)
from credit_ledger.store.base import (
    CLIENTS,
    LEADS,
    SALES,
    AuthProvider,
    RecordStore,
    collection_path,
)
from credit_ledger.store.snapshot import LedgerSnapshot

logger = logging.getLogger(__name__)


class LedgerSession:
    """Services bound to the current user's collections.

    Use :meth:`open` to resolve the user and subscribe the snapshot, and
    :meth:`close` to stop receiving pushes.
    """

    def __init__(
        self,
        store: RecordStore,
        user_id: str,
        config: LedgerConfig | None = None,
        calendar: DateCalendar | None = None,
    ) -> None:
        self.config = config or LedgerConfig()
        self.store = store
        self.user_id = user_id
        self.calendar = calendar or DateCalendar(self.config.timezone)
        self.snapshot = LedgerSnapshot()

        self.plan_generator = InstallmentPlanGenerator(
            seed=self.config.seed,
            locale=self.config.locale,
            amount_quantum=self.config.amount_quantum,
        )
        args = (store, user_id, self.snapshot, self.calendar)
        self.clients = ClientRegistry(*args)
        self.sales = SaleLedger(*args, plan_generator=self.plan_generator)
        self.leads = LeadBook(*args, sales=self.sales)
        self.portfolio = PortfolioAggregator(self.snapshot, self.calendar)

    @classmethod
    def open(
        cls,
        store: RecordStore,
        auth: AuthProvider,
        config: LedgerConfig | None = None,
        calendar: DateCalendar | None = None,
    ) -> "LedgerSession":
        """Start a session for the signed-in user.

        Raises
        ------
        AuthenticationError
            If nobody is signed in.
        """
        user_id = auth.current_user_id()
        if not user_id:
            raise AuthenticationError("No user authenticated")

        session = cls(store, user_id, config=config, calendar=calendar)
        session.snapshot.attach(store, user_id)
        logger.info("Ledger session opened for user %s: %s", user_id, session.snapshot.summary())
        return session

    async def refresh(self) -> None:
        """Reload every collection from the store, bypassing subscriptions."""
        self.snapshot.load_clients(await self.store.list(collection_path(self.user_id, CLIENTS)))
        self.snapshot.load_sales(await self.store.list(collection_path(self.user_id, SALES)))
        self.snapshot.load_leads(await self.store.list(collection_path(self.user_id, LEADS)))

    def close(self) -> None:
        """Unsubscribe and drop the cached state."""
        self.snapshot.detach()
        self.snapshot.clear()
        logger.info("Ledger session closed for user %s", self.user_id)

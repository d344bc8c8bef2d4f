"""Sample portfolio scenario: clients, sales and payment behaviour."""

from __future__ import annotations

import logging
import random
from datetime import date, timedelta
from typing import Any

from credit_ledger.generators.sample import ClientGenerator, SaleTermsGenerator
from credit_ledger.models import SaleStatus
from credit_ledger.session import LedgerSession

logger = logging.getLogger(__name__)


class SamplePortfolioScenario:
    """Seed a ledger session with a realistic collection portfolio.

    This scenario creates:
    - Clients with contact data
    - One or more credit sales per client
    - Payment history for installments already due:
        - Paid installments
        - Missed payments that slide the schedule
        - Sales written off as defaulted
    """

    def __init__(
        self,
        num_clients: int = 20,
        max_sales_per_client: int = 2,
        pay_rate: float = 0.85,
        missed_rate: float = 0.10,
        default_rate: float = 0.05,
        seed: int | None = None,
    ) -> None:
        """Initialize the scenario.

        Parameters
        ----------
        num_clients : int
            Number of clients to create.
        max_sales_per_client : int
            Upper bound of sales per client (at least one each).
        pay_rate : float
            Probability that an installment already due has been paid.
        missed_rate : float
            Probability that a sale has a reported missed payment.
        default_rate : float
            Probability that a sale is flagged as defaulted.
        seed : int | None
            Random seed for reproducibility.
        """
        self.num_clients = num_clients
        self.max_sales_per_client = max(1, max_sales_per_client)
        self.pay_rate = pay_rate
        self.missed_rate = missed_rate
        self.default_rate = default_rate
        self.seed = seed

        self._random = random.Random(seed)
        self._client_gen = ClientGenerator(seed=seed)
        self._terms_gen = SaleTermsGenerator(seed=seed)

    async def run(self, session: LedgerSession) -> dict[str, Any]:
        """Populate ``session`` and return summary counts."""
        logger.info("Starting sample portfolio: %d clients", self.num_clients)
        today = session.calendar.today()

        for sample in self._client_gen.generate_batch(self.num_clients):
            client = await session.clients.add_client(
                name=sample.name,
                phone=sample.phone,
                address=sample.address,
                notes=sample.notes,
            )

            for _ in range(self._random.randint(1, self.max_sales_per_client)):
                start = today - timedelta(days=self._random.randint(0, 180))
                terms = self._terms_gen.generate(client.client_id, start_date=start)
                sale = await session.sales.create_sale(terms)
                await self._simulate_payments(session, sale.sale_id, today)

        summary = session.snapshot.summary()
        summary["defaulted"] = len(session.sales.list_sales(status=SaleStatus.DEFAULTED))
        summary["completed"] = len(session.sales.list_sales(status=SaleStatus.COMPLETED))
        logger.info("Sample portfolio complete: %s", summary)
        return summary

    async def _simulate_payments(self, session: LedgerSession, sale_id: str, today: date) -> None:
        sale = session.sales.get_sale(sale_id)
        due = [inst for inst in sale.installments if inst.due_date <= today]

        for inst in due:
            if self._random.random() < self.pay_rate:
                sale = await session.sales.mark_installment_paid(sale_id, inst.installment_id)
            else:
                # Payments stop at the first unpaid installment
                break

        if sale.status == SaleStatus.ACTIVE and self._random.random() < self.missed_rate:
            await session.sales.report_missed_payment(sale_id)
        if sale.status == SaleStatus.ACTIVE and self._random.random() < self.default_rate:
            await session.sales.toggle_sale_status(sale_id)

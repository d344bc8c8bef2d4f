"""Sample clients and sale terms for demos and tests."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterator

from credit_ledger.dates import DateCalendar
from credit_ledger.generators.base import BaseGenerator
from credit_ledger.models import (
    Client,
    Frequency,
    PaymentMethod,
    Product,
    SaleTerms,
)


class ClientGenerator(BaseGenerator):
    """Generate synthetic clients."""

    NOTES = [
        "Cobrar en el domicilio",
        "Prefiere pagar por transferencia",
        "Referido por otro cliente",
        "Llamar antes de pasar",
    ]

    def generate(self) -> Client:
        """Generate a single client.

        Returns
        -------
        Client
            Generated client with a provisional identifier.
        """
        return Client(
            client_id=self.new_id(),
            name=self.fake.name(),
            phone=self.fake.phone_number(),
            address=f"{self.fake.street_address()}, {self.fake.city()}",
            created_at=self.fake.date_time_this_year(),
            notes=self.random.choice(self.NOTES) if self.random.random() < 0.3 else None,
        )

    def generate_batch(self, count: int) -> Iterator[Client]:
        """Generate multiple clients.

        Parameters
        ----------
        count : int
            Number of clients to generate.

        Yields
        ------
        Client
            Generated clients.
        """
        for _ in range(count):
            yield self.generate()


class SaleTermsGenerator(BaseGenerator):
    """Generate synthetic sale terms for home appliances sold on credit.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    locale : str
        Faker locale.
    calendar : DateCalendar | None
        Source of "today" for default start dates, in the ledger's
        reference timezone.
    """

    # (name, cost range in whole units)
    PRODUCTS = [
        ("Heladera", (350_000, 900_000)),
        ("Lavarropas", (300_000, 700_000)),
        ("Smart TV 50", (400_000, 850_000)),
        ("Aire acondicionado", (450_000, 1_100_000)),
        ("Celular", (150_000, 600_000)),
        ("Colchon", (120_000, 400_000)),
        ("Microondas", (90_000, 220_000)),
        ("Ventilador", (40_000, 110_000)),
    ]

    FREQUENCIES = list(Frequency)
    FREQUENCY_WEIGHTS = [0.30, 0.45, 0.25]

    INSTALLMENT_COUNTS = {
        Frequency.DAILY: [30, 45, 60, 90],
        Frequency.WEEKLY: [8, 12, 16, 24],
        Frequency.MONTHLY: [3, 6, 9, 12],
    }

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "es_AR",
        calendar: DateCalendar | None = None,
    ) -> None:
        super().__init__(seed, locale)
        self.calendar = calendar or DateCalendar()

    def generate(self, client_id: str, start_date: date | None = None) -> SaleTerms:
        """Generate terms for one sale.

        Parameters
        ----------
        client_id : str
            Buyer of the product.
        start_date : date | None
            First due date; a date within the last six months when omitted.

        Returns
        -------
        SaleTerms
            Generated terms.
        """
        name, (low, high) = self.random.choice(self.PRODUCTS)
        cost = Decimal(self.random.randint(low // 1000, high // 1000) * 1000)
        markup = Decimal(str(round(self.random.uniform(1.4, 2.0), 2)))
        sale_price = (cost * markup / 100).quantize(Decimal("1")) * 100

        frequency = self.random.choices(self.FREQUENCIES, weights=self.FREQUENCY_WEIGHTS)[0]
        if start_date is None:
            start_date = self.calendar.today() - timedelta(days=self.random.randint(0, 180))

        weekly_day = None
        monthly_day = None
        if frequency == Frequency.WEEKLY and self.random.random() < 0.5:
            weekly_day = self.random.randint(0, 6)
        if frequency == Frequency.MONTHLY and self.random.random() < 0.5:
            monthly_day = self.random.randint(1, 28)

        return SaleTerms(
            client_id=client_id,
            product=Product(name=name, cost_price=cost, sale_price=sale_price),
            frequency=frequency,
            installments_count=self.random.choice(self.INSTALLMENT_COUNTS[frequency]),
            start_date=start_date,
            payment_method=self.random.choices(list(PaymentMethod), weights=[0.7, 0.3])[0],
            weekly_day=weekly_day,
            monthly_day=monthly_day,
        )

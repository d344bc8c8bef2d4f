"""Read-only report types produced by the portfolio aggregator."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from credit_ledger.models.enums import Frequency, SaleStatus
from credit_ledger.models.sale import Sale


@dataclass
class ClientStats:
    """Purchase and debt totals for one client."""

    client_id: str
    total_purchased: Decimal
    total_paid: Decimal
    total_debt: Decimal
    history: list[Sale] = field(default_factory=list)  # newest start date first


@dataclass
class ReceivableInstallment:
    """Pending installment inside a grouped receivable."""

    installment_id: str
    sale_id: str
    number: int
    amount: Decimal
    due_date: date
    product_name: str


@dataclass
class GroupedReceivable:
    """Pending installments of one client due on a date, grouped together."""

    client_id: str
    client_name: str
    due_date: date
    installments: list[ReceivableInstallment] = field(default_factory=list)
    total_amount: Decimal = Decimal("0")
    days_overdue: int = 0
    missed_payments_count: int = 0
    frequencies: list[Frequency] = field(default_factory=list)

    @property
    def is_overdue(self) -> bool:
        return self.days_overdue > 0

    @property
    def products(self) -> list[str]:
        return [inst.product_name for inst in self.installments]

    def add(self, item: ReceivableInstallment) -> None:
        self.installments.append(item)
        self.total_amount += item.amount


@dataclass
class CollectedPayment:
    """Installment paid on a given day."""

    installment_id: str
    sale_id: str
    client_id: str
    client_name: str
    amount: Decimal
    paid_at: datetime


@dataclass
class ActiveCredit:
    """Progress view of a sale still being collected."""

    sale_id: str
    client_id: str
    client_name: str
    product_name: str
    total_amount: Decimal
    remaining_amount: Decimal
    paid_amount: Decimal
    paid_installments: int
    pending_installments: int
    total_installments: int
    start_date: date
    status: SaleStatus
    progress: Decimal


@dataclass
class DashboardSummary:
    """Collection KPIs for a target date."""

    target_date: date
    total_receivable: Decimal
    total_collected: Decimal
    active_credits_count: int
    completed_credits_count: int
    receivables_due: list[GroupedReceivable] = field(default_factory=list)
    overdue: list[GroupedReceivable] = field(default_factory=list)
    collected_today: list[CollectedPayment] = field(default_factory=list)
    active_credits: list[ActiveCredit] = field(default_factory=list)

    @property
    def due_total(self) -> Decimal:
        return sum((group.total_amount for group in self.receivables_due), Decimal("0"))

    @property
    def collected_today_total(self) -> Decimal:
        return sum((payment.amount for payment in self.collected_today), Decimal("0"))

    @property
    def collection_rate(self) -> Decimal:
        """Share of the portfolio already collected, as a percentage."""
        base = self.total_collected + self.total_receivable
        if base <= 0:
            return Decimal("0")
        return (self.total_collected / base * 100).quantize(Decimal("0.1"))


@dataclass
class PeriodReportRow:
    """Income, expense and volume for one reporting period."""

    period_key: str
    label: str
    period_start: date
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    sales_volume: Decimal = Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


@dataclass
class FinancialTotals:
    """Totals across all rows of a period report."""

    income: Decimal
    expense: Decimal
    sales_volume: Decimal

    @property
    def profit(self) -> Decimal:
        return self.income - self.expense

    @property
    def margin(self) -> Decimal:
        if self.sales_volume <= 0:
            return Decimal("0")
        return ((self.sales_volume - self.expense) / self.sales_volume * 100).quantize(Decimal("0.01"))

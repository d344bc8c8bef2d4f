"""Sale and installment models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from credit_ledger.models.enums import (
    Frequency,
    InstallmentStatus,
    PaymentMethod,
    SaleStatus,
)

CENT = Decimal("0.01")


@dataclass
class Product:
    """Product sold on credit (embedded in a sale)."""

    name: str
    cost_price: Decimal
    sale_price: Decimal


@dataclass
class Installment:
    """One scheduled payment (cuota) of a sale."""

    installment_id: str
    sale_id: str
    number: int  # 1-based, may start above 1 for mid-plan sales
    amount: Decimal
    due_date: date
    status: InstallmentStatus = InstallmentStatus.PENDING
    paid_at: datetime | None = None

    @property
    def is_paid(self) -> bool:
        return self.status == InstallmentStatus.PAID


@dataclass
class Sale:
    """Credit sale repaid through an installment plan."""

    sale_id: str
    client_id: str
    product: Product
    total_amount: Decimal
    remaining_amount: Decimal
    frequency: Frequency
    payment_method: PaymentMethod
    start_date: date
    status: SaleStatus
    created_at: datetime
    installments: list[Installment] = field(default_factory=list)
    missed_payments_count: int = 0
    weekly_day: int | None = None  # 0=Sunday..6=Saturday
    monthly_day: int | None = None  # 1..31

    def pending_total(self) -> Decimal:
        """Remaining balance folded from the installment set."""
        remaining = sum(
            (inst.amount for inst in self.installments if not inst.is_paid),
            Decimal("0"),
        )
        return max(Decimal("0"), remaining.quantize(CENT, rounding=ROUND_HALF_UP))

    def find_installment(self, installment_id: str) -> Installment | None:
        for inst in self.installments:
            if inst.installment_id == installment_id:
                return inst
        return None

    @property
    def plan_length(self) -> int:
        """Highest installment number of the plan."""
        return max((inst.number for inst in self.installments), default=0)

    @property
    def first_installment_number(self) -> int:
        return min((inst.number for inst in self.installments), default=1)

    @property
    def paid_amount(self) -> Decimal:
        return self.total_amount - self.remaining_amount

    @property
    def paid_installments(self) -> int:
        return sum(1 for inst in self.installments if inst.is_paid)

    @property
    def pending_installments(self) -> int:
        return len(self.installments) - self.paid_installments

    @property
    def progress(self) -> Decimal:
        """Percentage of the total already paid."""
        if self.total_amount <= 0:
            return Decimal("0")
        return (self.paid_amount / self.total_amount * 100).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass
class SaleTerms:
    """Financial and descriptive terms used to create or edit a sale."""

    client_id: str
    product: Product
    frequency: Frequency
    installments_count: int  # total plan length
    start_date: date
    payment_method: PaymentMethod = PaymentMethod.CASH
    weekly_day: int | None = None
    monthly_day: int | None = None
    first_installment_number: int = 1

    @property
    def total_amount(self) -> Decimal:
        return self.product.sale_price

"""Installment plan generator for credit sales."""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Iterator

from credit_ledger.dates import (
    add_days,
    add_months,
    add_months_on_day,
    next_month_day,
    next_weekday,
)
from credit_ledger.exceptions import ValidationError
from credit_ledger.generators.base import BaseGenerator
from credit_ledger.models import (
    Frequency,
    Installment,
    InstallmentStatus,
    Sale,
    SaleStatus,
    SaleTerms,
)

logger = logging.getLogger(__name__)


class InstallmentPlanGenerator(BaseGenerator):
    """Turn sale terms into an ordered, dated installment sequence.

    Every installment but the absolute last of the plan gets the floored unit
    amount; the last one absorbs the rounding remainder, so a plan starting
    at number 1 always sums exactly to the sale total.

    Parameters
    ----------
    seed : int | None
        Seed for reproducible installment identifiers.
    locale : str
        Faker locale.
    amount_quantum : Decimal
        Unit amounts are floored to a multiple of this value (whole
        currency units by default).
    """

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "es_AR",
        amount_quantum: Decimal = Decimal("1"),
    ) -> None:
        super().__init__(seed, locale)
        self.amount_quantum = Decimal(amount_quantum)

    def unit_amount(self, total_amount: Decimal, installments_count: int) -> Decimal:
        """Floor of ``total_amount / installments_count`` to the amount quantum."""
        return (Decimal(total_amount) / installments_count // self.amount_quantum) * self.amount_quantum

    def validate(
        self,
        total_amount: Decimal,
        installments_count: int,
        first_installment_number: int = 1,
        frequency: Frequency = Frequency.DAILY,
        weekly_day: int | None = None,
        monthly_day: int | None = None,
    ) -> None:
        """Reject malformed terms before any installment is produced."""
        if Decimal(total_amount) <= 0:
            raise ValidationError(f"Total amount must be positive, got {total_amount}")
        if installments_count < 1:
            raise ValidationError(f"Installments count must be at least 1, got {installments_count}")
        if frequency == Frequency.WEEKLY and weekly_day is not None and not 0 <= weekly_day <= 6:
            raise ValidationError(f"Weekday must be in [0, 6] (0=Sunday), got {weekly_day}")
        if frequency == Frequency.MONTHLY and monthly_day is not None and not 1 <= monthly_day <= 31:
            raise ValidationError(f"Day of month must be in [1, 31], got {monthly_day}")

        if first_installment_number > installments_count:
            raise ValidationError(
                f"Installment {first_installment_number} is beyond a "
                f"{installments_count}-installment plan"
            )

    def generate(
        self,
        total_amount: Decimal,
        installments_count: int,
        frequency: Frequency,
        start_date: date,
        first_installment_number: int = 1,
        weekly_day: int | None = None,
        monthly_day: int | None = None,
        sale_id: str = "",
    ) -> list[Installment]:
        """Generate the installment plan.

        Parameters
        ----------
        total_amount : Decimal
            Amount financed (the product sale price).
        installments_count : int
            Total plan length.
        frequency : Frequency
            DAILY, WEEKLY or MONTHLY.
        start_date : date
            Date of the first generated installment (before anchoring).
        first_installment_number : int
            Number of the first generated installment, above 1 when the
            sale continues a plan that started elsewhere.
        weekly_day : int | None
            Weekday anchor for weekly plans (0=Sunday).
        monthly_day : int | None
            Day-of-month anchor for monthly plans.
        sale_id : str
            Back-reference stored on every installment.

        Returns
        -------
        list[Installment]
            Installments ordered by number.
        """
        self.validate(
            total_amount,
            installments_count,
            first_installment_number,
            frequency,
            weekly_day,
            monthly_day,
        )
        installments = list(
            self._generate_installments(
                Decimal(total_amount),
                installments_count,
                frequency,
                start_date,
                first_installment_number,
                weekly_day,
                monthly_day,
                sale_id,
            )
        )
        logger.debug(
            "Generated %d %s installments for sale %s starting %s",
            len(installments),
            frequency.value,
            sale_id or "<new>",
            start_date,
        )
        return installments

    def _generate_installments(
        self,
        total_amount: Decimal,
        installments_count: int,
        frequency: Frequency,
        start_date: date,
        first_installment_number: int,
        weekly_day: int | None,
        monthly_day: int | None,
        sale_id: str,
    ) -> Iterator[Installment]:
        start_num = max(1, first_installment_number)
        plan_end = installments_count
        unit = self.unit_amount(total_amount, installments_count)

        if frequency == Frequency.WEEKLY and weekly_day is not None:
            anchor = next_weekday(start_date, weekly_day)
        elif frequency == Frequency.MONTHLY and monthly_day is not None:
            anchor = next_month_day(start_date, monthly_day)
        else:
            anchor = start_date

        for i in range(plan_end - start_num + 1):
            number = start_num + i

            if frequency == Frequency.DAILY:
                due_date = add_days(anchor, i)
            elif frequency == Frequency.WEEKLY:
                due_date = add_days(anchor, i * 7)
            elif monthly_day is not None:
                due_date = add_months_on_day(anchor, i, monthly_day)
            else:  # MONTHLY from the start date
                due_date = add_months(anchor, i)

            if number == plan_end:
                amount = total_amount - unit * (plan_end - 1)
            else:
                amount = unit

            yield Installment(
                installment_id=self.new_id(),
                sale_id=sale_id,
                number=number,
                amount=amount,
                due_date=due_date,
                status=InstallmentStatus.PENDING,
                paid_at=None,
            )

    def build_sale(
        self,
        terms: SaleTerms,
        created_at: datetime,
        sale_id: str | None = None,
    ) -> Sale:
        """Create a fresh ACTIVE sale with its full installment plan."""
        if sale_id is None:
            sale_id = self.new_id()
        installments = self.generate(
            total_amount=terms.total_amount,
            installments_count=terms.installments_count,
            frequency=terms.frequency,
            start_date=terms.start_date,
            first_installment_number=terms.first_installment_number,
            weekly_day=terms.weekly_day,
            monthly_day=terms.monthly_day,
            sale_id=sale_id,
        )
        sale = Sale(
            sale_id=sale_id,
            client_id=terms.client_id,
            product=terms.product,
            total_amount=Decimal(terms.total_amount),
            remaining_amount=Decimal("0"),
            frequency=terms.frequency,
            payment_method=terms.payment_method,
            start_date=terms.start_date,
            status=SaleStatus.ACTIVE,
            created_at=created_at,
            installments=installments,
            missed_payments_count=0,
            weekly_day=terms.weekly_day if terms.frequency == Frequency.WEEKLY else None,
            monthly_day=terms.monthly_day if terms.frequency == Frequency.MONTHLY else None,
        )
        sale.remaining_amount = sale.pending_total()
        return sale

    @staticmethod
    def plan_changed(sale: Sale, terms: SaleTerms) -> bool:
        """Whether ``terms`` alter the financial plan of ``sale``.

        Only the total, the plan length, the frequency and the start date
        count; product name, cost price, client and payment method are
        cosmetic and keep the payment history.
        """
        return (
            Decimal(sale.total_amount) != Decimal(terms.total_amount)
            or sale.plan_length != terms.installments_count
            or sale.frequency != terms.frequency
            or sale.start_date != terms.start_date
        )

    def apply_terms(self, sale: Sale, terms: SaleTerms) -> Sale:
        """Return ``sale`` edited with ``terms``, replanning only if needed.

        A changed plan is regenerated from scratch: every installment is
        pending again, the balance is recomputed and the status goes back to
        ACTIVE even if the sale had been completed or defaulted.
        """
        replan = self.plan_changed(sale, terms)

        sale.client_id = terms.client_id
        sale.product = terms.product
        sale.payment_method = terms.payment_method
        sale.weekly_day = terms.weekly_day if terms.frequency == Frequency.WEEKLY else None
        sale.monthly_day = terms.monthly_day if terms.frequency == Frequency.MONTHLY else None

        if not replan:
            logger.debug("Sale %s edited without plan changes; history kept", sale.sale_id)
            return sale

        sale.installments = self.generate(
            total_amount=terms.total_amount,
            installments_count=terms.installments_count,
            frequency=terms.frequency,
            start_date=terms.start_date,
            first_installment_number=terms.first_installment_number,
            weekly_day=terms.weekly_day,
            monthly_day=terms.monthly_day,
            sale_id=sale.sale_id,
        )
        sale.total_amount = Decimal(terms.total_amount)
        sale.frequency = terms.frequency
        sale.start_date = terms.start_date
        sale.remaining_amount = sale.pending_total()
        sale.status = SaleStatus.ACTIVE
        logger.info(
            "Sale %s replanned: %d installments from %s",
            sale.sale_id,
            len(sale.installments),
            sale.start_date,
        )
        return sale

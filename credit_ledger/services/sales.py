"""Sale ledger: payment, arrears, default and edit transitions."""

from __future__ import annotations

import copy
import logging

from credit_ledger.dates import DateCalendar, shift_by_period
from credit_ledger.exceptions import (
    EntityNotFoundError,
    InvalidEntityStateError,
    ReferentialIntegrityError,
)
from credit_ledger.generators.plan import InstallmentPlanGenerator
from credit_ledger.models import (
    InstallmentStatus,
    Sale,
    SaleStatus,
    SaleTerms,
)
from credit_ledger.serialization import serialize_value, to_document
from credit_ledger.services.base import LedgerService
from credit_ledger.store.base import SALES, RecordStore
from credit_ledger.store.snapshot import LedgerSnapshot

logger = logging.getLogger(__name__)


class SaleLedger(LedgerService):
    """State machine over sales and their installments.

    States are ACTIVE, COMPLETED and DEFAULTED. COMPLETED is derived from
    the balance after a payment toggle; DEFAULTED is a manual flag. Every
    mutation works on a copy of the cached sale, recomputes the balance from
    the installments and writes the result back to the store.
    """

    def __init__(
        self,
        store: RecordStore,
        user_id: str,
        snapshot: LedgerSnapshot,
        calendar: DateCalendar,
        plan_generator: InstallmentPlanGenerator,
    ) -> None:
        super().__init__(store, user_id, snapshot, calendar)
        self.plan_generator = plan_generator

    def _require_client(self, client_id: str) -> None:
        if client_id not in self.snapshot.clients:
            raise ReferentialIntegrityError(f"Client {client_id} not found")

    def _require_sale(self, sale_id: str) -> Sale:
        sale = self.snapshot.sales.get(sale_id)
        if sale is None:
            raise EntityNotFoundError(f"Sale {sale_id} not found")
        return copy.deepcopy(sale)

    async def create_sale(self, terms: SaleTerms) -> Sale:
        """Create a sale together with its whole installment plan.

        Raises
        ------
        ValidationError
            If the terms cannot produce a plan.
        ReferentialIntegrityError
            If the client does not exist.
        """
        self._require_client(terms.client_id)
        sale = self.plan_generator.build_sale(terms, created_at=self.calendar.now(), sale_id="")

        sale_id = await self.store.create(self._path(SALES), to_document(sale))
        sale.sale_id = sale_id
        for inst in sale.installments:
            inst.sale_id = sale_id

        logger.info(
            "Sale %s created for client %s: %s %s x%d (%s)",
            sale_id,
            sale.client_id,
            sale.product.name,
            sale.total_amount,
            len(sale.installments),
            sale.frequency.value,
            extra=self._log_extra(sale_id=sale_id, client_id=sale.client_id),
        )
        return sale

    async def mark_installment_paid(self, sale_id: str, installment_id: str) -> Sale:
        """Toggle an installment between pending and paid.

        A sale whose balance reaches zero becomes COMPLETED; a COMPLETED sale
        whose payment is reverted goes back to ACTIVE. DEFAULTED sales stay
        DEFAULTED while a balance remains.
        """
        sale = self._require_sale(sale_id)
        inst = sale.find_installment(installment_id)
        if inst is None:
            raise EntityNotFoundError(f"Installment {installment_id} not found in sale {sale_id}")

        if inst.is_paid:
            inst.status = InstallmentStatus.PENDING
            inst.paid_at = None
        else:
            inst.status = InstallmentStatus.PAID
            inst.paid_at = self.calendar.now()

        previous_status = sale.status
        sale.remaining_amount = sale.pending_total()
        if sale.remaining_amount <= 0:
            sale.status = SaleStatus.COMPLETED
        elif previous_status == SaleStatus.COMPLETED:
            sale.status = SaleStatus.ACTIVE

        await self.store.update(
            self._path(SALES),
            sale_id,
            {
                "installments": serialize_value(sale.installments),
                "remaining_amount": serialize_value(sale.remaining_amount),
                "status": sale.status.value,
            },
        )
        logger.info(
            "Installment %d of sale %s marked %s; remaining %s, status %s",
            inst.number,
            sale_id,
            inst.status.value,
            sale.remaining_amount,
            sale.status.value,
            extra=self._log_extra(sale_id=sale_id, installment_id=installment_id),
        )
        return sale

    async def report_missed_payment(self, sale_id: str) -> Sale:
        """Record a missed payment and slide the pending schedule one period."""
        sale = self._require_sale(sale_id)
        sale.missed_payments_count += 1

        shifted = 0
        for inst in sale.installments:
            if not inst.is_paid:
                inst.due_date = shift_by_period(inst.due_date, sale.frequency, sale.monthly_day)
                shifted += 1

        sale.remaining_amount = sale.pending_total()
        await self.store.update(
            self._path(SALES),
            sale_id,
            {
                "missed_payments_count": sale.missed_payments_count,
                "installments": serialize_value(sale.installments),
                "remaining_amount": serialize_value(sale.remaining_amount),
            },
        )
        logger.warning(
            "Missed payment #%d on sale %s; %d pending installment(s) rescheduled",
            sale.missed_payments_count,
            sale_id,
            shifted,
            extra=self._log_extra(sale_id=sale_id, client_id=sale.client_id),
        )
        return sale

    async def toggle_sale_status(self, sale_id: str) -> Sale:
        """Flag an ACTIVE sale as DEFAULTED, or reinstate a DEFAULTED one."""
        sale = self._require_sale(sale_id)
        if sale.status == SaleStatus.ACTIVE:
            sale.status = SaleStatus.DEFAULTED
        elif sale.status == SaleStatus.DEFAULTED:
            sale.status = SaleStatus.ACTIVE
        else:
            raise InvalidEntityStateError(f"Sale {sale_id} is {sale.status.value} and cannot be toggled")

        sale.remaining_amount = sale.pending_total()
        await self.store.update(
            self._path(SALES),
            sale_id,
            {
                "status": sale.status.value,
                "remaining_amount": serialize_value(sale.remaining_amount),
            },
        )
        logger.info(
            "Sale %s is now %s",
            sale_id,
            sale.status.value,
            extra=self._log_extra(sale_id=sale_id, client_id=sale.client_id),
        )
        return sale

    async def update_sale(self, sale_id: str, terms: SaleTerms) -> Sale:
        """Edit a sale, regenerating the plan only when its terms changed."""
        sale = self._require_sale(sale_id)
        self._require_client(terms.client_id)

        sale = self.plan_generator.apply_terms(sale, terms)
        sale.remaining_amount = sale.pending_total()
        await self.store.update(self._path(SALES), sale_id, to_document(sale))
        return sale

    async def delete_sale(self, sale_id: str) -> None:
        """Delete a sale and all its installments."""
        self._require_sale(sale_id)
        await self.store.delete(self._path(SALES), sale_id)
        logger.info("Sale %s deleted", sale_id, extra=self._log_extra(sale_id=sale_id))

    def get_sale(self, sale_id: str) -> Sale:
        sale = self.snapshot.sales.get(sale_id)
        if sale is None:
            raise EntityNotFoundError(f"Sale {sale_id} not found")
        return sale

    def list_sales(
        self,
        client_id: str | None = None,
        status: SaleStatus | None = None,
    ) -> list[Sale]:
        """Sales newest first, optionally filtered by client and status."""
        if client_id is not None:
            sales = self.snapshot.get_client_sales(client_id)
        else:
            sales = list(self.snapshot.sales.values())
        if status is not None:
            sales = [s for s in sales if s.status == status]
        return sales

"""Cross-sale rollups: receivables, arrears, dashboards and period reports.

Everything here is read-only and synchronous over the cached snapshot.
Pending installments of DEFAULTED sales never count towards receivables;
they stay visible in per-sale and per-client views.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from credit_ledger.dates import DateCalendar, week_of_year, week_start
from credit_ledger.models import (
    ActiveCredit,
    ClientStats,
    CollectedPayment,
    DashboardSummary,
    FinancialTotals,
    GroupedReceivable,
    PeriodReportRow,
    ReceivableInstallment,
    ReportPeriod,
    Sale,
    SaleStatus,
)
from credit_ledger.services.clients import UNKNOWN_CLIENT
from credit_ledger.store.snapshot import LedgerSnapshot

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class PortfolioAggregator:
    """Portfolio views over a :class:`LedgerSnapshot`."""

    def __init__(self, snapshot: LedgerSnapshot, calendar: DateCalendar) -> None:
        self.snapshot = snapshot
        self.calendar = calendar

    def _client_name(self, client_id: str) -> str:
        client = self.snapshot.clients.get(client_id)
        return client.name if client else UNKNOWN_CLIENT

    def _receivable_sales(self) -> list[Sale]:
        return [s for s in self.snapshot.sales.values() if s.status != SaleStatus.DEFAULTED]

    # Client views
    def is_defaulter(self, client_id: str) -> bool:
        """True when any sale of the client is flagged DEFAULTED."""
        return any(s.status == SaleStatus.DEFAULTED for s in self.snapshot.get_client_sales(client_id))

    def defaulters(self) -> list[str]:
        """Client ids with at least one defaulted sale."""
        return sorted({s.client_id for s in self.snapshot.sales.values() if s.status == SaleStatus.DEFAULTED})

    def client_stats(self, client_id: str) -> ClientStats:
        sales = self.snapshot.get_client_sales(client_id)
        total_purchased = sum((s.total_amount for s in sales), ZERO)
        total_debt = sum((s.remaining_amount for s in sales), ZERO)
        return ClientStats(
            client_id=client_id,
            total_purchased=total_purchased,
            total_paid=total_purchased - total_debt,
            total_debt=total_debt,
            history=sorted(sales, key=lambda s: s.start_date, reverse=True),
        )

    # Receivables
    def receivables_due(self, target_date: date, today: date | None = None) -> list[GroupedReceivable]:
        """Pending installments due on ``target_date``, grouped by client.

        Groups are sorted by client name; ``days_overdue`` is measured
        against ``today`` (the calendar's today by default).
        """
        today = today or self.calendar.today()
        groups: dict[str, GroupedReceivable] = {}

        for sale in self._receivable_sales():
            for inst in sale.installments:
                if inst.is_paid or inst.due_date != target_date:
                    continue
                group = groups.get(sale.client_id)
                if group is None:
                    group = GroupedReceivable(
                        client_id=sale.client_id,
                        client_name=self._client_name(sale.client_id),
                        due_date=target_date,
                        days_overdue=max(0, (today - target_date).days),
                    )
                    groups[sale.client_id] = group
                group.add(
                    ReceivableInstallment(
                        installment_id=inst.installment_id,
                        sale_id=sale.sale_id,
                        number=inst.number,
                        amount=inst.amount,
                        due_date=inst.due_date,
                        product_name=sale.product.name,
                    )
                )
                group.missed_payments_count = max(group.missed_payments_count, sale.missed_payments_count)
                if sale.frequency not in group.frequencies:
                    group.frequencies.append(sale.frequency)

        return sorted(groups.values(), key=lambda g: g.client_name.lower())

    def arrears(self, as_of: date | None = None) -> list[GroupedReceivable]:
        """Pending installments due on or before ``as_of``, grouped by client.

        Each group's ``due_date`` is its oldest unpaid due date. Groups are
        ordered most overdue first.
        """
        as_of = as_of or self.calendar.today()
        groups: dict[str, GroupedReceivable] = {}

        for sale in self._receivable_sales():
            for inst in sale.installments:
                if inst.is_paid or inst.due_date > as_of:
                    continue
                group = groups.get(sale.client_id)
                if group is None:
                    group = GroupedReceivable(
                        client_id=sale.client_id,
                        client_name=self._client_name(sale.client_id),
                        due_date=inst.due_date,
                    )
                    groups[sale.client_id] = group
                group.add(
                    ReceivableInstallment(
                        installment_id=inst.installment_id,
                        sale_id=sale.sale_id,
                        number=inst.number,
                        amount=inst.amount,
                        due_date=inst.due_date,
                        product_name=sale.product.name,
                    )
                )
                group.due_date = min(group.due_date, inst.due_date)
                group.missed_payments_count = max(group.missed_payments_count, sale.missed_payments_count)
                if sale.frequency not in group.frequencies:
                    group.frequencies.append(sale.frequency)

        for group in groups.values():
            group.days_overdue = (as_of - group.due_date).days
            group.installments.sort(key=lambda item: (item.due_date, item.number))

        return sorted(groups.values(), key=lambda g: (-g.days_overdue, g.client_name.lower()))

    def total_receivable(self) -> Decimal:
        """Pending balance over non-defaulted sales."""
        return sum(
            (inst.amount for sale in self._receivable_sales() for inst in sale.installments if not inst.is_paid),
            ZERO,
        )

    def total_collected(self) -> Decimal:
        """Amount of every paid installment."""
        return sum(
            (inst.amount for sale in self.snapshot.sales.values() for inst in sale.installments if inst.is_paid),
            ZERO,
        )

    def collected_on(self, day: date) -> list[CollectedPayment]:
        """Installments paid on ``day`` in the reference calendar."""
        payments = []
        for sale in self.snapshot.sales.values():
            for inst in sale.installments:
                if not inst.is_paid or inst.paid_at is None:
                    continue
                if self.calendar.local_date(inst.paid_at) != day:
                    continue
                payments.append(
                    CollectedPayment(
                        installment_id=inst.installment_id,
                        sale_id=sale.sale_id,
                        client_id=sale.client_id,
                        client_name=self._client_name(sale.client_id),
                        amount=inst.amount,
                        paid_at=inst.paid_at,
                    )
                )
        return sorted(payments, key=lambda p: p.paid_at)

    def active_credits(self) -> list[ActiveCredit]:
        """Sales still open (ACTIVE or DEFAULTED), largest balance first."""
        credits = [
            ActiveCredit(
                sale_id=sale.sale_id,
                client_id=sale.client_id,
                client_name=self._client_name(sale.client_id),
                product_name=sale.product.name,
                total_amount=sale.total_amount,
                remaining_amount=sale.remaining_amount,
                paid_amount=sale.paid_amount,
                paid_installments=sale.paid_installments,
                pending_installments=sale.pending_installments,
                total_installments=len(sale.installments),
                start_date=sale.start_date,
                status=sale.status,
                progress=sale.progress,
            )
            for sale in self.snapshot.sales.values()
            if sale.status in (SaleStatus.ACTIVE, SaleStatus.DEFAULTED)
        ]
        return sorted(credits, key=lambda c: c.remaining_amount, reverse=True)

    def dashboard(self, target_date: date | None = None) -> DashboardSummary:
        """Collection KPIs, with receivables listed for ``target_date``."""
        today = self.calendar.today()
        target_date = target_date or today
        active = self.active_credits()
        summary = DashboardSummary(
            target_date=target_date,
            total_receivable=self.total_receivable(),
            total_collected=self.total_collected(),
            active_credits_count=len(active),
            completed_credits_count=len(self.snapshot.sales) - len(active),
            receivables_due=self.receivables_due(target_date, today=today),
            overdue=self.arrears(today),
            collected_today=self.collected_on(today),
            active_credits=active,
        )
        logger.debug(
            "Dashboard for %s: receivable=%s collected=%s due=%s",
            target_date,
            summary.total_receivable,
            summary.total_collected,
            summary.due_total,
        )
        return summary

    # Period reports
    @staticmethod
    def _bucket(day: date, period: ReportPeriod) -> tuple[str, str, date]:
        """Return (key, label, period start) of the bucket holding ``day``."""
        if period == ReportPeriod.DAILY:
            return day.isoformat(), day.strftime("%d %b"), day
        if period == ReportPeriod.WEEKLY:
            week = week_of_year(day)
            return f"{day.year}-W{week:02d}", f"Week {week}", week_start(day)
        if period == ReportPeriod.MONTHLY:
            start = day.replace(day=1)
            return f"{day.year}-{day.month:02d}", start.strftime("%b %y"), start
        start = date(day.year, 1, 1)
        return str(day.year), str(day.year), start

    def period_report(self, period: ReportPeriod = ReportPeriod.MONTHLY) -> list[PeriodReportRow]:
        """Income, expense and sales volume bucketed by period.

        Sales are bucketed by start date (expense is the product cost, sales
        volume the sale total); paid installments by the local date of
        ``paid_at`` (income). Rows are sorted by period start.
        """
        period = ReportPeriod(period)
        rows: dict[str, PeriodReportRow] = {}

        def row_for(day: date) -> PeriodReportRow:
            key, label, start = self._bucket(day, period)
            if key not in rows:
                rows[key] = PeriodReportRow(period_key=key, label=label, period_start=start)
            return rows[key]

        for sale in self.snapshot.sales.values():
            row = row_for(sale.start_date)
            row.expense += sale.product.cost_price
            row.sales_volume += sale.total_amount

        for sale in self.snapshot.sales.values():
            for inst in sale.installments:
                if inst.is_paid and inst.paid_at is not None:
                    row_for(self.calendar.local_date(inst.paid_at)).income += inst.amount

        return sorted(rows.values(), key=lambda r: (r.period_start, r.period_key))

    def financial_totals(self, period: ReportPeriod = ReportPeriod.MONTHLY) -> FinancialTotals:
        """Sum of every row of :meth:`period_report`."""
        rows = self.period_report(period)
        return FinancialTotals(
            income=sum((r.income for r in rows), ZERO),
            expense=sum((r.expense for r in rows), ZERO),
            sales_volume=sum((r.sales_volume for r in rows), ZERO),
        )

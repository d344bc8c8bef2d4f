"""Domain models for the credit ledger."""

from credit_ledger.models.base import ChangeEvent
from credit_ledger.models.client import Client
from credit_ledger.models.enums import (
    ChangeKind,
    Frequency,
    InstallmentStatus,
    LeadStatus,
    PaymentMethod,
    ReportPeriod,
    SaleStatus,
)
from credit_ledger.models.lead import Lead
from credit_ledger.models.reports import (
    ActiveCredit,
    ClientStats,
    CollectedPayment,
    DashboardSummary,
    FinancialTotals,
    GroupedReceivable,
    PeriodReportRow,
    ReceivableInstallment,
)
from credit_ledger.models.sale import Installment, Product, Sale, SaleTerms

__all__ = [
    "ActiveCredit",
    "ChangeEvent",
    "ChangeKind",
    "Client",
    "ClientStats",
    "CollectedPayment",
    "DashboardSummary",
    "FinancialTotals",
    "Frequency",
    "GroupedReceivable",
    "Installment",
    "InstallmentStatus",
    "Lead",
    "LeadStatus",
    "PaymentMethod",
    "PeriodReportRow",
    "Product",
    "ReceivableInstallment",
    "ReportPeriod",
    "Sale",
    "SaleStatus",
    "SaleTerms",
]

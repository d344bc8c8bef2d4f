"""Ledger services operating on one user's collections."""

from credit_ledger.services.clients import ClientRegistry
from credit_ledger.services.leads import LeadBook
from credit_ledger.services.portfolio import PortfolioAggregator
from credit_ledger.services.sales import SaleLedger

__all__ = ["ClientRegistry", "LeadBook", "PortfolioAggregator", "SaleLedger"]

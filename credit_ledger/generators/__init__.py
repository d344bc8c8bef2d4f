"""Installment plan and sample data generators."""

from credit_ledger.generators.plan import InstallmentPlanGenerator
from credit_ledger.generators.sample import ClientGenerator, SaleTermsGenerator

__all__ = ["ClientGenerator", "InstallmentPlanGenerator", "SaleTermsGenerator"]

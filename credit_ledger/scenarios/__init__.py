"""Scenarios for seeding sample ledgers."""

from credit_ledger.scenarios.portfolio import SamplePortfolioScenario

__all__ = ["SamplePortfolioScenario"]

"""Leads: notes about possible sales."""

from __future__ import annotations

import copy
import logging

from credit_ledger.exceptions import (
    EntityNotFoundError,
    ReferentialIntegrityError,
    ValidationError,
)
from credit_ledger.models import Lead, LeadStatus, Sale, SaleTerms
from credit_ledger.serialization import to_document
from credit_ledger.services.base import LedgerService
from credit_ledger.services.sales import SaleLedger
from credit_ledger.store.base import LEADS

logger = logging.getLogger(__name__)


class LeadBook(LedgerService):
    """Lead records, convertible into sales."""

    def __init__(self, *args, sales: SaleLedger, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.sales = sales

    async def add_lead(self, description: str, client_id: str | None = None) -> Lead:
        if not description or not description.strip():
            raise ValidationError("Lead description is required")
        if client_id and client_id not in self.snapshot.clients:
            raise ReferentialIntegrityError(f"Client {client_id} not found")

        lead = Lead(
            lead_id="",
            description=description.strip(),
            status=LeadStatus.NEW,
            created_at=self.calendar.now(),
            client_id=client_id or None,
        )
        lead.lead_id = await self.store.create(self._path(LEADS), to_document(lead))
        logger.info(
            "Lead %s added",
            lead.lead_id,
            extra=self._log_extra(lead_id=lead.lead_id, client_id=lead.client_id),
        )
        return lead

    async def update_lead_status(self, lead_id: str, status: LeadStatus) -> Lead:
        lead = copy.deepcopy(self.get_lead(lead_id))
        await self.store.update(self._path(LEADS), lead_id, {"status": LeadStatus(status).value})
        lead.status = LeadStatus(status)
        return lead

    async def delete_lead(self, lead_id: str) -> None:
        self.get_lead(lead_id)
        await self.store.delete(self._path(LEADS), lead_id)
        logger.info("Lead %s deleted", lead_id, extra=self._log_extra(lead_id=lead_id))

    async def convert_lead(self, lead_id: str, terms: SaleTerms) -> Sale:
        """Create a sale from a lead, then drop the lead."""
        self.get_lead(lead_id)
        sale = await self.sales.create_sale(terms)
        await self.store.delete(self._path(LEADS), lead_id)
        logger.info(
            "Lead %s converted into sale %s",
            lead_id,
            sale.sale_id,
            extra=self._log_extra(lead_id=lead_id, sale_id=sale.sale_id),
        )
        return sale

    def get_lead(self, lead_id: str) -> Lead:
        lead = self.snapshot.leads.get(lead_id)
        if lead is None:
            raise EntityNotFoundError(f"Lead {lead_id} not found")
        return lead

    def list_leads(self, status: LeadStatus | None = None) -> list[Lead]:
        """Leads newest first."""
        leads = list(self.snapshot.leads.values())
        if status is not None:
            leads = [lead for lead in leads if lead.status == status]
        return leads

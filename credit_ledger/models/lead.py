"""Lead model."""

from dataclasses import dataclass
from datetime import datetime

from credit_ledger.models.enums import LeadStatus


@dataclass
class Lead:
    """Sales opportunity that may later become a sale."""

    lead_id: str
    description: str
    status: LeadStatus
    created_at: datetime
    client_id: str | None = None

"""Client model."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Client:
    """Borrower buying products on credit."""

    client_id: str
    name: str
    phone: str
    address: str
    created_at: datetime
    notes: str | None = None

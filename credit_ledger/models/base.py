"""Base models shared across the ledger."""

from dataclasses import dataclass, field
from datetime import datetime

from credit_ledger.models.enums import ChangeKind


@dataclass
class ChangeEvent:
    """Change notification emitted by a record store."""

    event_id: str
    event_type: str  # collection.kind (e.g., sales.updated)
    event_time: datetime
    collection: str  # Full collection path (users/{uid}/sales)
    kind: ChangeKind
    subject: str  # Record ID affected
    data: dict = field(default_factory=dict)

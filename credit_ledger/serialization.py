"""Document codec between ledger dataclasses and store records."""

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from credit_ledger.models import (
    Client,
    Frequency,
    Installment,
    InstallmentStatus,
    Lead,
    LeadStatus,
    PaymentMethod,
    Product,
    Sale,
    SaleStatus,
)

# Primary-key fields are carried by the store, not inside the document body
ID_FIELDS = {"client_id": Client, "sale_id": Sale, "lead_id": Lead}


def to_dict(obj: Any) -> dict:
    """Convert object to dictionary."""
    if is_dataclass(obj):
        return dataclass_to_dict(obj)
    elif isinstance(obj, dict):
        return {k: serialize_value(v) for k, v in obj.items()}
    else:
        return {"value": str(obj)}


def dataclass_to_dict(obj: Any) -> dict:
    """Convert dataclass to dict with proper serialization.

    Uses ``dataclasses.fields()`` + ``getattr`` so nested dataclasses
    (Product, Installment) are serialized once, without the deep copy done
    by ``asdict()``.
    """
    return {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}


def serialize_value(value: Any) -> Any:
    """Serialize a value for a JSON-compatible document."""
    if is_dataclass(value) and not isinstance(value, type):
        return dataclass_to_dict(value)
    elif isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value


def to_document(entity: Client | Sale | Lead) -> dict:
    """Serialize an entity without its primary key."""
    document = dataclass_to_dict(entity)
    for id_field, entity_type in ID_FIELDS.items():
        if isinstance(entity, entity_type):
            document.pop(id_field, None)
    return document


def _decimal(value: Any) -> Decimal:
    return Decimal(str(value))


def _date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def client_from_document(record_id: str, doc: dict) -> Client:
    """Decode a client document."""
    return Client(
        client_id=record_id,
        name=doc["name"],
        phone=doc.get("phone", ""),
        address=doc.get("address", ""),
        created_at=_datetime(doc["created_at"]),
        notes=doc.get("notes"),
    )


def product_from_document(doc: dict) -> Product:
    """Decode an embedded product."""
    return Product(
        name=doc["name"],
        cost_price=_decimal(doc.get("cost_price", "0")),
        sale_price=_decimal(doc["sale_price"]),
    )


def installment_from_document(doc: dict, sale_id: str = "") -> Installment:
    """Decode an embedded installment."""
    return Installment(
        installment_id=doc["installment_id"],
        sale_id=sale_id or doc.get("sale_id", ""),
        number=int(doc["number"]),
        amount=_decimal(doc["amount"]),
        due_date=_date(doc["due_date"]),
        status=InstallmentStatus(doc.get("status", InstallmentStatus.PENDING.value)),
        paid_at=_datetime(doc.get("paid_at")),
    )


def sale_from_document(record_id: str, doc: dict) -> Sale:
    """Decode a sale document, installments ordered by number."""
    installments = sorted(
        (installment_from_document(item, record_id) for item in doc.get("installments", [])),
        key=lambda inst: inst.number,
    )
    return Sale(
        sale_id=record_id,
        client_id=doc["client_id"],
        product=product_from_document(doc["product"]),
        total_amount=_decimal(doc["total_amount"]),
        remaining_amount=_decimal(doc.get("remaining_amount", "0")),
        frequency=Frequency(doc["frequency"]),
        payment_method=PaymentMethod(doc.get("payment_method", PaymentMethod.CASH.value)),
        start_date=_date(doc["start_date"]),
        status=SaleStatus(doc.get("status", SaleStatus.ACTIVE.value)),
        created_at=_datetime(doc["created_at"]),
        installments=installments,
        missed_payments_count=int(doc.get("missed_payments_count") or 0),
        weekly_day=doc.get("weekly_day"),
        monthly_day=doc.get("monthly_day"),
    )


def lead_from_document(record_id: str, doc: dict) -> Lead:
    """Decode a lead document."""
    return Lead(
        lead_id=record_id,
        description=doc["description"],
        status=LeadStatus(doc.get("status", LeadStatus.NEW.value)),
        created_at=_datetime(doc["created_at"]),
        client_id=doc.get("client_id"),
    )

"""Typed sale records and normalization of Lightspeed JSON payloads.

Lightspeed's JSON is loose in three ways that this module absorbs so nothing
downstream has to care:

- A relation with one member is returned as a bare object, with several
  members as a list, and with none as a missing key or empty string.
- Numbers and booleans arrive as strings ("12.50", "true").
- Nested relations (Customer, SaleLines, Item) may be absent.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Customer:
    """Customer attached to a sale."""

    customer_id: str | None
    first_name: str
    last_name: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class LineItem:
    """One sale line.

    Attributes:
        item_id: Lightspeed itemID ("0" or None for miscellaneous lines).
        quantity: Units sold; fractional for weighted goods.
        subtotal: Line subtotal (calcSubtotal).
        unit_cost: FIFO cost when available, otherwise average cost.
        description: Item description, None when the Item relation is absent.
    """

    item_id: str | None
    quantity: float
    subtotal: float
    unit_cost: float
    description: str | None = None

    @property
    def cost(self) -> float:
        return self.unit_cost * self.quantity


@dataclass(frozen=True)
class Transaction:
    """A completed Lightspeed sale with its lines.

    Attributes:
        sale_id: Lightspeed saleID.
        completed_at: Completion instant (timezone-aware), None if missing.
        voided: Whether the sale was voided.
        total: Sale total (calcTotal).
        subtotal: Sale subtotal (calcSubtotal).
        customer: Attached customer, None for walk-in sales.
        lines: Sale lines in POS order.
    """

    sale_id: str | None
    completed_at: datetime | None
    voided: bool
    total: float
    subtotal: float
    customer: Customer | None = None
    lines: tuple[LineItem, ...] = field(default_factory=tuple)


def as_records(value: Any, kind: str = "record") -> list[dict[str, Any]]:
    """Normalize a Lightspeed relation value to a list of objects.

    Args:
        value: A bare object, a list of objects, or None/"" for no members.
        kind: Name used in warnings.

    Returns:
        List of dict records (possibly empty).

    Examples:
        >>> as_records({"saleID": "1"})
        [{'saleID': '1'}]
        >>> as_records(None)
        []

    """
    if value is None or value == "":
        return []
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list):
        records = [v for v in value if isinstance(v, dict)]
        if len(records) != len(value):
            logger.warning("Dropped %d non-object %s entries", len(value) - len(records), kind)
        return records
    logger.warning("Unexpected %s payload of type %s; ignoring", kind, type(value).__name__)
    return []


def to_float(value: Any, field_name: str = "value") -> float:
    """Coerce a Lightspeed numeric field to float; missing or invalid -> 0.0."""
    if value is None or value == "":
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s %r; using 0", field_name, value)
        return 0.0
    if not math.isfinite(number):
        logger.warning("Non-finite %s %r; using 0", field_name, value)
        return 0.0
    return number


def to_bool(value: Any) -> bool:
    """Coerce a Lightspeed boolean ("true"/"false" or a real bool)."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ("true", "1")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 timestamp; naive values are taken as UTC."""
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.warning("Invalid timestamp %r; ignoring", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _clean_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_customer(raw: Any) -> Customer | None:
    """Build a Customer from the nested Customer relation, if present."""
    records = as_records(raw, "Customer")
    if not records:
        return None
    rec = records[0]
    return Customer(
        customer_id=_clean_str(rec.get("customerID")),
        first_name=str(rec.get("firstName") or "").strip(),
        last_name=str(rec.get("lastName") or "").strip(),
    )


def parse_line(raw: dict[str, Any]) -> LineItem:
    """Build a LineItem from a SaleLine record."""
    fifo = raw.get("fifoCost")
    cost_raw = fifo if fifo not in (None, "") else raw.get("avgCost")

    item = as_records(raw.get("Item"), "Item")
    description = _clean_str(item[0].get("description")) if item else None

    return LineItem(
        item_id=_clean_str(raw.get("itemID")),
        quantity=to_float(raw.get("unitQuantity"), "unitQuantity"),
        subtotal=to_float(raw.get("calcSubtotal"), "calcSubtotal"),
        unit_cost=to_float(cost_raw, "unit cost"),
        description=description,
    )


def parse_transaction(raw: dict[str, Any]) -> Transaction:
    """Build a Transaction from a Sale record with loaded relations."""
    sale_lines = raw.get("SaleLines")
    line_records = as_records(sale_lines.get("SaleLine"), "SaleLine") if isinstance(sale_lines, dict) else []

    return Transaction(
        sale_id=_clean_str(raw.get("saleID")),
        completed_at=parse_timestamp(raw.get("completeTime")),
        voided=to_bool(raw.get("voided")),
        total=to_float(raw.get("calcTotal"), "calcTotal"),
        subtotal=to_float(raw.get("calcSubtotal"), "calcSubtotal"),
        customer=parse_customer(raw.get("Customer")),
        lines=tuple(parse_line(line) for line in line_records),
    )


def parse_transactions(payload: Any) -> list[Transaction]:
    """Parse the Sale member of a Sale.json response body."""
    return [parse_transaction(rec) for rec in as_records(payload, "Sale")]

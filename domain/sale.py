"""
Domain: Sale records.

A SaleRecord is the immutable header of a completed checkout. It is created by
the point-of-sale flow and read by the analytics engine; nothing in this
package mutates it.

Rules captured here:
- created_at is an authoritative UTC timestamp.
- payment_snapshot is loosely structured text, not a validated schema.
  Decoding it is the job of services.snapshot_codec and must never fail.
- Sales without a customer reference still belong to the ledger; they are only
  excluded from per-customer attribution.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from .time import require_utc_timestamp

# Display name used by the ledger store when a sale has no linked customer.
WALK_IN_CUSTOMER_NAME = "Consumidor Final"


class SaleStatus(str, Enum):
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    PENDING = "PENDING"


@dataclass(frozen=True, slots=True)
class SaleRecord:
    """
    Immutable transaction header.

    Captures:
    - Who bought (customer_id, customer_name)
    - When (created_at)
    - How much (subtotal, discount, total_amount)
    - How it was paid (payment_snapshot)

    ``status`` is kept as text: anything other than ``"COMPLETED"`` is
    treated as not completed.
    """

    sale_id: str
    created_at: datetime
    total_amount: Decimal
    payment_snapshot: str = ""
    customer_id: Optional[str] = None
    customer_name: str = ""
    subtotal: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    status: str = SaleStatus.COMPLETED.value
    sale_number: Optional[str] = None
    user_name: Optional[str] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("created_at", self.created_at)

    @property
    def is_completed(self) -> bool:
        return self.status == SaleStatus.COMPLETED.value


@dataclass(frozen=True, slots=True)
class SaleLineItem:
    """Single product line of a sale. Fetched lazily per sale."""

    sale_id: str
    product_id: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    product_name: Optional[str] = None
    product_sku: Optional[str] = None


__all__ = [
    "SaleLineItem",
    "SaleRecord",
    "SaleStatus",
    "WALK_IN_CUSTOMER_NAME",
]

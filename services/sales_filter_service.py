"""
Sales filter service.

Narrows the ledger by business date range, customer name, and payment method,
and orders the result newest first.

Matching rules:
- Dates are compared as local calendar dates (``YYYY-MM-DD``), never as
  instants, so timezone offsets cannot shift a sale across a day boundary.
  Both bounds are inclusive.
- Customer and method filters are case-insensitive substring matches.
- The method filter matches the cleaned snapshot (what users see), so options
  built by ``list_payment_methods`` always find their sales.

The input collection is never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Iterable, List, Optional

from domain.sale import SaleRecord
from domain.time import require_date_string, to_local_date_string
from services.snapshot_codec import clean_snapshot


@dataclass(frozen=True, slots=True)
class SalesFilter:
    """
    Filter criteria for the sales ledger.

    Empty or None fields impose no constraint.
    """
    start_date: Optional[str] = None  # YYYY-MM-DD, inclusive
    end_date: Optional[str] = None  # YYYY-MM-DD, inclusive
    customer_contains: Optional[str] = None
    method_contains: Optional[str] = None

    def __post_init__(self) -> None:
        if self.start_date:
            require_date_string("start_date", self.start_date)
        if self.end_date:
            require_date_string("end_date", self.end_date)

    @property
    def is_active(self) -> bool:
        """True if any criterion is set."""
        return any((self.start_date, self.end_date, self.customer_contains, self.method_contains))


def _matches(sale: SaleRecord, criteria: SalesFilter, tz: Optional[tzinfo]) -> bool:
    if criteria.start_date or criteria.end_date:
        sale_date = to_local_date_string(sale.created_at, tz)
        if criteria.start_date and sale_date < criteria.start_date:
            return False
        if criteria.end_date and sale_date > criteria.end_date:
            return False

    if criteria.customer_contains:
        term = criteria.customer_contains.lower()
        if term not in (sale.customer_name or "").lower():
            return False

    if criteria.method_contains:
        term = criteria.method_contains.lower()
        if term not in clean_snapshot(sale.payment_snapshot).lower():
            return False

    return True


def filter_sales(
    sales: Iterable[SaleRecord],
    criteria: Optional[SalesFilter] = None,
    tz: Optional[tzinfo] = None,
) -> List[SaleRecord]:
    """
    Select the sales matching every active criterion, newest first.

    Args:
        sales: Ledger snapshot (not modified)
        criteria: Filter criteria; None selects everything
        tz: Timezone for calendar-date projection (None = process local timezone)

    Returns:
        New list sorted by created_at descending. Sales with equal timestamps
        keep their input order.

    Example:
        recent = filter_sales(ledger, SalesFilter(start_date="2026-02-01", method_contains="visa"))
    """

    criteria = criteria or SalesFilter()
    selected = [sale for sale in sales if _matches(sale, criteria, tz)]
    return sorted(selected, key=lambda sale: sale.created_at, reverse=True)


__all__ = [
    "SalesFilter",
    "filter_sales",
]

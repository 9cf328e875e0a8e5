"""
Sales aggregation service.

Reduces a (usually filtered) set of sales into the Stats contract consumed by
the scorecards and the printable report.

Guarantees:
- Pure reduction: identical input yields equal Stats.
- Never raises on empty input; returns zeroed Stats.
- avg_ticket is 0 when there are no sales.
- top_customers holds at most 3 entries, highest total first; equal totals
  are ordered by customer name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List

from domain.sale import SaleRecord
from services.snapshot_codec import decode_sale

UNKNOWN_CUSTOMER_NAME = "Desconocido"
TOP_CUSTOMERS_LIMIT = 3


@dataclass(frozen=True, slots=True)
class CustomerTotal:
    """Ticket count and spend for one customer display name."""
    name: str
    count: int
    total: Decimal


@dataclass(frozen=True, slots=True)
class Stats:
    """
    Aggregated KPIs for a set of sales.

    by_method maps method name → amount.
    by_method_grouped maps type label → method name → amount.
    """
    total_sales: Decimal = Decimal("0")
    count: int = 0
    avg_ticket: Decimal = Decimal("0")
    by_method: Dict[str, Decimal] = field(default_factory=dict)
    by_method_grouped: Dict[str, Dict[str, Decimal]] = field(default_factory=dict)
    top_customers: List[CustomerTotal] = field(default_factory=list)


def calculate_stats(sales: Iterable[SaleRecord]) -> Stats:
    """
    Compute KPI totals, payment breakdowns, and the top customers.

    Args:
        sales: Sales to aggregate (typically the output of filter_sales)

    Returns:
        Stats for the given sales

    Example:
        stats = calculate_stats(filter_sales(ledger, SalesFilter(start_date="2026-02-01")))
        print(f"{stats.count} tickets, average {stats.avg_ticket}")
    """
    total_sales = Decimal("0")
    count = 0
    by_method: Dict[str, Decimal] = {}
    by_method_grouped: Dict[str, Dict[str, Decimal]] = {}
    customer_counts: Dict[str, int] = {}
    customer_totals: Dict[str, Decimal] = {}

    for sale in sales:
        total_sales += sale.total_amount
        count += 1

        for component in decode_sale(sale):
            by_method[component.method_name] = (
                by_method.get(component.method_name, Decimal("0")) + component.amount
            )
            group = by_method_grouped.setdefault(component.type_label, {})
            group[component.method_name] = group.get(component.method_name, Decimal("0")) + component.amount

        name = sale.customer_name or UNKNOWN_CUSTOMER_NAME
        customer_counts[name] = customer_counts.get(name, 0) + 1
        customer_totals[name] = customer_totals.get(name, Decimal("0")) + sale.total_amount

    ranked = sorted(
        (CustomerTotal(name=name, count=customer_counts[name], total=total)
         for name, total in customer_totals.items()),
        key=lambda customer: (-customer.total, customer.name),
    )

    return Stats(
        total_sales=total_sales,
        count=count,
        avg_ticket=total_sales / count if count > 0 else Decimal("0"),
        by_method=by_method,
        by_method_grouped=by_method_grouped,
        top_customers=ranked[:TOP_CUSTOMERS_LIMIT],
    )


__all__ = [
    "CustomerTotal",
    "Stats",
    "TOP_CUSTOMERS_LIMIT",
    "UNKNOWN_CUSTOMER_NAME",
    "calculate_stats",
]

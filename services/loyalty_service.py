"""
Customer loyalty service.

Joins the customer roster with the full sales history (never a filtered view)
to produce lifetime metrics per customer.

Rules:
- Only COMPLETED sales with a customer reference are attributed.
- Every roster customer appears in the result, with zeroed metrics when they
  have no completed sales.
- average_ticket is 0 when visit_count is 0; last_visit is "" when there
  is no visit.
- Ranking is by total_spent descending, then customer_id ascending.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

from domain.customer import Customer
from domain.sale import SaleRecord

TOP_SPENDERS_LIMIT = 3


@dataclass(frozen=True, slots=True)
class CustomerMetric:
    """
    Lifetime metrics for one roster customer.

    last_visit is the ISO-8601 UTC timestamp of the latest completed sale.
    """
    customer: Customer
    total_spent: Decimal
    visit_count: int
    last_visit: str
    average_ticket: Decimal

    @property
    def customer_id(self) -> str:
        return self.customer.customer_id

    @property
    def name(self) -> str:
        return self.customer.name


@dataclass
class _Accumulator:
    total: Decimal = Decimal("0")
    count: int = 0
    last_date: Optional[datetime] = None


def _ranking_key(metric: CustomerMetric) -> tuple[Decimal, str]:
    return (-metric.total_spent, metric.customer_id)


def merge_customer_metrics(
    customers: Iterable[Customer],
    sales: Iterable[SaleRecord],
) -> List[CustomerMetric]:
    """
    Compute lifetime metrics for every customer in the roster.

    Args:
        customers: Full customer roster
        sales: Full, unfiltered sales history

    Returns:
        One CustomerMetric per customer, highest spend first.
    """
    by_customer: Dict[str, _Accumulator] = {}

    for sale in sales:
        if not sale.is_completed or not sale.customer_id:
            continue
        acc = by_customer.setdefault(sale.customer_id, _Accumulator())
        acc.total += sale.total_amount
        acc.count += 1
        if acc.last_date is None or sale.created_at > acc.last_date:
            acc.last_date = sale.created_at

    metrics = []
    for customer in customers:
        acc = by_customer.get(customer.customer_id, _Accumulator())
        metrics.append(CustomerMetric(
            customer=customer,
            total_spent=acc.total,
            visit_count=acc.count,
            last_visit=acc.last_date.isoformat() if acc.last_date else "",
            average_ticket=acc.total / acc.count if acc.count > 0 else Decimal("0"),
        ))

    metrics.sort(key=_ranking_key)
    return metrics


def top_spenders(metrics: Sequence[CustomerMetric], limit: int = TOP_SPENDERS_LIMIT) -> List[CustomerMetric]:
    """Highest-spending customers, excluding anyone with no spend."""

    spenders = [metric for metric in metrics if metric.total_spent > 0]
    spenders.sort(key=_ranking_key)
    return spenders[:limit]


__all__ = [
    "CustomerMetric",
    "TOP_SPENDERS_LIMIT",
    "merge_customer_metrics",
    "top_spenders",
]

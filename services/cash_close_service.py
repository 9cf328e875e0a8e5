"""
Daily cash close service.

Summarizes one business day of completed sales the way the register is closed:
physical cash versus digital income, totals per payment type and per method,
tickets per seller, and an itemized list of every non-cash payment for
reconciliation against bank and POS statements.

Sellers are listed in order of their first sale of the day.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import tzinfo
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from domain.payment import PaymentType
from domain.sale import SaleRecord
from domain.time import require_date_string, to_local_date_string
from services.snapshot_codec import decode_sale

UNKNOWN_SELLER_NAME = "Desconocido"


@dataclass(frozen=True, slots=True)
class NonCashPayment:
    """One card, transfer, or other payment line to reconcile."""
    method_name: str
    type_key: PaymentType
    amount: Decimal
    reference: str


@dataclass(frozen=True, slots=True)
class SellerTotal:
    """Tickets and sales amount rung up by one seller."""
    name: str
    tickets: int
    amount: Decimal


@dataclass(frozen=True, slots=True)
class CashCloseSummary:
    business_date: str
    total_sales: Decimal
    ticket_count: int
    cash_income: Decimal
    digital_income: Decimal
    by_type: Dict[PaymentType, Decimal]
    by_method: Dict[str, Decimal]
    non_cash_detail: List[NonCashPayment] = field(default_factory=list)
    by_seller: List[SellerTotal] = field(default_factory=list)


def _ticket_reference(sale_id: str) -> str:
    return f"Ticket #{sale_id[-6:]}"


def summarize_cash_close(
    sales: Iterable[SaleRecord],
    business_date: str,
    tz: Optional[tzinfo] = None,
) -> CashCloseSummary:
    """
    Close the register for one local calendar day.

    Args:
        sales: Full sales history; only COMPLETED sales on business_date count
        business_date: Day to close, as YYYY-MM-DD
        tz: Timezone for calendar-date projection (None = process local timezone)

    Returns:
        CashCloseSummary. by_type always carries all four payment types.

    Raises:
        ValueError: If business_date is not a YYYY-MM-DD date
    """
    require_date_string("business_date", business_date)

    total_sales = Decimal("0")
    ticket_count = 0
    cash_income = Decimal("0")
    digital_income = Decimal("0")
    by_type: Dict[PaymentType, Decimal] = {payment_type: Decimal("0") for payment_type in PaymentType}
    by_method: Dict[str, Decimal] = {}
    non_cash_detail: List[NonCashPayment] = []
    sellers: Dict[str, SellerTotal] = {}

    for sale in sales:
        if not sale.is_completed or to_local_date_string(sale.created_at, tz) != business_date:
            continue

        total_sales += sale.total_amount
        ticket_count += 1

        seller_name = sale.user_name or UNKNOWN_SELLER_NAME
        seller = sellers.get(seller_name, SellerTotal(seller_name, 0, Decimal("0")))
        sellers[seller_name] = SellerTotal(seller_name, seller.tickets + 1, seller.amount + sale.total_amount)

        for component in decode_sale(sale):
            by_method[component.method_name] = (
                by_method.get(component.method_name, Decimal("0")) + component.amount
            )
            by_type[component.type_key] += component.amount

            if component.is_cash:
                cash_income += component.amount
            else:
                digital_income += component.amount
                non_cash_detail.append(NonCashPayment(
                    method_name=component.method_name,
                    type_key=component.type_key,
                    amount=component.amount,
                    reference=_ticket_reference(sale.sale_id),
                ))

    return CashCloseSummary(
        business_date=business_date,
        total_sales=total_sales,
        ticket_count=ticket_count,
        cash_income=cash_income,
        digital_income=digital_income,
        by_type=by_type,
        by_method=by_method,
        non_cash_detail=non_cash_detail,
        by_seller=list(sellers.values()),
    )


__all__ = [
    "CashCloseSummary",
    "NonCashPayment",
    "SellerTotal",
    "summarize_cash_close",
]

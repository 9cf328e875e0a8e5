"""
Sales report service.

Assembles the data behind the printable sales report from an already filtered
ledger and its Stats, and renders it as CSV.

The report never recomputes aggregates: KPIs and the method breakdown come
straight from Stats, so the on-screen scorecards and the exported document
always agree.

Security:
- CSV Injection Prevention: text cells are sanitized to prevent formula execution
- Security Logging: logs when dangerous characters are stripped
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, localcontext
from io import StringIO
from typing import Iterable, List, Optional

from domain.sale import WALK_IN_CUSTOMER_NAME, SaleRecord
from services.aggregation_service import Stats
from services.sales_filter_service import SalesFilter
from services.snapshot_codec import clean_snapshot

logger = logging.getLogger(__name__)

REPORT_TITLE = "Reporte de Ventas"
SHARE_PRECISION = 28
FORMULA_TRIGGERS = "=+-@\t\r"


def sanitize_csv_field(value: str | None, field_name: str = "unknown") -> str:
    """
    Strip spreadsheet formula triggers from a report cell.

    Customer names, method names, and payment details come from free-text POS
    input; leading =, +, -, @, tab, or carriage return characters are removed
    and logged at WARNING with the column they came from.

    Example:
        sanitize_csv_field("=HYPERLINK(...)", "customer_name")
        # Returns "HYPERLINK(...)"
    """
    if value is None or value == "":
        return ""

    text = str(value).strip()
    sanitized = text.lstrip(FORMULA_TRIGGERS)
    if len(sanitized) != len(text):
        logger.warning(
            f"CSV injection character(s) stripped from report field '{field_name}'",
            extra={
                "field_name": field_name,
                "stripped_characters": text[:len(text) - len(sanitized)],
                "original_value": text[:100],
                "sanitized_value": sanitized[:100],
            }
        )

    return sanitized


@dataclass(frozen=True, slots=True)
class MethodShare:
    """One row of the payment method breakdown."""
    method_name: str
    amount: Decimal
    share_percent: Decimal


@dataclass(frozen=True, slots=True)
class TransactionRow:
    """One sale in the transaction detail table."""
    sale_id: str
    created_at: datetime
    customer_name: str
    payment_detail: str
    total_amount: Decimal
    status: str


@dataclass(frozen=True, slots=True)
class SalesReport:
    title: str
    generated_at: datetime
    filter_description: str
    total_sales: Decimal
    count: int
    avg_ticket: Decimal
    method_rows: List[MethodShare]
    transactions: List[TransactionRow]


def describe_filter(criteria: Optional[SalesFilter]) -> str:
    """
    Human-readable description of the active filters.

    Example:
        >>> describe_filter(SalesFilter(start_date="2026-02-01", customer_contains="ana"))
        'Filtro Aplicado: Período: 2026-02-01 a Hoy | Cliente: "ana"'
    """
    if criteria is None or not criteria.is_active:
        return "Filtro Aplicado: Histórico Completo"

    active: List[str] = []
    if criteria.start_date or criteria.end_date:
        active.append(f"Período: {criteria.start_date or 'Inicio'} a {criteria.end_date or 'Hoy'}")
    if criteria.customer_contains:
        active.append(f'Cliente: "{criteria.customer_contains}"')
    if criteria.method_contains:
        active.append(f'Método: "{criteria.method_contains}"')

    return "Filtro Aplicado: " + " | ".join(active)


def share_percent(amount: Decimal, total: Decimal) -> Decimal:
    """Share of total as a percentage with one decimal; 0 when total is 0."""
    if total == 0:
        return Decimal("0.0")
    with localcontext() as ctx:
        ctx.prec = SHARE_PRECISION
        share = amount / total * 100
        # Enough digits for the integer part plus one decimal.
        ctx.prec = max(SHARE_PRECISION, share.adjusted() + 3)
        return share.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def build_sales_report(
    sales: Iterable[SaleRecord],
    stats: Stats,
    criteria: Optional[SalesFilter],
    generated_at: datetime,
    title: str = REPORT_TITLE,
) -> SalesReport:
    """
    Assemble report data for a filtered ledger.

    Args:
        sales: The filtered sales, in display order
        stats: Stats computed from the same sales
        criteria: Filter that produced the sales (for the header)
        generated_at: Report timestamp
        title: Report title

    Returns:
        SalesReport ready for rendering
    """
    method_rows = [
        MethodShare(
            method_name=method_name,
            amount=amount,
            share_percent=share_percent(amount, stats.total_sales),
        )
        for method_name, amount in stats.by_method.items()
    ]

    transactions = [
        TransactionRow(
            sale_id=sale.sale_id,
            created_at=sale.created_at,
            customer_name=sale.customer_name or WALK_IN_CUSTOMER_NAME,
            payment_detail=clean_snapshot(sale.payment_snapshot),
            total_amount=sale.total_amount,
            status=sale.status,
        )
        for sale in sales
    ]

    return SalesReport(
        title=title,
        generated_at=generated_at,
        filter_description=describe_filter(criteria),
        total_sales=stats.total_sales,
        count=stats.count,
        avg_ticket=stats.avg_ticket,
        method_rows=method_rows,
        transactions=transactions,
    )


def _money(amount: Decimal) -> str:
    return f"{amount:.2f}"


def render_sales_report_csv(report: SalesReport) -> str:
    """
    Render a SalesReport as CSV.

    Layout: header lines, KPI block, method breakdown, transaction detail,
    separated by blank rows.

    Returns:
        CSV content as a string
    """
    output = StringIO()
    writer = csv.writer(output)

    writer.writerow([sanitize_csv_field(report.title, "title")])
    writer.writerow(["Generado el", report.generated_at.isoformat()])
    writer.writerow([sanitize_csv_field(report.filter_description, "filter_description")])
    writer.writerow([])

    writer.writerow(["Ventas Totales", "Transacciones", "Ticket Promedio"])
    writer.writerow([_money(report.total_sales), str(report.count), _money(report.avg_ticket)])
    writer.writerow([])

    writer.writerow(["Método / Canal", "Monto Total", "% Participación"])
    for row in report.method_rows:
        writer.writerow([
            sanitize_csv_field(row.method_name, "method_name"),
            _money(row.amount),
            f"{row.share_percent}%",
        ])
    writer.writerow([])

    writer.writerow(["Ticket ID", "Fecha", "Cliente", "Detalle Pagos", "Total", "Estado"])
    for tx in report.transactions:
        writer.writerow([
            sanitize_csv_field(tx.sale_id, "sale_id"),
            tx.created_at.isoformat(),
            sanitize_csv_field(tx.customer_name, "customer_name"),
            sanitize_csv_field(tx.payment_detail, "payment_detail"),
            _money(tx.total_amount),
            sanitize_csv_field(tx.status, "status"),
        ])

    return output.getvalue()


__all__ = [
    "MethodShare",
    "REPORT_TITLE",
    "SalesReport",
    "TransactionRow",
    "build_sales_report",
    "describe_filter",
    "render_sales_report_csv",
    "sanitize_csv_field",
    "share_percent",
]

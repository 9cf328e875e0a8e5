"""
Sale repository (persistence).

This module provides *only* persistence operations for sale headers and their
line items. It performs no aggregation; analytics run in services/ over the
records returned here.

Deleting a sale removes its line items first so the per-row stock triggers in
the database revert inventory.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, List, Mapping, Optional

from domain.sale import WALK_IN_CUSTOMER_NAME, SaleLineItem, SaleRecord, SaleStatus
from domain.time import parse_utc_datetime
from repositories.client import get_supabase

logger = logging.getLogger(__name__)

# Supabase table names.
# Keep these aligned with your database schema.
_SALES_TABLE: str = "sales"
_SALE_ITEMS_TABLE: str = "sale_items"

_SALES_HISTORY_SELECT = "*, users (full_name), customers (name), payment_methods (name)"


def _check_response(response: Any, action: str) -> None:
    error = getattr(response, "error", None)
    if error:
        logger.error(f"Failed to {action}", extra={"error": str(error)})
        raise RuntimeError(f"Failed to {action}: {error}")


def _decimal(value: Any) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


def _joined_name(row: Mapping[str, Any], relation: str, column: str) -> Optional[str]:
    joined = row.get(relation)
    if isinstance(joined, Mapping):
        return joined.get(column)
    return None


def _row_to_sale(row: Mapping[str, Any]) -> SaleRecord:
    """
    Convert a Supabase sales row (with joined relations) into a SaleRecord.

    Older sales carry no payment snapshot; one is rebuilt from the primary
    payment method so they still decode as a single-method sale.
    """

    total = _decimal(row.get("total"))
    snapshot = row.get("payment_method_snapshot")
    if not snapshot:
        method_name = _joined_name(row, "payment_methods", "name") or "Desconocido"
        snapshot = f"{method_name}: ${total}"

    return SaleRecord(
        sale_id=str(row["id"]),
        created_at=parse_utc_datetime(row["created_at"]),
        total_amount=total,
        payment_snapshot=snapshot,
        customer_id=str(row["customer_id"]) if row.get("customer_id") else None,
        customer_name=_joined_name(row, "customers", "name") or WALK_IN_CUSTOMER_NAME,
        subtotal=_decimal(row.get("subtotal")),
        discount=_decimal(row.get("discount")),
        status=str(row.get("status") or SaleStatus.COMPLETED.value),
        sale_number=row.get("sale_number"),
        user_name=_joined_name(row, "users", "full_name"),
    )


def _row_to_line_item(row: Mapping[str, Any]) -> SaleLineItem:
    """Convert a Supabase sale_items row into a SaleLineItem."""

    return SaleLineItem(
        sale_id=str(row["sale_id"]),
        product_id=str(row["product_id"]),
        quantity=int(row.get("quantity") or 0),
        unit_price=_decimal(row.get("unit_price")),
        subtotal=_decimal(row.get("subtotal")),
        product_name=row.get("product_name"),
        product_sku=row.get("product_sku"),
    )


def fetch_sales_history() -> List[SaleRecord]:
    """
    Retrieve the full sales ledger, newest first.

    Returns:
        List[SaleRecord] (possibly empty)
    """

    response = (
        get_supabase().table(_SALES_TABLE)
        .select(_SALES_HISTORY_SELECT)
        .order("created_at", desc=True)
        .execute()
    )
    _check_response(response, "fetch sales history")

    rows = getattr(response, "data", None) or []
    sales = [_row_to_sale(row) for row in rows]
    logger.info("Fetched sales history", extra={"sale_count": len(sales)})
    return sales


def fetch_sale_line_items(sale_id: str) -> List[SaleLineItem]:
    """
    Retrieve the line items of one sale.

    Returns:
        List[SaleLineItem] (empty if the sale does not exist)
    """

    response = get_supabase().table(_SALE_ITEMS_TABLE).select("*").eq("sale_id", sale_id).execute()
    _check_response(response, "fetch sale line items")

    rows = getattr(response, "data", None) or []
    return [_row_to_line_item(row) for row in rows]


def update_sale_customer(sale_id: str, customer_id: str) -> None:
    """
    Reassign a sale to another customer.

    Args:
        sale_id: Sale identifier
        customer_id: New customer identifier
    """

    response = (
        get_supabase().table(_SALES_TABLE)
        .update({"customer_id": customer_id})
        .eq("id", sale_id)
        .execute()
    )
    _check_response(response, "update sale customer")


def delete_sale(sale_id: str) -> None:
    """
    Delete a sale and its line items.

    Line items go first so stock reversion triggers fire per row.
    """

    client = get_supabase()

    response = client.table(_SALE_ITEMS_TABLE).delete().eq("sale_id", sale_id).execute()
    _check_response(response, "delete sale items")

    response = client.table(_SALES_TABLE).delete().eq("id", sale_id).execute()
    _check_response(response, "delete sale")
    logger.info("Deleted sale", extra={"sale_id": sale_id})


__all__ = [
    "delete_sale",
    "fetch_sale_line_items",
    "fetch_sales_history",
    "update_sale_customer",
]

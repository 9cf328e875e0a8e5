"""
Customer repository for the store's customer roster.

Provides functions to list, register, and update customers.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from domain.customer import Customer
from domain.time import parse_utc_datetime
from repositories.client import get_supabase

logger = logging.getLogger(__name__)

_CUSTOMERS_TABLE: str = "customers"

# Tax id recorded for customers without a NIT (consumidor final).
DEFAULT_TAX_ID = "CF"

_UPDATABLE_FIELDS = {"name", "nit", "phone", "email", "address", "notes"}


def _row_to_customer(row: Mapping[str, Any]) -> Customer:
    """Convert a Supabase customers row into a Customer."""

    return Customer(
        customer_id=str(row["id"]),
        name=str(row.get("name") or ""),
        tax_id=row.get("nit"),
        phone=row.get("phone"),
        email=row.get("email"),
        address=row.get("address"),
        notes=row.get("notes"),
        created_at=parse_utc_datetime(row["created_at"]) if row.get("created_at") else None,
    )


def fetch_customers() -> List[Customer]:
    """
    Retrieve the full customer roster ordered by name.

    Returns:
        List[Customer] (possibly empty)
    """
    response = get_supabase().table(_CUSTOMERS_TABLE).select("*").order("name").execute()

    error = getattr(response, "error", None)
    if error:
        logger.error("Failed to fetch customers", extra={"error": str(error)})
        raise RuntimeError(f"Failed to fetch customers: {error}")

    rows = getattr(response, "data", None) or []
    customers = [_row_to_customer(row) for row in rows]
    logger.info("Fetched customers", extra={"customer_count": len(customers)})
    return customers


def create_customer(
    name: str,
    phone: str,
    tax_id: Optional[str] = None,
    email: Optional[str] = None,
    address: Optional[str] = None,
    notes: Optional[str] = None,
) -> Customer:
    """
    Register a new customer.

    Args:
        name: Full name (required)
        phone: Phone number (required)
        tax_id: NIT; defaults to "CF" when blank

    Returns:
        The created Customer

    Raises:
        ValueError: If name or phone is blank
        RuntimeError: If the insert fails
    """
    if not name.strip() or not phone.strip():
        raise ValueError("Customer name and phone are required")

    payload: dict[str, Any] = {
        "name": name.strip(),
        "phone": phone.strip(),
        "nit": (tax_id or "").strip() or DEFAULT_TAX_ID,
        "email": email,
        "address": address,
        "notes": notes,
    }

    response = get_supabase().table(_CUSTOMERS_TABLE).insert(payload).execute()
    error = getattr(response, "error", None)
    if error:
        logger.error("Failed to create customer", extra={"error": str(error)})
        raise RuntimeError(f"Failed to create customer: {error}")

    rows = getattr(response, "data", None) or []
    if not rows:
        raise RuntimeError("Failed to create customer: no row returned")

    return _row_to_customer(rows[0])


def update_customer(customer_id: str, updates: Mapping[str, Any]) -> None:
    """
    Update roster fields of a customer.

    Args:
        customer_id: Customer identifier
        updates: Column → value; only name, nit, phone, email, address, notes

    Raises:
        ValueError: If updates is empty or names an unknown column
        RuntimeError: If the update fails
    """
    if not updates:
        raise ValueError("No customer fields to update")

    unknown = set(updates) - _UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update customer fields: {', '.join(sorted(unknown))}")

    response = (
        get_supabase().table(_CUSTOMERS_TABLE)
        .update(dict(updates))
        .eq("id", customer_id)
        .execute()
    )

    error = getattr(response, "error", None)
    if error:
        logger.error("Failed to update customer", extra={"error": str(error)})
        raise RuntimeError(f"Failed to update customer: {error}")


__all__ = [
    "DEFAULT_TAX_ID",
    "create_customer",
    "fetch_customers",
    "update_customer",
]

"""
Domain: Customer roster entries.

Customers are registered by the store and referenced from sales by id.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .time import require_utc_timestamp


@dataclass(frozen=True, slots=True)
class Customer:
    """
    Registered customer.

    ``tax_id`` holds the customer's NIT; the store records ``"CF"``
    (consumidor final) when none was given.
    """

    customer_id: str
    name: str
    tax_id: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Validate timestamps are UTC-aware."""
        if self.created_at is not None:
            require_utc_timestamp("created_at", self.created_at)


__all__ = ["Customer"]

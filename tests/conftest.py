"""
Pytest configuration for ledger tests.

This file adds the parent directory to the Python path so that tests
can import from the domain, services, repositories, and api modules,
and provides factories for ledger entities.
"""

import sys
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest

# Add the project root to the Python path
# so tests can import domain, services, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.customer import Customer  # noqa: E402
from domain.sale import SaleRecord  # noqa: E402


@pytest.fixture
def make_sale():
    """Factory for SaleRecord with sensible defaults."""

    counter = {"n": 0}

    def _make_sale(
        total="100.00",
        snapshot="CASH|Efectivo: $100.00",
        created_at=None,
        customer_name="",
        customer_id=None,
        status="COMPLETED",
        sale_id=None,
        user_name=None,
    ) -> SaleRecord:
        counter["n"] += 1
        return SaleRecord(
            sale_id=sale_id or f"sale-{counter['n']:06d}",
            created_at=created_at or datetime(2026, 2, 10, 15, 0, tzinfo=timezone.utc),
            total_amount=Decimal(total),
            payment_snapshot=snapshot,
            customer_id=customer_id,
            customer_name=customer_name,
            user_name=user_name,
            status=status,
        )

    return _make_sale


@pytest.fixture
def make_customer():
    """Factory for Customer."""

    def _make_customer(customer_id: str, name: str = "", **kwargs) -> Customer:
        return Customer(customer_id=customer_id, name=name or f"Cliente {customer_id}", **kwargs)

    return _make_customer

"""
Tests for `services/aggregation_service.py`.

Covers:
- KPI totals and average ticket (0 for no sales)
- Per-method and per-type breakdowns
- Top customer ranking (max 3, ties by name, "Desconocido" for missing names)
- Idempotence of filter → aggregate
- Malformed or out-of-range snapshot amounts never raise
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from services.aggregation_service import CustomerTotal, Stats, calculate_stats
from services.sales_filter_service import SalesFilter, filter_sales


def test_empty_input_returns_zeroed_stats() -> None:
    stats = calculate_stats([])

    assert stats == Stats()
    assert stats.count == 0
    assert stats.avg_ticket == 0
    assert stats.top_customers == []


def test_totals_and_average_ticket(make_sale) -> None:
    sales = [make_sale(total="100.00"), make_sale(total="50.00"), make_sale(total="25.50")]

    stats = calculate_stats(sales)

    assert stats.total_sales == Decimal("175.50")
    assert stats.count == 3
    assert stats.avg_ticket == Decimal("58.5")


def test_mixed_payment_breakdowns(make_sale) -> None:
    sale = make_sale(total="75.50", snapshot="CASH|Efectivo: $50.00, CARD|Visa: $25.50")

    stats = calculate_stats([sale])

    assert stats.by_method == {"Efectivo": Decimal("50.00"), "Visa": Decimal("25.50")}
    assert stats.by_method_grouped["Efectivo"]["Efectivo"] == 50
    assert stats.by_method_grouped["Tarjeta / POS"]["Visa"] == 25.5


def test_legacy_snapshot_grouped_under_inferred_type(make_sale) -> None:
    stats = calculate_stats([make_sale(snapshot="Efectivo: $100.00")])

    assert stats.by_method_grouped == {"Efectivo": {"Efectivo": Decimal("100.00")}}


def test_same_method_accumulates_across_sales(make_sale) -> None:
    sales = [
        make_sale(snapshot="TRANSFER|Bac David: $10.00"),
        make_sale(snapshot="TRANSFER|Bac David: $5.00, TRANSFER|Banrural: $1.00"),
    ]

    stats = calculate_stats(sales)

    assert stats.by_method["Bac David"] == Decimal("15.00")
    assert stats.by_method_grouped["Transferencia"] == {
        "Bac David": Decimal("15.00"),
        "Banrural": Decimal("1.00"),
    }


def test_empty_snapshot_counts_but_adds_no_method(make_sale) -> None:
    stats = calculate_stats([make_sale(total="30.00", snapshot="")])

    assert stats.count == 1
    assert stats.total_sales == Decimal("30.00")
    assert stats.by_method == {}
    assert stats.by_method_grouped == {}


def test_unknown_tag_groups_under_raw_text(make_sale) -> None:
    stats = calculate_stats([make_sale(snapshot="CRYPTO|Bitcoin: $5.00")])

    assert stats.by_method_grouped == {"CRYPTO": {"Bitcoin": Decimal("5.00")}}


class TestTopCustomers:
    """Top customer ranking."""

    def test_ranked_by_total_and_truncated_to_three(self, make_sale):
        sales = [
            make_sale(total="10.00", customer_name="Ana"),
            make_sale(total="50.00", customer_name="Luis"),
            make_sale(total="30.00", customer_name="Ana"),
            make_sale(total="5.00", customer_name="Eva"),
            make_sale(total="20.00", customer_name="Marta"),
        ]

        stats = calculate_stats(sales)

        assert stats.top_customers == [
            CustomerTotal(name="Luis", count=1, total=Decimal("50.00")),
            CustomerTotal(name="Ana", count=2, total=Decimal("40.00")),
            CustomerTotal(name="Marta", count=1, total=Decimal("20.00")),
        ]

    def test_missing_name_is_desconocido(self, make_sale):
        stats = calculate_stats([make_sale(total="10.00", customer_name="")])

        assert stats.top_customers == [CustomerTotal(name="Desconocido", count=1, total=Decimal("10.00"))]

    def test_ties_are_ordered_by_name(self, make_sale):
        sales = [
            make_sale(total="10.00", customer_name="Zoe"),
            make_sale(total="10.00", customer_name="Ana"),
        ]

        assert [c.name for c in calculate_stats(sales).top_customers] == ["Ana", "Zoe"]


def test_date_range_excluding_everything_yields_zeroed_stats(make_sale) -> None:
    sales = [
        make_sale(created_at=datetime(2026, 2, day, 12, tzinfo=timezone.utc), customer_name="Ana")
        for day in range(1, 11)
    ]

    stats = calculate_stats(
        filter_sales(sales, SalesFilter(start_date="2030-01-01", end_date="2030-12-31"), tz=timezone.utc)
    )

    assert stats.count == 0
    assert stats.avg_ticket == 0
    assert stats.top_customers == []


def test_filter_then_aggregate_is_idempotent(make_sale) -> None:
    sales = [
        make_sale(total="12.00", snapshot="CASH|Efectivo: $12.00", customer_name="Ana"),
        make_sale(total="8.00", snapshot="Visa: $8.00", customer_name="Luis"),
        make_sale(total="3.00", snapshot="bad clause", customer_name=""),
    ]
    criteria = SalesFilter(method_contains="e")

    first = calculate_stats(filter_sales(sales, criteria))
    second = calculate_stats(filter_sales(sales, criteria))

    assert first == second


def test_out_of_range_amount_does_not_break_other_clauses(make_sale) -> None:
    sales = [
        make_sale(total="10.00", snapshot="CASH|Efectivo: $1e1000000, CARD|Visa: $10.00"),
        make_sale(total="5.00", snapshot="CASH|Efectivo: $5.00"),
    ]

    stats = calculate_stats(sales)

    assert stats.total_sales == Decimal("15.00")
    assert stats.by_method == {"Visa": Decimal("10.00"), "Efectivo": Decimal("5.00")}
    assert stats.by_method_grouped == {
        "Tarjeta / POS": {"Visa": Decimal("10.00")},
        "Efectivo": {"Efectivo": Decimal("5.00")},
    }


@pytest.mark.parametrize(
    "snapshot",
    [
        "CASH|Efectivo: $1e1000000",
        "CASH|Efectivo: -1e1000000, CARD|Visa: $1e999999",
        "CARD|Visa: $1e27",
        "CASH|Efectivo: $1_000",
        "CASH|Efectivo: sNaN",
        "|: $, :, , ",
        "CASH|Efectivo: $1e-1000000",
    ],
)
def test_malformed_amounts_never_raise(make_sale, snapshot) -> None:
    stats = calculate_stats([make_sale(total="1.00", snapshot=snapshot), make_sale(total="1.00", snapshot=snapshot)])

    assert stats.count == 2
    assert stats.total_sales == Decimal("2.00")

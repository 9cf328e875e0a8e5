"""
Tests for the HTTP API (`api/`).

Repository calls are replaced through monkeypatch so the endpoints run the
real analytics over an in-memory ledger.
"""

from __future__ import annotations

import csv
from datetime import datetime, timezone
from io import StringIO

import pytest
from fastapi.testclient import TestClient

import config
from api.main import app
from repositories import customer_repository, sale_repository


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def ledger(make_sale, make_customer):
    sales = [
        make_sale(
            sale_id="sale-000001",
            user_name="Cajero 1",
            total="75.50",
            snapshot="CASH|Efectivo: $50.00, CARD|Visa: $25.50",
            customer_id="c1",
            customer_name="Ana López",
            created_at=_utc(2026, 2, 13, 15),
        ),
        make_sale(
            sale_id="sale-000002",
            total="40.00",
            snapshot="TRANSFER|Bac David: $40.00",
            customer_name="Consumidor Final",
            created_at=_utc(2026, 2, 14, 15),
        ),
        make_sale(
            sale_id="sale-000003",
            total="10.00",
            snapshot="Efectivo: $10.00",
            customer_id="c1",
            customer_name="Ana López",
            created_at=_utc(2026, 1, 20, 15),
        ),
    ]
    customers = [make_customer("c1", "Ana López"), make_customer("c2", "Luis Pérez")]
    return sales, customers


@pytest.fixture
def client(monkeypatch, ledger):
    sales, customers = ledger
    monkeypatch.setattr(config, "LEDGER_TIMEZONE", "UTC")
    monkeypatch.setattr(sale_repository, "fetch_sales_history", lambda: list(sales))
    monkeypatch.setattr(customer_repository, "fetch_customers", lambda: list(customers))
    return TestClient(app)


def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestSalesEndpoints:

    def test_list_sales_newest_first_with_stats(self, client):
        response = client.get("/api/v1/sales")

        assert response.status_code == 200
        body = response.json()
        assert [item["sale_id"] for item in body["items"]] == ["sale-000002", "sale-000001", "sale-000003"]
        assert body["items"][1]["payment_detail"] == "Efectivo: $50.00, Visa: $25.50"
        assert body["total_count"] == 3
        assert body["filters_applied"] == {}
        assert float(body["stats"]["total_sales"]) == 125.5
        assert body["stats"]["count"] == 3

    def test_filters_are_applied(self, client):
        response = client.get("/api/v1/sales", params={"start_date": "2026-02-01", "method": "visa"})

        body = response.json()
        assert [item["sale_id"] for item in body["items"]] == ["sale-000001"]
        assert body["filters_applied"] == {"start_date": "2026-02-01", "method": "visa"}

    def test_invalid_date_is_bad_request(self, client):
        response = client.get("/api/v1/sales", params={"start_date": "13/02/2026"})

        assert response.status_code == 400

    def test_stats_contract(self, client):
        response = client.get("/api/v1/sales/stats", params={"end_date": "2026-02-13"})

        assert response.status_code == 200
        stats = response.json()
        assert set(stats) == {"total_sales", "count", "avg_ticket", "by_method", "by_method_grouped", "top_customers"}
        assert stats["count"] == 2
        assert float(stats["by_method"]["Efectivo"]) == 60.0
        assert float(stats["by_method_grouped"]["Tarjeta / POS"]["Visa"]) == 25.5
        assert stats["top_customers"][0]["name"] == "Ana López"
        assert stats["top_customers"][0]["count"] == 2

    def test_stats_for_empty_range(self, client):
        stats = client.get("/api/v1/sales/stats", params={"start_date": "2030-01-01"}).json()

        assert stats["count"] == 0
        assert float(stats["avg_ticket"]) == 0
        assert stats["top_customers"] == []

    def test_payment_methods(self, client):
        response = client.get("/api/v1/sales/methods")

        assert response.json() == {"methods": ["Bac David", "Efectivo", "Visa"]}

    def test_report_csv(self, client):
        response = client.get("/api/v1/sales/report.csv", params={"customer": "ana"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        rows = list(csv.reader(StringIO(response.text)))
        assert rows[2] == ['Filtro Aplicado: Cliente: "ana"']
        assert rows[-1][0] == "sale-000003"

    def test_repository_failure_is_bad_gateway(self, client, monkeypatch):
        def _fail():
            raise RuntimeError("Failed to fetch sales history: timeout")

        monkeypatch.setattr(sale_repository, "fetch_sales_history", _fail)

        response = client.get("/api/v1/sales")

        assert response.status_code == 502
        assert "timeout" in response.json()["detail"]

    def test_sale_items_not_found(self, client, monkeypatch):
        monkeypatch.setattr(sale_repository, "fetch_sale_line_items", lambda sale_id: [])

        assert client.get("/api/v1/sales/nope/items").status_code == 404


class TestCustomerEndpoints:

    def test_metrics_include_customers_without_sales(self, client):
        body = client.get("/api/v1/customers/metrics").json()

        assert body["total_count"] == 2
        ana, luis = body["items"]
        assert ana["customer_id"] == "c1"
        assert float(ana["total_spent"]) == 85.5
        assert ana["visit_count"] == 2
        assert ana["last_visit"] == "2026-02-13T15:00:00+00:00"
        assert luis["visit_count"] == 0
        assert luis["last_visit"] == ""
        assert float(luis["average_ticket"]) == 0

    def test_top_spenders_exclude_zero_spend(self, client):
        body = client.get("/api/v1/customers/top-spenders").json()

        assert [item["customer_id"] for item in body["items"]] == ["c1"]


class TestCashCloseEndpoint:

    def test_cash_close(self, client):
        response = client.get("/api/v1/cash-close", params={"date": "2026-02-13"})

        assert response.status_code == 200
        body = response.json()
        assert body["ticket_count"] == 1
        assert float(body["cash_income"]) == 50.0
        assert float(body["digital_income"]) == 25.5
        assert set(body["by_type"]) == {"CASH", "CARD", "TRANSFER", "OTHER"}
        assert body["non_cash_detail"][0]["reference"] == "Ticket #000001"
        [seller] = body["by_seller"]
        assert (seller["name"], seller["tickets"], float(seller["amount"])) == ("Cajero 1", 1, 75.5)

    def test_cash_close_invalid_date(self, client):
        assert client.get("/api/v1/cash-close", params={"date": "ayer"}).status_code == 400

    def test_cash_close_requires_date(self, client):
        assert client.get("/api/v1/cash-close").status_code == 422

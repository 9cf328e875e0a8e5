"""
API Request and Response Models.

Pydantic models for serializing ledger analytics responses. Field names of
StatsResponse mirror the Stats contract consumed by the scorecards and the
report renderer.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel


# ============================================================================
# Sales Models
# ============================================================================

class SaleResponse(BaseModel):
    """Single sale header in API response."""
    sale_id: str
    sale_number: Optional[str] = None
    created_at: datetime
    customer_id: Optional[str] = None
    customer_name: str
    total_amount: Decimal
    status: str
    payment_snapshot: str
    payment_detail: str  # snapshot as displayed (type tags removed)

    class Config:
        json_schema_extra = {
            "example": {
                "sale_id": "8f1c2d4e-0000-4000-8000-000000000001",
                "sale_number": "SALE-1770950400000",
                "created_at": "2026-02-13T02:11:44Z",
                "customer_id": None,
                "customer_name": "Consumidor Final",
                "total_amount": "75.50",
                "status": "COMPLETED",
                "payment_snapshot": "CASH|Efectivo: $50.00, CARD|Visa: $25.50",
                "payment_detail": "Efectivo: $50.00, Visa: $25.50"
            }
        }


class CustomerTotalResponse(BaseModel):
    """Ticket count and spend for one customer name."""
    name: str
    count: int
    total: Decimal


class StatsResponse(BaseModel):
    """Aggregated KPIs for a set of sales."""
    total_sales: Decimal
    count: int
    avg_ticket: Decimal
    by_method: Dict[str, Decimal]
    by_method_grouped: Dict[str, Dict[str, Decimal]]
    top_customers: List[CustomerTotalResponse]

    class Config:
        json_schema_extra = {
            "example": {
                "total_sales": "75.50",
                "count": 1,
                "avg_ticket": "75.50",
                "by_method": {"Efectivo": "50.00", "Visa": "25.50"},
                "by_method_grouped": {
                    "Efectivo": {"Efectivo": "50.00"},
                    "Tarjeta / POS": {"Visa": "25.50"}
                },
                "top_customers": [
                    {"name": "Consumidor Final", "count": 1, "total": "75.50"}
                ]
            }
        }


class SalesListResponse(BaseModel):
    """Filtered sales with their aggregated KPIs."""
    items: List[SaleResponse]
    total_count: int
    filters_applied: dict
    stats: StatsResponse


class PaymentMethodsResponse(BaseModel):
    """Distinct payment method names for filter options."""
    methods: List[str]


class SaleLineItemResponse(BaseModel):
    """Single product line of a sale."""
    product_id: str
    product_name: Optional[str] = None
    product_sku: Optional[str] = None
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


# ============================================================================
# Cash Close Models
# ============================================================================

class NonCashPaymentResponse(BaseModel):
    """Card, transfer, or other payment line to reconcile."""
    method_name: str
    type_key: str
    amount: Decimal
    reference: str


class SellerTotalResponse(BaseModel):
    """Tickets and amount rung up by one seller."""
    name: str
    tickets: int
    amount: Decimal


class CashCloseResponse(BaseModel):
    """Daily register close summary."""
    business_date: str
    total_sales: Decimal
    ticket_count: int
    cash_income: Decimal
    digital_income: Decimal
    by_type: Dict[str, Decimal]
    by_method: Dict[str, Decimal]
    non_cash_detail: List[NonCashPaymentResponse]
    by_seller: List[SellerTotalResponse]


# ============================================================================
# Customer Models
# ============================================================================

class CustomerMetricResponse(BaseModel):
    """Lifetime metrics for one customer."""
    customer_id: str
    name: str
    tax_id: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    total_spent: Decimal
    visit_count: int
    last_visit: str
    average_ticket: Decimal

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": "c7d1e0a2-0000-4000-8000-000000000002",
                "name": "Ana López",
                "tax_id": "CF",
                "phone": "5555-1234",
                "email": None,
                "address": None,
                "total_spent": "240.00",
                "visit_count": 3,
                "last_visit": "2026-02-13T02:11:44+00:00",
                "average_ticket": "80.00"
            }
        }


class CustomerMetricsListResponse(BaseModel):
    """Customer metrics ranked by spend."""
    items: List[CustomerMetricResponse]
    total_count: int

"""
Sales API Endpoints.

Endpoints for browsing the sales ledger, its KPIs, and the exported report.
All analytics are recomputed from the current ledger on every request.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

import config
from api.models import (
    CustomerTotalResponse,
    PaymentMethodsResponse,
    SaleLineItemResponse,
    SaleResponse,
    SalesListResponse,
    StatsResponse,
)
from domain.sale import SaleRecord
from repositories import sale_repository
from services.aggregation_service import Stats, calculate_stats
from services.report_service import build_sales_report, render_sales_report_csv
from services.sales_filter_service import SalesFilter, filter_sales
from services.snapshot_codec import clean_snapshot, list_payment_methods

logger = logging.getLogger(__name__)

router = APIRouter()


def get_sales_filter(
    start_date: Optional[str] = Query(None, description="First business date, inclusive (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, description="Last business date, inclusive (YYYY-MM-DD)"),
    customer: Optional[str] = Query(None, description="Case-insensitive customer name substring"),
    method: Optional[str] = Query(None, description="Case-insensitive payment method substring"),
) -> SalesFilter:
    """Build filter criteria from query parameters."""
    try:
        return SalesFilter(
            start_date=start_date or None,
            end_date=end_date or None,
            customer_contains=customer or None,
            method_contains=method or None,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _load_sales() -> List[SaleRecord]:
    try:
        return sale_repository.fetch_sales_history()
    except RuntimeError as e:
        raise HTTPException(status_code=502, detail=str(e))


def _filtered_sales(criteria: SalesFilter) -> List[SaleRecord]:
    try:
        tz = config.get_ledger_timezone()
    except ValueError as e:
        logger.error("Invalid ledger timezone", extra={"error": str(e)})
        raise HTTPException(status_code=500, detail=str(e))
    return filter_sales(_load_sales(), criteria, tz=tz)


def _filters_applied(criteria: SalesFilter) -> dict:
    filters_applied = {}
    if criteria.start_date:
        filters_applied["start_date"] = criteria.start_date
    if criteria.end_date:
        filters_applied["end_date"] = criteria.end_date
    if criteria.customer_contains:
        filters_applied["customer"] = criteria.customer_contains
    if criteria.method_contains:
        filters_applied["method"] = criteria.method_contains
    return filters_applied


def _sale_response(sale: SaleRecord) -> SaleResponse:
    return SaleResponse(
        sale_id=sale.sale_id,
        sale_number=sale.sale_number,
        created_at=sale.created_at,
        customer_id=sale.customer_id,
        customer_name=sale.customer_name,
        total_amount=sale.total_amount,
        status=sale.status,
        payment_snapshot=sale.payment_snapshot,
        payment_detail=clean_snapshot(sale.payment_snapshot),
    )


def _stats_response(stats: Stats) -> StatsResponse:
    return StatsResponse(
        total_sales=stats.total_sales,
        count=stats.count,
        avg_ticket=stats.avg_ticket,
        by_method=stats.by_method,
        by_method_grouped=stats.by_method_grouped,
        top_customers=[
            CustomerTotalResponse(name=c.name, count=c.count, total=c.total)
            for c in stats.top_customers
        ],
    )


@router.get(
    "/sales",
    response_model=SalesListResponse,
    summary="Query Sales Ledger",
    description="List sales newest first, filtered by date range, customer, and payment method, with KPIs."
)
def get_sales(criteria: SalesFilter = Depends(get_sales_filter)):
    """
    Query the sales ledger with optional filters.

    **Example usage:**
    - Whole history: `GET /api/v1/sales`
    - One month: `GET /api/v1/sales?start_date=2026-02-01&end_date=2026-02-28`
    - Combine filters: `GET /api/v1/sales?customer=ana&method=visa`
    """
    try:
        sales = _filtered_sales(criteria)
        return SalesListResponse(
            items=[_sale_response(sale) for sale in sales],
            total_count=len(sales),
            filters_applied=_filters_applied(criteria),
            stats=_stats_response(calculate_stats(sales)),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to query sales")
        raise HTTPException(status_code=500, detail=f"Failed to query sales: {str(e)}")


@router.get(
    "/sales/stats",
    response_model=StatsResponse,
    summary="Sales KPIs",
    description="Totals, average ticket, payment breakdowns, and top customers for the filtered ledger."
)
def get_sales_stats(criteria: SalesFilter = Depends(get_sales_filter)):
    try:
        return _stats_response(calculate_stats(_filtered_sales(criteria)))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to compute sales stats")
        raise HTTPException(status_code=500, detail=f"Failed to compute sales stats: {str(e)}")


@router.get(
    "/sales/methods",
    response_model=PaymentMethodsResponse,
    summary="Payment Methods",
    description="Distinct payment method names across the ledger, for filter options."
)
def get_payment_methods():
    return PaymentMethodsResponse(methods=list_payment_methods(_load_sales()))


@router.get(
    "/sales/report.csv",
    summary="Download Sales Report CSV",
    description="CSV report of the filtered ledger: KPIs, method breakdown, and transaction detail.",
    response_class=Response
)
def download_sales_report(criteria: SalesFilter = Depends(get_sales_filter)):
    """
    Download the sales report for the current filters.

    **Response:**
    CSV file download with filename: `reporte_ventas_{YYYY-MM-DD}.csv`
    """
    try:
        sales = _filtered_sales(criteria)
        generated_at = datetime.now(timezone.utc)
        report = build_sales_report(sales, calculate_stats(sales), criteria, generated_at)
        return Response(
            content=render_sales_report_csv(report),
            media_type="text/csv",
            headers={
                "Content-Disposition": f"attachment; filename=reporte_ventas_{generated_at.date().isoformat()}.csv"
            }
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to generate sales report")
        raise HTTPException(status_code=500, detail=f"Failed to generate report: {str(e)}")


@router.get(
    "/sales/{sale_id}/items",
    response_model=List[SaleLineItemResponse],
    summary="Sale Line Items",
    description="Products, quantities, and subtotals of one sale."
)
def get_sale_items(sale_id: str):
    try:
        items = sale_repository.fetch_sale_line_items(sale_id)
    except RuntimeError as e:
        raise HTTPException(status_code=502, detail=str(e))

    if not items:
        raise HTTPException(status_code=404, detail=f"Sale not found or has no items: {sale_id}")

    return [
        SaleLineItemResponse(
            product_id=item.product_id,
            product_name=item.product_name,
            product_sku=item.product_sku,
            quantity=item.quantity,
            unit_price=item.unit_price,
            subtotal=item.subtotal,
        )
        for item in items
    ]

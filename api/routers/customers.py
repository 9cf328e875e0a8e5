"""
Customer API Endpoints.

Lifetime loyalty metrics per customer, computed over the full, unfiltered
sales history.
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Query

from api.models import CustomerMetricResponse, CustomerMetricsListResponse
from repositories import customer_repository, sale_repository
from services.loyalty_service import (
    TOP_SPENDERS_LIMIT,
    CustomerMetric,
    merge_customer_metrics,
    top_spenders,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _load_metrics() -> List[CustomerMetric]:
    try:
        customers = customer_repository.fetch_customers()
        sales = sale_repository.fetch_sales_history()
    except RuntimeError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return merge_customer_metrics(customers, sales)


def _metric_response(metric: CustomerMetric) -> CustomerMetricResponse:
    customer = metric.customer
    return CustomerMetricResponse(
        customer_id=customer.customer_id,
        name=customer.name,
        tax_id=customer.tax_id,
        phone=customer.phone,
        email=customer.email,
        address=customer.address,
        total_spent=metric.total_spent,
        visit_count=metric.visit_count,
        last_visit=metric.last_visit,
        average_ticket=metric.average_ticket,
    )


@router.get(
    "/customers/metrics",
    response_model=CustomerMetricsListResponse,
    summary="Customer Loyalty Metrics",
    description="Every customer with total spend, visit count, last visit, and average ticket, highest spend first."
)
def get_customer_metrics():
    try:
        metrics = _load_metrics()
        return CustomerMetricsListResponse(
            items=[_metric_response(metric) for metric in metrics],
            total_count=len(metrics),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to compute customer metrics")
        raise HTTPException(status_code=500, detail=f"Failed to compute customer metrics: {str(e)}")


@router.get(
    "/customers/top-spenders",
    response_model=CustomerMetricsListResponse,
    summary="Top Spenders",
    description="Highest-spending customers; customers without purchases are excluded."
)
def get_top_spenders(
    limit: int = Query(TOP_SPENDERS_LIMIT, ge=1, le=100, description="Maximum number of customers to return"),
):
    try:
        metrics = top_spenders(_load_metrics(), limit=limit)
        return CustomerMetricsListResponse(
            items=[_metric_response(metric) for metric in metrics],
            total_count=len(metrics),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to compute top spenders")
        raise HTTPException(status_code=500, detail=f"Failed to compute top spenders: {str(e)}")

"""
Cash Close API Endpoints.

Daily register close: cash versus digital income and the non-cash payments to
reconcile.
"""

import logging

from fastapi import APIRouter, HTTPException, Query

import config
from api.models import CashCloseResponse, NonCashPaymentResponse, SellerTotalResponse
from repositories import sale_repository
from services.cash_close_service import summarize_cash_close

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/cash-close",
    response_model=CashCloseResponse,
    summary="Daily Cash Close",
    description="Summarize completed sales of one business day by payment type and method."
)
def get_cash_close(
    date: str = Query(..., description="Business date to close (YYYY-MM-DD)"),
):
    """
    Close the register for one day.

    **Example usage:**
    - `GET /api/v1/cash-close?date=2026-02-13`
    """
    try:
        try:
            tz = config.get_ledger_timezone()
        except ValueError as e:
            raise HTTPException(status_code=500, detail=str(e))

        try:
            sales = sale_repository.fetch_sales_history()
        except RuntimeError as e:
            raise HTTPException(status_code=502, detail=str(e))

        try:
            summary = summarize_cash_close(sales, date, tz=tz)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return CashCloseResponse(
            business_date=summary.business_date,
            total_sales=summary.total_sales,
            ticket_count=summary.ticket_count,
            cash_income=summary.cash_income,
            digital_income=summary.digital_income,
            by_type={payment_type.value: amount for payment_type, amount in summary.by_type.items()},
            by_method=summary.by_method,
            non_cash_detail=[
                NonCashPaymentResponse(
                    method_name=line.method_name,
                    type_key=line.type_key.value,
                    amount=line.amount,
                    reference=line.reference,
                )
                for line in summary.non_cash_detail
            ],
            by_seller=[
                SellerTotalResponse(name=seller.name, tickets=seller.tickets, amount=seller.amount)
                for seller in summary.by_seller
            ],
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Failed to close cash register")
        raise HTTPException(status_code=500, detail=f"Failed to close cash register: {str(e)}")

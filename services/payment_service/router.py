"""
Payment endpoints. Everything except /health requires X-Internal-API-Key.
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from shared.security import PAYMENT_RATE_LIMIT, limiter, verify_internal_api_key

from .dependencies import get_payment_service, get_query_service
from .models import PaymentStatus
from .schemas import PaymentCreate, PaymentResponse, PaymentSummaryResponse, QueryResponse
from .service import PaymentService, QueryFilter, QueryPaymentsService

router = APIRouter(dependencies=[Depends(verify_internal_api_key)])
public_router = APIRouter()  # For any public endpoints (e.g. health check)

@public_router.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "payment", "status": "running"}


@router.post(
    "/",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Approve a card payment for a partner",
)
@limiter.limit(PAYMENT_RATE_LIMIT)
async def create_payment(
    request: Request,                                   # slowapi reads the caller key from here
    payment: PaymentCreate,
    service: PaymentService = Depends(get_payment_service),
):
    return await service.pay(payment)


@router.get(
    "/",
    response_model=QueryResponse,
    summary="Payment history with statistics over the whole filter",
)
async def list_payments(
    partner_id: Optional[int] = Query(default=None),
    payment_status: Optional[PaymentStatus] = Query(default=None, alias="status"),
    from_: Optional[datetime] = Query(default=None, alias="from"),
    to: Optional[datetime] = Query(default=None),
    cursor: Optional[str] = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    service: QueryPaymentsService = Depends(get_query_service),
):
    result = await service.query(
        QueryFilter(
            partner_id=partner_id,
            status=payment_status,
            from_=from_,
            to=to,
            cursor=cursor,
            limit=limit,
        )
    )
    return QueryResponse(
        items=[PaymentResponse.model_validate(item) for item in result.items],
        summary=PaymentSummaryResponse.model_validate(result.summary),
        next_cursor=result.next_cursor,
        has_next=result.has_next,
    )

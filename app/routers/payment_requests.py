"""
Square 15 - Payment Requests Router

API endpoints for listing payment requests and triggering the monthly
salary sweep by hand.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import require_admin
from app.models.payment_request import PaymentRequest, PaymentRequestSource, PaymentRequestStatus
from app.models.user import User
from app.schemas.payment_request import (
    CreatedSalaryPaymentResponse,
    PaymentRequestListResponse,
    PaymentRequestResponse,
    SalarySweepRequest,
    SalarySweepResponse,
)
from app.services.salary_scheduler_service import SalarySchedulerService


router = APIRouter(prefix="/payment-requests", tags=["Payment Requests"])


@router.get(
    "",
    response_model=PaymentRequestListResponse,
    summary="List payment requests",
)
async def list_payment_requests(
    status_filter: Optional[PaymentRequestStatus] = Query(None, alias="status"),
    source_type: Optional[PaymentRequestSource] = Query(None),
    artisan_id: Optional[UUID] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(require_admin()),
    db: AsyncSession = Depends(get_async_session),
):
    query = select(PaymentRequest)
    count_query = select(func.count(PaymentRequest.id))

    filters = []
    if status_filter is not None:
        filters.append(PaymentRequest.status == status_filter)
    if source_type is not None:
        filters.append(PaymentRequest.source_type == source_type)
    if artisan_id is not None:
        filters.append(PaymentRequest.artisan_id == artisan_id)
    for condition in filters:
        query = query.where(condition)
        count_query = count_query.where(condition)

    total = (await db.execute(count_query)).scalar() or 0
    result = await db.execute(
        query.order_by(PaymentRequest.created_at.desc()).limit(limit).offset(offset)
    )

    return PaymentRequestListResponse(
        payment_requests=[PaymentRequestResponse.model_validate(pr) for pr in result.scalars().all()],
        total=total,
    )


@router.post(
    "/monthly-salary/run",
    response_model=SalarySweepResponse,
    summary="Run monthly salary sweep",
    description=(
        "Create this month's salary payment requests for employees due on the run date. "
        "Safe to repeat: employees already paid for the month are skipped."
    ),
)
async def run_monthly_salary_sweep(
    request: Optional[SalarySweepRequest] = None,
    current_user: User = Depends(require_admin()),
    db: AsyncSession = Depends(get_async_session),
):
    service = SalarySchedulerService(db)
    result = await service.run_daily_salary_sweep(request.run_date if request else None)

    return SalarySweepResponse(
        run_date=result.run_date,
        candidates=result.candidates,
        created=[CreatedSalaryPaymentResponse.model_validate(item) for item in result.created],
        skipped=result.skipped,
        failed={str(employee_id): error for employee_id, error in result.failed.items()},
    )

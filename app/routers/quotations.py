"""
Square 15 - Quotations Router

API endpoints for the quotation review workflow.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_current_active_user
from app.models.quotation import QuotationStatus
from app.models.user import User
from app.schemas.quotation import (
    AllowedTransitionsResponse,
    QuotationCreateRequest,
    QuotationListResponse,
    QuotationResponse,
    QuotationStatusUpdateRequest,
)
from app.services.quotation_workflow_service import QuotationWorkflowService


router = APIRouter(prefix="/quotations", tags=["Quotations"])


@router.post(
    "",
    response_model=QuotationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create quotation",
    description="Create a DRAFT quotation for the current user's company.",
)
async def create_quotation(
    request: QuotationCreateRequest,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    service = QuotationWorkflowService(db)
    return await service.create_quotation(request, current_user)


@router.get(
    "",
    response_model=QuotationListResponse,
    summary="List quotations",
)
async def list_quotations(
    status_filter: Optional[QuotationStatus] = Query(None, alias="status", description="Filter by status"),
    assigned_to_id: Optional[UUID] = Query(None, description="Filter by assigned artisan"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """List quotations visible to the current user."""
    service = QuotationWorkflowService(db)
    quotations, total = await service.list_quotations(
        current_user,
        status=status_filter,
        assigned_to_id=assigned_to_id,
        limit=limit,
        offset=offset,
    )
    return QuotationListResponse(
        quotations=[QuotationResponse.model_validate(q) for q in quotations],
        total=total,
    )


@router.get(
    "/{quotation_id}",
    response_model=QuotationResponse,
    summary="Get quotation",
)
async def get_quotation(
    quotation_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    service = QuotationWorkflowService(db)
    return await service.get_visible_quotation(quotation_id, current_user, refresh=True)


@router.get(
    "/{quotation_id}/transitions",
    response_model=AllowedTransitionsResponse,
    summary="Allowed transitions",
    description="Statuses the current user may move this quotation into.",
)
async def get_allowed_transitions(
    quotation_id: UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    service = QuotationWorkflowService(db)
    quotation = await service.get_visible_quotation(quotation_id, current_user)
    return AllowedTransitionsResponse(
        quotation_id=quotation.id,
        current_status=quotation.status,
        allowed_statuses=service.get_allowed_transitions(quotation, current_user),
        is_terminal=service.is_terminal(quotation),
    )


@router.patch(
    "/{quotation_id}/status",
    response_model=QuotationResponse,
    summary="Update quotation status",
    description=(
        "Move a quotation to a new status. Fails with 422 when the current user's "
        "role cannot make the move, and with 409 when the status changed since "
        "expected_status was read."
    ),
)
async def update_quotation_status(
    quotation_id: UUID,
    request: QuotationStatusUpdateRequest,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    service = QuotationWorkflowService(db)
    return await service.apply_transition(
        quotation_id,
        request.status,
        current_user,
        rejection_reason=request.rejection_reason,
        expected_status=request.expected_status,
        costing=request.costing,
    )

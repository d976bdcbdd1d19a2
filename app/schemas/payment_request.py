"""
Square 15 - Payment Request Schemas

Pydantic schemas for payment requests and the monthly salary sweep.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.models.payment_request import PaymentRequestSource, PaymentRequestStatus


# ===========================================
# REQUEST SCHEMAS
# ===========================================

class SalarySweepRequest(BaseModel):
    """Manual trigger of the monthly salary sweep."""
    run_date: Optional[date] = Field(
        None,
        description="Date to run the sweep for; defaults to today in the scheduler timezone",
    )


# ===========================================
# RESPONSE SCHEMAS
# ===========================================

class PaymentRequestResponse(BaseModel):
    """Schema for payment request response."""
    id: UUID
    request_number: str
    artisan_id: UUID
    order_ids: List[str] = []
    calculated_amount: Decimal
    notes: Optional[str] = None
    status: PaymentRequestStatus
    rejection_reason: Optional[str] = None
    approved_date: Optional[datetime] = None
    paid_date: Optional[datetime] = None
    source_type: PaymentRequestSource
    period_key: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PaymentRequestListResponse(BaseModel):
    """List of payment requests response."""
    payment_requests: List[PaymentRequestResponse]
    total: int


class CreatedSalaryPaymentResponse(BaseModel):
    payment_request_id: UUID
    request_number: str
    employee_id: UUID
    amount: Decimal

    class Config:
        from_attributes = True


class SalarySweepResponse(BaseModel):
    """Outcome of a salary sweep run."""
    run_date: date
    candidates: int
    created: List[CreatedSalaryPaymentResponse]
    skipped: List[UUID]
    failed: Dict[str, str]

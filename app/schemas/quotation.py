"""
Square 15 - Quotation Schemas

Pydantic schemas for quotation creation, status transitions and costing.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from app.models.quotation import DurationUnit, ExpenseSlipCategory, QuotationStatus


# ===========================================
# REQUEST SCHEMAS
# ===========================================

class QuotationCreateRequest(BaseModel):
    """Schema for creating a draft quotation."""
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_email: Optional[EmailStr] = None
    address: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None

    assigned_to_id: Optional[UUID] = Field(None, description="Artisan responsible for the quotation")

    subtotal: Decimal = Field(Decimal("0.00"), ge=0)
    tax: Decimal = Field(Decimal("0.00"), ge=0)
    total: Decimal = Field(Decimal("0.00"), ge=0)


class ExpenseSlipInput(BaseModel):
    """Receipt attached when submitting costing."""
    url: str = Field(..., min_length=1, max_length=1000)
    category: ExpenseSlipCategory
    description: Optional[str] = Field(None, max_length=500)
    amount: Optional[Decimal] = Field(None, ge=0)


class QuotationCosting(BaseModel):
    """
    Side data captured along with a transition.

    before_pictures is read when the quotation moves to IN_PROGRESS; the
    remaining fields when it is submitted for manager review.
    """
    before_pictures: Optional[List[str]] = None

    line_items: Optional[List[Dict[str, Any]]] = None
    num_people_needed: Optional[int] = Field(None, ge=1)
    estimated_duration: Optional[Decimal] = Field(None, gt=0)
    duration_unit: Optional[DurationUnit] = None
    labour_rate: Optional[Decimal] = Field(None, ge=0)
    material_cost: Optional[Decimal] = Field(None, ge=0, description="Used when no expense slips are given")
    expense_slips: Optional[List[ExpenseSlipInput]] = None


class QuotationStatusUpdateRequest(BaseModel):
    """Schema for requesting a status transition."""
    status: QuotationStatus
    rejection_reason: Optional[str] = Field(None, max_length=2000)
    expected_status: Optional[QuotationStatus] = Field(
        None,
        description="Status the client last saw; the update fails with 409 if it changed",
    )
    costing: Optional[QuotationCosting] = None


# ===========================================
# RESPONSE SCHEMAS
# ===========================================

class ExpenseSlipResponse(BaseModel):
    id: UUID
    url: str
    category: ExpenseSlipCategory
    description: Optional[str] = None
    amount: Optional[Decimal] = None

    class Config:
        from_attributes = True


class QuotationResponse(BaseModel):
    """Schema for quotation response."""
    id: UUID
    quote_number: str
    status: QuotationStatus
    rejection_reason: Optional[str] = None

    company_id: Optional[UUID] = None
    assigned_to_id: Optional[UUID] = None
    created_by_id: Optional[UUID] = None

    customer_name: str
    customer_email: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None

    subtotal: Decimal
    tax: Decimal
    total: Decimal

    # Costing
    line_items: Optional[List[Dict[str, Any]]] = None
    before_pictures: Optional[List[str]] = None
    num_people_needed: Optional[int] = None
    estimated_duration: Optional[Decimal] = None
    duration_unit: Optional[DurationUnit] = None
    labour_rate: Optional[Decimal] = None
    company_material_cost: Optional[Decimal] = None
    company_labour_cost: Optional[Decimal] = None
    estimated_profit: Optional[Decimal] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    expense_slips: List[ExpenseSlipResponse] = []

    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class QuotationListResponse(BaseModel):
    """List of quotations response."""
    quotations: List[QuotationResponse]
    total: int


class AllowedTransitionsResponse(BaseModel):
    """Statuses the caller may move a quotation into."""
    quotation_id: UUID
    current_status: QuotationStatus
    allowed_statuses: List[QuotationStatus]
    is_terminal: bool

"""
Square 15 - Quotation Models

Quotations move through a review ladder:
DRAFT -> PENDING_ARTISAN_REVIEW -> IN_PROGRESS -> PENDING_JUNIOR_MANAGER_REVIEW
-> PENDING_SENIOR_MANAGER_REVIEW -> APPROVED -> SENT_TO_CUSTOMER

Every review stage can send the quotation back one step, managers can
reject, and REJECTED returns to DRAFT. Status changes go through
QuotationWorkflowService only.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    Uuid,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel, AuditMixin

if TYPE_CHECKING:
    from app.models.user import User


class QuotationStatus(str, Enum):
    """Quotation workflow status."""
    DRAFT = "DRAFT"
    PENDING_ARTISAN_REVIEW = "PENDING_ARTISAN_REVIEW"
    IN_PROGRESS = "IN_PROGRESS"
    PENDING_JUNIOR_MANAGER_REVIEW = "PENDING_JUNIOR_MANAGER_REVIEW"
    PENDING_SENIOR_MANAGER_REVIEW = "PENDING_SENIOR_MANAGER_REVIEW"
    APPROVED = "APPROVED"
    SENT_TO_CUSTOMER = "SENT_TO_CUSTOMER"
    REJECTED = "REJECTED"


class DurationUnit(str, Enum):
    """Unit for the artisan's labour estimate."""
    HOURLY = "HOURLY"
    DAILY = "DAILY"


class ExpenseSlipCategory(str, Enum):
    """Categories for quotation expense slips."""
    MATERIALS = "MATERIALS"
    TOOLS = "TOOLS"
    TRANSPORTATION = "TRANSPORTATION"
    OTHER = "OTHER"


class Quotation(BaseModel, AuditMixin):
    """
    Quotation prepared by a contractor for a customer.

    Monetary totals are computed by the quoting UI and preserved across
    transitions. The costing fields are filled by the artisan when the
    quotation is submitted for manager review.
    """

    __tablename__ = "quotations"

    quote_number: Mapped[str] = mapped_column(
        String(30),
        unique=True,
        nullable=False,
        index=True,
    )
    status: Mapped[QuotationStatus] = mapped_column(
        SQLEnum(QuotationStatus, name="quotation_status"),
        default=QuotationStatus.DRAFT,
        nullable=False,
        index=True,
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Ownership
    company_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        nullable=True,
        index=True,
    )
    assigned_to_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Customer
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Totals
    subtotal: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0.00"), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0.00"), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=Decimal("0.00"), nullable=False)

    # Artisan costing
    line_items: Mapped[Optional[List[Dict[str, Any]]]] = mapped_column(JSON, nullable=True)
    before_pictures: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    num_people_needed: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    estimated_duration: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    duration_unit: Mapped[Optional[DurationUnit]] = mapped_column(
        SQLEnum(DurationUnit, name="duration_unit"),
        nullable=True,
    )
    labour_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    company_material_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    company_labour_cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    estimated_profit: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)

    start_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    assigned_to: Mapped[Optional["User"]] = relationship(
        "User",
        foreign_keys=[assigned_to_id],
        lazy="selectin",
    )
    expense_slips: Mapped[List["QuotationExpenseSlip"]] = relationship(
        "QuotationExpenseSlip",
        back_populates="quotation",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class QuotationExpenseSlip(BaseModel):
    """Receipt uploaded by the artisan against a quotation."""

    __tablename__ = "quotation_expense_slips"

    quotation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("quotations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    category: Mapped[ExpenseSlipCategory] = mapped_column(
        SQLEnum(ExpenseSlipCategory, name="expense_slip_category"),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)

    quotation: Mapped["Quotation"] = relationship(
        "Quotation",
        back_populates="expense_slips",
    )

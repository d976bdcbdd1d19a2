"""
Square 15 - Payment Request Model

Payment requests pay artisans and salaried employees. Salary requests are
created by the daily salary sweep and carry a structured period marker:
at most one MONTHLY_SALARY request per employee per YYYY-MM period.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    JSON,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.user import User


class PaymentRequestStatus(str, Enum):
    """Payment request status."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PAID = "PAID"


class PaymentRequestSource(str, Enum):
    """What produced the payment request."""
    MANUAL = "MANUAL"
    MONTHLY_SALARY = "MONTHLY_SALARY"
    MILESTONE = "MILESTONE"


def period_key_for(day: date) -> str:
    """Period key for the calendar month containing day, e.g. '2024-03'."""
    return f"{day.year:04d}-{day.month:02d}"


class PaymentRequest(BaseModel):
    """Request to pay an artisan or employee."""

    __tablename__ = "payment_requests"
    __table_args__ = (
        UniqueConstraint(
            "artisan_id",
            "source_type",
            "period_key",
            name="uq_payment_requests_artisan_source_period",
        ),
    )

    request_number: Mapped[str] = mapped_column(
        String(30),
        unique=True,
        nullable=False,
        index=True,
    )
    artisan_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    order_ids: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    calculated_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[PaymentRequestStatus] = mapped_column(
        SQLEnum(PaymentRequestStatus, name="payment_request_status"),
        default=PaymentRequestStatus.PENDING,
        nullable=False,
        index=True,
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    approved_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Idempotency marker for recurring payments
    source_type: Mapped[PaymentRequestSource] = mapped_column(
        SQLEnum(PaymentRequestSource, name="payment_request_source"),
        default=PaymentRequestSource.MANUAL,
        nullable=False,
    )
    period_key: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)

    artisan: Mapped["User"] = relationship("User", lazy="selectin")

"""
Square 15 - Property Manager RFQ Model

Requests for quotation raised by property managers. The quotation
workflow marks the matching RFQ as RECEIVED once a quotation is sent.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.user import User


class RFQStatus(str, Enum):
    """Property manager RFQ status."""
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    RECEIVED = "RECEIVED"
    QUOTED = "QUOTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


# RFQs still waiting for a contractor's quotation
OPEN_RFQ_STATUSES = (RFQStatus.SUBMITTED, RFQStatus.UNDER_REVIEW)


class PropertyManagerRFQ(BaseModel):
    """Request for quotation from a property manager."""

    __tablename__ = "property_manager_rfqs"

    rfq_number: Mapped[str] = mapped_column(String(30), unique=True, nullable=False)
    property_manager_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[RFQStatus] = mapped_column(
        SQLEnum(RFQStatus, name="rfq_status"),
        default=RFQStatus.SUBMITTED,
        nullable=False,
        index=True,
    )
    quoted_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    property_manager: Mapped["User"] = relationship("User", lazy="selectin")

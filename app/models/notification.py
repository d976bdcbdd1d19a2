"""
Square 15 - Notification Model

Model for storing in-app notifications.

Notification Types:
- Quotation workflow status changes
- Payment request lifecycle
- RFQ updates
- System announcements
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class NotificationType(str, Enum):
    """Types of notifications."""
    # Quotation
    QUOTATION_ASSIGNED = "QUOTATION_ASSIGNED"
    QUOTATION_STATUS_UPDATED = "QUOTATION_STATUS_UPDATED"
    QUOTATION_REVIEW_REQUIRED = "QUOTATION_REVIEW_REQUIRED"
    QUOTATION_REJECTED = "QUOTATION_REJECTED"

    # RFQ
    RFQ_QUOTED = "RFQ_QUOTED"

    # Payment requests
    PAYMENT_REQUEST_CREATED = "PAYMENT_REQUEST_CREATED"
    PAYMENT_REQUEST_APPROVED = "PAYMENT_REQUEST_APPROVED"
    PAYMENT_REQUEST_REJECTED = "PAYMENT_REQUEST_REJECTED"
    PAYMENT_REQUEST_PAID = "PAYMENT_REQUEST_PAID"

    # General
    SYSTEM_ANNOUNCEMENT = "SYSTEM_ANNOUNCEMENT"


class Notification(BaseModel):
    """
    Notification stored for a single recipient.

    recipient_role is the recipient's role at creation time so the feed
    stays consistent if the user's role changes later.
    """

    __tablename__ = "notifications"

    recipient_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    recipient_role: Mapped[str] = mapped_column(String(50), nullable=False)

    message: Mapped[str] = mapped_column(Text, nullable=False)
    notification_type: Mapped[NotificationType] = mapped_column(
        SQLEnum(NotificationType, name="notification_type"),
        nullable=False,
        index=True,
    )

    # Link back to the record the notification is about
    related_entity_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    related_entity_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    is_read: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        index=True,
    )
    read_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, type={self.notification_type}, recipient={self.recipient_id})>"

    def mark_as_read(self) -> None:
        """Mark notification as read."""
        if not self.is_read:
            self.is_read = True
            self.read_at = datetime.now(timezone.utc)

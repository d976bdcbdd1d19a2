"""
Square 15 - Notifications Router

API endpoints for the current user's in-app notifications.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.dependencies import get_current_active_user
from app.models.notification import NotificationType
from app.models.user import User
from app.services.notification_service import NotificationService
from app.utils.error_handling import NotFoundException


router = APIRouter(prefix="/notifications", tags=["Notifications"])


# ===========================================
# REQUEST/RESPONSE SCHEMAS
# ===========================================

class NotificationResponse(BaseModel):
    """Schema for notification response."""
    id: uuid.UUID
    message: str
    notification_type: NotificationType
    recipient_role: str
    related_entity_id: Optional[uuid.UUID] = None
    related_entity_type: Optional[str] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    """Schema for notification list response."""
    notifications: List[NotificationResponse]
    total: int
    unread_count: int


class MessageResponse(BaseModel):
    """Generic message response."""
    message: str
    success: bool = True


# ===========================================
# ENDPOINTS
# ===========================================

@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List notifications",
    description="Get notifications for the current user, newest first.",
)
async def list_notifications(
    unread_only: bool = Query(False, description="Only unread notifications"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """List notifications for the current user."""
    service = NotificationService(db)

    notifications, total = await service.get_user_notifications(
        user_id=current_user.id,
        unread_only=unread_only,
        limit=limit,
        offset=offset,
    )
    unread_count = await service.get_unread_count(current_user.id)

    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        total=total,
        unread_count=unread_count,
    )


@router.post(
    "/{notification_id}/read",
    response_model=MessageResponse,
    summary="Mark notification as read",
)
async def mark_as_read(
    notification_id: uuid.UUID,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Mark a notification as read."""
    service = NotificationService(db)

    notification = await service.mark_as_read(
        notification_id=notification_id,
        user_id=current_user.id,
    )
    if notification is None:
        raise NotFoundException("Notification", notification_id)

    return MessageResponse(message="Notification marked as read")


@router.post(
    "/read-all",
    response_model=MessageResponse,
    summary="Mark all notifications as read",
)
async def mark_all_as_read(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_async_session),
):
    service = NotificationService(db)
    count = await service.mark_all_as_read(current_user.id)
    return MessageResponse(message=f"Marked {count} notification(s) as read")

"""
Square 15 - Notification Service

Handles in-app notifications for workflow events.

Notifications are never critical to the operation that triggers them:
every public notify_* helper logs and swallows delivery failures so a
broken notification can't undo a committed status change or payment
request. create_notification is the strict primitive underneath.
"""

import uuid
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select, func, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification, NotificationType
from app.models.quotation import Quotation, QuotationStatus
from app.models.rfq import PropertyManagerRFQ
from app.models.user import User, UserRole, ADMIN_ROLES
from app.utils.error_handling import NotificationDeliveryFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuotationStatusChanged:
    """Status-change event emitted by the quotation workflow."""
    quotation_id: uuid.UUID
    quote_number: str
    previous_status: QuotationStatus
    new_status: QuotationStatus
    actor_id: uuid.UUID
    company_id: Optional[uuid.UUID] = None
    assigned_to_id: Optional[uuid.UUID] = None
    created_by_id: Optional[uuid.UUID] = None
    rejection_reason: Optional[str] = None
    reviewer_roles: frozenset = frozenset()

    @classmethod
    def from_quotation(
        cls,
        quotation: Quotation,
        previous_status: QuotationStatus,
        actor_id: uuid.UUID,
        reviewer_roles: Iterable[UserRole] = (),
    ) -> "QuotationStatusChanged":
        return cls(
            quotation_id=quotation.id,
            quote_number=quotation.quote_number,
            previous_status=previous_status,
            new_status=quotation.status,
            actor_id=actor_id,
            company_id=quotation.company_id,
            assigned_to_id=quotation.assigned_to_id,
            created_by_id=quotation.created_by_id,
            rejection_reason=quotation.rejection_reason if quotation.status == QuotationStatus.REJECTED else None,
            reviewer_roles=frozenset(reviewer_roles),
        )


def humanize_status(status: QuotationStatus) -> str:
    """PENDING_SENIOR_MANAGER_REVIEW -> 'PENDING SENIOR MANAGER REVIEW'."""
    value = status.value if isinstance(status, QuotationStatus) else str(status)
    return value.replace("_", " ")


def format_amount(amount: Decimal) -> str:
    return f"R{Decimal(amount):,.2f}"


class NotificationService:
    """Service for storing notifications and fanning them out to recipients."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_notification(
        self,
        recipient: User,
        message: str,
        notification_type: NotificationType,
        related_entity_id: Optional[uuid.UUID] = None,
        related_entity_type: Optional[str] = None,
    ) -> Optional[Notification]:
        """
        Stage a notification for one recipient.

        Returns None when the recipient disabled this notification type.
        The caller commits.
        """
        disabled = recipient.disabled_notification_types or []
        if notification_type.value in disabled:
            logger.debug(f"User {recipient.id} disabled {notification_type.value}; skipping")
            return None

        notification = Notification(
            recipient_id=recipient.id,
            recipient_role=recipient.role.value if isinstance(recipient.role, UserRole) else str(recipient.role),
            message=message,
            notification_type=notification_type,
            related_entity_id=related_entity_id,
            related_entity_type=related_entity_type,
            is_read=False,
        )
        self.db.add(notification)
        return notification

    async def _fan_out(
        self,
        recipients: Iterable[User],
        message: str,
        notification_type: NotificationType,
        related_entity_id: Optional[uuid.UUID],
        related_entity_type: Optional[str],
    ) -> List[Notification]:
        """Create one notification per recipient and commit them together."""
        created = []
        try:
            for recipient in recipients:
                notification = await self.create_notification(
                    recipient,
                    message,
                    notification_type,
                    related_entity_id=related_entity_id,
                    related_entity_type=related_entity_type,
                )
                if notification is not None:
                    created.append(notification)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            error = NotificationDeliveryFailed(notification_type.value, original_error=e)
            logger.error(f"{error.message}: {e}", exc_info=True)
            return []

        logger.info(f"Sent {len(created)} {notification_type.value} notification(s)")
        return created

    async def _users_by_ids(self, user_ids: Iterable[uuid.UUID]) -> List[User]:
        ids = {uid for uid in user_ids if uid is not None}
        if not ids:
            return []
        result = await self.db.execute(
            select(User).where(User.id.in_(ids)).where(User.is_active == True)
        )
        return list(result.scalars().all())

    async def get_admins(self) -> List[User]:
        result = await self.db.execute(
            select(User)
            .where(User.role.in_(list(ADMIN_ROLES)))
            .where(User.is_active == True)
        )
        return list(result.scalars().all())

    async def get_company_users_with_roles(
        self,
        company_id: Optional[uuid.UUID],
        roles: Iterable[UserRole],
    ) -> List[User]:
        roles = list(roles)
        if company_id is None or not roles:
            return []
        result = await self.db.execute(
            select(User)
            .where(User.company_id == company_id)
            .where(User.role.in_(roles))
            .where(User.is_active == True)
        )
        return list(result.scalars().all())

    # ===========================================
    # WORKFLOW NOTIFICATIONS
    # ===========================================

    async def notify_admins(
        self,
        message: str,
        notification_type: NotificationType,
        related_entity_id: Optional[uuid.UUID] = None,
        related_entity_type: Optional[str] = None,
    ) -> List[Notification]:
        """Notify every active admin."""
        try:
            admins = await self.get_admins()
        except Exception as e:
            logger.error(f"Failed to load admins for {notification_type.value}: {e}", exc_info=True)
            return []
        return await self._fan_out(admins, message, notification_type, related_entity_id, related_entity_type)

    async def notify_admins_payment_request(
        self,
        artisan_name: str,
        amount: Decimal,
        payment_request_id: uuid.UUID,
    ) -> List[Notification]:
        """Tell admins a payment request is waiting for approval."""
        return await self.notify_admins(
            message=f"{artisan_name} has submitted a payment request for {format_amount(amount)}",
            notification_type=NotificationType.PAYMENT_REQUEST_CREATED,
            related_entity_id=payment_request_id,
            related_entity_type="PAYMENT_REQUEST",
        )

    async def notify_quotation_status_changed(self, event: QuotationStatusChanged) -> List[Notification]:
        """
        Fan a quotation status change out to everyone on the other side of it.

        Recipients: the assigned artisan, the quotation's creator, managers of
        the same company who act on the new status, and all admins. The actor
        never notifies themselves.
        """
        status_text = humanize_status(event.new_status)
        if event.new_status == QuotationStatus.REJECTED and event.rejection_reason:
            message = f"Quotation {event.quote_number} was rejected: {event.rejection_reason}"
            owner_type = NotificationType.QUOTATION_REJECTED
        else:
            message = f"Quotation {event.quote_number} status updated to {status_text}"
            owner_type = NotificationType.QUOTATION_STATUS_UPDATED

        try:
            owners = await self._users_by_ids([event.assigned_to_id, event.created_by_id])
            reviewers = await self.get_company_users_with_roles(event.company_id, event.reviewer_roles)
            admins = await self.get_admins()
        except Exception as e:
            logger.error(f"Failed to resolve recipients for quotation {event.quote_number}: {e}", exc_info=True)
            return []

        seen = {event.actor_id}
        owner_recipients, reviewer_recipients, admin_recipients = [], [], []
        for bucket, users in (
            (owner_recipients, owners),
            (reviewer_recipients, reviewers),
            (admin_recipients, admins),
        ):
            for user in users:
                if user.id not in seen:
                    seen.add(user.id)
                    bucket.append(user)

        created = []
        created += await self._fan_out(
            owner_recipients, message, owner_type, event.quotation_id, "QUOTATION",
        )
        created += await self._fan_out(
            reviewer_recipients,
            f"Quotation {event.quote_number} is waiting for your review ({status_text})",
            NotificationType.QUOTATION_REVIEW_REQUIRED,
            event.quotation_id,
            "QUOTATION",
        )
        created += await self._fan_out(
            admin_recipients, message, NotificationType.QUOTATION_STATUS_UPDATED, event.quotation_id, "QUOTATION",
        )
        return created

    async def notify_quotation_assigned(self, quotation: Quotation) -> List[Notification]:
        try:
            assignees = await self._users_by_ids([quotation.assigned_to_id])
        except Exception as e:
            logger.error(f"Failed to load assignee for quotation {quotation.quote_number}: {e}", exc_info=True)
            return []
        return await self._fan_out(
            assignees,
            f"Quotation {quotation.quote_number} for {quotation.customer_name} has been assigned to you",
            NotificationType.QUOTATION_ASSIGNED,
            quotation.id,
            "QUOTATION",
        )

    async def notify_rfq_quoted(self, rfq: PropertyManagerRFQ, quotation: Quotation) -> List[Notification]:
        """Tell the property manager a quotation arrived for their RFQ."""
        try:
            managers = await self._users_by_ids([rfq.property_manager_id])
        except Exception as e:
            logger.error(f"Failed to load property manager for RFQ {rfq.rfq_number}: {e}", exc_info=True)
            return []
        return await self._fan_out(
            managers,
            f"Quotation {quotation.quote_number} has been received for your RFQ {rfq.rfq_number}",
            NotificationType.RFQ_QUOTED,
            rfq.id,
            "RFQ",
        )

    # ===========================================
    # INBOX
    # ===========================================

    async def get_user_notifications(
        self,
        user_id: uuid.UUID,
        unread_only: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Notification], int]:
        """
        Get notifications for a user.

        Returns:
            Tuple of (notifications, total_count)
        """
        query = select(Notification).where(Notification.recipient_id == user_id)
        count_query = select(func.count(Notification.id)).where(Notification.recipient_id == user_id)
        if unread_only:
            query = query.where(Notification.is_read == False)
            count_query = count_query.where(Notification.is_read == False)

        total = (await self.db.execute(count_query)).scalar() or 0

        result = await self.db.execute(
            query.order_by(Notification.created_at.desc()).limit(limit).offset(offset)
        )
        return list(result.scalars().all()), total

    async def get_unread_count(self, user_id: uuid.UUID) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id))
            .where(Notification.recipient_id == user_id)
            .where(Notification.is_read == False)
        )
        return result.scalar() or 0

    async def mark_as_read(self, notification_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Notification]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.id == notification_id)
            .where(Notification.recipient_id == user_id)
        )
        notification = result.scalar_one_or_none()
        if notification is None:
            return None
        notification.mark_as_read()
        await self.db.commit()
        return notification

    async def mark_all_as_read(self, user_id: uuid.UUID) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(Notification.recipient_id == user_id)
            .where(Notification.is_read == False)
            .values(is_read=True, read_at=datetime.now(timezone.utc))
        )
        await self.db.commit()
        return result.rowcount

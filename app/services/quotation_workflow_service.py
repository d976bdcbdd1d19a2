"""
Square 15 - Quotation Workflow Service

Validates and applies quotation status changes.

Flow for a transition:
1. Load the quotation and compare against the status the caller saw
2. Check the (status, role) pair against the transition table
3. Enforce a rejection reason when rejecting
4. Write status and side data with an UPDATE guarded on the status read in 1
5. Commit, then run side effects (RFQ update, notifications) that may fail
   without undoing the transition
"""

import uuid
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, func, update, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.quotation import Quotation, QuotationExpenseSlip, QuotationStatus
from app.models.rfq import PropertyManagerRFQ, RFQStatus, OPEN_RFQ_STATUSES
from app.models.user import User, UserRole
from app.schemas.quotation import QuotationCosting, QuotationCreateRequest
from app.services.notification_service import NotificationService, QuotationStatusChanged
from app.services.sequence_service import SequenceService
from app.services.status_transitions import allowed_transitions, is_terminal, reviewers_for
from app.utils.error_handling import (
    AuthorizationException,
    ConcurrentTransitionException,
    InvalidTransitionException,
    MissingRejectionReasonException,
    QuotationNotFoundException,
    UserNotFoundException,
)

logger = logging.getLogger(__name__)


MANAGER_REVIEW_STATUSES = frozenset({
    QuotationStatus.PENDING_JUNIOR_MANAGER_REVIEW,
    QuotationStatus.PENDING_SENIOR_MANAGER_REVIEW,
})

MONEY = Decimal("0.01")


def _role_name(role) -> str:
    return role.value if isinstance(role, UserRole) else str(role)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def compute_costing(
    quotation: Quotation,
    target_status: QuotationStatus,
    costing: Optional[QuotationCosting],
    now: datetime,
) -> Tuple[Dict[str, Any], Optional[List[QuotationExpenseSlip]]]:
    """
    Column values and replacement expense slips for a transition.

    Returns (values, slips); slips is None when the existing slips stay.
    An empty slip list counts as no slips.
    """
    values: Dict[str, Any] = {}
    slips = None

    if target_status == QuotationStatus.IN_PROGRESS:
        if costing is not None and costing.before_pictures:
            values["before_pictures"] = list(costing.before_pictures)
            values["start_time"] = now
        return values, slips

    if target_status not in MANAGER_REVIEW_STATUSES:
        return values, slips

    values["end_time"] = now
    if costing is None:
        return values, slips

    if costing.line_items is not None:
        values["line_items"] = costing.line_items
    for field in ("num_people_needed", "estimated_duration", "duration_unit", "labour_rate"):
        value = getattr(costing, field)
        if value is not None:
            values[field] = value

    material_cost = None
    if costing.expense_slips:
        slips = [
            QuotationExpenseSlip(
                url=slip.url,
                category=slip.category,
                description=slip.description,
                amount=slip.amount,
            )
            for slip in costing.expense_slips
        ]
        material_cost = sum((slip.amount or Decimal("0")) for slip in costing.expense_slips)
    elif costing.material_cost is not None:
        material_cost = costing.material_cost
    if material_cost is not None:
        values["company_material_cost"] = Decimal(material_cost).quantize(MONEY)

    labour_cost = None
    if (
        costing.num_people_needed is not None
        and costing.estimated_duration is not None
        and costing.labour_rate is not None
    ):
        labour_cost = (
            Decimal(costing.num_people_needed) * costing.estimated_duration * costing.labour_rate
        ).quantize(MONEY)
        values["company_labour_cost"] = labour_cost

    if material_cost is None:
        material_cost = quotation.company_material_cost
    if labour_cost is None:
        labour_cost = quotation.company_labour_cost
    if material_cost is not None and labour_cost is not None:
        values["estimated_profit"] = (
            Decimal(quotation.total or 0) - (Decimal(material_cost) + Decimal(labour_cost))
        ).quantize(MONEY)

    return values, slips


class QuotationWorkflowService:
    """Service for the quotation review workflow."""

    def __init__(self, db: AsyncSession, notifier: Optional[NotificationService] = None):
        self.db = db
        self.notifier = notifier or NotificationService(db)

    # ===========================================
    # QUERIES
    # ===========================================

    async def get_quotation(self, quotation_id: uuid.UUID, refresh: bool = False) -> Quotation:
        query = select(Quotation).where(Quotation.id == quotation_id)
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        quotation = result.scalar_one_or_none()
        if quotation is None:
            raise QuotationNotFoundException(quotation_id)
        return quotation

    def can_view(self, quotation: Quotation, actor: User) -> bool:
        """Same visibility rule as list_quotations."""
        if actor.is_admin:
            return True
        if actor.company_id is not None:
            return quotation.company_id == actor.company_id
        return actor.id in (quotation.assigned_to_id, quotation.created_by_id)

    async def get_visible_quotation(
        self, quotation_id: uuid.UUID, actor: User, refresh: bool = False
    ) -> Quotation:
        """get_quotation for actor; quotations outside their scope are reported as missing."""
        quotation = await self.get_quotation(quotation_id, refresh=refresh)
        if not self.can_view(quotation, actor):
            logger.warning(
                f"User {actor.id} denied access to quotation {quotation_id} "
                f"of company {quotation.company_id}"
            )
            raise QuotationNotFoundException(quotation_id)
        return quotation

    async def list_quotations(
        self,
        actor: User,
        status: Optional[QuotationStatus] = None,
        assigned_to_id: Optional[uuid.UUID] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Quotation], int]:
        """
        List quotations visible to the actor.

        Admins see every quotation. Everyone else sees their company's
        quotations, or only their own when they have no company.
        """
        query = select(Quotation)
        count_query = select(func.count(Quotation.id))

        filters = []
        if not actor.is_admin:
            if actor.company_id is not None:
                filters.append(Quotation.company_id == actor.company_id)
            else:
                filters.append(or_(
                    Quotation.assigned_to_id == actor.id,
                    Quotation.created_by_id == actor.id,
                ))
        if status is not None:
            filters.append(Quotation.status == status)
        if assigned_to_id is not None:
            filters.append(Quotation.assigned_to_id == assigned_to_id)

        for condition in filters:
            query = query.where(condition)
            count_query = count_query.where(condition)

        total = (await self.db.execute(count_query)).scalar() or 0
        result = await self.db.execute(
            query.order_by(Quotation.created_at.desc()).limit(limit).offset(offset)
        )
        return list(result.scalars().all()), total

    def get_allowed_transitions(self, quotation: Quotation, actor: User) -> List[QuotationStatus]:
        """Targets the actor may pick for this quotation, in workflow order."""
        allowed = allowed_transitions(quotation.status, actor.role)
        return [status for status in QuotationStatus if status in allowed]

    # ===========================================
    # COMMANDS
    # ===========================================

    async def create_quotation(self, data: QuotationCreateRequest, actor: User) -> Quotation:
        """Create a DRAFT quotation owned by the actor's company."""
        if not actor.is_contractor_side:
            raise AuthorizationException(
                message="Only contractor staff can create quotations",
                required_role=UserRole.CONTRACTOR.value,
            )

        if data.assigned_to_id is not None:
            assignee = await self.db.get(User, data.assigned_to_id)
            if assignee is None:
                raise UserNotFoundException(data.assigned_to_id)

        quote_number = await SequenceService(self.db).next_quotation_number()
        quotation = Quotation(
            quote_number=quote_number,
            status=QuotationStatus.DRAFT,
            company_id=actor.company_id,
            assigned_to_id=data.assigned_to_id,
            created_by_id=actor.id,
            updated_by_id=actor.id,
            customer_name=data.customer_name,
            customer_email=data.customer_email,
            address=data.address,
            description=data.description,
            subtotal=data.subtotal,
            tax=data.tax,
            total=data.total,
        )
        self.db.add(quotation)
        await self.db.commit()

        logger.info(f"Quotation {quote_number} created by {actor.id}")

        quotation_id = quotation.id
        quotation = await self.get_quotation(quotation_id, refresh=True)
        if quotation.assigned_to_id is not None and quotation.assigned_to_id != actor.id:
            await self.notifier.notify_quotation_assigned(quotation)
            # A failed notification rolls back and expires loaded instances
            quotation = await self.get_quotation(quotation_id, refresh=True)
        return quotation

    async def apply_transition(
        self,
        quotation_id: uuid.UUID,
        requested_status: QuotationStatus,
        actor: User,
        rejection_reason: Optional[str] = None,
        expected_status: Optional[QuotationStatus] = None,
        costing: Optional[QuotationCosting] = None,
    ) -> Quotation:
        """
        Move a quotation to requested_status on behalf of actor.

        Raises:
            QuotationNotFoundException: no such quotation, or not visible to actor
            ConcurrentTransitionException: status differs from expected_status,
                or changed between read and write
            InvalidTransitionException: (status, role) does not allow the target
            MissingRejectionReasonException: rejecting without a reason
        """
        quotation = await self.get_visible_quotation(quotation_id, actor, refresh=True)
        current_status = quotation.status

        if expected_status is not None and expected_status != current_status:
            raise ConcurrentTransitionException(
                quotation.id,
                expected_status.value,
                current_status.value,
            )

        allowed = allowed_transitions(current_status, actor.role)
        if requested_status not in allowed:
            logger.warning(
                f"Rejected transition of {quotation.quote_number} "
                f"{current_status.value} -> {requested_status.value} by role {_role_name(actor.role)}"
            )
            raise InvalidTransitionException(
                current_status=current_status.value,
                requested_status=requested_status.value,
                role=_role_name(actor.role),
                allowed=[status.value for status in allowed],
            )

        now = _utcnow()
        values: Dict[str, Any] = {
            "status": requested_status,
            "updated_by_id": actor.id,
        }
        if requested_status == QuotationStatus.REJECTED:
            reason = (rejection_reason or "").strip()
            if not reason:
                raise MissingRejectionReasonException()
            values["rejection_reason"] = reason

        side_values, slips = compute_costing(quotation, requested_status, costing, now)
        values.update(side_values)

        try:
            result = await self.db.execute(
                update(Quotation)
                .where(Quotation.id == quotation.id)
                .where(Quotation.status == current_status)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise ConcurrentTransitionException(quotation.id, current_status.value)

            if slips is not None:
                quotation.expense_slips = slips

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"Quotation {quotation.quote_number}: {current_status.value} -> "
            f"{requested_status.value} by {actor.id}"
        )

        quotation = await self.get_quotation(quotation.id, refresh=True)

        if requested_status == QuotationStatus.SENT_TO_CUSTOMER and quotation.customer_email:
            await self._mark_rfq_received(quotation)

        await self.notifier.notify_quotation_status_changed(
            QuotationStatusChanged.from_quotation(
                quotation,
                previous_status=current_status,
                actor_id=actor.id,
                reviewer_roles=reviewers_for(requested_status),
            )
        )
        # Side effects may have rolled back the session
        return await self.get_quotation(quotation_id, refresh=True)

    async def _mark_rfq_received(self, quotation: Quotation) -> Optional[PropertyManagerRFQ]:
        """
        Flag the customer's newest open RFQ as RECEIVED.

        Runs after the transition committed, so failures are logged only.
        """
        try:
            result = await self.db.execute(
                select(PropertyManagerRFQ)
                .join(User, PropertyManagerRFQ.property_manager_id == User.id)
                .where(func.lower(User.email) == quotation.customer_email.lower())
                .where(User.role == UserRole.PROPERTY_MANAGER)
                .where(PropertyManagerRFQ.status.in_(OPEN_RFQ_STATUSES))
                .order_by(PropertyManagerRFQ.created_at.desc())
                .limit(1)
            )
            rfq = result.scalar_one_or_none()
            if rfq is None:
                return None

            rfq.status = RFQStatus.RECEIVED
            rfq.quoted_date = _utcnow()
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(
                f"Failed to update RFQ for quotation {quotation.quote_number}: {e}",
                exc_info=True,
            )
            return None

        logger.info(f"RFQ {rfq.rfq_number} marked RECEIVED by quotation {quotation.quote_number}")
        await self.notifier.notify_rfq_quoted(rfq, quotation)
        return rfq

    def is_terminal(self, quotation: Quotation) -> bool:
        return is_terminal(quotation.status)

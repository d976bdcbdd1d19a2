"""
Square 15 - Quotation Workflow Tests

Tests for QuotationWorkflowService:
- Role-gated transitions and the full review ladder
- Rejection reasons
- Optimistic concurrency
- Costing side data
- RFQ side effect and notification fan-out
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from sqlalchemy import select, update

from app.models.notification import Notification, NotificationType
from app.models.quotation import DurationUnit, ExpenseSlipCategory, Quotation, QuotationStatus
from app.models.rfq import PropertyManagerRFQ, RFQStatus
from app.models.user import UserRole
from app.schemas.quotation import ExpenseSlipInput, QuotationCosting, QuotationCreateRequest
from app.services.notification_service import NotificationService
from app.services.quotation_workflow_service import QuotationWorkflowService
from app.utils.error_handling import (
    AuthorizationException,
    ConcurrentTransitionException,
    ErrorCode,
    InvalidTransitionException,
    MissingRejectionReasonException,
    QuotationNotFoundException,
)
from tests.conftest import COMPANY_ID, OTHER_COMPANY_ID, create_user


S = QuotationStatus


async def walk(service, quotation_id, steps):
    """Apply (status, actor) steps in order and return the final quotation."""
    quotation = None
    for status, actor in steps:
        quotation = await service.apply_transition(quotation_id, status, actor)
    return quotation


async def notifications_for(db, recipient_id):
    result = await db.execute(select(Notification).where(Notification.recipient_id == recipient_id))
    return list(result.scalars().all())


class TestApplyTransition:
    """Status changes through the engine."""

    @pytest.mark.asyncio
    async def test_full_review_ladder(self, db_session, quotation, artisan, junior_manager, senior_manager):
        service = QuotationWorkflowService(db_session)

        result = await walk(service, quotation.id, [
            (S.PENDING_ARTISAN_REVIEW, artisan),
            (S.IN_PROGRESS, artisan),
            (S.PENDING_JUNIOR_MANAGER_REVIEW, artisan),
            (S.PENDING_SENIOR_MANAGER_REVIEW, junior_manager),
            (S.APPROVED, senior_manager),
            (S.SENT_TO_CUSTOMER, artisan),
        ])

        assert result.status == S.SENT_TO_CUSTOMER
        assert result.updated_by_id == artisan.id
        assert service.get_allowed_transitions(result, senior_manager) == []

    @pytest.mark.asyncio
    async def test_invalid_transition_leaves_status_unchanged(self, db_session, quotation, contractor):
        service = QuotationWorkflowService(db_session)

        with pytest.raises(InvalidTransitionException) as exc_info:
            await service.apply_transition(quotation.id, S.APPROVED, contractor)

        assert exc_info.value.code == ErrorCode.INVALID_TRANSITION
        assert exc_info.value.status_code == 422
        assert exc_info.value.details["allowed_statuses"] == [S.PENDING_ARTISAN_REVIEW.value]

        reloaded = await service.get_quotation(quotation.id, refresh=True)
        assert reloaded.status == S.DRAFT

    @pytest.mark.asyncio
    async def test_artisan_cannot_review(self, db_session, quotation, artisan):
        service = QuotationWorkflowService(db_session)
        await walk(service, quotation.id, [
            (S.PENDING_ARTISAN_REVIEW, artisan),
            (S.IN_PROGRESS, artisan),
            (S.PENDING_JUNIOR_MANAGER_REVIEW, artisan),
        ])

        with pytest.raises(InvalidTransitionException):
            await service.apply_transition(quotation.id, S.PENDING_SENIOR_MANAGER_REVIEW, artisan)

    @pytest.mark.asyncio
    async def test_junior_manager_cannot_approve(self, db_session, quotation, artisan, junior_manager):
        service = QuotationWorkflowService(db_session)
        await walk(service, quotation.id, [
            (S.PENDING_ARTISAN_REVIEW, artisan),
            (S.IN_PROGRESS, artisan),
            (S.PENDING_JUNIOR_MANAGER_REVIEW, artisan),
            (S.PENDING_SENIOR_MANAGER_REVIEW, junior_manager),
        ])

        with pytest.raises(InvalidTransitionException):
            await service.apply_transition(quotation.id, S.APPROVED, junior_manager)

    @pytest.mark.asyncio
    async def test_terminal_status_rejects_everything(self, db_session, quotation, contractor):
        await db_session.execute(
            update(Quotation).where(Quotation.id == quotation.id).values(status=S.SENT_TO_CUSTOMER)
        )
        await db_session.commit()
        service = QuotationWorkflowService(db_session)

        for target in QuotationStatus:
            with pytest.raises(InvalidTransitionException):
                await service.apply_transition(quotation.id, target, contractor)

    @pytest.mark.asyncio
    async def test_missing_quotation(self, db_session, artisan):
        service = QuotationWorkflowService(db_session)

        with pytest.raises(QuotationNotFoundException) as exc_info:
            await service.apply_transition(uuid4(), S.PENDING_ARTISAN_REVIEW, artisan)

        assert exc_info.value.status_code == 404


class TestCompanyScope:
    """Quotations are only visible within their company."""

    @pytest.mark.asyncio
    async def test_other_company_cannot_transition(self, db_session, quotation):
        quotation_id = quotation.id
        outsider = await create_user(
            db_session, UserRole.CONTRACTOR, "owner@otherbuilders.co.za", company_id=OTHER_COMPANY_ID,
        )
        service = QuotationWorkflowService(db_session)

        with pytest.raises(QuotationNotFoundException):
            await service.apply_transition(quotation_id, S.PENDING_ARTISAN_REVIEW, outsider)

        reloaded = await service.get_quotation(quotation_id, refresh=True)
        assert reloaded.status == S.DRAFT

    @pytest.mark.asyncio
    async def test_admin_can_view_any_company(self, db_session, quotation, admin):
        service = QuotationWorkflowService(db_session)

        found = await service.get_visible_quotation(quotation.id, admin)

        assert found.company_id == COMPANY_ID

    @pytest.mark.asyncio
    async def test_companyless_user_sees_only_own_quotations(self, db_session, quotation, artisan):
        loner = await create_user(db_session, UserRole.ARTISAN, "loner@builders.co.za", company_id=None)
        service = QuotationWorkflowService(db_session)

        assert service.can_view(quotation, loner) is False
        quotation.assigned_to_id = loner.id
        assert service.can_view(quotation, loner) is True


class TestRejection:
    """Rejection requires a reason and the reason is kept."""

    async def _to_junior_review(self, service, quotation, artisan):
        await walk(service, quotation.id, [
            (S.PENDING_ARTISAN_REVIEW, artisan),
            (S.IN_PROGRESS, artisan),
            (S.PENDING_JUNIOR_MANAGER_REVIEW, artisan),
        ])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("review_status,reviewer", [
        (S.PENDING_JUNIOR_MANAGER_REVIEW, "junior_manager"),
        (S.PENDING_SENIOR_MANAGER_REVIEW, "senior_manager"),
        (S.PENDING_SENIOR_MANAGER_REVIEW, "contractor"),
    ])
    @pytest.mark.parametrize("reason", [None, "", "   \n\t"])
    async def test_blank_reason_is_refused(
        self, request, db_session, quotation, artisan, junior_manager, senior_manager, review_status, reviewer, reason,
    ):
        quotation_id = quotation.id
        actor = request.getfixturevalue(reviewer)
        service = QuotationWorkflowService(db_session)
        await self._to_junior_review(service, quotation, artisan)
        if review_status == S.PENDING_SENIOR_MANAGER_REVIEW:
            await service.apply_transition(quotation_id, S.PENDING_SENIOR_MANAGER_REVIEW, junior_manager)

        with pytest.raises(MissingRejectionReasonException) as exc_info:
            await service.apply_transition(
                quotation_id, S.REJECTED, actor, rejection_reason=reason,
            )

        assert exc_info.value.code == ErrorCode.MISSING_REJECTION_REASON
        reloaded = await service.get_quotation(quotation_id, refresh=True)
        assert reloaded.status == review_status
        assert reloaded.rejection_reason is None

    @pytest.mark.asyncio
    async def test_rejection_cycle_keeps_reason(self, db_session, quotation, artisan, junior_manager):
        service = QuotationWorkflowService(db_session)
        await self._to_junior_review(service, quotation, artisan)

        rejected = await service.apply_transition(
            quotation.id, S.REJECTED, junior_manager, rejection_reason="  Labour estimate too high  ",
        )
        assert rejected.status == S.REJECTED
        assert rejected.rejection_reason == "Labour estimate too high"

        redrafted = await service.apply_transition(quotation.id, S.DRAFT, artisan)
        assert redrafted.status == S.DRAFT
        assert redrafted.rejection_reason == "Labour estimate too high"

        resubmitted = await service.apply_transition(quotation.id, S.PENDING_ARTISAN_REVIEW, artisan)
        assert resubmitted.status == S.PENDING_ARTISAN_REVIEW

    @pytest.mark.asyncio
    async def test_reason_ignored_for_other_targets(self, db_session, quotation, artisan):
        service = QuotationWorkflowService(db_session)

        result = await service.apply_transition(
            quotation.id, S.PENDING_ARTISAN_REVIEW, artisan, rejection_reason="not a rejection",
        )

        assert result.rejection_reason is None


class TestConcurrency:
    """Optimistic concurrency on the status column."""

    @pytest.mark.asyncio
    async def test_expected_status_mismatch(self, db_session, quotation, artisan):
        service = QuotationWorkflowService(db_session)
        await service.apply_transition(quotation.id, S.PENDING_ARTISAN_REVIEW, artisan)

        with pytest.raises(ConcurrentTransitionException) as exc_info:
            await service.apply_transition(
                quotation.id, S.PENDING_ARTISAN_REVIEW, artisan, expected_status=S.DRAFT,
            )

        assert exc_info.value.status_code == 409
        assert exc_info.value.code == ErrorCode.VERSION_CONFLICT
        assert exc_info.value.details["actual_status"] == S.PENDING_ARTISAN_REVIEW.value

    @pytest.mark.asyncio
    async def test_expected_status_match(self, db_session, quotation, artisan):
        service = QuotationWorkflowService(db_session)

        result = await service.apply_transition(
            quotation.id, S.PENDING_ARTISAN_REVIEW, artisan, expected_status=S.DRAFT,
        )

        assert result.status == S.PENDING_ARTISAN_REVIEW

    @pytest.mark.asyncio
    async def test_status_changed_between_read_and_write(self, db_session, quotation, artisan):
        """A concurrent writer moved the row after it was read; the guarded update misses."""
        quotation_id = quotation.id
        service = QuotationWorkflowService(db_session)
        stale = await service.get_quotation(quotation_id, refresh=True)

        await db_session.execute(
            update(Quotation)
            .where(Quotation.id == quotation_id)
            .values(status=S.PENDING_ARTISAN_REVIEW)
            .execution_options(synchronize_session=False)
        )
        await db_session.commit()
        assert stale.status == S.DRAFT

        with patch.object(service, "get_quotation", AsyncMock(return_value=stale)):
            with pytest.raises(ConcurrentTransitionException):
                await service.apply_transition(quotation_id, S.PENDING_ARTISAN_REVIEW, artisan)

        reloaded = await QuotationWorkflowService(db_session).get_quotation(quotation_id, refresh=True)
        assert reloaded.status == S.PENDING_ARTISAN_REVIEW


class TestCosting:
    """Side data captured with transitions."""

    @pytest.mark.asyncio
    async def test_before_pictures_start_the_job(self, db_session, quotation, artisan):
        service = QuotationWorkflowService(db_session)
        await service.apply_transition(quotation.id, S.PENDING_ARTISAN_REVIEW, artisan)

        result = await service.apply_transition(
            quotation.id, S.IN_PROGRESS, artisan,
            costing=QuotationCosting(before_pictures=["https://cdn.example/lobby-1.jpg"]),
        )

        assert result.before_pictures == ["https://cdn.example/lobby-1.jpg"]
        assert result.start_time is not None

    @pytest.mark.asyncio
    async def test_submission_computes_costs(self, db_session, quotation, artisan):
        service = QuotationWorkflowService(db_session)
        await walk(service, quotation.id, [
            (S.PENDING_ARTISAN_REVIEW, artisan),
            (S.IN_PROGRESS, artisan),
        ])

        result = await service.apply_transition(
            quotation.id, S.PENDING_JUNIOR_MANAGER_REVIEW, artisan,
            costing=QuotationCosting(
                line_items=[{"description": "Paint", "quantity": 10, "unit_price": 350}],
                num_people_needed=2,
                estimated_duration=Decimal("3"),
                duration_unit=DurationUnit.DAILY,
                labour_rate=Decimal("800.00"),
                expense_slips=[
                    ExpenseSlipInput(url="https://cdn.example/slip-1.pdf", category=ExpenseSlipCategory.MATERIALS, amount=Decimal("2500.00")),
                    ExpenseSlipInput(url="https://cdn.example/slip-2.pdf", category=ExpenseSlipCategory.TRANSPORTATION, amount=Decimal("300.00")),
                ],
            ),
        )

        assert result.end_time is not None
        assert result.company_material_cost == Decimal("2800.00")
        assert result.company_labour_cost == Decimal("4800.00")
        assert result.estimated_profit == Decimal("11500.00") - Decimal("7600.00")
        assert result.duration_unit == DurationUnit.DAILY
        assert len(result.expense_slips) == 2

    @pytest.mark.asyncio
    async def test_material_cost_used_without_slips(self, db_session, quotation, artisan):
        service = QuotationWorkflowService(db_session)
        await walk(service, quotation.id, [
            (S.PENDING_ARTISAN_REVIEW, artisan),
            (S.IN_PROGRESS, artisan),
        ])

        result = await service.apply_transition(
            quotation.id, S.PENDING_JUNIOR_MANAGER_REVIEW, artisan,
            costing=QuotationCosting(material_cost=Decimal("1000.00")),
        )

        assert result.company_material_cost == Decimal("1000.00")
        assert result.company_labour_cost is None
        assert result.estimated_profit is None

    @pytest.mark.asyncio
    async def test_resubmission_replaces_slips(self, db_session, quotation, artisan, junior_manager):
        service = QuotationWorkflowService(db_session)
        first_slips = QuotationCosting(expense_slips=[
            ExpenseSlipInput(url="https://cdn.example/a.pdf", category=ExpenseSlipCategory.MATERIALS, amount=Decimal("100")),
            ExpenseSlipInput(url="https://cdn.example/b.pdf", category=ExpenseSlipCategory.TOOLS, amount=Decimal("200")),
        ])
        await walk(service, quotation.id, [
            (S.PENDING_ARTISAN_REVIEW, artisan),
            (S.IN_PROGRESS, artisan),
        ])
        await service.apply_transition(quotation.id, S.PENDING_JUNIOR_MANAGER_REVIEW, artisan, costing=first_slips)
        await service.apply_transition(quotation.id, S.IN_PROGRESS, junior_manager)

        result = await service.apply_transition(
            quotation.id, S.PENDING_JUNIOR_MANAGER_REVIEW, artisan,
            costing=QuotationCosting(expense_slips=[
                ExpenseSlipInput(url="https://cdn.example/c.pdf", category=ExpenseSlipCategory.OTHER, amount=Decimal("50")),
            ]),
        )

        assert [slip.url for slip in result.expense_slips] == ["https://cdn.example/c.pdf"]
        assert result.company_material_cost == Decimal("50.00")

    @pytest.mark.asyncio
    async def test_empty_slip_list_falls_back_to_material_cost(self, db_session, quotation, artisan, junior_manager):
        service = QuotationWorkflowService(db_session)
        await walk(service, quotation.id, [
            (S.PENDING_ARTISAN_REVIEW, artisan),
            (S.IN_PROGRESS, artisan),
        ])
        await service.apply_transition(
            quotation.id, S.PENDING_JUNIOR_MANAGER_REVIEW, artisan,
            costing=QuotationCosting(expense_slips=[
                ExpenseSlipInput(url="https://cdn.example/a.pdf", category=ExpenseSlipCategory.MATERIALS, amount=Decimal("100")),
            ]),
        )
        await service.apply_transition(quotation.id, S.IN_PROGRESS, junior_manager)

        result = await service.apply_transition(
            quotation.id, S.PENDING_JUNIOR_MANAGER_REVIEW, artisan,
            costing=QuotationCosting(expense_slips=[], material_cost=Decimal("500.00")),
        )

        assert result.company_material_cost == Decimal("500.00")
        assert [slip.url for slip in result.expense_slips] == ["https://cdn.example/a.pdf"]

    @pytest.mark.asyncio
    async def test_totals_preserved(self, db_session, quotation, artisan):
        service = QuotationWorkflowService(db_session)

        result = await service.apply_transition(quotation.id, S.PENDING_ARTISAN_REVIEW, artisan)

        assert result.subtotal == Decimal("10000.00")
        assert result.tax == Decimal("1500.00")
        assert result.total == Decimal("11500.00")


class TestRFQSideEffect:
    """Sending a quotation to the customer updates their open RFQ."""

    async def _send(self, service, quotation, artisan, junior_manager, senior_manager):
        return await walk(service, quotation.id, [
            (S.PENDING_ARTISAN_REVIEW, artisan),
            (S.IN_PROGRESS, artisan),
            (S.PENDING_JUNIOR_MANAGER_REVIEW, artisan),
            (S.PENDING_SENIOR_MANAGER_REVIEW, junior_manager),
            (S.APPROVED, senior_manager),
            (S.SENT_TO_CUSTOMER, artisan),
        ])

    @pytest.mark.asyncio
    async def test_newest_open_rfq_marked_received(
        self, db_session, quotation, artisan, junior_manager, senior_manager, property_manager,
    ):
        now = datetime.now(timezone.utc)
        older = PropertyManagerRFQ(
            rfq_number="RFQ-00001", property_manager_id=property_manager.id, title="Lobby",
            status=RFQStatus.SUBMITTED, created_at=now - timedelta(days=5),
        )
        newer = PropertyManagerRFQ(
            rfq_number="RFQ-00002", property_manager_id=property_manager.id, title="Lobby repaint",
            status=RFQStatus.UNDER_REVIEW, created_at=now - timedelta(days=1),
        )
        closed = PropertyManagerRFQ(
            rfq_number="RFQ-00003", property_manager_id=property_manager.id, title="Roof",
            status=RFQStatus.APPROVED, created_at=now,
        )
        db_session.add_all([older, newer, closed])
        await db_session.commit()

        service = QuotationWorkflowService(db_session)
        await self._send(service, quotation, artisan, junior_manager, senior_manager)

        result = await db_session.execute(
            select(PropertyManagerRFQ)
            .order_by(PropertyManagerRFQ.rfq_number)
            .execution_options(populate_existing=True)
        )
        rfqs = {rfq.rfq_number: rfq for rfq in result.scalars().all()}
        assert rfqs["RFQ-00002"].status == RFQStatus.RECEIVED
        assert rfqs["RFQ-00002"].quoted_date is not None
        assert rfqs["RFQ-00001"].status == RFQStatus.SUBMITTED
        assert rfqs["RFQ-00003"].status == RFQStatus.APPROVED

        pm_notifications = await notifications_for(db_session, property_manager.id)
        assert [n.notification_type for n in pm_notifications] == [NotificationType.RFQ_QUOTED]

    @pytest.mark.asyncio
    async def test_no_matching_rfq_is_fine(self, db_session, quotation, artisan, junior_manager, senior_manager):
        service = QuotationWorkflowService(db_session)

        result = await self._send(service, quotation, artisan, junior_manager, senior_manager)

        assert result.status == S.SENT_TO_CUSTOMER


class TestNotifications:
    """Fan-out after a committed transition."""

    @pytest.mark.asyncio
    async def test_submission_notifies_everyone_but_the_actor(
        self, db_session, quotation, admin, contractor, senior_manager, junior_manager, artisan,
    ):
        outsider = await create_user(
            db_session, UserRole.CONTRACTOR_JUNIOR_MANAGER, "junior@otherbuilders.co.za",
            company_id=OTHER_COMPANY_ID,
        )
        service = QuotationWorkflowService(db_session)
        await walk(service, quotation.id, [
            (S.PENDING_ARTISAN_REVIEW, artisan),
            (S.IN_PROGRESS, artisan),
        ])
        await db_session.execute(Notification.__table__.delete())
        await db_session.commit()

        await service.apply_transition(quotation.id, S.PENDING_JUNIOR_MANAGER_REVIEW, artisan)

        assert await notifications_for(db_session, artisan.id) == []
        assert await notifications_for(db_session, outsider.id) == []

        creator = await notifications_for(db_session, contractor.id)
        assert len(creator) == 1
        assert creator[0].notification_type == NotificationType.QUOTATION_STATUS_UPDATED
        assert "PENDING JUNIOR MANAGER REVIEW" in creator[0].message

        for reviewer in (junior_manager, senior_manager):
            received = await notifications_for(db_session, reviewer.id)
            assert [n.notification_type for n in received] == [NotificationType.QUOTATION_REVIEW_REQUIRED]
            assert received[0].recipient_role == reviewer.role.value

        admin_notes = await notifications_for(db_session, admin.id)
        assert len(admin_notes) == 1
        assert admin_notes[0].related_entity_id == quotation.id

    @pytest.mark.asyncio
    async def test_rejection_notification_carries_reason(self, db_session, quotation, artisan, junior_manager):
        service = QuotationWorkflowService(db_session)
        await walk(service, quotation.id, [
            (S.PENDING_ARTISAN_REVIEW, artisan),
            (S.IN_PROGRESS, artisan),
            (S.PENDING_JUNIOR_MANAGER_REVIEW, artisan),
        ])

        await service.apply_transition(
            quotation.id, S.REJECTED, junior_manager, rejection_reason="Missing slips",
        )

        received = await notifications_for(db_session, artisan.id)
        rejected = [n for n in received if n.notification_type == NotificationType.QUOTATION_REJECTED]
        assert len(rejected) == 1
        assert "Missing slips" in rejected[0].message

    @pytest.mark.asyncio
    async def test_disabled_notification_type_is_respected(self, db_session, quotation, artisan):
        admin = await create_user(
            db_session, UserRole.SENIOR_ADMIN, "quiet-admin@square15.co.za", company_id=None,
            disabled_notification_types=[NotificationType.QUOTATION_STATUS_UPDATED.value],
        )
        service = QuotationWorkflowService(db_session)

        await service.apply_transition(quotation.id, S.PENDING_ARTISAN_REVIEW, artisan)

        assert await notifications_for(db_session, admin.id) == []

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_undo_transition(self, db_session, quotation, artisan, admin):
        quotation_id, admin_id = quotation.id, admin.id
        notifier = NotificationService(db_session)
        service = QuotationWorkflowService(db_session, notifier=notifier)

        with patch.object(notifier, "create_notification", AsyncMock(side_effect=RuntimeError("smtp down"))):
            result = await service.apply_transition(quotation_id, S.PENDING_ARTISAN_REVIEW, artisan)

        assert result.status == S.PENDING_ARTISAN_REVIEW
        assert await notifications_for(db_session, admin_id) == []


class TestCreateQuotation:
    """Draft creation and numbering."""

    @pytest.mark.asyncio
    async def test_creates_numbered_drafts(self, db_session, contractor, artisan):
        service = QuotationWorkflowService(db_session)
        data = QuotationCreateRequest(
            customer_name="Priya Manager",
            customer_email="pm@estates.co.za",
            assigned_to_id=artisan.id,
            total=Decimal("5000.00"),
        )

        first = await service.create_quotation(data, contractor)
        second = await service.create_quotation(data, contractor)

        assert first.status == S.DRAFT
        assert first.quote_number == "QUO-00001"
        assert second.quote_number == "QUO-00002"
        assert first.company_id == COMPANY_ID
        assert first.created_by_id == contractor.id

        assigned = await notifications_for(db_session, artisan.id)
        assert [n.notification_type for n in assigned] == [
            NotificationType.QUOTATION_ASSIGNED,
            NotificationType.QUOTATION_ASSIGNED,
        ]

    @pytest.mark.asyncio
    async def test_client_side_cannot_create(self, db_session, property_manager):
        service = QuotationWorkflowService(db_session)

        with pytest.raises(AuthorizationException):
            await service.create_quotation(QuotationCreateRequest(customer_name="Someone"), property_manager)

    @pytest.mark.asyncio
    async def test_list_is_scoped_to_company(self, db_session, quotation, contractor, admin):
        outsider = await create_user(
            db_session, UserRole.CONTRACTOR, "owner@otherbuilders.co.za", company_id=OTHER_COMPANY_ID,
        )
        service = QuotationWorkflowService(db_session)

        own, own_total = await service.list_quotations(contractor)
        other, other_total = await service.list_quotations(outsider)
        everything, everything_total = await service.list_quotations(admin)

        assert own_total == 1 and own[0].id == quotation.id
        assert other_total == 0 and other == []
        assert everything_total == 1

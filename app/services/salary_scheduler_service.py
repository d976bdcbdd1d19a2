"""
Square 15 - Monthly Salary Scheduler

Daily sweep that raises one PENDING salary payment request per salaried
employee per calendar month.

Employees are due when their monthly_payment_day is today. On the last day
of a month, employees whose payment day does not exist in that month
(e.g. 31 in April, 29-31 in a non-leap February) are due as well, so
nobody is skipped in short months.

Each employee is handled in its own transaction. A failure for one
employee is logged and the sweep moves on to the next.
"""

import calendar
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from sqlalchemy import select, or_, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.payment_request import (
    PaymentRequest,
    PaymentRequestSource,
    PaymentRequestStatus,
    period_key_for,
)
from app.models.user import User
from app.services.notification_service import NotificationService
from app.services.sequence_service import SequenceService
from app.utils.error_handling import EmployeePaymentCreationFailed, NotificationDeliveryFailed

logger = logging.getLogger(__name__)


def scheduler_today() -> date:
    """Current date in the scheduler's timezone."""
    return datetime.now(ZoneInfo(settings.scheduler_timezone)).date()


def last_day_of_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def month_bounds(day: date) -> Tuple[datetime, datetime]:
    """First and last instant of the month containing day, in the scheduler timezone."""
    tz = ZoneInfo(settings.scheduler_timezone)
    start = datetime.combine(day.replace(day=1), time.min, tzinfo=tz)
    end = datetime.combine(day.replace(day=last_day_of_month(day)), time.max, tzinfo=tz)
    return start, end


def is_payment_due(payment_day: int, today: date) -> bool:
    """True when an employee paid on payment_day should be paid today."""
    if payment_day == today.day:
        return True
    last_day = last_day_of_month(today)
    return today.day == last_day and payment_day > last_day


def build_salary_notes(today: date, payment_day: int) -> str:
    month_label = f"{calendar.month_name[today.month]} {today.year}"
    return (
        f"{settings.monthly_salary_marker} for {month_label}. "
        f"Scheduled payment day: {payment_day}"
    )


@dataclass
class SalaryCandidate:
    """Employee row selected by the sweep."""
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    monthly_salary: Decimal
    monthly_payment_day: int

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass
class CreatedSalaryPayment:
    payment_request_id: uuid.UUID
    request_number: str
    employee_id: uuid.UUID
    amount: Decimal


@dataclass
class SweepResult:
    """Outcome of one sweep."""
    run_date: date
    candidates: int = 0
    created: List[CreatedSalaryPayment] = field(default_factory=list)
    skipped: List[uuid.UUID] = field(default_factory=list)
    failed: Dict[uuid.UUID, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_date": self.run_date.isoformat(),
            "candidates": self.candidates,
            "created": [
                {
                    "payment_request_id": str(item.payment_request_id),
                    "request_number": item.request_number,
                    "employee_id": str(item.employee_id),
                    "amount": str(item.amount),
                }
                for item in self.created
            ],
            "skipped": [str(employee_id) for employee_id in self.skipped],
            "failed": {str(employee_id): error for employee_id, error in self.failed.items()},
        }


class SalarySchedulerService:
    """Creates monthly salary payment requests."""

    def __init__(
        self,
        db: AsyncSession,
        notifier: Optional[NotificationService] = None,
        clock: Optional[Callable[[], date]] = None,
    ):
        self.db = db
        self.notifier = notifier or NotificationService(db)
        self.clock = clock or scheduler_today

    async def get_due_employees(self, today: date) -> List[SalaryCandidate]:
        """Active salaried employees whose payment falls on today."""
        last_day = last_day_of_month(today)
        day_filter = User.monthly_payment_day == today.day
        if today.day == last_day:
            day_filter = or_(day_filter, User.monthly_payment_day > last_day)

        result = await self.db.execute(
            select(
                User.id,
                User.first_name,
                User.last_name,
                User.email,
                User.monthly_salary,
                User.monthly_payment_day,
            )
            .where(User.monthly_salary.isnot(None))
            .where(User.monthly_payment_day.isnot(None))
            .where(User.is_active == True)
            .where(day_filter)
            .order_by(User.last_name, User.first_name)
        )
        return [SalaryCandidate(*row) for row in result.all()]

    async def has_salary_request(self, employee_id: uuid.UUID, today: date) -> bool:
        """
        True when the employee already has a salary request for today's month.

        Matches the structured period marker, and also requests created this
        month whose notes carry the salary marker text.
        """
        start, end = month_bounds(today)
        result = await self.db.execute(
            select(PaymentRequest.id)
            .where(PaymentRequest.artisan_id == employee_id)
            .where(or_(
                and_(
                    PaymentRequest.source_type == PaymentRequestSource.MONTHLY_SALARY,
                    PaymentRequest.period_key == period_key_for(today),
                ),
                and_(
                    PaymentRequest.created_at >= start,
                    PaymentRequest.created_at <= end,
                    PaymentRequest.notes.contains(settings.monthly_salary_marker),
                ),
            ))
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def create_salary_request(self, employee: SalaryCandidate, today: date) -> CreatedSalaryPayment:
        request_number = await SequenceService(self.db).next_payment_request_number()
        payment_request = PaymentRequest(
            request_number=request_number,
            artisan_id=employee.id,
            order_ids=[],
            calculated_amount=employee.monthly_salary,
            notes=build_salary_notes(today, employee.monthly_payment_day),
            status=PaymentRequestStatus.PENDING,
            source_type=PaymentRequestSource.MONTHLY_SALARY,
            period_key=period_key_for(today),
        )
        self.db.add(payment_request)
        await self.db.commit()

        return CreatedSalaryPayment(
            payment_request_id=payment_request.id,
            request_number=request_number,
            employee_id=employee.id,
            amount=employee.monthly_salary,
        )

    async def run_daily_salary_sweep(self, today: Optional[date] = None) -> SweepResult:
        """
        Run the sweep for today (defaults to the injected clock).

        Never raises for a single employee; see SweepResult.failed.
        """
        today = today or self.clock()
        result = SweepResult(run_date=today)

        logger.info(f"Checking for monthly salary payments due on {today.isoformat()}")
        employees = await self.get_due_employees(today)
        result.candidates = len(employees)
        logger.info(f"Found {len(employees)} employees due for monthly salary payment")

        for employee in employees:
            await self._process_employee(employee, today, result)

        logger.info(
            f"Monthly salary sweep for {today.isoformat()} completed: "
            f"{len(result.created)} created, {len(result.skipped)} skipped, {len(result.failed)} failed"
        )
        return result

    async def _process_employee(self, employee: SalaryCandidate, today: date, result: SweepResult) -> None:
        try:
            if await self.has_salary_request(employee.id, today):
                logger.info(
                    f"Payment already exists for {employee.full_name} ({employee.email}) "
                    f"for {period_key_for(today)}"
                )
                result.skipped.append(employee.id)
                return

            created = await self.create_salary_request(employee, today)
        except IntegrityError as e:
            await self.db.rollback()
            # Another sweep may have created the same month's request first
            if await self._safe_has_salary_request(employee.id, today):
                logger.info(
                    f"Payment for {employee.full_name} ({employee.email}) was created by a concurrent run"
                )
                result.skipped.append(employee.id)
            else:
                self._record_failure(employee, e, result)
            return
        except Exception as e:
            await self.db.rollback()
            self._record_failure(employee, e, result)
            return

        result.created.append(created)
        logger.info(
            f"Created monthly salary payment request {created.request_number} for "
            f"{employee.full_name} ({employee.email}) - R{employee.monthly_salary}"
        )

        try:
            await self.notifier.notify_admins_payment_request(
                artisan_name=employee.full_name,
                amount=created.amount,
                payment_request_id=created.payment_request_id,
            )
        except Exception as e:
            error = NotificationDeliveryFailed("PAYMENT_REQUEST_CREATED", original_error=e)
            logger.error(f"{error.message} for {created.request_number}: {e}", exc_info=True)

    async def _safe_has_salary_request(self, employee_id: uuid.UUID, today: date) -> bool:
        try:
            return await self.has_salary_request(employee_id, today)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to re-check salary request for {employee_id}: {e}", exc_info=True)
            return False

    def _record_failure(self, employee: SalaryCandidate, error: Exception, result: SweepResult) -> None:
        failure = EmployeePaymentCreationFailed(employee.id, original_error=error)
        result.failed[employee.id] = str(error)
        logger.error(f"{failure.message} ({employee.email}): {error}", exc_info=True)

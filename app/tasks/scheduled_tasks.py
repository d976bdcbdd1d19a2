"""
Square 15 - Background Tasks

Task definitions that can be run either directly (for development and
the CLI script) or via Celery (for production).
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.services.salary_scheduler_service import SalarySchedulerService

logger = logging.getLogger(__name__)


# ===========================================
# SCHEDULED TASK: MONTHLY SALARY PAYMENTS
# ===========================================

async def create_monthly_salary_payments(db: AsyncSession, today: Optional[date] = None) -> dict:
    """
    Create salary payment requests for employees due today.
    Should run once a day; repeated runs on the same day create nothing new.
    """
    service = SalarySchedulerService(db)
    result = await service.run_daily_salary_sweep(today)
    return result.to_dict()


# ===========================================
# TASK RUNNER (for development without Celery)
# ===========================================

class TaskRunner:
    """
    Simple task runner for development.
    In production, replace with Celery.
    """

    def __init__(self, db_session_factory):
        self.db_session_factory = db_session_factory

    async def run_task(self, task_func, *args, **kwargs):
        """Run a single task with a new database session."""
        async with self.db_session_factory() as db:
            try:
                result = await task_func(db, *args, **kwargs)
                logger.info(f"Task {task_func.__name__} completed: {result}")
                return result
            except Exception as e:
                logger.error(f"Task {task_func.__name__} failed: {e}")
                raise

    async def run_scheduled_tasks(self, today: Optional[date] = None):
        """Run all daily tasks (for development/testing)."""
        results = {}

        tasks = [
            ("create_monthly_salary_payments", create_monthly_salary_payments),
        ]

        for name, task_func in tasks:
            try:
                result = await self.run_task(task_func, today=today)
                results[name] = {"status": "success", "result": result}
            except Exception as e:
                results[name] = {"status": "error", "error": str(e)}

        return results

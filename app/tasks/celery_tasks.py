"""
Square 15 - Celery Tasks

Background tasks for scheduled operations.
"""

import asyncio
import logging
from datetime import date
from typing import Any, Dict, Optional

from celery import shared_task

from app.database import async_session_factory, engine
from app.tasks.scheduled_tasks import create_monthly_salary_payments

logger = logging.getLogger(__name__)


def run_async(coro):
    """Helper to run async functions in Celery tasks."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


# ===========================================
# PAYROLL TASKS
# ===========================================

@shared_task(name='app.tasks.celery_tasks.run_monthly_salary_sweep_task')
def run_monthly_salary_sweep_task(run_date: Optional[str] = None) -> Dict[str, Any]:
    """
    Create this month's salary payment requests for employees due today.

    run_date (YYYY-MM-DD) overrides today for catch-up runs.
    """
    today = date.fromisoformat(run_date) if run_date else None
    return run_async(_run_monthly_salary_sweep(today))


async def _run_monthly_salary_sweep(today: Optional[date]) -> Dict[str, Any]:
    """Async implementation of the salary sweep task."""
    try:
        async with async_session_factory() as db:
            result = await create_monthly_salary_payments(db, today=today)
    finally:
        # Pooled connections are bound to this task's event loop
        await engine.dispose()

    logger.info(
        f"Monthly salary sweep task finished: {len(result['created'])} created, "
        f"{len(result['skipped'])} skipped, {len(result['failed'])} failed"
    )
    return result

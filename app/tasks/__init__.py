"""
Square 15 - Background Tasks Package

Celery background tasks.
"""

from app.tasks.scheduled_tasks import (
    create_monthly_salary_payments,
    TaskRunner,
)

__all__ = [
    "create_monthly_salary_payments",
    "TaskRunner",
]

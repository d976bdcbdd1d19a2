"""
Square 15 - Services Package

Business logic services.
"""

from app.services.notification_service import NotificationService
from app.services.sequence_service import SequenceService
from app.services.quotation_workflow_service import QuotationWorkflowService
from app.services.salary_scheduler_service import SalarySchedulerService, SweepResult

__all__ = [
    "NotificationService",
    "SequenceService",
    "QuotationWorkflowService",
    "SalarySchedulerService",
    "SweepResult",
]

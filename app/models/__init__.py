"""
Square 15 - SQLAlchemy Models Package

This package contains all database models for the application.
"""

from app.models.base import BaseModel, TimestampMixin, AuditMixin
from app.models.user import User, UserRole, ADMIN_ROLES, CONTRACTOR_SIDE_ROLES
from app.models.quotation import (
    Quotation,
    QuotationExpenseSlip,
    QuotationStatus,
    DurationUnit,
    ExpenseSlipCategory,
)
from app.models.rfq import PropertyManagerRFQ, RFQStatus, OPEN_RFQ_STATUSES
from app.models.payment_request import (
    PaymentRequest,
    PaymentRequestStatus,
    PaymentRequestSource,
    period_key_for,
)
from app.models.notification import Notification, NotificationType
from app.models.sequence import SequenceCounter

__all__ = [
    # Base
    "BaseModel",
    "TimestampMixin",
    "AuditMixin",
    # Users
    "User",
    "UserRole",
    "ADMIN_ROLES",
    "CONTRACTOR_SIDE_ROLES",
    # Quotations
    "Quotation",
    "QuotationExpenseSlip",
    "QuotationStatus",
    "DurationUnit",
    "ExpenseSlipCategory",
    # RFQs
    "PropertyManagerRFQ",
    "RFQStatus",
    "OPEN_RFQ_STATUSES",
    # Payment requests
    "PaymentRequest",
    "PaymentRequestStatus",
    "PaymentRequestSource",
    "period_key_for",
    # Notifications
    "Notification",
    "NotificationType",
    # Sequences
    "SequenceCounter",
]

"""
Square 15 - Schemas Package

Pydantic schemas for request/response validation.
"""

from app.schemas.quotation import (
    QuotationCreateRequest,
    QuotationCosting,
    ExpenseSlipInput,
    QuotationStatusUpdateRequest,
    QuotationResponse,
    QuotationListResponse,
    AllowedTransitionsResponse,
)
from app.schemas.payment_request import (
    SalarySweepRequest,
    PaymentRequestResponse,
    PaymentRequestListResponse,
    SalarySweepResponse,
)

__all__ = [
    # Quotations
    "QuotationCreateRequest",
    "QuotationCosting",
    "ExpenseSlipInput",
    "QuotationStatusUpdateRequest",
    "QuotationResponse",
    "QuotationListResponse",
    "AllowedTransitionsResponse",
    # Payment requests
    "SalarySweepRequest",
    "PaymentRequestResponse",
    "PaymentRequestListResponse",
    "SalarySweepResponse",
]

"""
Square 15 - Error Handling

Application exceptions and the FastAPI handlers that render them.

Every error leaves the API as
{"detail": {"code", "message", "timestamp", "field"?, "details"?}}.

Workflow errors (invalid transition, missing rejection reason, status
conflict) reach the client. Salary sweep and notification failures are
built only to be logged; the sweep and the notifier swallow them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Union
from uuid import UUID
import logging

from fastapi import FastAPI, Request, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import (
    SQLAlchemyError,
    IntegrityError,
    OperationalError,
    DataError,
)
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("square15.errors")


class ErrorCode(str, Enum):
    """Standardized error codes for the application"""

    # Request validation (422)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"

    # Auth (401/403)
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    TOKEN_INVALID = "TOKEN_INVALID"

    # Lookups and conflicts (404/409)
    NOT_FOUND = "NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
    VERSION_CONFLICT = "VERSION_CONFLICT"

    # Quotation workflow (422)
    INVALID_TRANSITION = "INVALID_TRANSITION"
    MISSING_REJECTION_REASON = "MISSING_REJECTION_REASON"

    # Background job errors (logged, never returned to a user)
    PAYMENT_CREATION_FAILED = "PAYMENT_CREATION_FAILED"
    NOTIFICATION_FAILED = "NOTIFICATION_FAILED"

    # Database and internal (500)
    DATABASE_ERROR = "DATABASE_ERROR"
    DATA_INTEGRITY_ERROR = "DATA_INTEGRITY_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppException(Exception):
    """Base for every error this service raises on purpose."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        field: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.field = field
        self.original_error = original_error
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(code={self.code.value}, status={self.status_code})>"


# ============================================================================
# Request and Auth Exceptions
# ============================================================================

class ValidationException(AppException):
    """A request value the schema accepted but the workflow cannot."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            field=field,
        )


class AuthenticationException(AppException):
    """No usable bearer token, or the token's user is gone"""

    def __init__(
        self,
        message: str = "Authentication required",
        code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ):
        super().__init__(code=code, message=message, status_code=status.HTTP_401_UNAUTHORIZED)


class AuthorizationException(AppException):
    """The caller's role may not use this endpoint or action"""

    def __init__(
        self,
        message: str = "Permission denied",
        required_role: Optional[str] = None,
    ):
        super().__init__(
            code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details={"required_role": required_role} if required_role else None,
        )


# ============================================================================
# Lookup Exceptions
# ============================================================================

class NotFoundException(AppException):
    """Resource not found exception"""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[Union[str, UUID]] = None,
        code: ErrorCode = ErrorCode.NOT_FOUND,
    ):
        label = f"{resource_type} '{resource_id}'" if resource_id else resource_type
        super().__init__(
            code=code,
            message=f"{label} not found",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": str(resource_id) if resource_id else None},
        )


class QuotationNotFoundException(NotFoundException):
    def __init__(self, quotation_id: Union[str, UUID]):
        super().__init__("Quotation", quotation_id)


class UserNotFoundException(NotFoundException):
    def __init__(self, user_id: Union[str, UUID]):
        super().__init__("User", user_id, code=ErrorCode.USER_NOT_FOUND)


# ============================================================================
# Quotation Workflow Exceptions
# ============================================================================

class ConcurrentTransitionException(AppException):
    """
    The quotation's status is not the one the caller acted on.

    Raised both for a stale expected_status and when the guarded UPDATE
    matched no row.
    """

    def __init__(self, resource_id: Union[str, UUID], expected_status: str, actual_status: Optional[str] = None):
        details = {
            "resource_id": str(resource_id),
            "expected_status": expected_status,
        }
        if actual_status:
            details["actual_status"] = actual_status
        super().__init__(
            code=ErrorCode.VERSION_CONFLICT,
            message=(
                f"Quotation {resource_id} is no longer {expected_status}. "
                "Reload it and try again."
            ),
            status_code=status.HTTP_409_CONFLICT,
            details=details,
        )


class InvalidTransitionException(AppException):
    """The (status, role) pair does not allow the requested status"""

    def __init__(
        self,
        current_status: str,
        requested_status: str,
        role: str,
        allowed: Iterable[str] = (),
    ):
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=f"Role {role} cannot move a quotation from {current_status} to {requested_status}",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={
                "current_status": current_status,
                "requested_status": requested_status,
                "role": role,
                "allowed_statuses": sorted(allowed),
            },
        )


class MissingRejectionReasonException(ValidationException):
    def __init__(self):
        super().__init__(
            message="A rejection reason is required when rejecting a quotation",
            field="rejection_reason",
            code=ErrorCode.MISSING_REJECTION_REASON,
        )


# ============================================================================
# Log-only Exceptions
# ============================================================================

class EmployeePaymentCreationFailed(AppException):
    """Salary payment request could not be created for one employee"""

    def __init__(self, employee_id: Union[str, UUID], original_error: Optional[Exception] = None):
        super().__init__(
            code=ErrorCode.PAYMENT_CREATION_FAILED,
            message=f"Failed to create monthly salary payment request for employee {employee_id}",
            details={"employee_id": str(employee_id)},
            original_error=original_error,
        )


class NotificationDeliveryFailed(AppException):
    """Notification could not be stored"""

    def __init__(self, notification_type: str, original_error: Optional[Exception] = None):
        super().__init__(
            code=ErrorCode.NOTIFICATION_FAILED,
            message=f"Failed to deliver {notification_type} notification",
            details={"notification_type": notification_type},
            original_error=original_error,
        )


# ============================================================================
# Exception Handlers
# ============================================================================

HTTP_STATUS_CODES = {
    400: ErrorCode.INVALID_INPUT,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.RESOURCE_CONFLICT,
    422: ErrorCode.VALIDATION_ERROR,
}


def create_error_response(
    code: ErrorCode,
    message: str,
    status_code: int,
    details: Optional[Dict[str, Any]] = None,
    field: Optional[str] = None,
) -> JSONResponse:
    body: Dict[str, Any] = {
        "code": code.value,
        "message": message,
        "timestamp": datetime.utcnow().isoformat() + "Z",
    }
    if field:
        body["field"] = field
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content={"detail": body})


def _request_context(request: Request) -> Dict[str, str]:
    return {"path": request.url.path, "method": request.method}


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{exc.code.value} on {request.method} {request.url.path}: {exc.message}",
        extra={**_request_context(request), "details": exc.details},
        exc_info=exc.original_error,
    )
    return create_error_response(exc.code, exc.message, exc.status_code, exc.details, exc.field)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    logger.warning(f"HTTP {exc.status_code}: {message}", extra=_request_context(request))
    return create_error_response(
        HTTP_STATUS_CODES.get(exc.status_code, ErrorCode.INTERNAL_ERROR),
        message,
        exc.status_code,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Flatten pydantic errors into field/message pairs."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Request validation failed with {len(errors)} error(s)", extra=_request_context(request))
    return create_error_response(
        ErrorCode.VALIDATION_ERROR,
        "Request validation failed",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        details={"errors": errors},
    )


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """
    Translate database errors that escaped a service.

    Unique violations (a second salary request for the same month, a reused
    document number) become 409; everything else is a 500.
    """
    code, message, status_code = (
        ErrorCode.DATABASE_ERROR,
        "A database error occurred",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if isinstance(exc, IntegrityError):
        orig = str(exc.orig).lower() if exc.orig else ""
        if "unique" in orig or "duplicate" in orig:
            code, message, status_code = (
                ErrorCode.DUPLICATE_ENTRY,
                "A record with this value already exists",
                status.HTTP_409_CONFLICT,
            )
        else:
            code, message = ErrorCode.DATA_INTEGRITY_ERROR, "Data integrity constraint violated"
    elif isinstance(exc, DataError):
        code, message, status_code = (
            ErrorCode.INVALID_INPUT,
            "Invalid data format for database",
            status.HTTP_422_UNPROCESSABLE_ENTITY,
        )
    elif isinstance(exc, OperationalError):
        message = "Database unavailable"

    logger.error(f"{type(exc).__name__}: {exc}", extra=_request_context(request), exc_info=True)
    return create_error_response(code, message, status_code)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.critical(f"Unhandled {type(exc).__name__}: {exc}", extra=_request_context(request), exc_info=True)
    return create_error_response(
        ErrorCode.INTERNAL_ERROR,
        "An unexpected error occurred. Please try again later.",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application"""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "AppException",
    "ErrorCode",
    "ValidationException",
    "AuthenticationException",
    "AuthorizationException",
    "NotFoundException",
    "QuotationNotFoundException",
    "UserNotFoundException",
    "ConcurrentTransitionException",
    "InvalidTransitionException",
    "MissingRejectionReasonException",
    "EmployeePaymentCreationFailed",
    "NotificationDeliveryFailed",
    "setup_exception_handlers",
    "create_error_response",
]

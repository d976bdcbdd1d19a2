"""
Square 15 - Routers Package

FastAPI route handlers.

Routers:
- quotations: Quotation review workflow
- payment_requests: Payment requests and the monthly salary sweep
- notifications: In-app notifications
"""

from app.routers import (
    quotations,
    payment_requests,
    notifications,
)

__all__ = [
    "quotations",
    "payment_requests",
    "notifications",
]

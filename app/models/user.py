"""
Square 15 - User Model

Users are every actor on the platform: admins, contractors and their
managers, artisans (employees), property managers and customers.

Role groups:
1. Platform admins: ADMIN, SENIOR_ADMIN, JUNIOR_ADMIN
2. Contractor side: CONTRACTOR (company owner, full approval authority),
   CONTRACTOR_SENIOR_MANAGER, CONTRACTOR_JUNIOR_MANAGER, ARTISAN
3. Client side: PROPERTY_MANAGER, CUSTOMER

Employees on a monthly salary carry monthly_salary and monthly_payment_day;
the daily salary sweep reads both.
"""

import uuid
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    JSON,
    Numeric,
    SmallInteger,
    String,
    Uuid,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class UserRole(str, Enum):
    """Platform roles."""
    ADMIN = "ADMIN"
    SENIOR_ADMIN = "SENIOR_ADMIN"
    JUNIOR_ADMIN = "JUNIOR_ADMIN"
    CONTRACTOR = "CONTRACTOR"
    CONTRACTOR_SENIOR_MANAGER = "CONTRACTOR_SENIOR_MANAGER"
    CONTRACTOR_JUNIOR_MANAGER = "CONTRACTOR_JUNIOR_MANAGER"
    ARTISAN = "ARTISAN"
    PROPERTY_MANAGER = "PROPERTY_MANAGER"
    CUSTOMER = "CUSTOMER"


ADMIN_ROLES = frozenset({
    UserRole.ADMIN,
    UserRole.SENIOR_ADMIN,
    UserRole.JUNIOR_ADMIN,
})

CONTRACTOR_SIDE_ROLES = frozenset({
    UserRole.CONTRACTOR,
    UserRole.CONTRACTOR_SENIOR_MANAGER,
    UserRole.CONTRACTOR_JUNIOR_MANAGER,
    UserRole.ARTISAN,
})


class User(BaseModel):
    """
    User model.

    company_id groups contractor staff under their contractor's company so
    manager notifications stay inside one tenant.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "monthly_payment_day IS NULL OR (monthly_payment_day BETWEEN 1 AND 31)",
            name="monthly_payment_day_range",
        ),
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole, name="user_role"),
        default=UserRole.CUSTOMER,
        nullable=False,
        index=True,
    )
    company_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Monthly salary configuration
    monthly_salary: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(14, 2),
        nullable=True,
    )
    monthly_payment_day: Mapped[Optional[int]] = mapped_column(
        SmallInteger,
        nullable=True,
    )

    # Notification type names this user opted out of
    disabled_notification_types: Mapped[List[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )

    @property
    def full_name(self) -> str:
        """Get user's full name."""
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def is_contractor_side(self) -> bool:
        return self.role in CONTRACTOR_SIDE_ROLES

"""
Status Transition Tables

Declarative lookup of which statuses an actor may move an entity into.

Each table maps a status to a TransitionRule: the reachable targets plus,
optionally, the roles allowed to act from that status. Roles outside the
gate get no transitions at all from a gated status. Lookups are total:
unknown statuses and unknown roles answer with an empty set.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Generic, Iterable, Optional, TypeVar

from app.models.quotation import QuotationStatus
from app.models.user import UserRole

S = TypeVar("S", bound=Enum)

EMPTY: FrozenSet = frozenset()


@dataclass(frozen=True)
class TransitionRule(Generic[S]):
    """Targets reachable from one status and who may take them."""
    targets: FrozenSet[S]
    allowed_roles: Optional[FrozenSet[UserRole]] = None

    def permits(self, role: Optional[UserRole]) -> bool:
        if self.allowed_roles is None:
            return True
        return role in self.allowed_roles


class TransitionTable(Generic[S]):
    """Lookup table of legal status transitions for one entity type."""

    def __init__(self, name: str, rules: Dict[S, TransitionRule[S]]):
        self.name = name
        self._rules = dict(rules)

    def allowed_transitions(self, current_status: S, actor_role: Optional[UserRole]) -> FrozenSet[S]:
        """Statuses actor_role may move an entity into from current_status."""
        rule = self._rules.get(current_status)
        if rule is None or not rule.permits(_coerce_role(actor_role)):
            return EMPTY
        return rule.targets

    def can_transition(self, current_status: S, requested_status: S, actor_role: Optional[UserRole]) -> bool:
        return requested_status in self.allowed_transitions(current_status, actor_role)

    def is_terminal(self, status: S) -> bool:
        """True when no role can move the entity out of status."""
        rule = self._rules.get(status)
        return rule is None or not rule.targets

    def statuses(self) -> Iterable[S]:
        return self._rules.keys()


def _coerce_role(role) -> Optional[UserRole]:
    if role is None or isinstance(role, UserRole):
        return role
    try:
        return UserRole(role)
    except ValueError:
        return None


# ===========================================
# QUOTATION WORKFLOW
# ===========================================

JUNIOR_REVIEWERS = frozenset({
    UserRole.CONTRACTOR_JUNIOR_MANAGER,
    UserRole.CONTRACTOR_SENIOR_MANAGER,
    UserRole.CONTRACTOR,
})

SENIOR_REVIEWERS = frozenset({
    UserRole.CONTRACTOR_SENIOR_MANAGER,
    UserRole.CONTRACTOR,
})

QUOTATION_TRANSITIONS: TransitionTable[QuotationStatus] = TransitionTable(
    "quotation",
    {
        QuotationStatus.DRAFT: TransitionRule(
            frozenset({QuotationStatus.PENDING_ARTISAN_REVIEW}),
        ),
        QuotationStatus.PENDING_ARTISAN_REVIEW: TransitionRule(
            frozenset({QuotationStatus.IN_PROGRESS, QuotationStatus.DRAFT}),
        ),
        QuotationStatus.IN_PROGRESS: TransitionRule(
            frozenset({
                QuotationStatus.PENDING_JUNIOR_MANAGER_REVIEW,
                QuotationStatus.PENDING_ARTISAN_REVIEW,
            }),
        ),
        QuotationStatus.PENDING_JUNIOR_MANAGER_REVIEW: TransitionRule(
            frozenset({
                QuotationStatus.PENDING_SENIOR_MANAGER_REVIEW,
                QuotationStatus.REJECTED,
                QuotationStatus.IN_PROGRESS,
            }),
            allowed_roles=JUNIOR_REVIEWERS,
        ),
        QuotationStatus.PENDING_SENIOR_MANAGER_REVIEW: TransitionRule(
            frozenset({
                QuotationStatus.APPROVED,
                QuotationStatus.REJECTED,
                QuotationStatus.PENDING_JUNIOR_MANAGER_REVIEW,
            }),
            allowed_roles=SENIOR_REVIEWERS,
        ),
        QuotationStatus.APPROVED: TransitionRule(
            frozenset({QuotationStatus.SENT_TO_CUSTOMER}),
        ),
        QuotationStatus.SENT_TO_CUSTOMER: TransitionRule(EMPTY),
        QuotationStatus.REJECTED: TransitionRule(
            frozenset({QuotationStatus.DRAFT}),
        ),
    },
)


def allowed_transitions(current_status: QuotationStatus, actor_role: Optional[UserRole]) -> FrozenSet[QuotationStatus]:
    """Quotation statuses actor_role may move a quotation into."""
    return QUOTATION_TRANSITIONS.allowed_transitions(current_status, actor_role)


def can_transition(
    current_status: QuotationStatus,
    requested_status: QuotationStatus,
    actor_role: Optional[UserRole],
) -> bool:
    return QUOTATION_TRANSITIONS.can_transition(current_status, requested_status, actor_role)


def is_terminal(status: QuotationStatus) -> bool:
    return QUOTATION_TRANSITIONS.is_terminal(status)


def reviewers_for(status: QuotationStatus) -> FrozenSet[UserRole]:
    """Roles that act on a quotation waiting in status; empty when ungated."""
    if status == QuotationStatus.PENDING_JUNIOR_MANAGER_REVIEW:
        return JUNIOR_REVIEWERS
    if status == QuotationStatus.PENDING_SENIOR_MANAGER_REVIEW:
        return SENIOR_REVIEWERS
    return EMPTY

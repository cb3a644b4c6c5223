"""
Error values.

Every failure in cartflow is one of these, returned inside a kungfu Result.
None of them is raised for control flow.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cartflow.orders._machine import StatusChange
    from cartflow.orders._types import OrderFlow, OrderStatus

# ═══════════════════════════════════════════════════════════════════════════════
# Caller Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ValidationError:
    """User-correctable input problem: empty cart, bad quantity, ..."""

    message: str
    field: str | None = None

    @property
    def code(self) -> str:
        return "VALIDATION"


@dataclass(frozen=True, slots=True)
class InvalidPaymentTiming(ValidationError):
    """Pay-later requested but nothing in the cart can be deferred."""

    @property
    def code(self) -> str:
        return "INVALID_PAYMENT_TIMING"


# ═══════════════════════════════════════════════════════════════════════════════
# Lifecycle Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class IllegalTransition:
    """Target status is not a direct successor within the order's flow."""

    flow: OrderFlow
    current: OrderStatus
    target: OrderStatus

    @property
    def code(self) -> str:
        return "ILLEGAL_TRANSITION"

    @property
    def message(self) -> str:
        return f"cannot move a {self.flow} order from {self.current} to {self.target}"


@dataclass(frozen=True, slots=True)
class Forbidden:
    """Ownership or cancellation window violated."""

    reason: str
    actor_id: str | None = None

    @property
    def code(self) -> str:
        return "FORBIDDEN"

    @property
    def message(self) -> str:
        return self.reason


# ═══════════════════════════════════════════════════════════════════════════════
# Data Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class TotalsMismatch:
    """Stored total disagrees with the recomputed one. A warning, not a failure."""

    order_id: str
    stored: Decimal
    computed: Decimal

    @property
    def difference(self) -> Decimal:
        return abs(self.stored - self.computed)

    @property
    def code(self) -> str:
        return "TOTALS_MISMATCH"

    @property
    def message(self) -> str:
        return (
            f"order {self.order_id}: stored total {self.stored} "
            f"differs from computed {self.computed}"
        )


@dataclass(frozen=True, slots=True)
class NotFound:
    """Absent, or not owned by the requesting buyer."""

    entity: str
    id: str

    @property
    def code(self) -> str:
        return "NOT_FOUND"

    @property
    def message(self) -> str:
        return f"{self.entity}:{self.id} not found"


@dataclass(frozen=True, slots=True)
class RepositoryFailure:
    """
    A collaborator raised.

    The cause is kept as-is; only the operation name is added.
    """

    operation: str
    cause: Exception

    @property
    def code(self) -> str:
        return "REPOSITORY_FAILURE"

    @property
    def message(self) -> str:
        return f"{self.operation} failed: {self.cause}"


@dataclass(frozen=True, slots=True)
class EventNotRecorded:
    """
    The status change was stored, its tracking event was not.

    change.order is the order as persisted. Calling advance() again with the
    same target records the missing event.
    """

    change: StatusChange
    failure: RepositoryFailure

    @property
    def code(self) -> str:
        return "EVENT_NOT_RECORDED"

    @property
    def message(self) -> str:
        return (
            f"order {self.change.order.id} moved to {self.change.order.status} "
            f"but its event was not recorded: {self.failure.message}"
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Unions
# ═══════════════════════════════════════════════════════════════════════════════

type TransitionError = IllegalTransition | Forbidden
type AdvanceError = (
    NotFound | IllegalTransition | Forbidden | RepositoryFailure | EventNotRecorded
)
type CheckoutError = ValidationError | RepositoryFailure


__all__ = (
    "ValidationError",
    "InvalidPaymentTiming",
    "IllegalTransition",
    "Forbidden",
    "TotalsMismatch",
    "NotFound",
    "RepositoryFailure",
    "EventNotRecorded",
    "TransitionError",
    "AdvanceError",
    "CheckoutError",
)

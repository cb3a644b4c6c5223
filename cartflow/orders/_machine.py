"""
Status machine — which status may follow which.

Pure: transition() never touches storage. It returns the next Order value
and the tracking event the caller must persist.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from types import MappingProxyType
from collections.abc import Mapping

from kungfu import Result, Ok, Error

from cartflow.errors import Forbidden, IllegalTransition, TransitionError
from cartflow.orders._types import (
    Actor,
    Order,
    OrderFlow,
    OrderStatus,
    Role,
    STATUS_INFO,
)

# ═══════════════════════════════════════════════════════════════════════════════
# Graph
# ═══════════════════════════════════════════════════════════════════════════════

INITIAL = OrderStatus.PENDING

TERMINAL: frozenset[OrderStatus] = frozenset({
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
    OrderStatus.COMPLETED,
})

_S = OrderStatus

SUCCESSORS: Mapping[OrderFlow, Mapping[OrderStatus, frozenset[OrderStatus]]] = MappingProxyType({
    OrderFlow.SHIPPING: MappingProxyType({
        _S.PENDING: frozenset({_S.CONFIRMED, _S.CANCELLED}),
        _S.CONFIRMED: frozenset({_S.PROCESSING}),
        _S.PROCESSING: frozenset({_S.SHIPPED}),
        _S.SHIPPED: frozenset({_S.DELIVERED}),
    }),
    OrderFlow.PAYMENT: MappingProxyType({
        _S.PENDING: frozenset({_S.AWAITING_PAYMENT, _S.CANCELLED}),
        _S.AWAITING_PAYMENT: frozenset({_S.COMPLETED}),
    }),
})


def successors(flow: OrderFlow, status: OrderStatus) -> frozenset[OrderStatus]:
    """Direct successors of status within flow. Empty for terminal states."""
    return SUCCESSORS[flow].get(status, frozenset())


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL


def can_transition(flow: OrderFlow, current: OrderStatus, target: OrderStatus) -> bool:
    return target in successors(flow, current)


# ═══════════════════════════════════════════════════════════════════════════════
# Transition
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StatusChange:
    """
    Outcome of a legal transition.

    event_type/description describe the tracking event to append.
    """

    order: Order
    previous: OrderStatus
    event_type: OrderStatus
    description: str


def _check_cancellation(order: Order, actor: Actor) -> Forbidden | None:
    if actor.role != Role.BUYER or actor.id != order.buyer_id:
        return Forbidden("Only the buyer can cancel this order", actor.id)
    if order.status != OrderStatus.PENDING:
        return Forbidden(
            "This order can no longer be cancelled here; please contact support",
            actor.id,
        )
    return None


def transition(
    order: Order,
    target: OrderStatus,
    actor: Actor,
) -> Result[StatusChange, TransitionError]:
    """
    Move order to target.

    Cancellation is the buyer's alone and only while pending (Forbidden
    otherwise). Any other target must be a direct successor within the
    order's flow (IllegalTransition otherwise).

    Example:
        match transition(order, OrderStatus.CONFIRMED, Actor.seller("s1")):
            case Ok(change):
                await orders.update_status(...)
                await tracking.append(order.id, change.event_type, change.description)
            case Error(e):
                show(e.message)
    """
    if target == OrderStatus.CANCELLED:
        refused = _check_cancellation(order, actor)
        if refused is not None:
            return Error(refused)

    if not can_transition(order.flow, order.status, target):
        return Error(IllegalTransition(order.flow, order.status, target))

    return Ok(StatusChange(
        order=replace(order, status=target),
        previous=order.status,
        event_type=target,
        description=STATUS_INFO[target].description,
    ))


__all__ = (
    "INITIAL",
    "TERMINAL",
    "SUCCESSORS",
    "successors",
    "is_terminal",
    "can_transition",
    "StatusChange",
    "transition",
)

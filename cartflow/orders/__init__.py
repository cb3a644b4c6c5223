"""
Orders — order values and their lifecycle.

    from cartflow import orders as O

    O.transition(order, O.OrderStatus.CONFIRMED, O.Actor.seller("s1"))   # pure
    await O.advance(orders_repo, tracking_repo, order.id, order.buyer_id,
                    O.OrderStatus.CONFIRMED, O.Actor.seller("s1"))       # persisted
"""

from __future__ import annotations

from cartflow.orders._types import (
    OrderStatus,
    StatusInfo,
    STATUS_INFO,
    OrderFlow,
    Role,
    Actor,
    OrderItem,
    OrderTotals,
    Order,
)
from cartflow.orders._machine import (
    INITIAL,
    TERMINAL,
    SUCCESSORS,
    successors,
    is_terminal,
    can_transition,
    StatusChange,
    transition,
)
from cartflow.orders._service import advance

__all__ = (
    # Types
    "OrderStatus",
    "StatusInfo",
    "STATUS_INFO",
    "OrderFlow",
    "Role",
    "Actor",
    "OrderItem",
    "OrderTotals",
    "Order",
    # Machine
    "INITIAL",
    "TERMINAL",
    "SUCCESSORS",
    "successors",
    "is_terminal",
    "can_transition",
    "StatusChange",
    "transition",
    # Service
    "advance",
)

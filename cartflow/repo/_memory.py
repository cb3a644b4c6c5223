"""
In-memory repositories.

Note: single process only. One asyncio.Lock per repository keeps
compare-and-swap honest between concurrent tasks; nothing survives a restart.
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from datetime import datetime, UTC
from typing import TYPE_CHECKING

from kungfu import Result, Ok, Error

from cartflow.cart._types import CartLine
from cartflow.errors import IllegalTransition, NotFound
from cartflow.orders._machine import INITIAL, can_transition
from cartflow.orders._types import Order, OrderFlow, OrderItem, OrderStatus, OrderTotals
from cartflow.repo._protocols import UpdateError
from cartflow.tracking._types import TrackingEvent

if TYPE_CHECKING:
    from cartflow.checkout import PaymentPlan

type Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(UTC)


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryCartRepository:
    """
    Cart held in a dict keyed by product_id.

    Lines come in through add(); set_quantity only changes quantities of
    products already in the cart.
    """

    def __init__(self, lines: Iterable[CartLine] = ()) -> None:
        self._lines: dict[str, CartLine] = {line.product_id: line for line in lines}

    def add(self, line: CartLine) -> None:
        self._lines[line.product_id] = line

    async def get_lines(self) -> list[CartLine]:
        return list(self._lines.values())

    async def set_quantity(self, product_id: str, quantity: int) -> None:
        line = self._lines.get(product_id)
        if line is None:
            raise KeyError(f"product {product_id} is not in the cart")
        self._lines[product_id] = replace(line, quantity=quantity)

    async def remove(self, product_id: str) -> None:
        self._lines.pop(product_id, None)

    async def clear(self) -> None:
        self._lines.clear()


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryOrderRepository:
    """
    Orders in a dict. Ids are sequential: ORD-0001, ORD-0002, ...

    Example:
        orders = MemoryOrderRepository()
        order = await orders.create("b1", items, plan, "12 Main St", "card")
        await orders.update_status(order.id, "b1", OrderStatus.CONFIRMED,
                                   expected=OrderStatus.PENDING)
    """

    def __init__(self, clock: Clock = utcnow) -> None:
        self._orders: dict[str, Order] = {}
        self._ids = itertools.count(1)
        self._clock = clock
        self._lock = asyncio.Lock()

    async def create(
        self,
        buyer_id: str,
        items: Sequence[OrderItem],
        plan: PaymentPlan,
        address: str,
        payment_method: str,
        *,
        flow: OrderFlow = OrderFlow.SHIPPING,
        shop_id: str | None = None,
    ) -> Order:
        async with self._lock:
            order = Order(
                id=f"ORD-{next(self._ids):04d}",
                buyer_id=buyer_id,
                status=INITIAL,
                items=tuple(items),
                created_at=self._clock(),
                payment_method=payment_method,
                delivery_address=address,
                totals=OrderTotals.from_plan(plan),
                has_on_order_items=plan.has_on_order_items,
                flow=flow,
                payment_timing=plan.timing,
                deposit_elected=plan.deposit_elected,
                shop_id=shop_id,
            )
            self._orders[order.id] = order
            return order

    def _owned(self, order_id: str, buyer_id: str) -> Order | None:
        order = self._orders.get(order_id)
        if order is None or order.buyer_id != buyer_id:
            return None
        return order

    async def fetch(self, order_id: str, buyer_id: str) -> Result[Order, NotFound]:
        async with self._lock:
            order = self._owned(order_id, buyer_id)
        if order is None:
            return Error(NotFound("order", order_id))
        return Ok(order)

    async def update_status(
        self,
        order_id: str,
        buyer_id: str,
        new_status: OrderStatus,
        *,
        expected: OrderStatus | None = None,
    ) -> Result[Order, UpdateError]:
        async with self._lock:
            order = self._owned(order_id, buyer_id)
            if order is None:
                return Error(NotFound("order", order_id))
            if expected is not None and order.status != expected:
                return Error(IllegalTransition(order.flow, order.status, new_status))
            if not can_transition(order.flow, order.status, new_status):
                return Error(IllegalTransition(order.flow, order.status, new_status))
            updated = replace(order, status=new_status)
            self._orders[order_id] = updated
            return Ok(updated)

    async def list_for_buyer(self, buyer_id: str) -> list[Order]:
        async with self._lock:
            owned = [o for o in self._orders.values() if o.buyer_id == buyer_id]
        # Insertion order breaks created_at ties, newest first.
        return sorted(reversed(owned), key=lambda o: o.created_at, reverse=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Tracking
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryTrackingEventRepository:
    def __init__(self, clock: Clock = utcnow) -> None:
        self._events: list[TrackingEvent] = []
        self._ids = itertools.count(1)
        self._clock = clock

    async def append(
        self,
        order_id: str,
        event_type: OrderStatus,
        description: str,
    ) -> TrackingEvent:
        event = TrackingEvent(
            id=f"EVT-{next(self._ids):04d}",
            order_id=order_id,
            event_type=event_type,
            description=description,
            occurred_at=self._clock(),
        )
        self._events.append(event)
        return event

    async def list_for(self, order_id: str) -> list[TrackingEvent]:
        events = [e for e in self._events if e.order_id == order_id]
        return sorted(events, key=lambda e: e.occurred_at)


__all__ = (
    "Clock",
    "utcnow",
    "MemoryCartRepository",
    "MemoryOrderRepository",
    "MemoryTrackingEventRepository",
)

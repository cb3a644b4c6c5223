"""
Repository protocols — what cartflow needs from storage.

Methods may raise; callers wrap them with cartflow.lift.guarded so an
exception becomes RepositoryFailure(operation). Expected outcomes (absent
order, lost race) come back as Result values instead.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, TYPE_CHECKING

from kungfu import Result

from cartflow.cart._types import CartLine
from cartflow.errors import Forbidden, IllegalTransition, NotFound
from cartflow.orders._types import Order, OrderFlow, OrderItem, OrderStatus
from cartflow.tracking._types import TrackingEvent

if TYPE_CHECKING:
    from cartflow.checkout import PaymentPlan

type UpdateError = NotFound | Forbidden | IllegalTransition


class CartRepository(Protocol):
    """One buyer's cart."""

    async def get_lines(self) -> list[CartLine]:
        ...

    async def set_quantity(self, product_id: str, quantity: int) -> None:
        ...

    async def remove(self, product_id: str) -> None:
        ...

    async def clear(self) -> None:
        ...


class OrderRepository(Protocol):
    """
    Order storage.

    Example — wiring the SQLAlchemy implementation:

        engine = create_async_engine("sqlite+aiosqlite:///shop.db")
        await create_schema(engine)
        orders = SQLAlchemyOrderRepository(async_sessionmaker(engine, expire_on_commit=False))
    """

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
        """Persist order and items atomically. Status starts at PENDING."""
        ...

    async def fetch(self, order_id: str, buyer_id: str) -> Result[Order, NotFound]:
        """NotFound when absent or owned by someone else."""
        ...

    async def update_status(
        self,
        order_id: str,
        buyer_id: str,
        new_status: OrderStatus,
        *,
        expected: OrderStatus | None = None,
    ) -> Result[Order, UpdateError]:
        """
        Set status.

        With expected, the write only happens if the stored status still
        equals it (compare-and-swap); otherwise IllegalTransition.
        """
        ...

    async def list_for_buyer(self, buyer_id: str) -> list[Order]:
        """Newest first."""
        ...


class TrackingEventRepository(Protocol):
    """Append-only tracking log."""

    async def append(
        self,
        order_id: str,
        event_type: OrderStatus,
        description: str,
    ) -> TrackingEvent:
        ...

    async def list_for(self, order_id: str) -> list[TrackingEvent]:
        """Ascending by occurred_at."""
        ...


__all__ = (
    "UpdateError",
    "CartRepository",
    "OrderRepository",
    "TrackingEventRepository",
)

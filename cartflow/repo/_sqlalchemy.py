"""
SQLAlchemy repositories — orders and tracking events over an async session.

Usage:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    await create_schema(engine)
    sessions = async_sessionmaker(engine, expire_on_commit=False)

    orders = SQLAlchemyOrderRepository(sessions)
    tracking = SQLAlchemyTrackingEventRepository(sessions)
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime, UTC
from decimal import Decimal
from typing import Any, TYPE_CHECKING, cast

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    TypeDecorator,
    select,
    update,
)
from sqlalchemy.engine import CursorResult, Dialect
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from kungfu import Result, Ok, Error

from cartflow._types import PaymentTiming
from cartflow.errors import IllegalTransition, NotFound
from cartflow.orders._machine import INITIAL, can_transition
from cartflow.orders._types import Order, OrderFlow, OrderItem, OrderStatus, OrderTotals
from cartflow.repo._memory import Clock, utcnow
from cartflow.repo._protocols import UpdateError
from cartflow.tracking._types import TrackingEvent

if TYPE_CHECKING:
    from cartflow.checkout import PaymentPlan


class MoneyText(TypeDecorator[Decimal]):
    """
    Decimal stored as its exact text.

    Values come back with the digits they were written with, at any scale.
    """

    impl = String
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: Dialect) -> str | None:
        return None if value is None else str(value)

    def process_result_value(self, value: str | None, dialect: Dialect) -> Decimal | None:
        return None if value is None else Decimal(value)


def _money() -> MoneyText:
    return MoneyText(64)


# ═══════════════════════════════════════════════════════════════════════════════
# Tables
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


class OrderTable(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    buyer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    shop_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    flow: Mapped[str] = mapped_column(String(16), nullable=False)

    payment_method: Mapped[str] = mapped_column(String(64), nullable=False)
    payment_timing: Mapped[str] = mapped_column(String(16), nullable=False)
    deposit_elected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    delivery_address: Mapped[str] = mapped_column(Text, nullable=False)
    has_on_order_items: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Totals as recorded at placement
    standard_total: Mapped[Decimal] = mapped_column(_money(), nullable=False)
    on_order_total: Mapped[Decimal] = mapped_column(_money(), nullable=False)
    shipping_fee: Mapped[Decimal] = mapped_column(_money(), nullable=False)
    tax: Mapped[Decimal] = mapped_column(_money(), nullable=False)
    discount: Mapped[Decimal] = mapped_column(_money(), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(_money(), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    items: Mapped[list[OrderItemTable]] = relationship(
        back_populates="order",
        order_by="OrderItemTable.position",
        lazy="selectin",
        cascade="all, delete-orphan",
    )


class OrderItemTable(Base):
    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    product_id: Mapped[str] = mapped_column(String(64), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(_money(), nullable=False)
    is_on_order: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    order: Mapped[OrderTable] = relationship(back_populates="items")


class TrackingEventTable(Base):
    __tablename__ = "order_tracking_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id"), nullable=False, index=True)
    event_type: Mapped[str] = mapped_column(String(32), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create all cartflow tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# ═══════════════════════════════════════════════════════════════════════════════
# Row mapping
# ═══════════════════════════════════════════════════════════════════════════════


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_order(row: OrderTable) -> Order:
    return Order(
        id=row.id,
        buyer_id=row.buyer_id,
        status=OrderStatus(row.status),
        items=tuple(
            OrderItem(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                is_on_order=item.is_on_order,
            )
            for item in row.items
        ),
        created_at=_aware(row.created_at),
        payment_method=row.payment_method,
        delivery_address=row.delivery_address,
        totals=OrderTotals(
            standard_total=row.standard_total,
            on_order_total=row.on_order_total,
            shipping_fee=row.shipping_fee,
            tax=row.tax,
            total_amount=row.total_amount,
            discount=row.discount,
        ),
        has_on_order_items=row.has_on_order_items,
        flow=OrderFlow(row.flow),
        payment_timing=PaymentTiming(row.payment_timing),
        deposit_elected=row.deposit_elected,
        shop_id=row.shop_id,
    )


def _to_event(row: TrackingEventTable) -> TrackingEvent:
    return TrackingEvent(
        id=str(row.id),
        order_id=row.order_id,
        event_type=OrderStatus(row.event_type),
        description=row.description,
        occurred_at=_aware(row.occurred_at),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyOrderRepository:
    """
    Orders backed by the orders / order_items tables.

    create() writes the order and its items in one transaction.
    update_status() is a conditional UPDATE on the status column, so two
    writers racing from the same status cannot both win.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Clock = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

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
        totals = OrderTotals.from_plan(plan)
        row = OrderTable(
            id=f"ORD-{uuid.uuid4().hex[:12].upper()}",
            buyer_id=buyer_id,
            shop_id=shop_id,
            status=str(INITIAL),
            flow=str(flow),
            payment_method=payment_method,
            payment_timing=str(plan.timing),
            deposit_elected=plan.deposit_elected,
            delivery_address=address,
            has_on_order_items=plan.has_on_order_items,
            standard_total=totals.standard_total,
            on_order_total=totals.on_order_total,
            shipping_fee=totals.shipping_fee,
            tax=totals.tax,
            discount=totals.discount,
            total_amount=totals.total_amount,
            created_at=self._clock(),
            items=[
                OrderItemTable(
                    position=position,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    is_on_order=item.is_on_order,
                )
                for position, item in enumerate(items)
            ],
        )
        async with self._session_factory() as session, session.begin():
            session.add(row)

        return Order(
            id=row.id,
            buyer_id=buyer_id,
            status=INITIAL,
            items=tuple(items),
            created_at=row.created_at,
            payment_method=payment_method,
            delivery_address=address,
            totals=totals,
            has_on_order_items=plan.has_on_order_items,
            flow=flow,
            payment_timing=plan.timing,
            deposit_elected=plan.deposit_elected,
            shop_id=shop_id,
        )

    @staticmethod
    async def _owned(session: AsyncSession, order_id: str, buyer_id: str) -> OrderTable | None:
        stmt = select(OrderTable).where(
            OrderTable.id == order_id,
            OrderTable.buyer_id == buyer_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def fetch(self, order_id: str, buyer_id: str) -> Result[Order, NotFound]:
        async with self._session_factory() as session:
            row = await self._owned(session, order_id, buyer_id)
            if row is None:
                return Error(NotFound("order", order_id))
            return Ok(_to_order(row))

    async def update_status(
        self,
        order_id: str,
        buyer_id: str,
        new_status: OrderStatus,
        *,
        expected: OrderStatus | None = None,
    ) -> Result[Order, UpdateError]:
        async with self._session_factory() as session, session.begin():
            row = await self._owned(session, order_id, buyer_id)
            if row is None:
                return Error(NotFound("order", order_id))

            order = _to_order(row)
            if expected is not None and order.status != expected:
                return Error(IllegalTransition(order.flow, order.status, new_status))
            if not can_transition(order.flow, order.status, new_status):
                return Error(IllegalTransition(order.flow, order.status, new_status))

            stmt = (
                update(OrderTable)
                .where(
                    OrderTable.id == order_id,
                    OrderTable.status == str(order.status),
                )
                .values(status=str(new_status))
                .execution_options(synchronize_session=False)
            )
            cursor = cast(CursorResult[Any], await session.execute(stmt))
            if cursor.rowcount == 0:
                # Someone else moved it between our read and write.
                return Error(IllegalTransition(order.flow, order.status, new_status))

        return Ok(replace(order, status=new_status))

    async def list_for_buyer(self, buyer_id: str) -> list[Order]:
        async with self._session_factory() as session:
            stmt = (
                select(OrderTable)
                .where(OrderTable.buyer_id == buyer_id)
                .order_by(OrderTable.created_at.desc())
            )
            result = await session.execute(stmt)
            return [_to_order(row) for row in result.scalars()]


# ═══════════════════════════════════════════════════════════════════════════════
# Tracking
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyTrackingEventRepository:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Clock = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock

    async def append(
        self,
        order_id: str,
        event_type: OrderStatus,
        description: str,
    ) -> TrackingEvent:
        row = TrackingEventTable(
            order_id=order_id,
            event_type=str(event_type),
            description=description,
            occurred_at=self._clock(),
        )
        async with self._session_factory() as session, session.begin():
            session.add(row)
            await session.flush()
            return TrackingEvent(
                id=str(row.id),
                order_id=order_id,
                event_type=event_type,
                description=description,
                occurred_at=row.occurred_at,
            )

    async def list_for(self, order_id: str) -> list[TrackingEvent]:
        async with self._session_factory() as session:
            stmt = (
                select(TrackingEventTable)
                .where(TrackingEventTable.order_id == order_id)
                .order_by(TrackingEventTable.occurred_at, TrackingEventTable.id)
            )
            result = await session.execute(stmt)
            return [_to_event(row) for row in result.scalars()]


__all__ = (
    "MoneyText",
    "Base",
    "OrderTable",
    "OrderItemTable",
    "TrackingEventTable",
    "create_schema",
    "SQLAlchemyOrderRepository",
    "SQLAlchemyTrackingEventRepository",
)

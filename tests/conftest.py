"""Shared fixtures for cartflow tests."""

from collections.abc import AsyncIterator
from datetime import datetime, timedelta, UTC
from decimal import Decimal

import pytest
from kungfu import Ok, Error
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cartflow.cart import Availability, CartLine
from cartflow.repo import (
    MemoryCartRepository,
    MemoryOrderRepository,
    MemoryTrackingEventRepository,
    create_schema,
)

D = Decimal


# ═══════════════════════════════════════════════════════════════════════════════
# Result helpers
# ═══════════════════════════════════════════════════════════════════════════════


def ok(result):
    match result:
        case Ok(value):
            return value
        case Error(e):
            raise AssertionError(f"expected Ok, got Error({e!r})")


def err(result):
    match result:
        case Error(e):
            return e
        case Ok(value):
            raise AssertionError(f"expected Error, got Ok({value!r})")


class TickClock:
    """Deterministic clock: each call is one minute after the previous."""

    def __init__(self, start: datetime = datetime(2024, 5, 1, 9, 0, tzinfo=UTC)) -> None:
        self._next = start

    def __call__(self) -> datetime:
        now = self._next
        self._next = now + timedelta(minutes=1)
        return now


# ═══════════════════════════════════════════════════════════════════════════════
# Cart lines
# ═══════════════════════════════════════════════════════════════════════════════


def in_stock(product_id: str, price: str, quantity: int = 1, **kw) -> CartLine:
    return CartLine(product_id, D(price), quantity, Availability.IN_STOCK, **kw)


def on_order(product_id: str, price: str, quantity: int = 1, **kw) -> CartLine:
    return CartLine(product_id, D(price), quantity, Availability.ON_ORDER, **kw)


@pytest.fixture
def mixed_lines() -> list[CartLine]:
    return [
        in_stock("soap", "10", 2, runner_fee_per_unit=D("1.5"), shop_id="s1"),
        on_order("sofa", "200", 2, delivery_fee_per_unit=D("15"), shop_id="s2"),
    ]


# ═══════════════════════════════════════════════════════════════════════════════
# Repositories
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def cart_repo(mixed_lines) -> MemoryCartRepository:
    return MemoryCartRepository(mixed_lines)


@pytest.fixture
def orders_repo() -> MemoryOrderRepository:
    return MemoryOrderRepository(clock=TickClock())


@pytest.fixture
def tracking_repo() -> MemoryTrackingEventRepository:
    return MemoryTrackingEventRepository(clock=TickClock())


@pytest.fixture
async def sessions(tmp_path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'cartflow.db'}")
    await create_schema(engine)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()

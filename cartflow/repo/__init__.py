"""
Repo — storage collaborators.

    from cartflow import repo as R

    orders = R.MemoryOrderRepository()
    tracking = R.MemoryTrackingEventRepository()

    # or, durable:
    await R.create_schema(engine)
    orders = R.SQLAlchemyOrderRepository(async_sessionmaker(engine, expire_on_commit=False))
"""

from __future__ import annotations

from cartflow.repo._protocols import (
    UpdateError,
    CartRepository,
    OrderRepository,
    TrackingEventRepository,
)
from cartflow.repo._memory import (
    Clock,
    utcnow,
    MemoryCartRepository,
    MemoryOrderRepository,
    MemoryTrackingEventRepository,
)
from cartflow.repo._sqlalchemy import (
    MoneyText,
    Base,
    OrderTable,
    OrderItemTable,
    TrackingEventTable,
    create_schema,
    SQLAlchemyOrderRepository,
    SQLAlchemyTrackingEventRepository,
)

__all__ = (
    # Protocols
    "UpdateError",
    "CartRepository",
    "OrderRepository",
    "TrackingEventRepository",
    # Memory
    "Clock",
    "utcnow",
    "MemoryCartRepository",
    "MemoryOrderRepository",
    "MemoryTrackingEventRepository",
    # SQLAlchemy
    "MoneyText",
    "Base",
    "OrderTable",
    "OrderItemTable",
    "TrackingEventTable",
    "create_schema",
    "SQLAlchemyOrderRepository",
    "SQLAlchemyTrackingEventRepository",
)

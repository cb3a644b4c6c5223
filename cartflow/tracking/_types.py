"""
Tracking types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum

from cartflow.orders._types import OrderStatus


@dataclass(frozen=True, slots=True)
class TrackingEvent:
    """One entry of an order's append-only progress log."""

    id: str
    order_id: str
    event_type: OrderStatus
    description: str
    occurred_at: datetime


class Stage(IntEnum):
    """Stepper stages. The value is the step index."""

    PLACED = 0
    CONFIRMED = 1
    PROCESSING = 2
    SHIPPED = 3
    DELIVERED = 4


@dataclass(frozen=True, slots=True)
class TimelineStep:
    """
    One stepper row.

    timestamp is None when the step is incomplete, or complete but with no
    recorded time ("unavailable").
    """

    stage: Stage
    label: str
    complete: bool
    timestamp: datetime | None

    @property
    def index(self) -> int:
        return int(self.stage)

    @property
    def timestamp_available(self) -> bool:
        return self.timestamp is not None


@dataclass(frozen=True, slots=True)
class CancellationMarker:
    occurred_at: datetime | None
    description: str


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    event_type: OrderStatus
    label: str
    description: str
    occurred_at: datetime


__all__ = (
    "TrackingEvent",
    "Stage",
    "TimelineStep",
    "CancellationMarker",
    "HistoryEntry",
)

"""
Timeline — stepper and history projections over the tracking log.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime

from cartflow.orders._types import OrderStatus, StatusInfo, STATUS_INFO
from cartflow.tracking._types import (
    CancellationMarker,
    HistoryEntry,
    Stage,
    TimelineStep,
    TrackingEvent,
)

# ═══════════════════════════════════════════════════════════════════════════════
# Tables
# ═══════════════════════════════════════════════════════════════════════════════

CANCELLED_STEP = -1

# Payment-flow statuses have no stepper stage of their own; they show as placed.
STEP_INDEX: dict[OrderStatus, int] = {
    OrderStatus.PENDING: 0,
    OrderStatus.CONFIRMED: 1,
    OrderStatus.PROCESSING: 2,
    OrderStatus.SHIPPED: 3,
    OrderStatus.DELIVERED: 4,
    OrderStatus.CANCELLED: CANCELLED_STEP,
    OrderStatus.AWAITING_PAYMENT: 0,
    OrderStatus.COMPLETED: 0,
}

STAGE_EVENT: dict[Stage, OrderStatus] = {
    Stage.PLACED: OrderStatus.PENDING,
    Stage.CONFIRMED: OrderStatus.CONFIRMED,
    Stage.PROCESSING: OrderStatus.PROCESSING,
    Stage.SHIPPED: OrderStatus.SHIPPED,
    Stage.DELIVERED: OrderStatus.DELIVERED,
}

_UNKNOWN = StatusInfo("Unknown", "Status information unavailable")


def describe(status: OrderStatus | str) -> StatusInfo:
    """Display label and description for a status."""
    return STATUS_INFO.get(status, _UNKNOWN)  # type: ignore[call-overload]


def step_index(status: OrderStatus) -> int:
    return STEP_INDEX.get(status, 0)


def earliest_by_type(events: Iterable[TrackingEvent]) -> dict[OrderStatus, datetime]:
    """First occurrence of each event type. Later duplicates are ignored."""
    first: dict[OrderStatus, datetime] = {}
    for event in events:
        seen = first.get(event.event_type)
        if seen is None or event.occurred_at < seen:
            first[event.event_type] = event.occurred_at
    return first


# ═══════════════════════════════════════════════════════════════════════════════
# Timeline
# ═══════════════════════════════════════════════════════════════════════════════


class Timeline:
    """
    Five-step stepper for one order.

    Iterating is lazy and restartable; each pass yields exactly five steps
    computed from the same snapshot of status and events.

    Example:
        timeline = build_timeline(order.status, events, order.created_at)
        for step in timeline:
            print(step.label, step.complete, step.timestamp)
        if timeline.cancellation:
            print("cancelled at", timeline.cancellation.occurred_at)
    """

    __slots__ = ("_status", "_first_seen", "_created_at")

    def __init__(
        self,
        status: OrderStatus,
        events: Iterable[TrackingEvent],
        created_at: datetime | None,
    ) -> None:
        self._status = status
        self._first_seen = earliest_by_type(events)
        self._created_at = created_at

    @property
    def status(self) -> OrderStatus:
        return self._status

    @property
    def current_step(self) -> int:
        return step_index(self._status)

    @property
    def is_cancelled(self) -> bool:
        return self.current_step == CANCELLED_STEP

    @property
    def cancellation(self) -> CancellationMarker | None:
        if not self.is_cancelled:
            return None
        return CancellationMarker(
            occurred_at=self._first_seen.get(OrderStatus.CANCELLED),
            description=STATUS_INFO[OrderStatus.CANCELLED].description,
        )

    def _timestamp(self, stage: Stage) -> datetime | None:
        recorded = self._first_seen.get(STAGE_EVENT[stage])
        if recorded is not None:
            return recorded
        if stage is Stage.PLACED:
            return self._created_at
        return None

    def __iter__(self) -> Iterator[TimelineStep]:
        current = self.current_step
        for stage in Stage:
            complete = current != CANCELLED_STEP and current >= stage
            yield TimelineStep(
                stage=stage,
                label=STATUS_INFO[STAGE_EVENT[stage]].label,
                complete=complete,
                timestamp=self._timestamp(stage) if complete else None,
            )

    def __len__(self) -> int:
        return len(Stage)


def build_timeline(
    status: OrderStatus,
    events: Iterable[TrackingEvent],
    created_at: datetime | None = None,
) -> Timeline:
    """Stepper projection. Never mutates anything."""
    return Timeline(status, events, created_at)


# ═══════════════════════════════════════════════════════════════════════════════
# History
# ═══════════════════════════════════════════════════════════════════════════════


def history(events: Iterable[TrackingEvent]) -> list[HistoryEntry]:
    """Every event, oldest first, labelled for display."""
    entries = []
    for event in sorted(events, key=lambda e: e.occurred_at):
        info = describe(event.event_type)
        entries.append(HistoryEntry(
            event_type=event.event_type,
            label=info.label,
            description=event.description or info.description,
            occurred_at=event.occurred_at,
        ))
    return entries


__all__ = (
    "CANCELLED_STEP",
    "STEP_INDEX",
    "describe",
    "step_index",
    "earliest_by_type",
    "Timeline",
    "build_timeline",
    "history",
)

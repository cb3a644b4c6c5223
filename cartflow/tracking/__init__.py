"""
Tracking — what the buyer sees of an order's progress.

    from cartflow import tracking as T

    timeline = T.build_timeline(order.status, events, order.created_at)
    [step.complete for step in timeline]   # five flags
    T.history(events)                      # full labelled log
"""

from __future__ import annotations

from cartflow.tracking._types import (
    TrackingEvent,
    Stage,
    TimelineStep,
    CancellationMarker,
    HistoryEntry,
)
from cartflow.tracking._timeline import (
    CANCELLED_STEP,
    STEP_INDEX,
    describe,
    step_index,
    earliest_by_type,
    Timeline,
    build_timeline,
    history,
)

__all__ = (
    "TrackingEvent",
    "Stage",
    "TimelineStep",
    "CancellationMarker",
    "HistoryEntry",
    "CANCELLED_STEP",
    "STEP_INDEX",
    "describe",
    "step_index",
    "earliest_by_type",
    "Timeline",
    "build_timeline",
    "history",
)

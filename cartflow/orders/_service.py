"""
Advance — apply a status change against storage.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

import structlog
from kungfu import Result, Ok, Error

from cartflow.errors import AdvanceError, EventNotRecorded, RepositoryFailure
from cartflow.lift import guarded, guarded_result
from cartflow.orders._machine import StatusChange, transition
from cartflow.orders._types import Actor, Order, OrderStatus

if TYPE_CHECKING:
    from cartflow.repo import OrderRepository, TrackingEventRepository

log = structlog.get_logger(__name__)


async def _unrecorded_from(
    tracking: TrackingEventRepository,
    order: Order,
) -> Result[OrderStatus | None, RepositoryFailure]:
    """
    Status the order left when its current status has no event yet.

    None when the current status is already in the log.
    """
    match await guarded("tracking.list_for", lambda: tracking.list_for(order.id)):
        case Error(failure):
            return Error(failure)
        case Ok(events):
            pass

    if any(event.event_type == order.status for event in events):
        return Ok(None)
    return Ok(events[-1].event_type if events else order.status)


async def advance(
    orders: OrderRepository,
    tracking: TrackingEventRepository,
    order_id: str,
    buyer_id: str,
    target: OrderStatus,
    actor: Actor,
) -> Result[StatusChange, AdvanceError]:
    """
    Fetch, transition, persist, record.

    The order is always read fresh; the status seen here is handed to
    update_status as expected, so a concurrent change surfaces as
    IllegalTransition instead of being overwritten.

    If the status is stored but the event append fails, the result is
    EventNotRecorded carrying the stored change. Calling advance again with
    the same target then appends the missing event without writing the
    status a second time.

    Example:
        match await advance(orders, tracking, "ORD-0001", "b1",
                            OrderStatus.CANCELLED, Actor.buyer("b1")):
            case Ok(change):
                print(change.order.status)
            case Error(e):
                print(e.code, e.message)
    """
    fetched = await guarded_result(
        "orders.fetch",
        lambda: orders.fetch(order_id, buyer_id),
    )
    match fetched:
        case Error(e):
            return Error(e)
        case Ok(order):
            pass

    source = order
    if order.status == target:
        match await _unrecorded_from(tracking, order):
            case Error(failure):
                return Error(failure)
            case Ok(None):
                pass
            case Ok(previous):
                source = replace(order, status=previous)
    catching_up = source is not order

    match transition(source, target, actor):
        case Error(refused):
            log.info(
                "transition_refused",
                order_id=order_id,
                current=str(order.status),
                target=str(target),
                actor=str(actor.role),
                code=refused.code,
            )
            return Error(refused)
        case Ok(change):
            pass

    if catching_up:
        stored = order
        log.info("missing_event_recovered", order_id=order_id, status=str(target))
    else:
        written = await guarded_result(
            "orders.update_status",
            lambda: orders.update_status(order_id, buyer_id, target, expected=order.status),
        )
        match written:
            case Error(e):
                log.warning(
                    "status_write_rejected",
                    order_id=order_id,
                    expected=str(order.status),
                    target=str(target),
                    code=e.code,
                )
                return Error(e)
            case Ok(stored):
                pass

    persisted = StatusChange(
        order=stored,
        previous=change.previous,
        event_type=change.event_type,
        description=change.description,
    )
    appended = await guarded(
        "tracking.append",
        lambda: tracking.append(order_id, change.event_type, change.description),
    )
    match appended:
        case Error(failure):
            log.error(
                "status_event_not_recorded",
                order_id=order_id,
                status=str(stored.status),
            )
            return Error(EventNotRecorded(persisted, failure))
        case Ok(_):
            log.info(
                "order_status_changed",
                order_id=order_id,
                previous=str(change.previous),
                status=str(stored.status),
                actor=str(actor.role),
            )
            return Ok(persisted)


__all__ = ("advance",)

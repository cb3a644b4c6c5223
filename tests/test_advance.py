"""Tests for persisted status changes."""

from cartflow._types import PaymentTiming
from cartflow.checkout import order_items, resolve
from cartflow.errors import EventNotRecorded, Forbidden, IllegalTransition, NotFound
from cartflow.orders import Actor, OrderStatus, advance
from cartflow.repo import MemoryTrackingEventRepository
from cartflow.tracking import build_timeline

from conftest import TickClock, err, ok

S = OrderStatus
SELLER = Actor.seller("s1")


async def placed(orders, tracking, lines):
    plan = ok(resolve(lines, PaymentTiming.NOW))
    order = await orders.create("b1", order_items(lines), plan, "12 Main St", "card")
    await tracking.append(order.id, S.PENDING, "placed")
    return order


async def test_advance_persists_and_records_one_event(orders_repo, tracking_repo, mixed_lines) -> None:
    order = await placed(orders_repo, tracking_repo, mixed_lines)

    change = ok(await advance(orders_repo, tracking_repo, order.id, "b1", S.CONFIRMED, SELLER))

    assert change.previous == S.PENDING
    assert change.order.status == S.CONFIRMED
    assert ok(await orders_repo.fetch(order.id, "b1")).status == S.CONFIRMED
    events = await tracking_repo.list_for(order.id)
    assert [e.event_type for e in events] == [S.PENDING, S.CONFIRMED]


async def test_full_shipping_lifecycle_fills_the_timeline(orders_repo, tracking_repo, mixed_lines) -> None:
    order = await placed(orders_repo, tracking_repo, mixed_lines)
    for target in (S.CONFIRMED, S.PROCESSING, S.SHIPPED, S.DELIVERED):
        ok(await advance(orders_repo, tracking_repo, order.id, "b1", target, SELLER))

    current = ok(await orders_repo.fetch(order.id, "b1"))
    steps = list(build_timeline(current.status, await tracking_repo.list_for(order.id), current.created_at))
    assert all(step.complete and step.timestamp is not None for step in steps)


async def test_illegal_target_leaves_everything_untouched(orders_repo, tracking_repo, mixed_lines) -> None:
    order = await placed(orders_repo, tracking_repo, mixed_lines)

    e = err(await advance(orders_repo, tracking_repo, order.id, "b1", S.SHIPPED, SELLER))

    assert isinstance(e, IllegalTransition)
    assert ok(await orders_repo.fetch(order.id, "b1")).status == S.PENDING
    assert len(await tracking_repo.list_for(order.id)) == 1


async def test_buyer_cancels_pending(orders_repo, tracking_repo, mixed_lines) -> None:
    order = await placed(orders_repo, tracking_repo, mixed_lines)
    change = ok(await advance(orders_repo, tracking_repo, order.id, "b1", S.CANCELLED, Actor.buyer("b1")))
    assert change.order.status == S.CANCELLED


async def test_cancel_after_confirmation_is_forbidden(orders_repo, tracking_repo, mixed_lines) -> None:
    order = await placed(orders_repo, tracking_repo, mixed_lines)
    ok(await advance(orders_repo, tracking_repo, order.id, "b1", S.CONFIRMED, SELLER))

    e = err(await advance(orders_repo, tracking_repo, order.id, "b1", S.CANCELLED, Actor.buyer("b1")))
    assert isinstance(e, Forbidden)


async def test_unknown_order(orders_repo, tracking_repo) -> None:
    e = err(await advance(orders_repo, tracking_repo, "ORD-9999", "b1", S.CONFIRMED, SELLER))
    assert isinstance(e, NotFound)


async def test_lost_race_surfaces_as_illegal_transition(orders_repo, tracking_repo, mixed_lines) -> None:
    order = await placed(orders_repo, tracking_repo, mixed_lines)

    class RacingRepository:
        """Lets a competing writer confirm the order between fetch and write."""

        def __init__(self, inner) -> None:
            self._inner = inner

        async def fetch(self, order_id, buyer_id):
            result = await self._inner.fetch(order_id, buyer_id)
            await self._inner.update_status(order_id, buyer_id, S.CONFIRMED)
            return result

        async def update_status(self, *args, **kwargs):
            return await self._inner.update_status(*args, **kwargs)

    e = err(await advance(
        RacingRepository(orders_repo), tracking_repo,
        order.id, "b1", S.CANCELLED, Actor.buyer("b1"),
    ))

    assert isinstance(e, IllegalTransition)
    assert ok(await orders_repo.fetch(order.id, "b1")).status == S.CONFIRMED
    assert len(await tracking_repo.list_for(order.id)) == 1


class FlakyTracking(MemoryTrackingEventRepository):
    """Fails the first append of one event type, then behaves."""

    def __init__(self, fails_on: OrderStatus) -> None:
        super().__init__(TickClock())
        self.fails_on = fails_on
        self.failures = 1

    async def append(self, order_id, event_type, description):
        if event_type == self.fails_on and self.failures:
            self.failures -= 1
            raise ConnectionError("tracking store down")
        return await super().append(order_id, event_type, description)


async def test_stored_change_without_event_is_reported_and_recoverable(orders_repo, mixed_lines) -> None:
    tracking = FlakyTracking(fails_on=S.CONFIRMED)
    order = await placed(orders_repo, tracking, mixed_lines)

    e = err(await advance(orders_repo, tracking, order.id, "b1", S.CONFIRMED, SELLER))

    assert isinstance(e, EventNotRecorded)
    assert e.code == "EVENT_NOT_RECORDED"
    assert e.failure.operation == "tracking.append"
    assert e.change.previous == S.PENDING
    assert e.change.order.status == S.CONFIRMED
    assert ok(await orders_repo.fetch(order.id, "b1")).status == S.CONFIRMED
    assert [ev.event_type for ev in await tracking.list_for(order.id)] == [S.PENDING]

    change = ok(await advance(orders_repo, tracking, order.id, "b1", S.CONFIRMED, SELLER))

    assert change.previous == S.PENDING
    assert change.order.status == S.CONFIRMED
    assert ok(await orders_repo.fetch(order.id, "b1")).status == S.CONFIRMED
    assert [ev.event_type for ev in await tracking.list_for(order.id)] == [S.PENDING, S.CONFIRMED]


async def test_recorded_status_is_not_recorded_twice(orders_repo, tracking_repo, mixed_lines) -> None:
    order = await placed(orders_repo, tracking_repo, mixed_lines)
    ok(await advance(orders_repo, tracking_repo, order.id, "b1", S.CONFIRMED, SELLER))

    e = err(await advance(orders_repo, tracking_repo, order.id, "b1", S.CONFIRMED, SELLER))

    assert isinstance(e, IllegalTransition)
    assert len(await tracking_repo.list_for(order.id)) == 2


async def test_missing_cancellation_event_still_needs_the_buyer(orders_repo, mixed_lines) -> None:
    tracking = FlakyTracking(fails_on=S.CANCELLED)
    order = await placed(orders_repo, tracking, mixed_lines)
    err(await advance(orders_repo, tracking, order.id, "b1", S.CANCELLED, Actor.buyer("b1")))

    e = err(await advance(orders_repo, tracking, order.id, "b1", S.CANCELLED, SELLER))

    assert isinstance(e, Forbidden)
    assert [ev.event_type for ev in await tracking.list_for(order.id)] == [S.PENDING]

"""Tests for order placement."""

import pytest
from structlog.testing import capture_logs

from cartflow._types import PaymentTiming
from cartflow.checkout import CheckoutRequest, place_order
from cartflow.errors import InvalidPaymentTiming, RepositoryFailure, ValidationError
from cartflow.orders import OrderStatus
from cartflow.repo import MemoryCartRepository, MemoryOrderRepository, MemoryTrackingEventRepository
from cartflow.summary import project

from conftest import D, TickClock, err, in_stock, ok, on_order

S = OrderStatus


def request(timing: PaymentTiming = PaymentTiming.LATER, **kw) -> CheckoutRequest:
    fields = {"delivery_address": "12 Main St", "payment_method": "card", **kw}
    return CheckoutRequest("b1", timing, **fields)


class StuckCart(MemoryCartRepository):
    async def clear(self) -> None:
        raise ConnectionError("cart store down")


async def test_one_order_per_shop_recorded_and_cart_cleared(cart_repo, orders_repo, tracking_repo) -> None:
    placement = ok(await place_order(cart_repo, orders_repo, tracking_repo, request()))

    assert [shop.shop_id for shop in placement.shops] == ["s1", "s2"]
    soap, sofa = placement.orders
    assert soap.shop_id == "s1" and sofa.shop_id == "s2"
    assert [i.product_id for i in soap.items] == ["soap"]
    assert [i.product_id for i in sofa.items] == ["sofa"]
    assert soap.status == sofa.status == S.PENDING

    # Nothing to defer at s1, so it is paid in full.
    assert soap.payment_timing == PaymentTiming.NOW and not soap.deposit_elected
    assert soap.totals.total_amount == D("20")
    assert sofa.payment_timing == PaymentTiming.LATER and sofa.deposit_elected
    assert sofa.totals.total_amount == D("230")

    assert placement.plan.due_now == D("250")
    assert sum(shop.plan.due_now for shop in placement.shops) == placement.plan.due_now
    assert placement.totals.grand_total == D("450")

    for order in placement.orders:
        events = await tracking_repo.list_for(order.id)
        assert [e.event_type for e in events] == [S.PENDING]
    assert await cart_repo.get_lines() == []


async def test_single_shop_cart_places_one_order(orders_repo, tracking_repo) -> None:
    cart = MemoryCartRepository([
        in_stock("soap", "10", 1, shop_id="s1"),
        on_order("lamp", "80", 1, shop_id="s1"),
    ])
    placement = ok(await place_order(cart, orders_repo, tracking_repo, request()))

    (order,) = placement.orders
    assert order.shop_id == "s1"
    assert order.totals.total_amount == D("50")


@pytest.mark.parametrize("timing", list(PaymentTiming))
async def test_placed_order_summaries_are_consistent(cart_repo, orders_repo, tracking_repo, timing) -> None:
    placement = ok(await place_order(cart_repo, orders_repo, tracking_repo, request(timing)))
    assert all(project(order).mismatch is None for order in placement.orders)


async def test_pay_now_logs_full_payment_decision(cart_repo, orders_repo, tracking_repo) -> None:
    with capture_logs() as logs:
        placement = ok(await place_order(
            cart_repo, orders_repo, tracking_repo, request(PaymentTiming.NOW),
        ))

    assert not any(order.deposit_elected for order in placement.orders)
    placed = [entry for entry in logs if entry["event"] == "order_placed"]
    assert [entry["shop_id"] for entry in placed] == ["s1", "s2"]
    assert all(entry["deposit_elected"] is False for entry in placed)


async def test_empty_cart_creates_nothing(orders_repo, tracking_repo) -> None:
    e = err(await place_order(MemoryCartRepository(), orders_repo, tracking_repo, request()))
    assert isinstance(e, ValidationError)
    assert await orders_repo.list_for_buyer("b1") == []


async def test_pay_later_without_on_order_items(orders_repo, tracking_repo) -> None:
    cart = MemoryCartRepository([in_stock("soap", "10", 1)])
    e = err(await place_order(cart, orders_repo, tracking_repo, request()))
    assert isinstance(e, InvalidPaymentTiming)
    assert await cart.get_lines() != []


async def test_blank_address_is_rejected(cart_repo, orders_repo, tracking_repo) -> None:
    e = err(await place_order(cart_repo, orders_repo, tracking_repo, request(delivery_address="  ")))
    assert e.field == "delivery_address"


async def test_failure_after_create_cancels_every_order(mixed_lines, orders_repo, tracking_repo) -> None:
    cart = StuckCart(mixed_lines)
    e = err(await place_order(cart, orders_repo, tracking_repo, request()))

    assert isinstance(e, RepositoryFailure)
    assert e.operation == "cart.clear"

    placed = await orders_repo.list_for_buyer("b1")
    assert sorted(order.shop_id for order in placed) == ["s1", "s2"]
    for order in placed:
        assert order.status == S.CANCELLED
        events = await tracking_repo.list_for(order.id)
        assert [ev.event_type for ev in events] == [S.PENDING, S.CANCELLED]
    assert len(await cart.get_lines()) == 2


async def test_second_shop_failing_cancels_the_first(cart_repo, tracking_repo) -> None:
    class DownForSofas(MemoryOrderRepository):
        async def create(self, *args, shop_id=None, **kwargs):
            if shop_id == "s2":
                raise TimeoutError("orders store down")
            return await super().create(*args, shop_id=shop_id, **kwargs)

    orders = DownForSofas(clock=TickClock())
    e = err(await place_order(cart_repo, orders, tracking_repo, request()))

    assert isinstance(e, RepositoryFailure)
    assert e.operation == "orders.create"
    (order,) = await orders.list_for_buyer("b1")
    assert order.shop_id == "s1"
    assert order.status == S.CANCELLED
    assert len(await cart_repo.get_lines()) == 2


async def test_unrecorded_cancellation_does_not_fail_the_rollback(mixed_lines, orders_repo) -> None:
    class NoCancelEvents(MemoryTrackingEventRepository):
        async def append(self, order_id, event_type, description):
            if event_type == S.CANCELLED:
                raise ConnectionError("tracking store down")
            return await super().append(order_id, event_type, description)

    tracking = NoCancelEvents(TickClock())
    with capture_logs() as logs:
        e = err(await place_order(StuckCart(mixed_lines), orders_repo, tracking, request()))

    assert e.operation == "cart.clear"
    assert all(order.status == S.CANCELLED for order in await orders_repo.list_for_buyer("b1"))

    failed = [entry for entry in logs if entry["event"] == "order_placement_failed"]
    assert failed and failed[0]["rollback_complete"] is True
    unrecorded = [entry for entry in logs if entry["event"] == "cancellation_event_not_recorded"]
    assert len(unrecorded) == 2
    assert not any(entry["event"] == "compensation_failed" for entry in logs)


async def test_create_failure_leaves_cart_alone(cart_repo, tracking_repo) -> None:
    class DownOrders(MemoryOrderRepository):
        async def create(self, *args, **kwargs):
            raise TimeoutError("orders store down")

    e = err(await place_order(cart_repo, DownOrders(), tracking_repo, request()))
    assert isinstance(e, RepositoryFailure)
    assert e.operation == "orders.create"
    assert len(await cart_repo.get_lines()) == 2

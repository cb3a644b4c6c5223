"""Tests for the order status machine."""

from datetime import datetime, UTC

import pytest

from cartflow.errors import Forbidden, IllegalTransition
from cartflow.orders import (
    Actor,
    Order,
    OrderFlow,
    OrderStatus,
    OrderTotals,
    SUCCESSORS,
    can_transition,
    is_terminal,
    successors,
    transition,
)

from conftest import D, err, ok

S = OrderStatus


def make_order(
    status: OrderStatus = S.PENDING,
    flow: OrderFlow = OrderFlow.SHIPPING,
    buyer_id: str = "b1",
) -> Order:
    return Order(
        id="ORD-0001",
        buyer_id=buyer_id,
        status=status,
        items=(),
        created_at=datetime(2024, 5, 1, tzinfo=UTC),
        payment_method="card",
        delivery_address="12 Main St",
        totals=OrderTotals(D("10"), D("0"), D("0"), D("0"), D("10")),
        has_on_order_items=False,
        flow=flow,
    )


SELLER = Actor.seller("s1")
BUYER = Actor.buyer("b1")

SHIPPING_PATH = [S.PENDING, S.CONFIRMED, S.PROCESSING, S.SHIPPED, S.DELIVERED]


class TestGraph:
    @pytest.mark.parametrize("status", [S.DELIVERED, S.CANCELLED, S.COMPLETED])
    def test_terminal_states_have_no_successors(self, status) -> None:
        assert is_terminal(status)
        for flow in OrderFlow:
            assert successors(flow, status) == frozenset()

    def test_flows_do_not_mix(self) -> None:
        assert not can_transition(OrderFlow.SHIPPING, S.PENDING, S.AWAITING_PAYMENT)
        assert not can_transition(OrderFlow.PAYMENT, S.PENDING, S.CONFIRMED)

    def test_cancel_only_from_pending(self) -> None:
        for flow, graph in SUCCESSORS.items():
            for status, targets in graph.items():
                assert (S.CANCELLED in targets) == (status == S.PENDING), (flow, status)


class TestTransition:
    def test_walks_the_shipping_path(self) -> None:
        order = make_order()
        for target in SHIPPING_PATH[1:]:
            change = ok(transition(order, target, SELLER))
            assert change.previous == order.status
            assert change.event_type == target
            assert change.description
            order = change.order
        assert order.status == S.DELIVERED

    def test_payment_flow(self) -> None:
        order = make_order(flow=OrderFlow.PAYMENT)
        order = ok(transition(order, S.AWAITING_PAYMENT, Actor.system())).order
        order = ok(transition(order, S.COMPLETED, Actor.system())).order
        assert order.status == S.COMPLETED

    def test_does_not_mutate_input(self) -> None:
        order = make_order()
        ok(transition(order, S.CONFIRMED, SELLER))
        assert order.status == S.PENDING

    def test_no_skipping(self) -> None:
        e = err(transition(make_order(), S.SHIPPED, SELLER))
        assert isinstance(e, IllegalTransition)
        assert (e.current, e.target) == (S.PENDING, S.SHIPPED)

    def test_no_going_back(self) -> None:
        e = err(transition(make_order(S.SHIPPED), S.PROCESSING, SELLER))
        assert isinstance(e, IllegalTransition)

    def test_terminal_is_final(self) -> None:
        for target in S:
            assert isinstance(err(transition(make_order(S.DELIVERED), target, SELLER)),
                              (IllegalTransition, Forbidden))


class TestCancellation:
    def test_buyer_cancels_pending(self) -> None:
        change = ok(transition(make_order(), S.CANCELLED, BUYER))
        assert change.order.status == S.CANCELLED

    def test_other_buyer_cannot_cancel(self) -> None:
        e = err(transition(make_order(), S.CANCELLED, Actor.buyer("someone-else")))
        assert isinstance(e, Forbidden)

    def test_seller_cannot_cancel(self) -> None:
        assert isinstance(err(transition(make_order(), S.CANCELLED, SELLER)), Forbidden)

    @pytest.mark.parametrize("status", [S.CONFIRMED, S.PROCESSING, S.SHIPPED])
    def test_cancel_after_pending_is_forbidden(self, status) -> None:
        e = err(transition(make_order(status), S.CANCELLED, BUYER))
        assert isinstance(e, Forbidden)
        assert "contact support" in e.message

    def test_cancel_from_awaiting_payment_is_forbidden(self) -> None:
        order = make_order(S.AWAITING_PAYMENT, flow=OrderFlow.PAYMENT)
        assert isinstance(err(transition(order, S.CANCELLED, BUYER)), Forbidden)

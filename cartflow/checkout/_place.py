"""
Place — turn a cart into one order per shop.

Placement is a saga, one leg per shop in cart order:

    create order  ──►  record "placed" event  ──►  next shop ... ──►  clear cart
         ▲                                                               │
         └────────────── cancel every created order if anything fails ◄─┘

Order and items are written by one repository call, so a half-written order
is never visible.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog
from kungfu import Result, Ok, Error

from cartflow import saga as S
from cartflow._types import PaymentTiming
from cartflow.cart._types import CartLine, ShopGroup
from cartflow.cart._aggregate import aggregate, group_by_shop
from cartflow.checkout._resolve import resolve
from cartflow.checkout._types import CheckoutRequest, Placement, PaymentPlan, ShopOrder
from cartflow.errors import CheckoutError, ValidationError
from cartflow.lift import guarded
from cartflow.orders._types import STATUS_INFO, Order, OrderItem, OrderStatus
from cartflow.repo import CartRepository, OrderRepository, TrackingEventRepository

log = structlog.get_logger(__name__)


class CompensationRefused(RuntimeError):
    """Raised inside a compensator when the order could not be cancelled."""


def order_items(lines: Sequence[CartLine]) -> tuple[OrderItem, ...]:
    return tuple(
        OrderItem(
            product_id=line.product_id,
            quantity=line.quantity,
            unit_price=line.unit_price,
            is_on_order=line.is_on_order,
        )
        for line in lines
    )


def _check_request(request: CheckoutRequest) -> ValidationError | None:
    if not request.delivery_address.strip():
        return ValidationError("Please enter a delivery address", "delivery_address")
    if not request.payment_method.strip():
        return ValidationError("Please choose a payment method", "payment_method")
    return None


def _shop_plans(
    groups: Sequence[ShopGroup],
    timing: PaymentTiming,
) -> Result[tuple[tuple[ShopGroup, PaymentPlan], ...], ValidationError]:
    """
    Price each shop's lines on their own.

    Pay-later applies per shop only where the shop has on-order lines;
    a shop with none is paid in full now.
    """
    priced: list[tuple[ShopGroup, PaymentPlan]] = []
    for group in groups:
        deferrable = any(line.is_on_order for line in group.lines)
        shop_timing = timing if deferrable else PaymentTiming.NOW
        match resolve(group.lines, shop_timing):
            case Error(invalid):
                return Error(invalid)
            case Ok(plan):
                priced.append((group, plan))
    return Ok(tuple(priced))


def _placement_saga(
    cart: CartRepository,
    orders: OrderRepository,
    tracking: TrackingEventRepository,
    request: CheckoutRequest,
    shops: tuple[tuple[ShopGroup, PaymentPlan], ...],
) -> S.SagaExpr[tuple[ShopOrder, ...], CheckoutError]:
    async def cancel(order: Order) -> None:
        match await orders.update_status(
            order.id,
            order.buyer_id,
            OrderStatus.CANCELLED,
            expected=OrderStatus.PENDING,
        ):
            case Error(e):
                raise CompensationRefused(e.message)
            case Ok(_):
                pass

        recorded = await guarded(
            "tracking.append",
            lambda: tracking.append(
                order.id,
                OrderStatus.CANCELLED,
                STATUS_INFO[OrderStatus.CANCELLED].description,
            ),
        )
        match recorded:
            case Error(failure):
                # The order is cancelled; only its history is short.
                log.error(
                    "cancellation_event_not_recorded",
                    order_id=order.id,
                    error=failure.message,
                )
            case Ok(_):
                pass
        log.warning("order_placement_rolled_back", order_id=order.id)

    def create(group: ShopGroup, plan: PaymentPlan) -> S.SagaStep[Order, CheckoutError]:
        return S.step(
            guarded(
                "orders.create",
                lambda: orders.create(
                    request.buyer_id,
                    order_items(group.lines),
                    plan,
                    request.delivery_address,
                    request.payment_method,
                    flow=request.flow,
                    shop_id=group.shop_id,
                ),
            ),
            compensate=cancel,
            name="create_order",
        )

    def record_placed(order: Order) -> S.SagaStep[Order, CheckoutError]:
        async def append_then_return() -> Order:
            await tracking.append(
                order.id,
                OrderStatus.PENDING,
                STATUS_INFO[OrderStatus.PENDING].description,
            )
            return order

        return S.step(guarded("tracking.append", append_then_return), name="record_placed")

    def clear_cart(placed: tuple[ShopOrder, ...]) -> S.SagaStep[tuple[ShopOrder, ...], CheckoutError]:
        async def clear_then_return() -> tuple[ShopOrder, ...]:
            await cart.clear()
            return placed

        return S.step(guarded("cart.clear", clear_then_return), name="clear_cart")

    def from_shop(
        index: int,
        placed: tuple[ShopOrder, ...],
    ) -> S.SagaExpr[tuple[ShopOrder, ...], CheckoutError]:
        if index == len(shops):
            return clear_cart(placed)

        group, plan = shops[index]
        return create(group, plan).then(
            lambda order: record_placed(order).then(
                lambda _: from_shop(index + 1, (*placed, ShopOrder(group.shop_id, order, plan)))
            )
        )

    return from_shop(0, ())


async def place_order(
    cart: CartRepository,
    orders: OrderRepository,
    tracking: TrackingEventRepository,
    request: CheckoutRequest,
) -> Result[Placement, CheckoutError]:
    """
    Validate and price the cart, create one order per shop, record them,
    empty the cart.

    Either every shop's order is placed or every one created is cancelled.

    Example:
        request = CheckoutRequest("b1", PaymentTiming.LATER, "12 Main St", "card")
        match await place_order(cart, orders, tracking, request):
            case Ok(placement):
                charge(placement.plan.due_now)
            case Error(e):
                show(e.message)
    """
    refused = _check_request(request)
    if refused is not None:
        return Error(refused)

    match await guarded("cart.get_lines", cart.get_lines):
        case Error(failure):
            return Error(failure)
        case Ok(lines):
            pass

    match resolve(lines, request.timing):
        case Error(invalid):
            log.info("checkout_rejected", buyer_id=request.buyer_id, field=invalid.field)
            return Error(invalid)
        case Ok(plan):
            pass

    match _shop_plans(group_by_shop(lines), request.timing):
        case Error(invalid):
            return Error(invalid)
        case Ok(shops):
            pass

    saga = _placement_saga(cart, orders, tracking, request, shops)
    match await S.run(saga):
        case Error(saga_error):
            log.error(
                "order_placement_failed",
                buyer_id=request.buyer_id,
                step=saga_error.step_name,
                rollback_complete=saga_error.rollback_complete,
            )
            return Error(saga_error.error)
        case Ok(done):
            placed = done.value
            for shop in placed:
                log.info(
                    "order_placed",
                    order_id=shop.order.id,
                    buyer_id=shop.order.buyer_id,
                    shop_id=shop.shop_id,
                    timing=str(shop.plan.timing),
                    deposit_elected=shop.plan.deposit_elected,
                    due_now=str(shop.plan.due_now),
                    due_later=str(shop.plan.due_later),
                )
            return Ok(Placement(shops=placed, plan=plan, totals=aggregate(lines)))


__all__ = (
    "CompensationRefused",
    "order_items",
    "place_order",
)

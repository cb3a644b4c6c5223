"""
Checkout types.
"""

from __future__ import annotations

from dataclasses import dataclass

from cartflow._types import Money, ZERO, DEPOSIT_RATIO, PaymentTiming
from cartflow.cart._types import CartTotals
from cartflow.orders._types import Order, OrderFlow


@dataclass(frozen=True, slots=True)
class LinePayment:
    """
    What one cart line costs now and later.

    due_now/due_later cover the item amount only; the line's delivery fee
    is always due now and is reported separately.
    """

    product_id: str
    line_total: Money
    delivery_fee: Money
    due_now: Money
    due_later: Money


@dataclass(frozen=True, slots=True)
class PaymentPlan:
    """
    Amounts due at checkout and on delivery.

    deposit_elected records the deposit-vs-full decision even when the buyer
    pays everything now.
    """

    timing: PaymentTiming
    due_now: Money
    due_later: Money
    deposit_elected: bool
    standard_total: Money
    on_order_total: Money
    on_order_due_now: Money
    delivery_fees: Money
    runner_fees: Money = ZERO
    transport_fees: Money = ZERO
    has_on_order_items: bool = False
    lines: tuple[LinePayment, ...] = ()
    deposit_ratio: Money = DEPOSIT_RATIO


@dataclass(frozen=True, slots=True)
class CheckoutRequest:
    buyer_id: str
    timing: PaymentTiming
    delivery_address: str
    payment_method: str
    flow: OrderFlow = OrderFlow.SHIPPING


@dataclass(frozen=True, slots=True)
class ShopOrder:
    """The order placed with one shop, and the plan it was priced under."""

    shop_id: str | None
    order: Order
    plan: PaymentPlan


@dataclass(frozen=True, slots=True)
class Placement:
    """
    Everything one checkout placed.

    plan covers the whole cart; its due_now is the sum of the per-shop plans.
    """

    shops: tuple[ShopOrder, ...]
    plan: PaymentPlan
    totals: CartTotals

    @property
    def orders(self) -> tuple[Order, ...]:
        return tuple(placed.order for placed in self.shops)


__all__ = (
    "LinePayment",
    "PaymentPlan",
    "CheckoutRequest",
    "ShopOrder",
    "Placement",
)

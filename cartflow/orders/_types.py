"""
Order types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from cartflow._types import Money, ZERO, PaymentTiming

if TYPE_CHECKING:
    from cartflow.checkout import PaymentPlan

# ═══════════════════════════════════════════════════════════════════════════════
# Status & Flow
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(StrEnum):
    """Order status values, as persisted."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    AWAITING_PAYMENT = "awaiting_payment"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class StatusInfo:
    label: str
    description: str


STATUS_INFO: dict[OrderStatus, StatusInfo] = {
    OrderStatus.PENDING: StatusInfo(
        "Order Placed",
        "Your order has been received and is awaiting confirmation.",
    ),
    OrderStatus.CONFIRMED: StatusInfo(
        "Order Confirmed",
        "Your order has been confirmed and is being prepared.",
    ),
    OrderStatus.PROCESSING: StatusInfo(
        "Processing",
        "Your order is being processed and prepared for shipping.",
    ),
    OrderStatus.SHIPPED: StatusInfo(
        "Shipped",
        "Your order has been shipped and is on its way to you.",
    ),
    OrderStatus.DELIVERED: StatusInfo(
        "Delivered",
        "Your order has been delivered successfully.",
    ),
    OrderStatus.CANCELLED: StatusInfo(
        "Cancelled",
        "Your order has been cancelled.",
    ),
    OrderStatus.AWAITING_PAYMENT: StatusInfo(
        "Awaiting Payment",
        "Your order is reserved until payment is received.",
    ),
    OrderStatus.COMPLETED: StatusInfo(
        "Completed",
        "Payment received. Your order is complete.",
    ),
}


class OrderFlow(StrEnum):
    """
    Which status vocabulary an order lives in.

    SHIPPING: pending → confirmed → processing → shipped → delivered
    PAYMENT:  pending → awaiting_payment → completed

    An order never mixes the two.
    """

    SHIPPING = "shipping"
    PAYMENT = "payment"


class Role(StrEnum):
    BUYER = "buyer"
    SELLER = "seller"
    COURIER = "courier"
    SYSTEM = "system"


@dataclass(frozen=True, slots=True)
class Actor:
    """Whoever is asking for a status change."""

    role: Role
    id: str

    @classmethod
    def buyer(cls, buyer_id: str) -> Actor:
        return cls(Role.BUYER, buyer_id)

    @classmethod
    def seller(cls, seller_id: str) -> Actor:
        return cls(Role.SELLER, seller_id)

    @classmethod
    def courier(cls, courier_id: str) -> Actor:
        return cls(Role.COURIER, courier_id)

    @classmethod
    def system(cls) -> Actor:
        return cls(Role.SYSTEM, "system")


# ═══════════════════════════════════════════════════════════════════════════════
# Order
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderItem:
    product_id: str
    quantity: int
    unit_price: Money
    is_on_order: bool = False

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity


@dataclass(frozen=True, slots=True)
class OrderTotals:
    """
    Totals as recorded at placement.

    on_order_total is what was actually charged for on-order items: the
    deposit when one was elected, the full amount otherwise.
    """

    standard_total: Money
    on_order_total: Money
    shipping_fee: Money
    tax: Money
    total_amount: Money
    discount: Money = ZERO

    @classmethod
    def from_plan(cls, plan: PaymentPlan) -> OrderTotals:
        """
        Totals for an order placed under plan.

        total_amount is plan.due_now; tax is a placeholder line.
        """
        return cls(
            standard_total=plan.standard_total,
            on_order_total=plan.on_order_due_now,
            shipping_fee=plan.delivery_fees,
            tax=ZERO,
            total_amount=plan.due_now,
        )


@dataclass(frozen=True, slots=True)
class Order:
    """
    A placed order.

    Checkout places one order per shop; shop_id is None for lines sold
    without one. Immutable: a status change produces a new Order value.
    """

    id: str
    buyer_id: str
    status: OrderStatus
    items: tuple[OrderItem, ...]
    created_at: datetime
    payment_method: str
    delivery_address: str
    totals: OrderTotals
    has_on_order_items: bool
    flow: OrderFlow = OrderFlow.SHIPPING
    payment_timing: PaymentTiming = PaymentTiming.NOW
    deposit_elected: bool = False
    shop_id: str | None = None


__all__ = (
    "OrderStatus",
    "StatusInfo",
    "STATUS_INFO",
    "OrderFlow",
    "Role",
    "Actor",
    "OrderItem",
    "OrderTotals",
    "Order",
)

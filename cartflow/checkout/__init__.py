"""
Checkout — pricing a cart and placing one order per shop.

    from cartflow import checkout as C

    plan = C.resolve(lines, PaymentTiming.LATER)   # pure
    placed = await C.place_order(cart, orders, tracking,
                                 C.CheckoutRequest("b1", PaymentTiming.NOW, "12 Main St", "card"))
"""

from __future__ import annotations

from cartflow.checkout._types import (
    LinePayment,
    PaymentPlan,
    CheckoutRequest,
    ShopOrder,
    Placement,
)
from cartflow.checkout._resolve import resolve, resolve_totals
from cartflow.checkout._place import CompensationRefused, order_items, place_order

__all__ = (
    "LinePayment",
    "PaymentPlan",
    "CheckoutRequest",
    "ShopOrder",
    "Placement",
    "resolve",
    "resolve_totals",
    "CompensationRefused",
    "order_items",
    "place_order",
)

"""
Cart types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from cartflow._types import Money, ZERO

# ═══════════════════════════════════════════════════════════════════════════════
# Availability
# ═══════════════════════════════════════════════════════════════════════════════


class Availability(StrEnum):
    """Whether a product ships from local stock or is special-ordered."""

    IN_STOCK = "in_stock"
    ON_ORDER = "on_order"


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Line — read-only view of one cart entry
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartLine:
    """
    One product in the cart.

    Fee fields are per unit and None when the product does not charge them.
    The cart store owns these; the aggregator only reads.
    """

    product_id: str
    unit_price: Money
    quantity: int
    availability: Availability = Availability.IN_STOCK
    delivery_fee_per_unit: Money | None = None
    runner_fee_per_unit: Money | None = None
    transport_fee_per_unit: Money | None = None
    free_delivery_threshold: Money | None = None
    shop_id: str | None = None
    name: str = ""

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity

    @property
    def is_on_order(self) -> bool:
        return self.availability == Availability.ON_ORDER

    @property
    def delivery_fee(self) -> Money:
        """Delivery fee for the whole line. Only on-order lines carry one."""
        if not self.is_on_order or self.delivery_fee_per_unit is None:
            return ZERO
        threshold = self.free_delivery_threshold
        if threshold is not None and threshold > 0 and self.line_total >= threshold:
            return ZERO
        return self.delivery_fee_per_unit * self.quantity

    @property
    def runner_fee(self) -> Money:
        if self.runner_fee_per_unit is None:
            return ZERO
        return self.runner_fee_per_unit * self.quantity

    @property
    def transport_fee(self) -> Money:
        if self.transport_fee_per_unit is None:
            return ZERO
        return self.transport_fee_per_unit * self.quantity


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Totals — derived, never persisted
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartTotals:
    """
    Categorized cart totals.

    grand_total = standard_subtotal + on_order_subtotal + delivery_fee_total.
    Runner and transport fees are informational and stay out of grand_total.
    """

    standard_subtotal: Money = ZERO
    on_order_subtotal: Money = ZERO
    delivery_fee_total: Money = ZERO
    runner_fee_total: Money = ZERO
    transport_fee_total: Money = ZERO
    grand_total: Money = ZERO
    item_count: int = 0
    has_on_order_items: bool = False

    @property
    def is_empty(self) -> bool:
        return self.item_count == 0


@dataclass(frozen=True, slots=True)
class ShopGroup:
    """Cart lines sold by one shop."""

    shop_id: str | None
    lines: tuple[CartLine, ...]
    subtotal: Money


__all__ = (
    "Availability",
    "CartLine",
    "CartTotals",
    "ShopGroup",
)

"""
Aggregation — cart lines to totals.
"""

from __future__ import annotations

from collections.abc import Iterable

from kungfu import Result, Ok, Error

from cartflow._types import Money, ZERO
from cartflow.cart._types import CartLine, CartTotals, ShopGroup
from cartflow.errors import ValidationError

# ═══════════════════════════════════════════════════════════════════════════════
# aggregate() — the one reduction everything else reads
# ═══════════════════════════════════════════════════════════════════════════════


def aggregate(lines: Iterable[CartLine]) -> CartTotals:
    """
    Reduce cart lines into categorized totals.

    Pure and order-independent: any permutation of the same lines gives the
    same CartTotals. Re-run it after every cart mutation.

    Example:
        totals = aggregate([
            CartLine("p1", Decimal("10"), 2),
            CartLine("p2", Decimal("200"), 1, Availability.ON_ORDER,
                     delivery_fee_per_unit=Decimal("15")),
        ])
        totals.grand_total  # Decimal("235")
    """
    standard = ZERO
    on_order = ZERO
    delivery = ZERO
    runner = ZERO
    transport = ZERO
    count = 0
    any_on_order = False

    for line in lines:
        if line.is_on_order:
            on_order += line.line_total
            delivery += line.delivery_fee
            any_on_order = True
        else:
            standard += line.line_total
        runner += line.runner_fee
        transport += line.transport_fee
        count += line.quantity

    return CartTotals(
        standard_subtotal=standard,
        on_order_subtotal=on_order,
        delivery_fee_total=delivery,
        runner_fee_total=runner,
        transport_fee_total=transport,
        grand_total=standard + on_order + delivery,
        item_count=count,
        has_on_order_items=any_on_order,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# group_by_shop()
# ═══════════════════════════════════════════════════════════════════════════════


def group_by_shop(lines: Iterable[CartLine]) -> tuple[ShopGroup, ...]:
    """Group lines per shop, in order of first appearance."""
    grouped: dict[str | None, list[CartLine]] = {}
    for line in lines:
        grouped.setdefault(line.shop_id, []).append(line)

    def subtotal(items: list[CartLine]) -> Money:
        return sum((line.line_total for line in items), ZERO)

    return tuple(
        ShopGroup(shop_id=shop_id, lines=tuple(items), subtotal=subtotal(items))
        for shop_id, items in grouped.items()
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════════════════════


def validate_quantity(
    quantity: int,
    available_stock: int | None = None,
) -> Result[int, ValidationError]:
    """Quantity must stay within [1, available_stock]."""
    if quantity < 1:
        return Error(ValidationError("Quantity must be at least 1", "quantity"))
    if available_stock is not None and quantity > available_stock:
        return Error(ValidationError(
            f"Only {available_stock} left in stock",
            "quantity",
        ))
    return Ok(quantity)


def validate_lines(lines: Iterable[CartLine]) -> Result[tuple[CartLine, ...], ValidationError]:
    """Checkout precondition: non-empty, positive quantities, non-negative money."""
    checked = tuple(lines)
    if not checked:
        return Error(ValidationError("Your cart is empty", "lines"))

    for line in checked:
        if line.quantity < 1:
            return Error(ValidationError(
                f"Invalid quantity for {line.product_id}",
                "quantity",
            ))
        if line.unit_price < 0:
            return Error(ValidationError(
                f"Invalid price for {line.product_id}",
                "unit_price",
            ))
        fees = (
            line.delivery_fee_per_unit,
            line.runner_fee_per_unit,
            line.transport_fee_per_unit,
        )
        if any(fee is not None and fee < 0 for fee in fees):
            return Error(ValidationError(
                f"Invalid fee for {line.product_id}",
                "fees",
            ))

    return Ok(checked)


__all__ = (
    "aggregate",
    "group_by_shop",
    "validate_quantity",
    "validate_lines",
)

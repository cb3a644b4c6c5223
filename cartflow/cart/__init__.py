"""
Cart — totals for a shopping cart.

    from cartflow import cart as K

    totals = K.aggregate(lines)
    totals.grand_total      # standard + on-order + delivery fees
    totals.runner_fee_total # informational, not in grand_total

    groups = K.group_by_shop(lines)
"""

from __future__ import annotations

from cartflow.cart._types import (
    Availability,
    CartLine,
    CartTotals,
    ShopGroup,
)
from cartflow.cart._aggregate import (
    aggregate,
    group_by_shop,
    validate_quantity,
    validate_lines,
)
from cartflow.cart._delivery import DeliveryZone, ZoneFees
from cartflow.cart._session import CartSession

__all__ = (
    "Availability",
    "CartLine",
    "CartTotals",
    "ShopGroup",
    "aggregate",
    "group_by_shop",
    "validate_quantity",
    "validate_lines",
    "DeliveryZone",
    "ZoneFees",
    "CartSession",
)

"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from decimal import Decimal

from kungfu import Ok, Error

from cartflow.cart import Availability, CartLine, DeliveryZone, ZoneFees
from cartflow.repo import MemoryCartRepository


# Catalog
SOFA_DELIVERY = ZoneFees(
    local=Decimal("15"),
    uptown=Decimal("25"),
    out_of_town=Decimal("40"),
    countrywide=Decimal("60"),
)


def demo_cart(zone: DeliveryZone = DeliveryZone.LOCAL) -> MemoryCartRepository:
    """Two in-stock items from one shop, one special-order sofa from another."""
    return MemoryCartRepository([
        CartLine("soap", Decimal("4.50"), 3, shop_id="corner-store", name="Olive soap",
                 runner_fee_per_unit=Decimal("0.50")),
        CartLine("towel", Decimal("12.00"), 2, shop_id="corner-store", name="Bath towel"),
        SOFA_DELIVERY.apply(
            CartLine("sofa", Decimal("320.00"), 1, Availability.ON_ORDER,
                     shop_id="furniture-hub", name="Three-seat sofa",
                     transport_fee_per_unit=Decimal("20")),
            zone,
        ),
    ])


# Helpers
def show(result) -> None:
    match result:
        case Ok(value):
            print(f"  ✓ {value}")
        case Error(e):
            print(f"  ✗ {e.code}: {e.message}")


def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    asyncio.run(main())

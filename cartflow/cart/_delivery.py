"""
Delivery zones — per-zone delivery fee schedules.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum

from cartflow._types import Money
from cartflow.cart._types import CartLine


class DeliveryZone(StrEnum):
    LOCAL = "local"
    UPTOWN = "uptown"
    OUT_OF_TOWN = "outoftown"
    COUNTRYWIDE = "countrywide"


@dataclass(frozen=True, slots=True)
class ZoneFees:
    """
    A product's per-unit delivery fee for each zone.

    A zone left as None means the product does not charge delivery there.

    Example:
        fees = ZoneFees(local=Decimal("5"), countrywide=Decimal("40"))
        line = fees.apply(line, DeliveryZone.LOCAL)
    """

    local: Money | None = None
    uptown: Money | None = None
    out_of_town: Money | None = None
    countrywide: Money | None = None

    def fee_for(self, zone: DeliveryZone | None) -> Money | None:
        match zone:
            case DeliveryZone.LOCAL:
                return self.local
            case DeliveryZone.UPTOWN:
                return self.uptown
            case DeliveryZone.OUT_OF_TOWN:
                return self.out_of_town
            case DeliveryZone.COUNTRYWIDE:
                return self.countrywide
            case _:
                return None

    def apply(self, line: CartLine, zone: DeliveryZone | None) -> CartLine:
        """Return the line priced for delivery to zone."""
        return replace(line, delivery_fee_per_unit=self.fee_for(zone))


__all__ = ("DeliveryZone", "ZoneFees")

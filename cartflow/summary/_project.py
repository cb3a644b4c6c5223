"""
Summary projection — recompute an order's total from its stored parts.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

import structlog
from kungfu import Result, Ok, Error

from cartflow._types import Money
from cartflow.config import DEFAULT_SETTINGS, Settings
from cartflow.errors import TotalsMismatch
from cartflow.orders._types import Order

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class OrderSummary:
    """
    Display figures for a placed order.

    Amounts are exact; call display() for the rounded version of any of them.
    """

    order_id: str
    subtotal: Money
    discount: Money
    shipping: Money
    tax: Money
    stored_total: Money
    computed_total: Money
    mismatch: TotalsMismatch | None
    settings: Settings = DEFAULT_SETTINGS

    @property
    def consistent(self) -> bool:
        return self.mismatch is None

    def display(self, amount: Money) -> Decimal:
        return self.settings.display(amount)


def project(order: Order, settings: Settings = DEFAULT_SETTINGS) -> OrderSummary:
    """
    Build the summary block.

    subtotal = standard + on-order (as charged), total = subtotal - discount
    + shipping + tax. Drift beyond settings.totals_epsilon is logged and
    carried in mismatch; it never fails the projection.
    """
    t = order.totals
    subtotal = t.standard_total + t.on_order_total
    computed = subtotal - t.discount + t.shipping_fee + t.tax

    mismatch = None
    if abs(computed - t.total_amount) > settings.totals_epsilon:
        mismatch = TotalsMismatch(order.id, t.total_amount, computed)
        log.warning(
            "totals_mismatch",
            order_id=order.id,
            stored=str(t.total_amount),
            computed=str(computed),
            difference=str(mismatch.difference),
        )

    return OrderSummary(
        order_id=order.id,
        subtotal=subtotal,
        discount=t.discount,
        shipping=t.shipping_fee,
        tax=t.tax,
        stored_total=t.total_amount,
        computed_total=computed,
        mismatch=mismatch,
        settings=settings,
    )


def verify(
    order: Order,
    settings: Settings = DEFAULT_SETTINGS,
) -> Result[OrderSummary, TotalsMismatch]:
    """project(), with drift as an Error for callers that branch on it."""
    summary = project(order, settings)
    if summary.mismatch is not None:
        return Error(summary.mismatch)
    return Ok(summary)


__all__ = ("OrderSummary", "project", "verify")

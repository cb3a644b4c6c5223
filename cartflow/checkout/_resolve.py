"""
Resolve — payment timing to amounts due now and later.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog
from kungfu import Result, Ok, Error

from cartflow._types import DEPOSIT_RATIO, ZERO, PaymentTiming
from cartflow.cart._aggregate import aggregate, validate_lines
from cartflow.cart._types import CartLine, CartTotals
from cartflow.checkout._types import LinePayment, PaymentPlan
from cartflow.errors import InvalidPaymentTiming, ValidationError

log = structlog.get_logger(__name__)

_NOTHING_TO_DEFER = (
    "Pay on delivery is only available for orders with on-order items"
)


def _line_payment(line: CartLine, deposit: bool) -> LinePayment:
    total = line.line_total
    if deposit and line.is_on_order:
        now = total * DEPOSIT_RATIO
        later = total - now
    else:
        now, later = total, ZERO
    return LinePayment(
        product_id=line.product_id,
        line_total=total,
        delivery_fee=line.delivery_fee,
        due_now=now,
        due_later=later,
    )


def _plan(
    totals: CartTotals,
    timing: PaymentTiming,
    lines: tuple[LinePayment, ...],
) -> Result[PaymentPlan, ValidationError]:
    if timing == PaymentTiming.LATER and not totals.has_on_order_items:
        return Error(InvalidPaymentTiming(_NOTHING_TO_DEFER, "timing"))

    deposit = timing == PaymentTiming.LATER
    if deposit:
        on_order_now = totals.on_order_subtotal * DEPOSIT_RATIO
        due_later = totals.on_order_subtotal - on_order_now
    else:
        on_order_now = totals.on_order_subtotal
        due_later = ZERO

    plan = PaymentPlan(
        timing=timing,
        due_now=totals.standard_subtotal + totals.delivery_fee_total + on_order_now,
        due_later=due_later,
        deposit_elected=deposit,
        standard_total=totals.standard_subtotal,
        on_order_total=totals.on_order_subtotal,
        on_order_due_now=on_order_now,
        delivery_fees=totals.delivery_fee_total,
        runner_fees=totals.runner_fee_total,
        transport_fees=totals.transport_fee_total,
        has_on_order_items=totals.has_on_order_items,
        lines=lines,
    )
    log.debug(
        "payment_plan_resolved",
        timing=str(timing),
        deposit_elected=deposit,
        due_now=str(plan.due_now),
        due_later=str(plan.due_later),
    )
    return Ok(plan)


def resolve(
    lines: Iterable[CartLine],
    timing: PaymentTiming,
) -> Result[PaymentPlan, ValidationError]:
    """
    Price a cart for checkout.

    Standard items and delivery fees are always due now. With LATER, each
    on-order line takes a deposit now and the balance on delivery.

    Example:
        match resolve(lines, PaymentTiming.LATER):
            case Ok(plan):
                charge(plan.due_now)
            case Error(e):
                show(e.message)
    """
    match validate_lines(lines):
        case Error(invalid):
            return Error(invalid)
        case Ok(checked):
            pass

    deposit = timing == PaymentTiming.LATER
    return _plan(
        aggregate(checked),
        timing,
        tuple(_line_payment(line, deposit) for line in checked),
    )


def resolve_totals(
    totals: CartTotals,
    timing: PaymentTiming,
) -> Result[PaymentPlan, ValidationError]:
    """Same rule as resolve(), from totals already aggregated. No per-line breakdown."""
    if totals.is_empty:
        return Error(ValidationError("Your cart is empty", "lines"))
    return _plan(totals, timing, ())


__all__ = ("resolve", "resolve_totals")

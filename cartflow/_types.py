"""
Core types for cartflow.

Re-exports from kungfu + money helpers shared by every module.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from enum import StrEnum

# Re-export from kungfu
from kungfu import Result, Ok, Error, LazyCoroResult

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

type Money = Decimal
"""Single fixed denomination. Never rounded before display."""

ZERO: Money = Decimal("0")

DEPOSIT_RATIO: Money = Decimal("0.5")
"""Share of an on-order line charged at checkout when paying a deposit."""


def money(value: Decimal | int | str | float) -> Money:
    """
    Coerce to Decimal.

    Floats go through str() so 19.99 stays 19.99 instead of its binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def to_display(
    amount: Money,
    places: int = 2,
    rounding: str = ROUND_HALF_UP,
) -> Decimal:
    """Quantize for display. Only call on final figures."""
    return amount.quantize(Decimal(1).scaleb(-places), rounding=rounding)


# ═══════════════════════════════════════════════════════════════════════════════
# Payment Timing
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentTiming(StrEnum):
    """
    When on-order items are paid.

    NOW: everything due at checkout.
    LATER: on-order items take a deposit now, the balance on delivery.
    """

    NOW = "now"
    LATER = "later"


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "LazyCoroResult",
    # Money
    "Money",
    "ZERO",
    "DEPOSIT_RATIO",
    "money",
    "to_display",
    # Checkout
    "PaymentTiming",
)

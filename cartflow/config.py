"""
Settings — behavior configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal, ROUND_HALF_UP, ROUND_HALF_EVEN

from cartflow._types import Money, to_display

_ROUNDING_MODES = frozenset({ROUND_HALF_UP, ROUND_HALF_EVEN})


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Pricing and display configuration.

    Fluent builder pattern — chain methods to configure.

    Example:
        settings = (
            Settings()
            .with_epsilon("0.01")
            .with_display(places=2)
        )

    Note: Immutable — each method returns new Settings. Pass it explicitly;
    nothing in cartflow reads a global.
    """

    totals_epsilon: Money = Decimal("0.01")
    display_places: int = 2
    rounding: str = ROUND_HALF_UP

    def with_epsilon(self, epsilon: Decimal | str) -> Settings:
        """
        Tolerance used when comparing stored and recomputed totals.

        Example:
            .with_epsilon("0.05")
        """
        value = Decimal(epsilon)
        if value < 0:
            raise ValueError("epsilon must be non-negative")
        return replace(self, totals_epsilon=value)

    def with_display(
        self,
        *,
        places: int | None = None,
        rounding: str | None = None,
    ) -> Settings:
        """
        Set display quantization.

        Example:
            .with_display(places=2, rounding=ROUND_HALF_EVEN)
        """
        if places is not None and places < 0:
            raise ValueError("places must be non-negative")
        if rounding is not None and rounding not in _ROUNDING_MODES:
            raise ValueError(f"unsupported rounding mode: {rounding}")
        return replace(
            self,
            display_places=self.display_places if places is None else places,
            rounding=self.rounding if rounding is None else rounding,
        )

    def display(self, amount: Money) -> Decimal:
        """Round a final figure for display."""
        return to_display(amount, self.display_places, self.rounding)


DEFAULT_SETTINGS = Settings()


__all__ = ("Settings", "DEFAULT_SETTINGS")

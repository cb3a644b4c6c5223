"""
cartflow — cart pricing and order lifecycle for a marketplace.

    from cartflow import cart as K       # Cart totals
    from cartflow import checkout as C   # Payment plans and placement
    from cartflow import orders as O     # Status machine
    from cartflow import tracking as T   # Timeline and history
    from cartflow import summary as Y    # Totals verification
    from cartflow import repo as R       # Storage
"""

from cartflow import cart
from cartflow import orders
from cartflow import tracking
from cartflow import summary
from cartflow import repo
from cartflow import saga
from cartflow import checkout
from cartflow import lift
from cartflow._log import configure_logging
from cartflow._types import (
    Money,
    ZERO,
    DEPOSIT_RATIO,
    PaymentTiming,
    money,
    to_display,
)
from cartflow.config import Settings, DEFAULT_SETTINGS
from cartflow.errors import (
    ValidationError,
    InvalidPaymentTiming,
    IllegalTransition,
    Forbidden,
    TotalsMismatch,
    NotFound,
    RepositoryFailure,
)

__version__ = "0.1.0"

__all__ = (
    "cart",
    "orders",
    "tracking",
    "summary",
    "repo",
    "saga",
    "checkout",
    "lift",
    "configure_logging",
    "Money",
    "ZERO",
    "DEPOSIT_RATIO",
    "PaymentTiming",
    "money",
    "to_display",
    "Settings",
    "DEFAULT_SETTINGS",
    "ValidationError",
    "InvalidPaymentTiming",
    "IllegalTransition",
    "Forbidden",
    "TotalsMismatch",
    "NotFound",
    "RepositoryFailure",
)

"""
Saga — multi-step writes with compensation.

    from cartflow import saga as S

    saga = S.step(action, compensate).then(lambda v: S.step(action2, compensate2))
    result = await S.run(saga)
"""

from __future__ import annotations

from cartflow.saga._types import (
    Compensator,
    SagaStep,
    Then,
    SagaExpr,
    SagaResult,
    SagaError,
)
from cartflow.saga._step import step, from_async
from cartflow.saga._run import run, run_step, run_compensators

__all__ = (
    "Compensator",
    "SagaStep",
    "Then",
    "SagaExpr",
    "SagaResult",
    "SagaError",
    "step",
    "from_async",
    "run",
    "run_step",
    "run_compensators",
)

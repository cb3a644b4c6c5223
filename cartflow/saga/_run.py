"""
Saga execution with automatic rollback.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog
from kungfu import Result, Ok, Error

from cartflow.saga._types import (
    Compensator,
    SagaExpr,
    SagaStep,
    SagaResult,
    SagaError,
    Then,
)

log = structlog.get_logger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Recorded Compensator
# ═══════════════════════════════════════════════════════════════════════════════

type RecordedCompensator = tuple[str, object, Compensator[object]]


@dataclass(slots=True)
class _Progress:
    compensators: list[RecordedCompensator] = field(default_factory=list)
    steps: int = 0
    current: str = ""


# ═══════════════════════════════════════════════════════════════════════════════
# run_step() — Execute single step
# ═══════════════════════════════════════════════════════════════════════════════

async def run_step[T, E](
    step: SagaStep[T, E],
    progress: _Progress,
) -> Result[T, E]:
    """Execute single step, recording compensator on success."""
    progress.steps += 1
    progress.current = step.name
    result = await step.action
    match result:
        case Ok(value):
            if step.compensate is not None:
                progress.compensators.append((step.name, value, step.compensate))  # type: ignore[arg-type]
            return Ok(value)
        case Error(e):
            return Error(e)


async def _evaluate(expr: SagaExpr[object, object], progress: _Progress) -> Result[object, object]:
    match expr:
        case SagaStep():
            return await run_step(expr, progress)
        case Then(inner, f):
            match await _evaluate(inner, progress):
                case Ok(value):
                    return await _evaluate(f(value), progress)
                case Error(e):
                    return Error(e)
    raise TypeError(f"not a saga expression: {expr!r}")


# ═══════════════════════════════════════════════════════════════════════════════
# run_compensators() — Rollback
# ═══════════════════════════════════════════════════════════════════════════════

async def run_compensators(
    compensators: list[RecordedCompensator],
) -> tuple[int, int]:
    """Run compensators in reverse. Returns (run, failed)."""
    comp_run = 0
    comp_failed = 0

    for name, value, comp in reversed(compensators):
        try:
            await comp(value)
            comp_run += 1
        except Exception as exc:
            log.error("compensation_failed", step=name, error=str(exc))
            comp_failed += 1

    return comp_run, comp_failed


# ═══════════════════════════════════════════════════════════════════════════════
# run() — Execute Saga
# ═══════════════════════════════════════════════════════════════════════════════

async def run[T, E](
    saga: SagaExpr[T, E],
) -> Result[SagaResult[T], SagaError[E]]:
    """
    Execute saga with automatic rollback on failure.

    On success: returns SagaResult with value and metadata.
    On failure: runs recorded compensators in reverse, returns SagaError.

    Example:
        from cartflow import saga as S

        placement = (
            S.step(create_order, cancel_order, name="create_order")
            .then(lambda order: S.step(record_placed(order), name="record_placed"))
        )

        match await S.run(placement):
            case Ok(r):
                print(f"Success: {r.value}")
            case Error(e):
                print(f"Failed at {e.step_name}")
    """
    progress = _Progress()
    result = await _evaluate(saga, progress)  # type: ignore[arg-type]

    match result:
        case Ok(value):
            return Ok(SagaResult(
                value=value,  # type: ignore[arg-type]
                steps_executed=progress.steps,
                compensators_recorded=len(progress.compensators),
            ))

        case Error(error):
            log.warning(
                "saga_rolling_back",
                step=progress.current,
                compensators=len(progress.compensators),
            )
            comp_run, comp_failed = await run_compensators(progress.compensators)

            return Error(SagaError(
                error=error,  # type: ignore[arg-type]
                step_failed=progress.steps,
                step_name=progress.current,
                compensators_run=comp_run,
                compensators_failed=comp_failed,
            ))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("run", "run_step", "run_compensators")

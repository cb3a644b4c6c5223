"""
Lift — wrapping collaborator calls into Result.

Re-exports from combinators.lift with cartflow-specific additions.
"""

from __future__ import annotations

from collections.abc import Callable, Awaitable

import structlog
from kungfu import LazyCoroResult, Result, Ok, Error

from combinators.lift import catching_async

from cartflow.errors import RepositoryFailure

log = structlog.get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Repository calls
# ═══════════════════════════════════════════════════════════════════════════════

def _failure(operation: str) -> Callable[[Exception], RepositoryFailure]:
    def on_error(exc: Exception) -> RepositoryFailure:
        log.error("repository_failure", operation=operation, error=str(exc))
        return RepositoryFailure(operation, exc)
    return on_error


def guarded[T](
    operation: str,
    call: Callable[[], Awaitable[T]],
) -> LazyCoroResult[T, RepositoryFailure]:
    """
    Run a collaborator call; an exception becomes RepositoryFailure(operation).

    Example:
        lines = await guarded("cart.get_lines", cart.get_lines)
    """
    return catching_async(call, on_error=_failure(operation))


def guarded_result[T, E](
    operation: str,
    call: Callable[[], Awaitable[Result[T, E]]],
) -> LazyCoroResult[T, E | RepositoryFailure]:
    """
    Like guarded(), for calls that already answer with a Result.

    Flattens Result[Result[T, E], RepositoryFailure] into Result[T, E | RepositoryFailure].
    """
    async def _run() -> Result[T, E | RepositoryFailure]:
        outer = await guarded(operation, call)
        match outer:
            case Ok(inner):
                return inner
            case Error(failure):
                return Error(failure)
    return LazyCoroResult(_run)


__all__ = (
    "catching_async",
    "guarded",
    "guarded_result",
)

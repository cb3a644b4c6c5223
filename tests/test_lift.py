"""Tests for lifting collaborator calls and logging setup."""

from kungfu import Ok, Error
from structlog.testing import capture_logs

from cartflow import configure_logging
from cartflow.errors import NotFound, RepositoryFailure
from cartflow.lift import guarded, guarded_result

from conftest import err, ok


async def test_guarded_passes_values() -> None:
    async def call():
        return 42
    assert ok(await guarded("thing.get", call)) == 42


async def test_guarded_tags_failures_and_logs() -> None:
    boom = ConnectionError("down")

    async def call():
        raise boom

    with capture_logs() as logs:
        e = err(await guarded("thing.get", call))

    assert isinstance(e, RepositoryFailure)
    assert e.operation == "thing.get"
    assert e.cause is boom
    assert e.code == "REPOSITORY_FAILURE"
    assert logs[0]["event"] == "repository_failure"
    assert logs[0]["log_level"] == "error"


async def test_guarded_result_flattens() -> None:
    async def found():
        return Ok("order")

    async def missing():
        return Error(NotFound("order", "x"))

    assert ok(await guarded_result("orders.fetch", found)) == "order"
    assert isinstance(err(await guarded_result("orders.fetch", missing)), NotFound)


def test_configure_logging_json(capsys) -> None:
    import structlog

    configure_logging("DEBUG", json=True)
    try:
        structlog.get_logger("cartflow.test").info("hello", order_id="ORD-1")
        out = capsys.readouterr().out
        assert '"event": "hello"' in out
        assert '"order_id": "ORD-1"' in out
    finally:
        structlog.reset_defaults()

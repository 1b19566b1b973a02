from __future__ import annotations

import pytest

from named_events.registry import EventRegistry


@pytest.fixture()
def registry() -> EventRegistry:
    return EventRegistry(debug=True)


def test_handler_exception_propagates_and_stops_chain(registry: EventRegistry) -> None:
    order: list[str] = []

    def failing() -> None:
        order.append("failing")
        raise ValueError("boom")

    def after() -> None:
        order.append("after")

    registry.bind("demo.error", failing)
    registry.bind("demo.error", after)

    with pytest.raises(ValueError, match="boom"):
        registry.run("demo.error")

    assert order == ["failing"]
    assert registry.has_run("demo.error") is True


def test_raising_once_handler_stays_registered(registry: EventRegistry) -> None:
    attempts: list[int] = []

    def flaky() -> str:
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("first attempt fails")
        return "ok"

    registry.bind("demo.retry", flaky, once=True)

    with pytest.raises(RuntimeError):
        registry.run("demo.retry")

    assert registry.handler_count("demo.retry") == 1
    assert registry.run("demo.retry") == ["ok"]
    assert registry.handler_count("demo.retry") == 0
    assert registry.run("demo.retry") is None


def test_once_handlers_before_failure_are_removed(registry: EventRegistry) -> None:
    registry.bind("demo.partial", lambda: "once", once=True)
    registry.bind("demo.partial", lambda: 1 / 0)

    with pytest.raises(ZeroDivisionError):
        registry.run("demo.partial")

    assert registry.handler_count("demo.partial") == 1


def test_first_and_until_propagate_errors(registry: EventRegistry) -> None:
    def failing() -> None:
        raise KeyError("missing")

    registry.bind("demo.error", failing)

    with pytest.raises(KeyError):
        registry.first("demo.error")

    with pytest.raises(KeyError):
        registry.until("demo.error")


def test_argument_mismatch_is_callers_problem(registry: EventRegistry) -> None:
    registry.bind("demo.arity", lambda a, b: a + b)

    with pytest.raises(TypeError):
        registry.run("demo.arity", [1])


def test_any_name_is_accepted(registry: EventRegistry) -> None:
    registry.bind("", lambda: "empty-name")
    registry.bind("with spaces / and:colons", lambda: "odd")

    assert registry.run("") == ["empty-name"]
    assert registry.run("with spaces / and:colons") == ["odd"]

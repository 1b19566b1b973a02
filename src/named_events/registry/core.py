"""EventRegistry core implementation.

This module contains the EventRegistry class, the named-event table that
callers bind handlers to and trigger synchronously.

CONTENTS:
- EventRegistry: Registration (bind/rebind/append/insert/unbind/on),
  triggering (run/first/until), inspection (bound/has_run/handlers) and
  run-tracking reset

THREAD SAFETY: Registration, removal and run-tracking are serialized by the
HandlerTable's RLock. Handlers themselves are invoked outside the lock on the
calling thread, in list order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .registration import EventName, HandlerEntry, HandlerTable
from .tracing import EventTracer

logger = logging.getLogger(__name__)


class EventRegistry:
    """
    Named-event registry with ordered, synchronous handler execution.

    PURPOSE: Let independent pieces of code hook into named points of a
    program. Callers bind callbacks under a string name and later trigger the
    name to invoke every callback in queue order, collecting the responses.

    LIFECYCLE:
    1. Construction: one registry per application (or per test)
    2. Registration: bind()/append()/insert()/rebind() or the on() decorator
    3. Triggering: run(), first() or until()
    4. Teardown: close() (or leaving a ``with`` block) drops all state

    EXECUTION RULES:
    - Handlers run front to back; append adds to the back, insert to the front
    - Each handler receives the trigger's data spread as positional arguments
    - A handler bound with once=True is removed after it returns successfully
    - A raising handler propagates its exception; later handlers do not run
      and a raising once handler stays registered
    - run(stop=True) returns right after the first truthy response

    TYPICAL USAGE:
    ```python
    events = EventRegistry()

    events.bind("system.ready", lambda: "db")
    events.bind("system.ready", lambda: "cache", once=True)

    events.run("system.ready")  # ["db", "cache"]
    events.run("system.ready")  # ["db"]
    events.has_run("system.ready")  # True
    ```

    CONFIGURATION OPTIONS:
    - debug: Log registration and removal details
    - event_trace: Time and report every trigger (see EventTracer)
    - trace_verbosity / trace_use_rich: Trace output detail and format
    - tracer: Custom EventTracer instance
    """

    def __init__(
        self,
        debug: bool = False,
        event_trace: bool = False,
        trace_verbosity: int = 1,
        trace_use_rich: bool = True,
        tracer: EventTracer | None = None,
    ):
        """
        Initialize EventRegistry.

        Args:
            debug: Enable debug logging of registration changes
            event_trace: Enable trigger tracing with timing
            trace_verbosity: Trace detail level (0=minimal, 1=normal, 2=verbose)
            trace_use_rich: Use Rich formatting for trace output
            tracer: Tracer to use instead of a fresh EventTracer
        """
        self._debug = debug
        self._table = HandlerTable(debug=debug)
        self._has_run: set[EventName] = set()

        if tracer is None:
            tracer = EventTracer(
                enabled=event_trace, verbosity=trace_verbosity, use_rich=trace_use_rich
            )
        self._tracer = tracer
        if event_trace:
            logger.debug("Event tracing enabled")

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def bind(self, name: EventName, callback: Callable[..., Any], once: bool = False) -> None:
        """
        Register a handler for an event.

        Each call adds another handler to the end of the event's queue; the
        same callback bound twice runs twice.

        Args:
            name: Event name
            callback: Handler invoked with the trigger's data as positional args
            once: Remove the handler after it fires successfully once
        """
        self.append(name, callback, once)

    def rebind(self, name: EventName, callback: Callable[..., Any], once: bool = False) -> None:
        """Replace every handler for an event with a single new handler."""
        self._table.replace(name, HandlerEntry.create(callback, once))

    def append(self, name: EventName, callback: Callable[..., Any], once: bool = False) -> None:
        """Add a handler to the end of an event's queue (same as bind)."""
        self._table.append(name, HandlerEntry.create(callback, once))

    def insert(self, name: EventName, callback: Callable[..., Any], once: bool = False) -> None:
        """
        Add a handler to the start of an event's queue.

        If the event has no handler list yet this is identical to append().
        """
        self._table.prepend(name, HandlerEntry.create(callback, once))

    def unbind(self, name: EventName | None = None) -> None:
        """
        Deregister the handlers for an event.

        Args:
            name: Event to clear. When omitted, every event's handlers are removed.
        """
        self._table.remove(name)

    def on(
        self, name: EventName, once: bool = False, first: bool = False
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """
        Decorator form of bind().

        Example:
            ```python
            @events.on("user.login")
            def audit(user_id: int) -> None:
                ...

            @events.on("user.login", first=True)
            def authorize(user_id: int) -> bool:
                ...
            ```

        Args:
            name: Event name
            once: Remove the handler after it fires successfully once
            first: Insert at the front of the queue instead of appending

        Returns:
            Decorator that registers the function and returns it unchanged
        """

        def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
            if first:
                self.insert(name, fn, once)
            else:
                self.append(name, fn, once)
            return fn

        return decorator

    # ------------------------------------------------------------------
    # Triggering
    # ------------------------------------------------------------------

    def run(self, name: EventName, data: Any = (), stop: bool = False) -> list[Any] | None:
        """
        Trigger every handler for an event.

        Returns the responses of all handlers that ran, in order, including
        empty ones. Returns None when the event has no handlers.

        Example:
            ```python
            # Trigger "start" with no arguments
            responses = events.run("start")

            # Pass two positional arguments to every handler
            responses = events.run("start", ["foo", "bar"])
            ```

        Args:
            name: Event name
            data: Positional arguments for the handlers. A list or tuple is
                spread, None means no arguments, and any other value is passed
                as the single argument.
            stop: Return right after the first truthy response. A response's
                own __bool__ decides truthiness; anything it raises (for example
                ValueError from an array with ambiguous truth value) propagates.

        Returns:
            List of responses, or None if no handler ran
        """
        return self._trigger(name, data, stop, "run")

    def first(self, name: EventName, data: Any = ()) -> Any:
        """
        Trigger an event and return only the first response.

        The first response is returned even if it is empty; every handler
        still runs. Returns None when the event has no handlers.
        """
        responses = self._trigger(name, data, False, "first")
        return responses[0] if responses else None

    def until(self, name: EventName, data: Any = ()) -> Any:
        """
        Trigger handlers until one returns a truthy response and return it.

        When no handler produces a truthy response the last response is
        returned. Returns None when the event has no handlers.
        """
        responses = self._trigger(name, data, True, "until")
        return responses[-1] if responses else None

    def _trigger(
        self, name: EventName, data: Any, stop: bool, method: str
    ) -> list[Any] | None:
        if data is None:
            arguments: list[Any] | tuple[Any, ...] = ()
        elif isinstance(data, (list, tuple)):
            arguments = data
        else:
            arguments = [data]
        started = self._tracer.start()

        with self._table.lock:
            entries = self._table.snapshot(name)
            if entries is not None:
                self._has_run.add(name)

        if entries is None:
            self._tracer.stop(name, method, arguments, 0, started)
            return None

        responses: list[Any] = []
        error: BaseException | None = None
        try:
            for entry in entries:
                if entry.once and not self._claim(name, entry):
                    continue

                try:
                    response = entry.callback(*arguments)
                except BaseException:
                    if entry.once:
                        self._release(entry)
                    raise

                responses.append(response)

                if entry.once:
                    self._table.discard(name, entry)

                if stop and response:
                    break
        except BaseException as e:
            error = e
            raise
        finally:
            self._tracer.stop(
                name,
                method,
                arguments,
                len(entries),
                started,
                result=responses or None,
                error=error,
            )

        return responses or None

    def _claim(self, name: EventName, entry: HandlerEntry) -> bool:
        """Reserve a once entry for this run; False if it already fired or was removed."""
        with self._table.lock:
            if entry.claimed or not self._table.holds(name, entry):
                return False
            entry.claimed = True
            return True

    def _release(self, entry: HandlerEntry) -> None:
        with self._table.lock:
            entry.claimed = False

    # ------------------------------------------------------------------
    # Inspection and run-tracking
    # ------------------------------------------------------------------

    def bound(self, name: EventName) -> bool:
        """
        Check if an event has a handler list.

        A list emptied by once handlers still counts as bound; only unbind()
        removes it.
        """
        return self._table.contains(name)

    def has_run(self, name: EventName) -> bool:
        """Check if a bound event has been triggered since the last reset."""
        with self._table.lock:
            return name in self._has_run

    def reset(self, name: EventName | None = None) -> None:
        """
        Clear the flag indicating an event has run.

        Args:
            name: Event to clear. When omitted, the flag is cleared for every event.
        """
        with self._table.lock:
            if name is None:
                self._has_run.clear()
            else:
                self._has_run.discard(name)

    def handlers(self, name: EventName) -> tuple[HandlerEntry, ...]:
        """Registered entries for an event, in invocation order."""
        return tuple(self._table.snapshot(name) or ())

    def handler_count(self, name: EventName | None = None) -> int:
        """Number of handlers for an event, or across all events."""
        return self._table.count(name)

    def events(self) -> list[EventName]:
        """Names that currently have a handler list."""
        return self._table.names()

    # ------------------------------------------------------------------
    # Tracing
    # ------------------------------------------------------------------

    def set_event_trace(
        self, enabled: bool, verbosity: int = 1, use_rich: bool = True
    ) -> None:
        """
        Enable or disable trigger tracing.

        When enabled, every run()/first()/until() call is timed and reported
        with its handler count, arguments and result.

        Args:
            enabled: Whether to enable tracing
            verbosity: Level of detail (0=minimal, 1=normal, 2=verbose)
            use_rich: Whether to use Rich formatting for output
        """
        self._tracer.configure(enabled, verbosity, use_rich)

    @property
    def event_trace_enabled(self) -> bool:
        return self._tracer.enabled

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Drop every registration and all run-tracking."""
        with self._table.lock:
            self.unbind()
            self.reset()
        if self._debug:
            logger.debug("EventRegistry closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

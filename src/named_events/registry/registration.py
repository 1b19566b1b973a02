"""Handler entries and thread-safe handler storage.

This module contains the storage layer behind EventRegistry: the tagged
handler entry record and the table mapping event names to ordered entry
lists.

CONTENTS:
- HandlerLifecycle: Enum tagging an entry as ALWAYS or ONCE
- HandlerEntry: A registered callback plus its lifecycle tag
- HandlerTable: Thread-safe name -> ordered entries storage

THREAD SAFETY: Every HandlerTable operation is protected by a threading.RLock.
The lock is re-entrant so a handler may register or remove handlers from
inside a run on the same thread.
"""

from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

EventName = str
"""Opaque string key handlers are grouped under."""


class HandlerLifecycle(enum.Enum):
    """How long a handler stays registered.

    - ALWAYS: Survives every trigger until explicitly unbound
    - ONCE: Removed after it fires successfully the first time
    """

    ALWAYS = "always"
    ONCE = "once"


@dataclass(eq=False)
class HandlerEntry:
    """A registered callback tagged with its lifecycle.

    Entries compare by identity: binding the same callback twice creates two
    independent entries that fire independently.
    """

    callback: Callable[..., Any]
    """The handler invoked with the trigger's positional arguments."""

    lifecycle: HandlerLifecycle = HandlerLifecycle.ALWAYS
    """ALWAYS or ONCE."""

    claimed: bool = field(default=False, repr=False)
    """Set while a ONCE entry is firing so concurrent runs skip it."""

    @classmethod
    def create(cls, callback: Callable[..., Any], once: bool = False) -> HandlerEntry:
        return cls(
            callback=callback,
            lifecycle=HandlerLifecycle.ONCE if once else HandlerLifecycle.ALWAYS,
        )

    @property
    def once(self) -> bool:
        return self.lifecycle is HandlerLifecycle.ONCE

    @property
    def name(self) -> str:
        return getattr(self.callback, "__name__", repr(self.callback))


class HandlerTable:
    """Thread-safe storage of ordered handler lists keyed by event name.

    A name stays present after its last ONCE entry is removed; its list is
    simply empty. Only remove() deletes keys.

    THREAD SAFETY: All public methods are protected by self.lock
    (threading.RLock). EventRegistry shares the same lock for its run-tracking
    set so both tables change under a single mutual-exclusion mechanism.
    """

    def __init__(self, debug: bool = False):
        self.lock = threading.RLock()
        """RLock guarding the table (and the owning registry's run-tracking)."""

        self._events: dict[EventName, list[HandlerEntry]] = {}
        """event name -> entries in invocation order."""

        self._debug = debug

    def append(self, event: EventName, entry: HandlerEntry) -> None:
        """Add an entry to the end of an event's queue."""
        with self.lock:
            self._events.setdefault(event, []).append(entry)
            if self._debug:
                logger.debug(
                    f"Appended {entry.name} ({entry.lifecycle.value}) to {event!r}"
                )

    def prepend(self, event: EventName, entry: HandlerEntry) -> None:
        """Add an entry to the front of an event's queue."""
        with self.lock:
            self._events.setdefault(event, []).insert(0, entry)
            if self._debug:
                logger.debug(
                    f"Inserted {entry.name} ({entry.lifecycle.value}) at front of {event!r}"
                )

    def replace(self, event: EventName, entry: HandlerEntry) -> None:
        """Discard every entry for an event and register a single new one."""
        with self.lock:
            self._events[event] = [entry]
            if self._debug:
                logger.debug(f"Replaced handlers for {event!r} with {entry.name}")

    def remove(self, event: EventName | None = None) -> None:
        """Remove an event's whole list, or every list when event is None."""
        with self.lock:
            if event is None:
                self._events.clear()
                if self._debug:
                    logger.debug("Removed all handlers")
            elif self._events.pop(event, None) is not None and self._debug:
                logger.debug(f"Removed handlers for {event!r}")

    def discard(self, event: EventName, entry: HandlerEntry) -> bool:
        """Remove one specific entry, matched by identity.

        Returns:
            True if the entry was still registered and has been removed
        """
        with self.lock:
            entries = self._events.get(event)
            if entries is None:
                return False
            for index, candidate in enumerate(entries):
                if candidate is entry:
                    del entries[index]
                    if self._debug:
                        logger.debug(f"Discarded once handler {entry.name} from {event!r}")
                    return True
            return False

    def holds(self, event: EventName, entry: HandlerEntry) -> bool:
        """Check whether a specific entry is still registered for an event."""
        with self.lock:
            return any(candidate is entry for candidate in self._events.get(event, ()))

    def contains(self, event: EventName) -> bool:
        with self.lock:
            return event in self._events

    def snapshot(self, event: EventName) -> list[HandlerEntry] | None:
        """Copy of an event's entries, or None if the event is not bound."""
        with self.lock:
            entries = self._events.get(event)
            return None if entries is None else list(entries)

    def names(self) -> list[EventName]:
        with self.lock:
            return list(self._events)

    def count(self, event: EventName | None = None) -> int:
        """Number of entries for an event, or across all events."""
        with self.lock:
            if event is not None:
                return len(self._events.get(event, ()))
            return sum(len(entries) for entries in self._events.values())

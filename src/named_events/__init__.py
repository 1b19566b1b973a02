"""named_events - in-process named-event registry.

Bind handlers under a string name and trigger the name to run them in order.
"""

import logging

from .registry import (
    EventName,
    EventRegistry,
    EventTracer,
    HandlerEntry,
    HandlerLifecycle,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "EventRegistry",
    "EventTracer",
    "HandlerEntry",
    "HandlerLifecycle",
    "EventName",
]

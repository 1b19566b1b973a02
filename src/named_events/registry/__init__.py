"""Re-export the EventRegistry package's public API under one import path."""

from __future__ import annotations

# Main EventRegistry class
from .core import EventRegistry

# Handler entries and storage
from .registration import EventName, HandlerEntry, HandlerLifecycle, HandlerTable

# Trigger tracing
from .tracing import EventTracer

__all__ = [
    # Core classes
    "EventRegistry",
    "EventTracer",
    # Registration
    "HandlerEntry",
    "HandlerLifecycle",
    "HandlerTable",
    # Type aliases
    "EventName",
]

from __future__ import annotations

import pytest

from named_events.registry import EventRegistry


@pytest.fixture()
def registry() -> EventRegistry:
    return EventRegistry()

"""Turn on trigger tracing to see handler counts and timing for each run."""

from __future__ import annotations

import time

from named_events import EventRegistry


def main() -> None:
    events = EventRegistry(event_trace=True, trace_verbosity=2)

    def slow_handler(payload: dict) -> int:
        time.sleep(0.005)
        return len(payload)

    events.bind("job.finished", slow_handler)
    events.bind("job.finished", lambda payload: payload.get("status"))

    events.run("job.finished", [{"status": "ok", "rows": 12}])
    events.first("job.missing")

    events.set_event_trace(False)


if __name__ == "__main__":
    main()

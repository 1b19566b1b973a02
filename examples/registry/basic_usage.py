"""Minimal EventRegistry example covering binding, once handlers and triggers."""

from __future__ import annotations

from named_events import EventRegistry

events = EventRegistry()


@events.on("app.ready")
def connect_database() -> str:
    return "database"


@events.on("app.ready", once=True)
def warm_cache() -> str:
    return "cache"


@events.on("auth.lookup")
def from_session(user_id: int) -> str | None:
    return None


@events.on("auth.lookup")
def from_directory(user_id: int) -> str | None:
    return f"user-{user_id}"


def main() -> None:
    print(events.run("app.ready"))
    print(events.run("app.ready"))
    print(events.until("auth.lookup", [7]))
    print(events.has_run("app.ready"))


if __name__ == "__main__":
    main()

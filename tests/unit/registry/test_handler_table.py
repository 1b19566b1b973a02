from __future__ import annotations

import logging

import pytest

from named_events.registry import HandlerEntry, HandlerLifecycle, HandlerTable


def _entry(tag: str, once: bool = False) -> HandlerEntry:
    return HandlerEntry.create(lambda: tag, once=once)


def test_entry_tags() -> None:
    always = _entry("a")
    once = _entry("b", once=True)

    assert always.lifecycle is HandlerLifecycle.ALWAYS
    assert always.once is False
    assert once.lifecycle is HandlerLifecycle.ONCE
    assert once.once is True


def test_entries_compare_by_identity() -> None:
    def callback() -> None:
        return None

    first = HandlerEntry.create(callback)
    second = HandlerEntry.create(callback)

    assert first != second
    assert first == first


def test_append_prepend_and_snapshot_order() -> None:
    table = HandlerTable()
    a, b, c = _entry("a"), _entry("b"), _entry("c")

    table.append("evt", a)
    table.append("evt", b)
    table.prepend("evt", c)

    assert table.snapshot("evt") == [c, a, b]
    assert table.snapshot("missing") is None


def test_snapshot_is_a_copy() -> None:
    table = HandlerTable()
    table.append("evt", _entry("a"))

    snapshot = table.snapshot("evt")
    assert snapshot is not None
    snapshot.clear()

    assert table.count("evt") == 1


def test_discard_removes_only_matching_entry() -> None:
    table = HandlerTable()
    a, b = _entry("a"), _entry("b")
    table.append("evt", a)
    table.append("evt", b)

    assert table.discard("evt", a) is True
    assert table.discard("evt", a) is False
    assert table.discard("missing", b) is False
    assert table.snapshot("evt") == [b]
    assert table.holds("evt", b)
    assert not table.holds("evt", a)


def test_discarding_last_entry_keeps_key() -> None:
    table = HandlerTable()
    a = _entry("a", once=True)
    table.append("evt", a)

    table.discard("evt", a)

    assert table.contains("evt")
    assert table.snapshot("evt") == []


def test_replace_and_remove() -> None:
    table = HandlerTable()
    table.append("one", _entry("a"))
    table.append("one", _entry("b"))
    table.append("two", _entry("c"))
    replacement = _entry("d")

    table.replace("one", replacement)
    assert table.snapshot("one") == [replacement]

    table.remove("one")
    assert not table.contains("one")
    assert table.names() == ["two"]

    table.remove()
    assert table.names() == []
    assert table.count() == 0


def test_debug_logging(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="named_events.registry.registration")
    table = HandlerTable(debug=True)

    def greet() -> None:
        return None

    table.append("evt", HandlerEntry.create(greet, once=True))
    table.remove("evt")

    assert "Appended greet (once) to 'evt'" in caplog.text
    assert "Removed handlers for 'evt'" in caplog.text

"""Trigger timing and trace output for EventRegistry.

EventTracer is the optional profiling collaborator wrapped around every
trigger: the registry asks it for a start mark before invoking handlers and
hands it the outcome afterwards. It only observes; ordering, once-removal and
return values are decided by the registry alone.

Output goes to a Rich console on stderr, or to the module logger at DEBUG
when Rich formatting is turned off.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .registration import EventName

logger = logging.getLogger(__name__)

# Use stderr to avoid interfering with stdout
_console = Console(stderr=True)

_VERBOSITY_NAMES = ["minimal", "normal", "verbose"]

_METHOD_COLORS = {
    "run": "blue",
    "first": "cyan",
    "until": "magenta",
}


def _truncate(value: Any, limit: int) -> str:
    text = str(value)
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


class EventTracer:
    """Measure and report each trigger call.

    Verbosity levels:
    - 0: main line only
    - 1: main line plus an inline summary of the first three arguments
    - 2: main line plus a table of arguments, result and error
    """

    def __init__(self, enabled: bool = False, verbosity: int = 1, use_rich: bool = True):
        self.enabled = enabled
        self.verbosity = verbosity
        self.use_rich = use_rich

    def configure(
        self, enabled: bool, verbosity: int = 1, use_rich: bool = True
    ) -> None:
        """Enable or disable tracing and announce the change."""
        was_rich = self.use_rich
        self.enabled = enabled
        self.verbosity = verbosity
        self.use_rich = use_rich

        if enabled:
            msg = "Event tracing enabled"
            if use_rich:
                _console.print(
                    Panel(
                        f"[bold green]✓[/bold green] {msg}\n"
                        f"[dim]Verbosity: {_VERBOSITY_NAMES[min(verbosity, 2)]}[/dim]",
                        title="Event Tracing",
                        border_style="green",
                    )
                )
            else:
                logger.info(f"{msg} (verbosity={verbosity})")
        else:
            msg = "Event tracing disabled"
            if use_rich and was_rich:
                _console.print(f"[yellow]ℹ[/yellow] {msg}")
            else:
                logger.info(msg)

    def start(self) -> float | None:
        """Start mark for a trigger, or None when tracing is off."""
        if not self.enabled:
            return None
        return time.perf_counter()

    def stop(
        self,
        event: EventName,
        method: str,
        arguments: Sequence[Any],
        handler_count: int,
        started: float | None,
        result: Any = None,
        error: BaseException | None = None,
    ) -> None:
        """Report a finished trigger started with start()."""
        if started is None or not self.enabled:
            return
        duration_ms = (time.perf_counter() - started) * 1000
        self.log(event, method, arguments, handler_count, duration_ms, result, error)

    def format(
        self,
        event: EventName,
        method: str,
        arguments: Sequence[Any] = (),
        handler_count: int = 0,
        duration_ms: float | None = None,
        result: Any = None,
        error: BaseException | None = None,
    ) -> tuple[Text | str, Table | None]:
        """
        Format trace data as a Rich line, or a plain string when Rich is off.

        Returns:
            Tuple of (main_text, optional_table)
        """
        method_color = _METHOD_COLORS.get(method, "white")

        text: Text | str
        if self.use_rich:
            text = Text()
            text.append("⚡ ", style="bold")
            text.append(event, style=f"bold {method_color}")
            text.append(" | ")
            text.append(f"{method}()", style=method_color)
            text.append(" | ")

            if handler_count > 0:
                text.append(f"handlers: {handler_count}", style="green")
            else:
                text.append("no handlers", style="dim red")

            if duration_ms is not None:
                text.append(" | ")
                if duration_ms < 10:
                    dur_style = "green"
                elif duration_ms < 100:
                    dur_style = "yellow"
                else:
                    dur_style = "red"
                text.append(f"{duration_ms:.2f}ms", style=f"bold {dur_style}")

            if error:
                text.append(" | ")
                text.append(f"ERROR: {error!r}", style="bold red")
        else:
            parts = [
                "[EVENT TRACE]",
                f"event={event!r}",
                f"method={method}",
                f"handlers={handler_count}",
            ]
            if duration_ms is not None:
                parts.append(f"duration={duration_ms:.2f}ms")
            if error:
                parts.append(f"error={error!r}")
            if arguments:
                parts.append(f"args={_truncate(tuple(arguments), 200)}")
            if result is not None:
                parts.append(f"result={_truncate(result, 100)}")
            text = " | ".join(parts)

        table = None
        if self.verbosity >= 2 and self.use_rich:
            table = Table(show_header=True, header_style="bold cyan", box=None)
            table.add_column("Field", style="cyan", width=15)
            table.add_column("Value", overflow="fold")

            for index, value in enumerate(arguments):
                table.add_row(f"arg[{index}]", _truncate(value, 100))

            if result is not None:
                table.add_row("result", _truncate(result, 200), style="green")

            if error:
                table.add_row("error", str(error), style="red")

        return text, table

    def log(
        self,
        event: EventName,
        method: str,
        arguments: Sequence[Any] = (),
        handler_count: int = 0,
        duration_ms: float | None = None,
        result: Any = None,
        error: BaseException | None = None,
    ) -> None:
        """Emit one trace record for a trigger."""
        if not self.enabled:
            return

        text, table = self.format(
            event, method, arguments, handler_count, duration_ms, result, error
        )

        if self.use_rich:
            if self.verbosity == 1 and arguments and isinstance(text, Text):
                summary = Text(" ")
                summary.append("[", style="dim")
                summary.append(
                    ", ".join(_truncate(value, 20) for value in list(arguments)[:3]),
                    style="dim",
                )
                if len(arguments) > 3:
                    summary.append(f", +{len(arguments) - 3} more", style="dim italic")
                summary.append("]", style="dim")
                text.append(summary)
            _console.print(text)
            if table is not None:
                _console.print(table)
            return

        logger.debug(text)

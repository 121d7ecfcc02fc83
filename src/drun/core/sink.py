"""
Output sinks for pipeline events.

The pipeline never prints. It emits `Event` objects to an injected
`OutputSink`; the CLI renders them on a rich console, library callers can
forward them to `logging` or collect them.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, runtime_checkable

from rich.console import Console
from rich.markup import escape

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Event:
    """
    A structured message from the pipeline.

    Attributes
    ----------
    severity : Severity
        How the message should be presented.
    message : str
        Human readable text.
    command : Optional[str]
        A rendered command line attached to the event, if any.
    """

    severity: Severity
    message: str
    command: Optional[str] = None


@runtime_checkable
class OutputSink(Protocol):
    def emit(self, event: Event) -> None: ...


_TAG_STYLES = {
    Severity.INFO: ("INFO", "blue"),
    Severity.SUCCESS: ("SUCCESS", "green"),
    Severity.WARNING: ("WARNING", "yellow"),
    Severity.ERROR: ("ERROR", "red"),
}


class ConsoleSink:
    """Render events as coloured ``[TAG] message`` lines on a rich console."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(highlight=False)

    def emit(self, event: Event) -> None:
        tag, style = _TAG_STYLES[event.severity]
        self.console.print(
            f"[{style}]\\[{tag}][/{style}] {escape(event.message)}", soft_wrap=True
        )
        if event.command is not None:
            self.console.print("[cyan]Generated command:[/cyan]")
            # Never wrap: the line must stay copy-pasteable.
            self.console.print(f"[bold]{escape(event.command)}[/bold]", soft_wrap=True)
            self.console.print()


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class LoggingSink:
    """Forward events to a standard library logger."""

    def __init__(self, target: Optional[logging.Logger] = None) -> None:
        self.logger = target or logger

    def emit(self, event: Event) -> None:
        message = event.message
        if event.command is not None:
            message = f"{message}: {event.command}"
        self.logger.log(_LOG_LEVELS[event.severity], message)

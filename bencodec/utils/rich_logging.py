"""Rich logging integration for bencodec.

Provides the Rich console handler and a markup-stripping file formatter.
"""

from __future__ import annotations

import logging
import re
import sys

from rich.console import Console
from rich.logging import RichHandler

_MARKUP_PATTERN = re.compile(r"\[/?[^\]]+\]")


class CorrelationRichHandler(RichHandler):
    """RichHandler that tags each record with the active correlation ID."""

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record with correlation ID attached."""
        if not hasattr(record, "correlation_id"):
            from bencodec.utils.logging_config import correlation_id

            record.correlation_id = correlation_id.get() or "no-correlation-id"
        super().emit(record)


def strip_rich_markup(text: str) -> str:
    """Strip Rich markup tags like ``[red]`` or ``[/bold]`` from text."""
    return _MARKUP_PATTERN.sub("", text)


class FileFormatter(logging.Formatter):
    """Formatter for file output that strips Rich markup.

    Only the message template is stripped. Arguments are interpolated
    afterwards, so bracketed text in logged data survives.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record, stripping Rich markup for file output."""
        plain = logging.makeLogRecord(record.__dict__)
        plain.msg = strip_rich_markup(str(record.msg))
        return super().format(plain)


def create_rich_handler(
    console: Console | None = None,
    level: int | str = logging.INFO,
    show_path: bool = False,
    rich_tracebacks: bool = True,
) -> logging.Handler:
    """Create a RichHandler with correlation ID support.

    Logs go to stderr so they never mix with encoded output on stdout.
    """
    if console is None:
        console = Console(file=sys.stderr, markup=True)

    return CorrelationRichHandler(
        console=console,
        level=level,
        show_path=show_path,
        rich_tracebacks=rich_tracebacks,
    )

"""User facing output for icloud-snapshot.

Every message is a single line of the form::

    <level> [<dd MMM yy HH:mm:ss>]: <message>
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from rich.console import Console
from rich.text import Text

from .utils import LOG_DATE_FORMAT, format_date_stamp

LEVEL_STYLES = {
    "info": "",
    "warning": "yellow",
    "error": "bold red",
    "debug": "dim",
}


class LogLineFormatter(logging.Formatter):
    """Format log records like output lines, with the logger name added."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(levelname)s [%(asctime)s]: %(name)s: %(message)s",
            datefmt=LOG_DATE_FORMAT,
        )

    def format(self, record: logging.LogRecord) -> str:
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = record.levelname.lower()
        return super().format(record)


def setup_logging(debug: bool = False) -> logging.Logger:
    """Configure the ``icloud_snapshot`` logger tree.

    Args:
        debug: Log DEBUG records, otherwise only WARNING and above

    Returns:
        The package logger
    """
    logger = logging.getLogger("icloud_snapshot")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler = logging.StreamHandler()
    handler.setFormatter(LogLineFormatter())
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False
    return logger


class OutputFormatter:
    """Writes timestamped, level prefixed lines to the console."""

    def __init__(
        self,
        quiet: bool = False,
        debug: bool = False,
        console: Optional[Console] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize output formatter.

        Args:
            quiet: Suppress info and debug lines (errors and warnings stay)
            debug: Emit debug lines
            console: Rich console to write to (defaults to stdout)
            clock: Source of the timestamp printed on each line
        """
        self.quiet = quiet
        self.debug_enabled = debug
        self.console = console or Console(highlight=False)
        self._clock = clock

    @property
    def progress_enabled(self) -> bool:
        """Whether transient spinners may be drawn."""
        return not self.quiet and self.console.is_terminal

    def format_line(self, level: str, message: str) -> str:
        return f"{level} [{format_date_stamp(self._clock())}]: {message}"

    def _emit(self, level: str, message: str) -> None:
        line = Text(self.format_line(level, message), style=LEVEL_STYLES[level])
        self.console.print(line, soft_wrap=True)

    def info(self, message: str) -> None:
        if not self.quiet:
            self._emit("info", message)

    def warning(self, message: str) -> None:
        self._emit("warning", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def debug(self, message: str) -> None:
        if self.debug_enabled and not self.quiet:
            self._emit("debug", message)

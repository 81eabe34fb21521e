"""
Process-wide logging for the terminal grid.

curses owns the terminal while the grid runs, so records go to a log
file instead of a stream. Everything uses the standard logging library.
"""
import logging
import os
from datetime import datetime, timezone

_CONFIGURED_FLAG = "_fuzzytable_configured"


class ConsoleLogFormatter(logging.Formatter):
    """
    Single-line records, for example:

        2026-10-17T09:12:03.114Z DEBUG grid_controller Committed cell (1, 0)
    """

    _time_format = "%Y-%m-%dT%H:%M:%S"

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s %(levelname)-5s %(name)s %(message)s",
            datefmt=self._time_format,
        )

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        base = dt.strftime(datefmt or self._time_format)
        return f"{base}.{int(record.msecs):03d}Z"


def configure_logging(level="WARNING", path=None) -> logging.Logger:
    """Install exactly one handler on the root logger; safe to call repeatedly."""
    root_logger = logging.getLogger()

    if path:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    else:
        handler = logging.NullHandler()
    handler.setFormatter(ConsoleLogFormatter())

    if getattr(root_logger, _CONFIGURED_FLAG, False):
        for old in list(root_logger.handlers):
            root_logger.removeHandler(old)
            old.close()
    root_logger.addHandler(handler)
    setattr(root_logger, _CONFIGURED_FLAG, True)

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.WARNING)
    root_logger.setLevel(level)
    return root_logger

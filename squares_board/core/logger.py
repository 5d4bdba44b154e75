"""Structured (JSON) logging set-up for the whole process."""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Attach a single JSON handler to the root logger. Safe to call more than once."""
    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers:
        if getattr(handler, "_squares_board", False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        JsonFormatter(LOG_FORMAT, rename_fields={"levelname": "level", "name": "logger"})
    )
    handler._squares_board = True  # type: ignore[attr-defined]
    root.addHandler(handler)

"""Logging setup shared by the CLI entry points"""

import logging
import sys
from typing import Optional


LOG_FORMAT = "%(levelname)s: %(message)s"
TRACE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"


def configure_logging(level: int | str = "WARNING", log_file: Optional[str] = None) -> logging.Logger:
    """Install a stderr handler (and optionally a file handler) on the root logger.

    DEBUG level switches to the timestamped format with logger names.
    """
    resolved = level if isinstance(level, int) else getattr(logging, str(level).upper(), logging.WARNING)

    root = logging.getLogger()
    root.setLevel(resolved)
    root.handlers.clear()

    formatter = logging.Formatter(
        TRACE_FORMAT if resolved <= logging.DEBUG else LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root

"""Logging configuration for the application.

Modules only call `logging.getLogger(__name__)`; the entry points (CLI, HTTP
app) call `setup_logging()` once.
"""

import logging
import sys

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str | int = "INFO") -> None:
    """Install a stdout handler on the root logger (idempotent)."""
    root_logger = logging.getLogger()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root_logger.setLevel(level)

    if not any(getattr(h, "_campus_events", False) for h in root_logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(_FORMAT))
        console_handler._campus_events = True
        root_logger.addHandler(console_handler)

    # Quieter third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

"""Logging setup for the planner app.

Streamlit re-executes ``app.py`` on every interaction; the root handler is
replaced, never stacked. Gemini client and file-watcher loggers stay at WARNING.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS = ("google", "google_genai", "grpc", "urllib3", "httpx", "watchdog")


def resolve_level(level):
    """Numeric level for a name like ``"debug"``; None when the name is unknown."""
    numeric_level = getattr(logging, str(level).upper(), None)
    return numeric_level if isinstance(numeric_level, int) else None


def configure_logging(level: str = "INFO") -> None:
    numeric_level = resolve_level(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level or logging.INFO)

    if numeric_level is None:
        root_logger.warning("Unknown SOP_LOG_LEVEL %r; using INFO", level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root_logger.level))

"""Logging for linemarks.

``setup_logging()`` configures the ``linemarks`` logger hierarchy with a
FileHandler to ~/linemarks.log. Every module that calls
``logging.getLogger("linemarks.xxx")`` inherits that handler.
"""

import logging
import os

LOG_PATH = os.path.join(os.path.expanduser("~"), "linemarks.log")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s — %(message)s"

_setup_done = False


def _to_level(level):
    # "WARN" is what the config layer stores; logging knows it as WARNING
    return getattr(logging, str(level).upper(), logging.DEBUG)


def setup_logging(level="DEBUG", path=None):
    """Configure the ``linemarks`` logger hierarchy.

    Attaches a FileHandler to the ``linemarks`` logger (not root), so the
    host editor's own logging setup is left alone. The log file is
    truncated on startup (mode ``"w"``) for clean sessions.

    No-op if already done or if the logger already has handlers.
    """
    global _setup_done
    if _setup_done:
        return
    _setup_done = True

    logger = logging.getLogger("linemarks")
    if logger.handlers:
        return

    logger.propagate = False

    handler = logging.FileHandler(path or LOG_PATH, mode="w", encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(_to_level(level))


def set_log_level(level):
    """Change the ``linemarks`` logger level at runtime."""
    logging.getLogger("linemarks").setLevel(_to_level(level))

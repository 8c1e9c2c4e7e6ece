"""Logging for the ``kakeibo`` package.

``startup.init_app`` calls ``configure_logging`` once; every other module only
asks for a logger with ``get_logger(__name__)``.
"""
import logging
import os
import sys
from typing import Union

PACKAGE = "kakeibo"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_configured = False


def parse_level(level: Union[int, str, None]) -> int:
    """Level number for an int, a digit string or a name; INFO when unknown.

    ``None`` falls back to ``KAKEIBO_LOG_LEVEL``.
    """
    if level is None:
        level = os.getenv("KAKEIBO_LOG_LEVEL", "")
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level: Union[int, str, None] = None) -> None:
    global _configured
    if _configured:
        return

    root = logging.getLogger(PACKAGE)
    for h in list(root.handlers):
        root.removeHandler(h)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(parse_level(level))
    root.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    root = logging.getLogger(PACKAGE)
    # Silent until configured.
    if not _configured and not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)

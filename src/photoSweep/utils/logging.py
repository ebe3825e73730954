"""Logging helpers shared across photoSweep modules."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

_ROOT_NAME = "photoSweep"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger, or a child logger when *name* is given."""

    if not name:
        return logging.getLogger(_ROOT_NAME)
    if name == _ROOT_NAME or name.startswith(_ROOT_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_NAME}.{name}")


def configure_logging(level: int | str = logging.WARNING) -> logging.Logger:
    """Attach a rich console handler to the package logger.

    Calling this repeatedly only adjusts the level; the handler is installed
    once so command-line entry points can call it unconditionally.
    """

    root = get_logger()
    root.setLevel(level)
    if not any(isinstance(handler, RichHandler) for handler in root.handlers):
        handler = RichHandler(show_path=False, rich_tracebacks=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    return root


logger = get_logger()

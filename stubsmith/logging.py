"""Logger hierarchy and handler setup shared by the emit and stubs commands."""

from __future__ import annotations

import logging
from pathlib import Path

ROOT_LOGGER = "stubsmith"
CONSOLE_FORMAT = "[stubsmith] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """``get_logger("resolve")`` is the ``stubsmith.resolve`` logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> logging.Logger:
    """Route stubsmith records to stderr and, with ``log_file``, to a file.

    Calling it again replaces the handlers installed by the previous call.
    """
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.propagate = False
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    _attach(root, logging.StreamHandler(), level, CONSOLE_FORMAT)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        _attach(root, logging.FileHandler(log_file, encoding="utf-8"), level, FILE_FORMAT)
    return root


def _attach(logger: logging.Logger, handler: logging.Handler, level: int, fmt: str) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)


__all__ = ["configure_logging", "get_logger"]

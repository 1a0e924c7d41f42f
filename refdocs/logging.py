"""Logging helpers shared by the refdocs processor and CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

_LOGGER_NAME = "refdocs"


class KeyValues:
    """Lazily formatted ``key=value`` context appended to log messages."""

    __slots__ = ("_values",)

    def __init__(self, values: dict[str, Any]) -> None:
        self._values = values

    def __str__(self) -> str:
        return " ".join(f"{key}={value!r}" for key, value in self._values.items())


def kv(**values: Any) -> KeyValues:
    """Bundle structured context for a log call, e.g. ``logger.debug("Load %s", kv(type=t))``."""
    return KeyValues(values)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the refdocs hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install console (and optional file) handlers on the refdocs logger.

    ``verbose`` enables resolver traces at DEBUG; ``quiet`` limits console
    output to warnings and errors. The file sink always records at the
    console level or below.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated CLI invocations in one process do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter("[refdocs] %(levelname)s %(message)s"))
    logger.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(sink)

    return logger


__all__ = ["KeyValues", "configure_logging", "get_logger", "kv"]

"""Fatal processing errors."""

from __future__ import annotations


class ProcessingError(RuntimeError):
    """Raised when a run cannot produce a consistent type graph."""


__all__ = ["ProcessingError"]

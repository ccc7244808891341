"""
Error types and the incoherent-data counter shared by the ANFR loaders.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class AnfrFatalError(Exception):
    """
    Input no longer matches the structural assumptions of the loader.
    """


class MalformedIdentifier(AnfrFatalError, ValueError):
    """
    A composite station identifier could not be decoded within its bounds.
    """


class CapacityExceeded(AnfrFatalError):
    """
    A table id or a per-parent child list went beyond its declared capacity.
    """


class LoadOrderError(AnfrFatalError):
    """
    A table was loaded before the tables it references.
    """


class IncoherentData:
    """
    Counter of recoverable data-integrity events.

    Every event is logged as a warning; the offending row or link is dropped by
    the caller and the run goes on.
    """

    def __init__(self) -> None:
        self.count = 0

    def warn(self, message: str, *args: object) -> None:
        self.count += 1
        logger.warning("incoherent data: " + message, *args)

    def __int__(self) -> int:
        return self.count


def check_capacity(value: int, capacity: int, what: str) -> None:
    """
    Raise ``CapacityExceeded`` unless ``0 <= value < capacity``.
    """
    if value < 0 or value >= capacity:
        raise CapacityExceeded(f"{what} {value} out of capacity {capacity}")


__all__ = [
    "AnfrFatalError",
    "CapacityExceeded",
    "IncoherentData",
    "LoadOrderError",
    "MalformedIdentifier",
    "check_capacity",
]

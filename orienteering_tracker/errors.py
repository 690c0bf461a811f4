"""Central error types used across the application."""

from __future__ import annotations


class OrienteeringError(RuntimeError):
    """Base error for the orienteering tracker."""


class PayloadFormatError(OrienteeringError):
    """Raised when an exported document does not have the expected shape."""


class BoundaryError(OrienteeringError):
    """Raised when a course boundary cannot be built from the given points."""


__all__ = [
    "OrienteeringError",
    "PayloadFormatError",
    "BoundaryError",
]

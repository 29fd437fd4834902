"""Engine error taxonomy.

Validation and permission problems are detected locally and never reach the
record store. Store failures are defined next to the store port.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for errors raised by the availability engine."""


class ValidationError(EngineError):
    """Malformed recurrence configuration or an out-of-range value."""


class NotFoundError(EngineError):
    """A member or occurrence is no longer part of the working set."""


class PermissionDeniedError(EngineError):
    """The acting identity may not edit availability for the team."""

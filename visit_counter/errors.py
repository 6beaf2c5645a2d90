"""
Exception hierarchy for the visit counter.

Every error that can reach an HTTP caller derives from VisitCounterError and
carries the status code it is reported with. The web layer maps these to
plain-text responses; the CLI maps them to exit code 1.
"""

from __future__ import annotations


class VisitCounterError(Exception):
    """Base class for errors surfaced to callers as a response."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ConfigurationError(VisitCounterError):
    """A required secret is missing or the database URL is unusable."""


class PersistenceError(VisitCounterError):
    """Schema creation, insert, update or query against the store failed."""


class ValidationError(VisitCounterError):
    """A required request parameter is missing."""

    status_code = 400


class ResultSetConsumedError(RuntimeError):
    """Raised when a single-pass ResultSet is iterated a second time."""


__all__ = [
    "VisitCounterError",
    "ConfigurationError",
    "PersistenceError",
    "ValidationError",
    "ResultSetConsumedError",
]

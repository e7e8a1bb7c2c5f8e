"""Exceptions mapped to HTTP responses by the global exception handlers."""


class UnauthorizedError(Exception):
    """Caller could not be authenticated (missing or bad credentials)."""


class PersistenceError(Exception):
    """A write to the database failed.

    The message is returned to the caller; ``details`` carries the driver error.
    """

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.details = details


class UpstreamServiceError(Exception):
    """The hosted auth admin API rejected or failed a request."""

"""Exception hierarchy for esfixtures."""

from __future__ import annotations


class EsFixturesError(Exception):
    """Base exception for all esfixtures errors."""


class EsFixturesConfigError(EsFixturesError):
    """Raised when the configuration is invalid or incomplete."""


class DataFileError(EsFixturesError):
    """Raised when a fixture data file cannot be read or parsed."""


class InvalidDocumentError(EsFixturesError):
    """Raised when an input document or bulk entry is malformed."""


class ScopeError(EsFixturesError):
    """Raised when the index/type scope is insufficient for an operation."""


class WriteFailedError(EsFixturesError):
    """Raised when a bulk submission fails as a whole.

    Per-item failures inside a successful bulk response are not raised;
    they are reported through ``BulkResult.errors``.
    """


class TransportError(EsFixturesError):
    """Raised when a request to the search engine fails.

    Attributes:
        status_code: HTTP status code (None for connection failures)
        error_type: Error type reported by the engine, if any
        reason: Human readable reason reported by the engine, if any
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_type: str | None = None,
        reason: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error_type = error_type
        self.reason = reason


class AuthenticationError(TransportError):
    """Raised on 401/403 responses."""


class NotFoundError(TransportError):
    """Raised when the requested resource does not exist."""


class IndexNotFoundError(NotFoundError):
    """Raised when the target index does not exist."""


class IndexExistsError(TransportError):
    """Raised when creating an index that already exists."""


class ScanExpiredError(TransportError):
    """Raised when a scroll cursor expired before the next page was requested."""

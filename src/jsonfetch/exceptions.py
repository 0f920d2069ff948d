"""Exception hierarchy for jsonfetch.

All exceptions inherit from :class:`JsonfetchError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`jsonfetch.exit_codes`.
Library callers normally catch :class:`RequestError`; the CLI entry point
in :func:`jsonfetch.app.main` catches ``JsonfetchError`` and exits with the
matching code.

Subclass hierarchy::

    JsonfetchError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- AuthError           (exit 3)
    +-- ConfigError         (exit 1)
    +-- UploadError         (exit 8)
    +-- RequestError        (exit 6)
        +-- TransportError  (exit 6)
        +-- DecodeError     (exit 9)
"""

from __future__ import annotations

from jsonfetch.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_DECODE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_TRANSPORT_ERROR,
    EXIT_UPLOAD_ERROR,
)


class JsonfetchError(Exception):
    """Base exception for all jsonfetch errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(JsonfetchError):
    """Raised for invalid CLI arguments (malformed ``key=value`` pairs, bad JSON)."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(JsonfetchError):
    """Raised when auth credentials are incomplete or of an unknown kind."""

    exit_code = EXIT_AUTH_FAILURE


class ConfigError(JsonfetchError):
    """Raised for configuration problems (invalid config file, unresolvable credential source)."""

    exit_code = EXIT_GENERIC_FAILURE


class UploadError(JsonfetchError):
    """Raised when a file selected for multipart upload cannot be read."""

    exit_code = EXIT_UPLOAD_ERROR


class RequestError(JsonfetchError):
    """Raised when a call does not yield a decoded response.

    Args:
        message: Human-readable error description.
        exchange: The :class:`~jsonfetch.models.ExchangeRecord` captured
            for the failed call, when one exists.
    """

    exit_code = EXIT_TRANSPORT_ERROR

    def __init__(self, message: str, exchange: object | None = None):
        super().__init__(message)
        self.exchange = exchange


class TransportError(RequestError):
    """Raised when the transport fails or returns no content.

    Covers connection refusal, DNS failures, timeouts and empty response
    bodies. HTTP error statuses (4xx/5xx) are *not* transport errors.
    """

    exit_code = EXIT_TRANSPORT_ERROR


class DecodeError(RequestError):
    """Raised in strict mode when a non-empty response body is not valid JSON."""

    exit_code = EXIT_DECODE_ERROR

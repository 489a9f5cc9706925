"""Exception hierarchy for dualauth.

All exceptions inherit from :class:`DualAuthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`dualauth.exit_codes`.

Only construction and configuration problems are raised by the library
itself.  Failures that happen while a request is in flight (``httpx``
transport errors, timeouts, signing errors) reach the caller exactly as
the signer produced them; the status-code classes below are used by the
CLI when it turns a finished response into a process exit code.

Subclass hierarchy::

    DualAuthError (exit 1)
    +-- ConfigError         (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- AuthError           (exit 3)
    +-- NotFoundError       (exit 4)
    +-- ServerError         (exit 5)
    +-- ConnectionError_    (exit 6)
"""

from dualauth.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class DualAuthError(Exception):
    """Base exception for all dualauth errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(DualAuthError):
    """Raised for configuration problems (empty bearer token, missing profile, bad credential source)."""

    exit_code = EXIT_GENERIC_FAILURE


class InvalidUsageError(DualAuthError):
    """Raised for invalid arguments, such as a relative request URI."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(DualAuthError):
    """Raised by the CLI when the API rejects the credentials (HTTP 401 / 403)."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(DualAuthError):
    """Raised by the CLI when the API returns HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(DualAuthError):
    """Raised by the CLI for any other HTTP error status."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(DualAuthError):
    """Raised by the CLI on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR

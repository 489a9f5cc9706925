"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~dualauth.exceptions.DualAuthError` subclass.
Shell scripts wrapping ``dualauth request`` can inspect the exit code to
tell a rejected credential apart from a network failure without parsing
stderr.

Example::

    $ dualauth request GET https://api.example.com/2/users/me
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the server answered 401 or 403
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""Authentication or authorisation failed (HTTP 401 / 403)."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The remote API returned an error status not covered above."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

"""Response bridge -- maps :class:`httpx.Response` to CLI output and exit codes.

The library hands responses back untouched whatever their status.  The
CLI needs two more things from them, both provided here:

- :func:`format_api_response` prints the status line to stderr and the
  body to stdout.
- :func:`raise_for_status` turns an error status into the typed exception
  whose ``exit_code`` the process should exit with.

See Also:
    :mod:`dualauth.output` -- the output manager that renders data.
"""

from __future__ import annotations

from typing import Any

import httpx

from dualauth.exceptions import AuthError, NotFoundError, ServerError
from dualauth.output import get_output


def format_api_response(response: httpx.Response) -> None:
    """Print ``HTTP <status> <reason>`` to stderr and the body to stdout."""
    output = get_output()
    output.info(f"HTTP {response.status_code} {response.reason_phrase or ''}".rstrip())

    data = extract_response_data(response)
    if data is not None:
        output.format_response(data)


def extract_response_data(response: httpx.Response) -> Any:
    """Return the body as decoded JSON, else as text, or ``None`` when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def raise_for_status(response: httpx.Response) -> None:
    """Raise a typed exception for HTTP error status codes.

    Raises:
        AuthError: On 401 / 403.
        NotFoundError: On 404.
        ServerError: On any other status >= 400.
    """
    status = response.status_code
    if status < 400:
        return

    try:
        detail = response.json()
        if isinstance(detail, dict):
            msg = str(detail.get("detail") or detail.get("title") or detail.get("error") or "")
        else:
            msg = str(detail)
    except ValueError:
        msg = response.text[:200]

    full_msg = f"HTTP {status}: {msg}" if msg else f"HTTP {status}"

    if status in (401, 403):
        raise AuthError(full_msg)
    if status == 404:
        raise NotFoundError(full_msg)
    raise ServerError(full_msg)

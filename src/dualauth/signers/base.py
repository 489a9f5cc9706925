"""Abstract base class for request signers.

A *signer* authenticates and transmits HTTP requests for one authentication
scheme.  This module defines the shared request pipeline:

1. Build an :class:`httpx.Request` from the verb arguments (or take the
   caller's prebuilt request for :meth:`Signer.send`).
2. Let the concrete scheme attach its credentials via
   :meth:`Signer.authorize`.
3. Send it through the signer's own :class:`httpx.AsyncClient`.

To implement a new scheme, subclass :class:`Signer`, set :attr:`scheme`, and
implement :meth:`~Signer.authorize`.

Responses are returned whatever their status code.  Transport failures
(:class:`httpx.TimeoutException`, :class:`httpx.ConnectError`, ...) are not
caught here.

See Also:
    :mod:`dualauth.signers.oauth1` and :mod:`dualauth.signers.oauth2`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Optional, Union

import httpx

from dualauth.exceptions import InvalidUsageError
from dualauth.models import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

URITypes = Union[httpx.URL, str]
"""Anything :class:`httpx.URL` accepts as an absolute resource locator."""


class Signer(ABC):
    """Base class for all request signers.

    Args:
        transport: Optional :mod:`httpx` transport for the underlying
            client.  Tests pass an :class:`httpx.MockTransport` here.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._client = httpx.AsyncClient(transport=transport)

    @property
    @abstractmethod
    def scheme(self) -> str:
        """Return a short name for the scheme, used in log lines.

        Returns:
            A string such as ``"oauth1"`` or ``"oauth2"``.
        """
        ...

    @abstractmethod
    async def authorize(self, request: httpx.Request) -> None:
        """Attach credentials to *request* in place.

        Args:
            request: The fully built request, about to be sent.
        """
        ...

    # ------------------------------------------------------------------ #
    # Verb surface
    # ------------------------------------------------------------------ #

    async def get(self, uri: URITypes, *, timeout: float = DEFAULT_TIMEOUT) -> httpx.Response:
        """Send an authenticated GET request."""
        return await self._request("GET", uri, timeout=timeout)

    async def post(
        self,
        uri: URITypes,
        *,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> httpx.Response:
        """Send an authenticated POST request.

        Args:
            uri: Absolute request URI.
            headers: Extra request headers, sent as given.
            body: ``str`` or ``bytes`` for a raw body, a mapping for a
                form-encoded body, or ``None``.
            timeout: Seconds before the request fails with
                :class:`httpx.TimeoutException`.
        """
        return await self._request("POST", uri, headers=headers, body=body, timeout=timeout)

    async def put(
        self,
        uri: URITypes,
        *,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> httpx.Response:
        """Send an authenticated PUT request.  Arguments as for :meth:`post`."""
        return await self._request("PUT", uri, headers=headers, body=body, timeout=timeout)

    async def delete(self, uri: URITypes, *, timeout: float = DEFAULT_TIMEOUT) -> httpx.Response:
        """Send an authenticated DELETE request."""
        return await self._request("DELETE", uri, timeout=timeout)

    async def send(
        self, request: httpx.Request, *, timeout: float = DEFAULT_TIMEOUT
    ) -> httpx.Response:
        """Authenticate and send a caller-built request, streaming the response.

        The returned response body has not been read.  Consume it with
        :meth:`httpx.Response.aiter_bytes` (or ``aread``) and release the
        connection with :meth:`httpx.Response.aclose`.

        Args:
            request: A request built by the caller, e.g. with a streamed
                or multipart body.
            timeout: Seconds before the request fails.

        Returns:
            The streamed :class:`httpx.Response`.
        """
        _require_absolute(request.url)
        request.extensions["timeout"] = httpx.Timeout(timeout).as_dict()
        await self.authorize(request)
        logger.debug("%s %s (streamed) via %s", request.method, request.url, self.scheme)
        return await self._client.send(request, stream=True)

    async def aclose(self) -> None:
        """Close the underlying HTTP client and its connection pool."""
        await self._client.aclose()

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _request(
        self,
        method: str,
        uri: URITypes,
        *,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
        timeout: float,
    ) -> httpx.Response:
        url = _require_absolute(uri)
        kwargs: dict[str, Any] = {"headers": headers, "timeout": timeout}
        if isinstance(body, Mapping):
            kwargs["data"] = body
        elif body is not None:
            kwargs["content"] = body

        request = self._client.build_request(method, url, **kwargs)
        await self.authorize(request)
        logger.debug("%s %s via %s", method, url, self.scheme)
        return await self._client.send(request)


def _require_absolute(uri: URITypes) -> httpx.URL:
    """Parse *uri* and reject anything without a scheme and host."""
    try:
        url = httpx.URL(uri)
    except httpx.InvalidURL as exc:
        raise InvalidUsageError(f"Invalid request URI {uri!r}: {exc}") from exc
    if not url.is_absolute_url:
        raise InvalidUsageError(f"Request URI must be absolute, got {str(url)!r}")
    return url

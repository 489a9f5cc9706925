"""Client context -- picks the signer for every outgoing request.

A :class:`ClientContext` holds one :class:`~dualauth.signers.OAuth2Signer`
and, when OAuth 1.0a credentials were supplied, one
:class:`~dualauth.signers.OAuth1Signer`.  Each verb method takes the
caller's :class:`~dualauth.models.UserContext`, asks :func:`select_signer`
which scheme applies, and forwards its remaining arguments to that signer
unchanged.  The response, or the exception, comes back exactly as the
signer produced it.

The decision is made on every call::

    UserContext         OAuth 1.0a credentials    signer
    ------------------  ------------------------  --------
    OAUTH2_OR_OAUTH1    present                   OAuth1
    OAUTH2_OR_OAUTH1    absent                    OAuth2
    OAUTH2_ONLY         either                    OAuth2

There is no fallback: when the OAuth 1.0a request fails, the failure is
returned and the bearer token is not tried.

Typical usage::

    from dualauth import OAuthTokens, UserContext, create_client_context

    async with create_client_context("bearer", oauth_tokens=tokens) as ctx:
        response = await ctx.get(UserContext.OAUTH2_OR_OAUTH1, "https://api.example.com/2/users/me")
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import Any, Optional

import httpx

from dualauth.exceptions import ConfigError
from dualauth.models import OAuthTokens, RequestDefaults, UserContext
from dualauth.signers import OAuth1Signer, OAuth2Signer, Signer, URITypes


class SignerKind(str, enum.Enum):
    """The two signers a :class:`ClientContext` can route a request to."""

    OAUTH1 = "oauth1"
    OAUTH2 = "oauth2"


def select_signer(user_context: UserContext, has_oauth1: bool) -> SignerKind:
    """Decide which scheme authenticates a request.

    Args:
        user_context: The schemes the caller accepts for this request.  A
            plain string equal to a member's value (``"oauth2_only"``) is
            accepted as that member.
        has_oauth1: Whether OAuth 1.0a credentials are available.

    Returns:
        :attr:`SignerKind.OAUTH1` only for ``OAUTH2_OR_OAUTH1`` with
        credentials present, :attr:`SignerKind.OAUTH2` otherwise.

    Raises:
        TypeError: If *user_context* does not name a :class:`UserContext` member.
    """
    try:
        user_context = UserContext(user_context)
    except ValueError:
        raise TypeError(f"Unsupported user context: {user_context!r}") from None

    if user_context is UserContext.OAUTH2_OR_OAUTH1:
        return SignerKind.OAUTH1 if has_oauth1 else SignerKind.OAUTH2
    return SignerKind.OAUTH2


class ClientContext:
    """Routes requests to the OAuth 1.0a or OAuth 2.0 signer.

    Prefer :func:`create_client_context`, which builds the signers from raw
    credentials.  The constructor takes ready-made signers so that tests
    and callers with custom transports can supply their own.

    The set of signers is fixed at construction.  The context keeps no
    other state, so concurrent calls on one instance are independent.

    Args:
        oauth2_signer: Signer used for every request that does not go
            through OAuth 1.0a.
        oauth1_signer: Optional OAuth 1.0a signer.  When ``None``, every
            request uses *oauth2_signer*.
        defaults: Values used when a caller omits ``timeout`` or
            ``headers``.  Defaults to a 10 second timeout and no headers.
    """

    def __init__(
        self,
        oauth2_signer: Signer,
        oauth1_signer: Optional[Signer] = None,
        defaults: Optional[RequestDefaults] = None,
    ) -> None:
        self._oauth2_signer = oauth2_signer
        self._oauth1_signer = oauth1_signer
        self._defaults = defaults or RequestDefaults()

    @property
    def has_oauth1_client(self) -> bool:
        """Whether this context was given OAuth 1.0a credentials."""
        return self._oauth1_signer is not None

    @property
    def defaults(self) -> RequestDefaults:
        """The defaults applied to omitted arguments."""
        return self._defaults

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> ClientContext:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close both signers' connection pools."""
        await self._oauth2_signer.aclose()
        if self._oauth1_signer is not None:
            await self._oauth1_signer.aclose()

    # ------------------------------------------------------------------ #
    # Verb surface
    # ------------------------------------------------------------------ #

    async def get(
        self,
        user_context: UserContext,
        uri: URITypes,
        *,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Send a GET request with the signer chosen for *user_context*.

        Args:
            user_context: The schemes the caller accepts for this request.
            uri: Absolute request URI.
            timeout: Seconds before the request fails; ``None`` uses
                :attr:`defaults`.

        Returns:
            The signer's :class:`httpx.Response`, whatever its status.
        """
        return await self._signer_for(user_context).get(
            uri, timeout=self._timeout(timeout)
        )

    async def post(
        self,
        user_context: UserContext,
        uri: URITypes,
        *,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Send a POST request with the signer chosen for *user_context*.

        Args:
            user_context: The schemes the caller accepts for this request.
            uri: Absolute request URI.
            headers: Request headers, forwarded as the same object.
                ``None`` uses a copy of ``defaults.headers``.
            body: Text, bytes, or a mapping of form fields, forwarded as is.
            timeout: Seconds before the request fails; ``None`` uses
                :attr:`defaults`.

        Returns:
            The signer's :class:`httpx.Response`, whatever its status.
        """
        return await self._signer_for(user_context).post(
            uri,
            headers=self._headers(headers),
            body=body,
            timeout=self._timeout(timeout),
        )

    async def put(
        self,
        user_context: UserContext,
        uri: URITypes,
        *,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Send a PUT request.  Arguments as for :meth:`post`."""
        return await self._signer_for(user_context).put(
            uri,
            headers=self._headers(headers),
            body=body,
            timeout=self._timeout(timeout),
        )

    async def delete(
        self,
        user_context: UserContext,
        uri: URITypes,
        *,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Send a DELETE request.  Arguments as for :meth:`get`."""
        return await self._signer_for(user_context).delete(
            uri, timeout=self._timeout(timeout)
        )

    async def send(
        self,
        user_context: UserContext,
        request: httpx.Request,
        *,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Send a caller-built request and return the streamed response.

        Use this for bodies the verb methods cannot express, such as
        multipart uploads or streamed content.  The response body is left
        unread; the caller consumes it and calls ``aclose()`` on it.

        Args:
            user_context: The schemes the caller accepts for this request.
            request: The request to authenticate and send.
            timeout: Seconds before the request fails; ``None`` uses
                :attr:`defaults`.

        Returns:
            The signer's streamed :class:`httpx.Response`.
        """
        return await self._signer_for(user_context).send(
            request, timeout=self._timeout(timeout)
        )

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _signer_for(self, user_context: UserContext) -> Signer:
        kind = select_signer(user_context, self.has_oauth1_client)
        if kind is SignerKind.OAUTH1:
            assert self._oauth1_signer is not None
            return self._oauth1_signer
        return self._oauth2_signer

    def _timeout(self, timeout: Optional[float]) -> float:
        return self._defaults.timeout if timeout is None else timeout

    def _headers(self, headers: Optional[Mapping[str, str]]) -> Mapping[str, str]:
        return dict(self._defaults.headers) if headers is None else headers


def create_client_context(
    bearer_token: str,
    oauth_tokens: Optional[OAuthTokens] = None,
    *,
    defaults: Optional[RequestDefaults] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ClientContext:
    """Build a :class:`ClientContext` from raw credentials.

    No network traffic happens here; the signers only allocate their HTTP
    clients.

    Args:
        bearer_token: OAuth 2.0 bearer token.  Must not be empty.
        oauth_tokens: OAuth 1.0a credentials.  When ``None``, every request
            uses the bearer token.
        defaults: Values for omitted ``timeout`` / ``headers`` arguments.
        transport: Optional :mod:`httpx` transport shared by both signers'
            clients.

    Returns:
        A ready :class:`ClientContext`.

    Raises:
        ConfigError: If *bearer_token* is empty.
    """
    if not bearer_token:
        raise ConfigError("A bearer token is required to create a client context")

    oauth1_signer: Optional[OAuth1Signer] = None
    if oauth_tokens is not None:
        oauth1_signer = OAuth1Signer(
            consumer_key=oauth_tokens.consumer_key,
            consumer_secret=oauth_tokens.consumer_secret,
            access_token=oauth_tokens.access_token,
            access_token_secret=oauth_tokens.access_token_secret,
            transport=transport,
        )

    return ClientContext(
        OAuth2Signer(bearer_token, transport=transport),
        oauth1_signer=oauth1_signer,
        defaults=defaults,
    )

"""OAuth 1.0a user-context signer.

This module provides :class:`OAuth1Signer`, which signs each request with
HMAC-SHA1 as described in :rfc:`5849` and places the signature in the
``Authorization`` header.  The signature base string, nonce, and timestamp
are produced by :class:`oauthlib.oauth1.Client`.

Only bodies whose media type is ``application/x-www-form-urlencoded``
take part in the signature; parameters such as ``charset`` are ignored.
JSON, raw, and multipart bodies are sent unsigned, as the RFC requires.

See Also:
    :class:`dualauth.signers.base.Signer` for the request pipeline.
"""

from __future__ import annotations

from typing import Optional

import httpx
from oauthlib.oauth1 import SIGNATURE_HMAC, SIGNATURE_TYPE_AUTH_HEADER, Client

from dualauth.signers.base import Signer

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class OAuth1Signer(Signer):
    """Authenticate requests with OAuth 1.0a user-context credentials.

    Args:
        consumer_key: The app's API key.
        consumer_secret: The app's API key secret.
        access_token: The user's access token.
        access_token_secret: The user's access token secret.
        transport: Optional :mod:`httpx` transport, see :class:`Signer`.
    """

    def __init__(
        self,
        consumer_key: str,
        consumer_secret: str,
        access_token: str,
        access_token_secret: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(transport=transport)
        self._oauth = Client(
            consumer_key,
            client_secret=consumer_secret,
            resource_owner_key=access_token,
            resource_owner_secret=access_token_secret,
            signature_method=SIGNATURE_HMAC,
            signature_type=SIGNATURE_TYPE_AUTH_HEADER,
        )

    @property
    def scheme(self) -> str:
        return "oauth1"

    async def authorize(self, request: httpx.Request) -> None:
        """Compute a fresh signature for *request* and set its ``Authorization`` header."""
        body: Optional[str] = None
        sign_headers: dict[str, str] = {}
        if _media_type(request.headers.get("Content-Type", "")) == _FORM_CONTENT_TYPE:
            content = await request.aread()
            if content:
                body = content.decode("utf-8")
                sign_headers["Content-Type"] = _FORM_CONTENT_TYPE

        _, signed_headers, _ = self._oauth.sign(
            str(request.url),
            http_method=request.method,
            body=body,
            headers=sign_headers,
        )
        request.headers["Authorization"] = signed_headers["Authorization"]


def _media_type(content_type: str) -> str:
    """Strip parameters such as ``charset`` and normalise case."""
    return content_type.split(";")[0].strip().lower()

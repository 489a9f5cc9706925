"""OAuth 2.0 bearer-token signer.

This module provides :class:`OAuth2Signer`, which sends every request with
an ``Authorization: Bearer <token>`` header.  The token is used exactly as
given; acquiring or refreshing it is the caller's business.

See Also:
    :class:`dualauth.signers.base.Signer` for the request pipeline.
"""

from __future__ import annotations

from typing import Optional

import httpx

from dualauth.exceptions import ConfigError
from dualauth.signers.base import Signer


class OAuth2Signer(Signer):
    """Authenticate requests with an OAuth 2.0 bearer token.

    Args:
        bearer_token: The app or user access token.
        transport: Optional :mod:`httpx` transport, see :class:`Signer`.

    Raises:
        ConfigError: If *bearer_token* is empty.
    """

    def __init__(
        self,
        bearer_token: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not bearer_token:
            raise ConfigError("A bearer token is required")
        super().__init__(transport=transport)
        self._bearer_token = bearer_token

    @property
    def scheme(self) -> str:
        return "oauth2"

    async def authorize(self, request: httpx.Request) -> None:
        request.headers["Authorization"] = f"Bearer {self._bearer_token}"

"""dualauth -- route API requests through OAuth 1.0a or OAuth 2.0 authentication.

Some APIs accept an OAuth 2.0 bearer token on every endpoint but also
support OAuth 1.0a user-context signing, and a few endpoints need the
latter.  A :class:`ClientContext` holds both credentials and picks the
scheme per request from a caller-declared :class:`UserContext`, so the
rest of a client library can call ``get``/``post``/``put``/``delete``/
``send`` without caring which scheme signs the request.

Typical usage::

    from dualauth import OAuthTokens, UserContext, create_client_context

    tokens = OAuthTokens(
        consumer_key="...", consumer_secret="...",
        access_token="...", access_token_secret="...",
    )
    async with create_client_context("BEARER", oauth_tokens=tokens) as ctx:
        response = await ctx.get(UserContext.OAUTH2_OR_OAUTH1, "https://api.example.com/2/users/me")

Modules:
    context: :class:`ClientContext`, :func:`create_client_context` and the
        :func:`select_signer` dispatch rule.
    signers: OAuth 1.0a and OAuth 2.0 request signers built on httpx.
    models: Pydantic value types and configuration models.
    config: XDG-aware profiles and credential-source resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    app: The ``dualauth`` command-line interface.
"""

__version__ = "0.1.0"

from dualauth.context import (  # noqa: E402
    ClientContext,
    SignerKind,
    create_client_context,
    select_signer,
)
from dualauth.models import OAuthTokens, RequestDefaults, UserContext  # noqa: E402

__all__ = [
    "ClientContext",
    "OAuthTokens",
    "RequestDefaults",
    "SignerKind",
    "UserContext",
    "create_client_context",
    "select_signer",
]

"""Canonical Pydantic models shared across all dualauth modules.

The models fall into two groups:

**Value types** -- passed to and held by a
:class:`~dualauth.context.ClientContext`:
    :class:`OAuthTokens`, :class:`UserContext`, and :class:`RequestDefaults`.

**Configuration models** -- serialised as JSON in the user's config directory
and turned into value types by :mod:`dualauth.config`:
    :class:`OAuthSources` and :class:`Profile`.

Configuration models store credential *source descriptors*
(``env:VAR``, ``file:/path``, ``prompt``) rather than secrets, so a profile
file can be shared without leaking tokens.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_TIMEOUT = 10.0
"""Seconds a request may take when the caller does not pass ``timeout``."""


# --- Value types ---


class OAuthTokens(BaseModel):
    """The four OAuth 1.0a credentials of one user.

    The bundle is immutable and has no optional fields: either all four
    strings are present and non-empty, or there is no bundle at all.

    Example::

        tokens = OAuthTokens(
            consumer_key="ck",
            consumer_secret="cs",
            access_token="at",
            access_token_secret="ats",
        )
    """

    model_config = ConfigDict(frozen=True)

    consumer_key: str = Field(min_length=1)
    consumer_secret: str = Field(min_length=1, repr=False)
    access_token: str = Field(min_length=1, repr=False)
    access_token_secret: str = Field(min_length=1, repr=False)


class UserContext(str, enum.Enum):
    """Which authentication schemes a caller accepts for one request.

    ``OAUTH2_ONLY`` always uses the OAuth 2.0 bearer token.
    ``OAUTH2_OR_OAUTH1`` prefers OAuth 1.0a user context when the
    :class:`~dualauth.context.ClientContext` holds OAuth 1.0a credentials,
    and uses the bearer token otherwise.
    """

    OAUTH2_ONLY = "oauth2_only"
    OAUTH2_OR_OAUTH1 = "oauth2_or_oauth1"


class RequestDefaults(BaseModel):
    """Values a :class:`~dualauth.context.ClientContext` substitutes for omitted arguments."""

    timeout: float = Field(
        default=DEFAULT_TIMEOUT, gt=0, description="Request timeout in seconds"
    )
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Headers sent by post/put when the caller passes none",
    )


# --- Configuration models ---


class OAuthSources(BaseModel):
    """Source descriptors for the four OAuth 1.0a credentials of a :class:`Profile`."""

    consumer_key: str = Field(default="env:DUALAUTH_CONSUMER_KEY")
    consumer_secret: str = Field(default="env:DUALAUTH_CONSUMER_SECRET")
    access_token: str = Field(default="env:DUALAUTH_ACCESS_TOKEN")
    access_token_secret: str = Field(default="env:DUALAUTH_ACCESS_TOKEN_SECRET")


class Profile(BaseModel):
    """Per-account profile stored as JSON under the ``profiles/`` config directory.

    A profile always names a bearer-token source.  When ``oauth`` is set the
    resulting context also signs OAuth 1.0a requests.  With ``base_url`` set,
    ``dualauth request`` accepts URLs relative to it.

    See Also:
        :func:`~dualauth.config.load_profile`: Deserialise a profile by name.
        :func:`~dualauth.config.build_context`: Turn a profile into a context.
    """

    name: str
    bearer_token: str = Field(
        default="env:DUALAUTH_BEARER_TOKEN",
        description="Credential source: env:VAR, file:/path, prompt",
    )
    oauth: Optional[OAuthSources] = Field(
        default=None, description="OAuth 1.0a credential sources"
    )
    base_url: Optional[str] = Field(
        default=None,
        description="Base URL that relative request URLs are resolved against",
    )
    request: RequestDefaults = Field(default_factory=RequestDefaults)

"""Request signers for the two supported authentication schemes.

- :class:`Signer` -- abstract base holding the shared request pipeline.
- :class:`OAuth1Signer` -- HMAC-SHA1 OAuth 1.0a user-context signing.
- :class:`OAuth2Signer` -- OAuth 2.0 bearer token.

A :class:`~dualauth.context.ClientContext` owns one signer of each kind
(the OAuth 1.0a one only when credentials were supplied) and picks one per
request.
"""

from dualauth.signers.base import Signer, URITypes
from dualauth.signers.oauth1 import OAuth1Signer
from dualauth.signers.oauth2 import OAuth2Signer

__all__ = ["Signer", "OAuth1Signer", "OAuth2Signer", "URITypes"]

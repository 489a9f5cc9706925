"""Tests for dualauth.models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from dualauth.models import (
    DEFAULT_TIMEOUT,
    OAuthSources,
    OAuthTokens,
    Profile,
    RequestDefaults,
    UserContext,
)


class TestOAuthTokens:
    def test_fields(self, oauth_tokens: OAuthTokens) -> None:
        assert oauth_tokens.consumer_key == "ck"
        assert oauth_tokens.consumer_secret == "cs"
        assert oauth_tokens.access_token == "at"
        assert oauth_tokens.access_token_secret == "ats"

    def test_immutable(self, oauth_tokens: OAuthTokens) -> None:
        with pytest.raises(ValidationError):
            oauth_tokens.access_token = "other"  # type: ignore[misc]

    @pytest.mark.parametrize(
        "missing",
        ["consumer_key", "consumer_secret", "access_token", "access_token_secret"],
    )
    def test_all_four_fields_required(self, missing: str) -> None:
        values = {
            "consumer_key": "ck",
            "consumer_secret": "cs",
            "access_token": "at",
            "access_token_secret": "ats",
        }
        del values[missing]
        with pytest.raises(ValidationError):
            OAuthTokens(**values)

    def test_empty_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            OAuthTokens(
                consumer_key="ck",
                consumer_secret="",
                access_token="at",
                access_token_secret="ats",
            )

    def test_repr_hides_secrets(self, oauth_tokens: OAuthTokens) -> None:
        text = repr(oauth_tokens)
        assert "ck" in text
        assert "ats" not in text
        assert "'cs'" not in text


class TestUserContext:
    def test_values(self) -> None:
        assert UserContext("oauth2_only") is UserContext.OAUTH2_ONLY
        assert UserContext("oauth2_or_oauth1") is UserContext.OAUTH2_OR_OAUTH1

    def test_closed_set(self) -> None:
        assert len(UserContext) == 2
        with pytest.raises(ValueError):
            UserContext("oauth1_only")


class TestRequestDefaults:
    def test_ten_second_timeout(self) -> None:
        defaults = RequestDefaults()
        assert defaults.timeout == DEFAULT_TIMEOUT == 10.0
        assert defaults.headers == {}

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            RequestDefaults(timeout=0)


class TestProfile:
    def test_defaults(self) -> None:
        profile = Profile(name="p")
        assert profile.bearer_token == "env:DUALAUTH_BEARER_TOKEN"
        assert profile.oauth is None
        assert profile.base_url is None
        assert profile.request.timeout == 10.0

    def test_roundtrip_json(self) -> None:
        profile = Profile(
            name="p",
            bearer_token="file:~/b",
            oauth=OAuthSources(),
            base_url="https://api.example.com/2/",
        )
        restored = Profile.model_validate(profile.model_dump(mode="json"))
        assert restored == profile
        assert restored.oauth.consumer_key == "env:DUALAUTH_CONSUMER_KEY"
        assert restored.base_url == "https://api.example.com/2/"

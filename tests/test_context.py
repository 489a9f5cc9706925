"""Tests for dualauth.context -- signer selection and argument forwarding."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from dualauth.context import (
    ClientContext,
    SignerKind,
    create_client_context,
    select_signer,
)
from dualauth.exceptions import ConfigError
from dualauth.models import OAuthTokens, RequestDefaults, UserContext
from dualauth.signers import OAuth1Signer, OAuth2Signer

URI = "https://api.example.com/2/tweets"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fake_signers() -> tuple[AsyncMock, AsyncMock]:
    """Return ``(oauth1, oauth2)`` mocks with the signer verb surface."""
    return AsyncMock(spec=OAuth1Signer), AsyncMock(spec=OAuth2Signer)


def _assert_untouched(signer: AsyncMock) -> None:
    for verb in ("get", "post", "put", "delete", "send"):
        getattr(signer, verb).assert_not_awaited()


# ---------------------------------------------------------------------------
# select_signer
# ---------------------------------------------------------------------------


class TestSelectSigner:
    @pytest.mark.parametrize(
        ("user_context", "has_oauth1", "expected"),
        [
            (UserContext.OAUTH2_OR_OAUTH1, True, SignerKind.OAUTH1),
            (UserContext.OAUTH2_OR_OAUTH1, False, SignerKind.OAUTH2),
            (UserContext.OAUTH2_ONLY, True, SignerKind.OAUTH2),
            (UserContext.OAUTH2_ONLY, False, SignerKind.OAUTH2),
        ],
    )
    def test_decision_table(
        self, user_context: UserContext, has_oauth1: bool, expected: SignerKind
    ) -> None:
        assert select_signer(user_context, has_oauth1) is expected

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("oauth2_or_oauth1", SignerKind.OAUTH1), ("oauth2_only", SignerKind.OAUTH2)],
    )
    def test_plain_string_values_are_accepted(self, raw: str, expected: SignerKind) -> None:
        assert select_signer(raw, True) is expected  # type: ignore[arg-type]

    @pytest.mark.parametrize("value", ["oauth1_only", "OAUTH2_ONLY", None, 1])
    def test_unknown_value_is_rejected(self, value: object) -> None:
        with pytest.raises(TypeError, match="Unsupported user context"):
            select_signer(value, True)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Routing with both signers present
# ---------------------------------------------------------------------------


class TestRoutingWithOAuth1:
    @pytest.mark.asyncio
    async def test_get_prefers_oauth1(self) -> None:
        oauth1, oauth2 = _fake_signers()
        ctx = ClientContext(oauth2, oauth1_signer=oauth1)

        await ctx.get(UserContext.OAUTH2_OR_OAUTH1, URI)

        oauth1.get.assert_awaited_once_with(URI, timeout=10.0)
        _assert_untouched(oauth2)

    @pytest.mark.asyncio
    async def test_post_forwards_headers_and_body(self) -> None:
        oauth1, oauth2 = _fake_signers()
        ctx = ClientContext(oauth2, oauth1_signer=oauth1)
        headers = {"X": "1"}

        await ctx.post(UserContext.OAUTH2_OR_OAUTH1, URI, headers=headers, body="payload")

        oauth1.post.assert_awaited_once_with(
            URI, headers={"X": "1"}, body="payload", timeout=10.0
        )
        assert oauth1.post.await_args.kwargs["headers"] is headers
        _assert_untouched(oauth2)

    @pytest.mark.asyncio
    async def test_put_forwards_form_body_unchanged(self) -> None:
        oauth1, oauth2 = _fake_signers()
        ctx = ClientContext(oauth2, oauth1_signer=oauth1)
        form = {"status": "hello"}

        await ctx.put(UserContext.OAUTH2_OR_OAUTH1, URI, body=form, timeout=3.5)

        kwargs = oauth1.put.await_args.kwargs
        assert kwargs["body"] is form
        assert kwargs["timeout"] == 3.5
        _assert_untouched(oauth2)

    @pytest.mark.asyncio
    async def test_delete_oauth2_only_uses_bearer(self) -> None:
        oauth1, oauth2 = _fake_signers()
        ctx = ClientContext(oauth2, oauth1_signer=oauth1)

        await ctx.delete(UserContext.OAUTH2_ONLY, URI)

        oauth2.delete.assert_awaited_once_with(URI, timeout=10.0)
        _assert_untouched(oauth1)

    @pytest.mark.asyncio
    async def test_send_returns_stream_unmodified(self) -> None:
        oauth1, oauth2 = _fake_signers()
        streamed = httpx.Response(200, stream=httpx.ByteStream(b"chunk"))
        oauth1.send.return_value = streamed
        ctx = ClientContext(oauth2, oauth1_signer=oauth1)
        raw = httpx.Request("POST", URI, content=b"data")

        result = await ctx.send(UserContext.OAUTH2_OR_OAUTH1, raw, timeout=5.0)

        assert result is streamed
        oauth1.send.assert_awaited_once_with(raw, timeout=5.0)
        _assert_untouched(oauth2)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("verb", ["get", "delete"])
    async def test_oauth2_only_never_touches_oauth1(self, verb: str) -> None:
        oauth1, oauth2 = _fake_signers()
        ctx = ClientContext(oauth2, oauth1_signer=oauth1)

        await getattr(ctx, verb)(UserContext.OAUTH2_ONLY, URI)

        getattr(oauth2, verb).assert_awaited_once()
        _assert_untouched(oauth1)

    @pytest.mark.asyncio
    async def test_plain_string_routes_like_member(self) -> None:
        oauth1, oauth2 = _fake_signers()
        ctx = ClientContext(oauth2, oauth1_signer=oauth1)

        await ctx.get("oauth2_or_oauth1", URI)  # type: ignore[arg-type]

        oauth1.get.assert_awaited_once_with(URI, timeout=10.0)
        _assert_untouched(oauth2)

    def test_has_oauth1_client(self) -> None:
        oauth1, oauth2 = _fake_signers()
        assert ClientContext(oauth2, oauth1_signer=oauth1).has_oauth1_client is True


# ---------------------------------------------------------------------------
# Routing without OAuth 1.0a credentials
# ---------------------------------------------------------------------------


class TestRoutingWithoutOAuth1:
    @pytest.mark.asyncio
    async def test_get_falls_back_to_bearer_with_default_timeout(self) -> None:
        oauth2 = AsyncMock(spec=OAuth2Signer)
        ctx = ClientContext(oauth2)

        await ctx.get(UserContext.OAUTH2_OR_OAUTH1, URI)

        oauth2.get.assert_awaited_once_with(URI, timeout=10.0)
        assert ctx.has_oauth1_client is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_context", list(UserContext))
    async def test_every_preference_uses_bearer(self, user_context: UserContext) -> None:
        oauth2 = AsyncMock(spec=OAuth2Signer)
        ctx = ClientContext(oauth2)
        raw = httpx.Request("GET", URI)

        await ctx.get(user_context, URI)
        await ctx.post(user_context, URI, body=b"x")
        await ctx.put(user_context, URI, body=b"x")
        await ctx.delete(user_context, URI)
        await ctx.send(user_context, raw)

        for verb in ("get", "post", "put", "delete", "send"):
            getattr(oauth2, verb).assert_awaited_once()


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    @pytest.mark.asyncio
    async def test_omitted_headers_become_empty_dict(self) -> None:
        oauth2 = AsyncMock(spec=OAuth2Signer)
        ctx = ClientContext(oauth2)

        await ctx.post(UserContext.OAUTH2_ONLY, URI, body="b")

        oauth2.post.assert_awaited_once_with(URI, headers={}, body="b", timeout=10.0)

    @pytest.mark.asyncio
    async def test_custom_defaults_apply_only_when_omitted(self) -> None:
        oauth2 = AsyncMock(spec=OAuth2Signer)
        defaults = RequestDefaults(timeout=2.5, headers={"User-Agent": "dualauth"})
        ctx = ClientContext(oauth2, defaults=defaults)

        await ctx.put(UserContext.OAUTH2_ONLY, URI)
        await ctx.put(UserContext.OAUTH2_ONLY, URI, headers={"A": "b"}, timeout=1.0)

        first, second = oauth2.put.await_args_list
        assert first.kwargs["headers"] == {"User-Agent": "dualauth"}
        assert first.kwargs["headers"] is not defaults.headers
        assert first.kwargs["timeout"] == 2.5
        assert second.kwargs["headers"] == {"A": "b"}
        assert second.kwargs["timeout"] == 1.0

    @pytest.mark.asyncio
    async def test_explicit_zero_like_timeout_is_not_replaced(self) -> None:
        oauth2 = AsyncMock(spec=OAuth2Signer)
        ctx = ClientContext(oauth2)

        await ctx.get(UserContext.OAUTH2_ONLY, URI, timeout=0.001)

        assert oauth2.get.await_args.kwargs["timeout"] == 0.001


# ---------------------------------------------------------------------------
# Independence of calls
# ---------------------------------------------------------------------------


class TestStatelessness:
    @pytest.mark.asyncio
    async def test_alternating_preferences(self) -> None:
        oauth1, oauth2 = _fake_signers()
        ctx = ClientContext(oauth2, oauth1_signer=oauth1)

        for _ in range(3):
            await ctx.get(UserContext.OAUTH2_OR_OAUTH1, URI)
            await ctx.get(UserContext.OAUTH2_ONLY, URI)

        assert oauth1.get.await_count == 3
        assert oauth2.get.await_count == 3

    @pytest.mark.asyncio
    async def test_concurrent_calls_route_independently(self) -> None:
        oauth1, oauth2 = _fake_signers()

        async def slow(uri: str, *, timeout: float) -> str:
            await asyncio.sleep(0)
            return uri

        oauth1.get.side_effect = slow
        oauth2.get.side_effect = slow
        ctx = ClientContext(oauth2, oauth1_signer=oauth1)

        results = await asyncio.gather(
            *(
                ctx.get(
                    UserContext.OAUTH2_OR_OAUTH1 if i % 2 else UserContext.OAUTH2_ONLY,
                    f"{URI}/{i}",
                )
                for i in range(10)
            )
        )

        assert results == [f"{URI}/{i}" for i in range(10)]
        assert oauth1.get.await_count == 5
        assert oauth2.get.await_count == 5


# ---------------------------------------------------------------------------
# Failure propagation
# ---------------------------------------------------------------------------


class TestFailurePropagation:
    @pytest.mark.asyncio
    async def test_oauth1_failure_is_not_retried_with_bearer(self) -> None:
        oauth1, oauth2 = _fake_signers()
        oauth1.get.side_effect = httpx.ConnectTimeout("timed out")
        ctx = ClientContext(oauth2, oauth1_signer=oauth1)

        with pytest.raises(httpx.ConnectTimeout, match="timed out"):
            await ctx.get(UserContext.OAUTH2_OR_OAUTH1, URI)
        _assert_untouched(oauth2)

    @pytest.mark.asyncio
    async def test_error_response_is_returned_as_is(self) -> None:
        oauth2 = AsyncMock(spec=OAuth2Signer)
        unauthorized = httpx.Response(401, json={"title": "Unauthorized"})
        oauth2.get.return_value = unauthorized
        ctx = ClientContext(oauth2)

        assert await ctx.get(UserContext.OAUTH2_ONLY, URI) is unauthorized

    @pytest.mark.asyncio
    async def test_context_remains_usable_after_failure(self) -> None:
        oauth2 = AsyncMock(spec=OAuth2Signer)
        ok = httpx.Response(200)
        oauth2.get.side_effect = [httpx.ReadTimeout("slow"), ok]
        ctx = ClientContext(oauth2)

        with pytest.raises(httpx.ReadTimeout):
            await ctx.get(UserContext.OAUTH2_ONLY, URI)
        assert await ctx.get(UserContext.OAUTH2_ONLY, URI) is ok


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_async_with_closes_both_signers(self) -> None:
        oauth1, oauth2 = _fake_signers()
        async with ClientContext(oauth2, oauth1_signer=oauth1) as ctx:
            assert ctx.has_oauth1_client
        oauth1.aclose.assert_awaited_once()
        oauth2.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_aclose_without_oauth1(self) -> None:
        oauth2 = AsyncMock(spec=OAuth2Signer)
        await ClientContext(oauth2).aclose()
        oauth2.aclose.assert_awaited_once()


# ---------------------------------------------------------------------------
# create_client_context
# ---------------------------------------------------------------------------


class TestCreateClientContext:
    @pytest.mark.asyncio
    async def test_bearer_only(self, recording_transport) -> None:
        async with create_client_context("B1", transport=recording_transport) as ctx:
            assert ctx.has_oauth1_client is False
            await ctx.get(UserContext.OAUTH2_OR_OAUTH1, URI)

        (request,) = recording_transport.requests
        assert request.headers["Authorization"] == "Bearer B1"
        assert request.extensions["timeout"]["read"] == 10.0

    @pytest.mark.asyncio
    async def test_with_tokens_signs_oauth1(
        self, recording_transport, oauth_tokens: OAuthTokens
    ) -> None:
        async with create_client_context(
            "B1", oauth_tokens, transport=recording_transport
        ) as ctx:
            assert ctx.has_oauth1_client is True
            await ctx.post(
                UserContext.OAUTH2_OR_OAUTH1, URI, headers={"X": "1"}, body="payload"
            )
            await ctx.delete(UserContext.OAUTH2_ONLY, URI)

        post, delete = recording_transport.requests
        assert post.headers["Authorization"].startswith("OAuth ")
        assert 'oauth_consumer_key="ck"' in post.headers["Authorization"]
        assert post.headers["X"] == "1"
        assert post.content == b"payload"
        assert delete.headers["Authorization"] == "Bearer B1"

    def test_empty_bearer_token_is_rejected(self, oauth_tokens: OAuthTokens) -> None:
        with pytest.raises(ConfigError, match="bearer token"):
            create_client_context("", oauth_tokens)

    @pytest.mark.asyncio
    async def test_construction_sends_nothing(
        self, recording_transport, oauth_tokens: OAuthTokens
    ) -> None:
        ctx = create_client_context("B1", oauth_tokens, transport=recording_transport)
        await ctx.aclose()
        assert recording_transport.requests == []

    @pytest.mark.asyncio
    async def test_defaults_are_used(self, recording_transport) -> None:
        defaults = RequestDefaults(timeout=4.0)
        async with create_client_context(
            "B1", defaults=defaults, transport=recording_transport
        ) as ctx:
            assert ctx.defaults is defaults
            await ctx.get(UserContext.OAUTH2_ONLY, URI)

        assert recording_transport.requests[0].extensions["timeout"]["connect"] == 4.0

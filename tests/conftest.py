"""Shared test fixtures for dualauth.

Provides fixtures for isolating configuration from the real user
directories, resetting the global output manager, and building
:mod:`httpx` mock transports that record what reached the wire.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import httpx
import pytest

from dualauth.models import OAuthTokens
from dualauth.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time, which go stale once CliRunner restores the streams.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


@pytest.fixture
def oauth_tokens() -> OAuthTokens:
    """A complete OAuth 1.0a credential bundle."""
    return OAuthTokens(
        consumer_key="ck",
        consumer_secret="cs",
        access_token="at",
        access_token_secret="ats",
    )


# ---------------------------------------------------------------------------
# Recording transport
# ---------------------------------------------------------------------------


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it receives.

    Args:
        handler: Optional response factory.  Defaults to ``200 {"ok": true}``.
    """

    def __init__(
        self, handler: Callable[[httpx.Request], httpx.Response] | None = None
    ) -> None:
        self.requests: list[httpx.Request] = []
        self._respond = handler or (lambda request: httpx.Response(200, json={"ok": True}))
        super().__init__(self._record)

    def _record(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return self._respond(request)


@pytest.fixture
def recording_transport() -> RecordingTransport:
    return RecordingTransport()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points the XDG directories into *tmp_path*, forces the XDG code path,
    and clears every ``DUALAUTH_*`` variable so tests never see real
    credentials.
    """
    monkeypatch.setattr("dualauth.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in [
        "DUALAUTH_PROFILE",
        "DUALAUTH_BEARER_TOKEN",
        "DUALAUTH_CONSUMER_KEY",
        "DUALAUTH_CONSUMER_SECRET",
        "DUALAUTH_ACCESS_TOKEN",
        "DUALAUTH_ACCESS_TOKEN_SECRET",
    ]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet PLAIN output manager."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()

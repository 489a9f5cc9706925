"""Configuration management with XDG paths, atomic writes, and credential resolution.

This module handles all persistent configuration for dualauth:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.dualauth/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_data_dir`, :func:`get_profiles_dir`.
* **Profiles** -- One JSON file per account, each deserialised into a
  :class:`~dualauth.models.Profile`. Managed via :func:`load_profile`,
  :func:`save_profile`, :func:`delete_profile`.
* **Environment profile** -- :func:`profile_from_env` builds an unsaved
  profile from ``DUALAUTH_*`` variables so the CLI works without setup.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files, or interactive prompts; :func:`resolve_tokens` and
  :func:`build_context` turn a profile into a
  :class:`~dualauth.context.ClientContext`.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Optional

import httpx
from pydantic import ValidationError

from dualauth.context import ClientContext, create_client_context
from dualauth.exceptions import ConfigError
from dualauth.models import OAuthSources, OAuthTokens, Profile

_APP_NAME = "dualauth"

ENV_PROFILE = "DUALAUTH_PROFILE"
ENV_BEARER_TOKEN = "DUALAUTH_BEARER_TOKEN"
ENV_OAUTH_VARS = (
    "DUALAUTH_CONSUMER_KEY",
    "DUALAUTH_CONSUMER_SECRET",
    "DUALAUTH_ACCESS_TOKEN",
    "DUALAUTH_ACCESS_TOKEN_SECRET",
)


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/dualauth/`` (default ``~/.config/dualauth/``).
    On macOS/Windows: ``~/.dualauth/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/dualauth/`` (default ``~/.local/share/dualauth/``).
    On macOS/Windows: ``~/.dualauth/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_profiles_dir() -> Path:
    """Return the profiles directory (``<config_dir>/profiles/``), creating it if necessary."""
    path = get_config_dir() / "profiles"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems.  Profiles name
    credential sources rather than secrets, but the file is still created
    with owner-only permissions.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.chmod(tmp_path, 0o600)
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Profiles ---


def _profile_path(name: str) -> Path:
    """Path to a named profile's JSON file."""
    return get_profiles_dir() / f"{name}.json"


def list_profiles() -> list[str]:
    """Return all profile names found in the profiles directory, sorted alphabetically."""
    return sorted(p.stem for p in get_profiles_dir().glob("*.json") if p.is_file())


def load_profile(name: str) -> Profile:
    """Load and validate a profile from disk.

    Args:
        name: Profile name (``<name>.json`` in the profiles directory).

    Returns:
        The deserialised :class:`~dualauth.models.Profile`.

    Raises:
        ConfigError: If the profile file does not exist, contains invalid
            JSON, or fails Pydantic validation.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Profile.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid profile '{name}' at {path}: {exc}") from exc


def save_profile(profile: Profile) -> None:
    """Persist a profile atomically to the profiles directory."""
    data = profile.model_dump(mode="json")
    _atomic_write(_profile_path(profile.name), json.dumps(data, indent=2) + "\n")


def delete_profile(name: str) -> None:
    """Delete a profile's JSON file from disk.

    Raises:
        ConfigError: If the profile does not exist.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    path.unlink()


def profile_exists(name: str) -> bool:
    """Check whether a profile file exists on disk."""
    return _profile_path(name).is_file()


def profile_from_env() -> Profile:
    """Build an unsaved profile from ``DUALAUTH_*`` environment variables.

    ``DUALAUTH_BEARER_TOKEN`` is always the bearer source.  OAuth 1.0a
    sources are added only when all four ``DUALAUTH_CONSUMER_*`` /
    ``DUALAUTH_ACCESS_TOKEN*`` variables are set.

    Raises:
        ConfigError: If some, but not all, OAuth 1.0a variables are set.
    """
    present = [var for var in ENV_OAUTH_VARS if os.environ.get(var)]
    oauth: Optional[OAuthSources] = None
    if len(present) == len(ENV_OAUTH_VARS):
        oauth = OAuthSources()
    elif present:
        missing = ", ".join(var for var in ENV_OAUTH_VARS if var not in present)
        raise ConfigError(
            f"Incomplete OAuth 1.0a credentials in environment; missing: {missing}"
        )
    return Profile(name="env", bearer_token=f"env:{ENV_BEARER_TOKEN}", oauth=oauth)


def resolve_profile(cli_profile: Optional[str] = None) -> Profile:
    """Pick the active profile.

    Precedence (high to low):
        1. ``cli_profile`` (the ``--profile`` flag)
        2. The ``DUALAUTH_PROFILE`` environment variable
        3. :func:`profile_from_env`

    Raises:
        ConfigError: If a named profile cannot be loaded.
    """
    name = cli_profile or os.environ.get(ENV_PROFILE)
    if name:
        return load_profile(name)
    return profile_from_env()


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Enter credential: ")

    raise ConfigError(f"Unknown credential source format: {source}")


def resolve_tokens(profile: Profile) -> tuple[str, Optional[OAuthTokens]]:
    """Resolve every credential source of *profile*.

    Returns:
        ``(bearer_token, oauth_tokens)`` where ``oauth_tokens`` is ``None``
        when the profile has no OAuth 1.0a section.

    Raises:
        ConfigError: If a source cannot be resolved or resolves to an
            empty value.
    """
    bearer_token = resolve_credential(profile.bearer_token)
    if not bearer_token:
        raise ConfigError(f"Bearer token for profile '{profile.name}' is empty")

    if profile.oauth is None:
        return bearer_token, None

    sources = profile.oauth
    try:
        tokens = OAuthTokens(
            consumer_key=resolve_credential(sources.consumer_key),
            consumer_secret=resolve_credential(sources.consumer_secret),
            access_token=resolve_credential(sources.access_token),
            access_token_secret=resolve_credential(sources.access_token_secret),
        )
    except ValidationError as exc:
        fields = ", ".join(str(err["loc"][0]) for err in exc.errors())
        raise ConfigError(
            f"OAuth 1.0a credentials for profile '{profile.name}' are empty: {fields}"
        ) from exc
    return bearer_token, tokens


def build_context(
    profile: Profile,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ClientContext:
    """Create a :class:`~dualauth.context.ClientContext` for *profile*.

    Args:
        profile: The active profile.
        transport: Optional :mod:`httpx` transport, mainly for tests.
    """
    bearer_token, oauth_tokens = resolve_tokens(profile)
    return create_client_context(
        bearer_token,
        oauth_tokens,
        defaults=profile.request,
        transport=transport,
    )

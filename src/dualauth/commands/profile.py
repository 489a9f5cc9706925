"""Profile commands -- create, inspect, and remove credential profiles.

A profile stores credential *sources*, never the secrets themselves::

    dualauth profile add work --bearer-token env:WORK_BEARER \\
        --base-url https://api.example.com/2/
    dualauth profile add bot --bearer-token file:~/.bot/bearer --oauth \\
        --consumer-key env:BOT_CK --consumer-secret env:BOT_CS \\
        --access-token env:BOT_AT --access-token-secret env:BOT_ATS
    dualauth profile list
    dualauth -p bot request GET https://api.example.com/2/users/me
    dualauth -p work request GET users/me
"""

from __future__ import annotations

from typing import Optional

import typer

from dualauth.output import error, format_response, info, print_table, success


profile_app = typer.Typer(no_args_is_help=True)


@profile_app.command("add")
def profile_add(
    name: str = typer.Argument(help="Profile name."),
    bearer_token: str = typer.Option(
        "env:DUALAUTH_BEARER_TOKEN",
        "--bearer-token",
        help="Bearer token source: env:VAR, file:/path or prompt.",
    ),
    oauth: bool = typer.Option(
        False, "--oauth", help="Also sign with OAuth 1.0a user context."
    ),
    consumer_key: Optional[str] = typer.Option(None, "--consumer-key", help="Consumer key source."),
    consumer_secret: Optional[str] = typer.Option(
        None, "--consumer-secret", help="Consumer secret source."
    ),
    access_token: Optional[str] = typer.Option(None, "--access-token", help="Access token source."),
    access_token_secret: Optional[str] = typer.Option(
        None, "--access-token-secret", help="Access token secret source."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Base URL for relative request URLs."
    ),
    timeout: float = typer.Option(10.0, "--timeout", help="Default request timeout in seconds."),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing profile."),
) -> None:
    """Create a profile.

    OAuth 1.0a source options left unset default to the
    ``DUALAUTH_CONSUMER_*`` / ``DUALAUTH_ACCESS_TOKEN*`` environment
    variables.

    Raises:
        typer.Exit: With code 2 if the profile exists (without ``--force``)
            or the values fail validation.
    """
    from pydantic import ValidationError

    from dualauth.config import profile_exists, save_profile
    from dualauth.models import OAuthSources, Profile, RequestDefaults

    if profile_exists(name) and not force:
        error(f"Profile '{name}' already exists. Use --force to overwrite.")
        raise typer.Exit(code=2)

    oauth_sources: Optional[OAuthSources] = None
    if oauth:
        overrides = {
            "consumer_key": consumer_key,
            "consumer_secret": consumer_secret,
            "access_token": access_token,
            "access_token_secret": access_token_secret,
        }
        oauth_sources = OAuthSources(**{k: v for k, v in overrides.items() if v})
    elif any((consumer_key, consumer_secret, access_token, access_token_secret)):
        error("OAuth 1.0a sources given without --oauth")
        raise typer.Exit(code=2)

    try:
        profile = Profile(
            name=name,
            bearer_token=bearer_token,
            oauth=oauth_sources,
            base_url=base_url,
            request=RequestDefaults(timeout=timeout),
        )
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_profile(profile)
    success(f"Saved profile '{name}'")


@profile_app.command("list")
def profile_list() -> None:
    """List saved profiles and the schemes they enable."""
    from dualauth.config import list_profiles, load_profile

    names = list_profiles()
    if not names:
        info("No profiles. Create one with: dualauth profile add NAME")
        return

    rows = []
    for name in names:
        profile = load_profile(name)
        schemes = "oauth2, oauth1" if profile.oauth else "oauth2"
        rows.append([name, schemes, f"{profile.request.timeout:g}s"])
    print_table(["name", "schemes", "timeout"], rows, title="Profiles")


@profile_app.command("show")
def profile_show(name: str = typer.Argument(help="Profile name.")) -> None:
    """Print a profile's stored settings (sources only, no secrets)."""
    from dualauth.config import load_profile

    format_response(load_profile(name).model_dump(mode="json"))


@profile_app.command("delete")
def profile_delete(name: str = typer.Argument(help="Profile name.")) -> None:
    """Delete a saved profile."""
    from dualauth.config import delete_profile

    delete_profile(name)
    success(f"Deleted profile '{name}'")

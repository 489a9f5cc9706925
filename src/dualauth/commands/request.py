"""Request commands -- send one authenticated request, or report what a profile enables.

``dualauth request`` builds a :class:`~dualauth.context.ClientContext` from
the active profile, lets it choose the signer for ``--user-context``, and
prints the response.  ``--stream`` goes through
:meth:`~dualauth.context.ClientContext.send` and writes the body as it
arrives, which suits long-lived streaming endpoints.

Example::

    dualauth request GET https://api.example.com/2/users/me
    dualauth request POST https://api.example.com/2/tweets \\
        -H "Content-Type: application/json" -d '{"text": "hello"}'
    dualauth request GET https://api.example.com/2/tweets/search/stream --stream -u oauth2_only
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx
import typer

from dualauth.config import build_context, resolve_profile
from dualauth.context import select_signer
from dualauth.exceptions import ConnectionError_, InvalidUsageError
from dualauth.models import Profile, UserContext
from dualauth.output import debug, get_output, print_table, warning
from dualauth.response import format_api_response, raise_for_status

_METHODS = ("GET", "POST", "PUT", "DELETE")


def request_command(
    ctx: typer.Context,
    method: str = typer.Argument(help="HTTP method: GET, POST, PUT or DELETE."),
    url: str = typer.Argument(
        help="Request URL, absolute or relative to the profile's base_url."
    ),
    user_context: UserContext = typer.Option(
        UserContext.OAUTH2_OR_OAUTH1,
        "--user-context",
        "-u",
        help="Accepted schemes. oauth2_or_oauth1 signs with OAuth 1.0a when the profile has it.",
    ),
    header: Optional[list[str]] = typer.Option(
        None, "--header", "-H", help="Request header as 'Name: value'. Repeatable."
    ),
    body: Optional[str] = typer.Option(None, "--body", "-d", help="Raw request body."),
    form: Optional[list[str]] = typer.Option(
        None, "--form", "-F", help="Form field as key=value. Repeatable."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", "-t", help="Timeout in seconds (default from profile)."
    ),
    stream: bool = typer.Option(
        False, "--stream", help="Stream the response body as it arrives."
    ),
) -> None:
    """Send an authenticated request and print the response.

    Raises:
        InvalidUsageError: For an unknown method, conflicting body options,
            or headers/body on GET and DELETE without ``--stream``.
        ConnectionError_: On timeouts and other transport failures.
        AuthError: On HTTP 401 / 403.
        NotFoundError: On HTTP 404.
        ServerError: On any other HTTP error status.
    """
    method = method.upper()
    if method not in _METHODS:
        raise InvalidUsageError(
            f"Unsupported method '{method}'. Use one of: {', '.join(_METHODS)}"
        )
    if body is not None and form:
        raise InvalidUsageError("--body and --form cannot be combined")

    headers = _parse_headers(header or [])
    payload: Any = _parse_form(form) if form else body
    if method in ("GET", "DELETE") and not stream and (headers or payload is not None):
        raise InvalidUsageError(
            f"{method} does not take headers or a body; use --stream to send a custom request"
        )

    profile = resolve_profile(ctx.obj.get("profile") if ctx.obj else None)
    debug(f"Using profile '{profile.name}'")
    url = _resolve_url(url, profile.base_url)
    asyncio.run(
        _perform(
            profile,
            method,
            url,
            user_context,
            headers=headers or None,
            payload=payload,
            timeout=timeout,
            stream=stream,
        )
    )


def status_command(ctx: typer.Context) -> None:
    """Show which authentication schemes the active profile enables."""
    profile = resolve_profile(ctx.obj.get("profile") if ctx.obj else None)
    has_oauth1, request_timeout = asyncio.run(_describe(profile))

    print_table(
        ["profile", "oauth2", "oauth1", "timeout"],
        [[
            profile.name,
            "yes",
            "yes" if has_oauth1 else "no",
            f"{request_timeout:g}s",
        ]],
        title="Authentication",
    )
    if not has_oauth1:
        warning(
            "No OAuth 1.0a credentials; oauth2_or_oauth1 requests will use the bearer token."
        )


async def _describe(profile: Profile) -> tuple[bool, float]:
    async with build_context(profile) as client:
        return client.has_oauth1_client, client.defaults.timeout


async def _perform(
    profile: Profile,
    method: str,
    url: str,
    user_context: UserContext,
    *,
    headers: Optional[dict[str, str]],
    payload: Any,
    timeout: Optional[float],
    stream: bool,
) -> None:
    """Run one request through a fresh context and print the outcome."""
    async with build_context(profile) as client:
        kind = select_signer(user_context, client.has_oauth1_client)
        debug(f"{method} {url} via {kind.value}")
        try:
            if stream:
                request = _build_request(method, url, headers, payload)
                await _stream(await client.send(user_context, request, timeout=timeout))
                return
            if method == "GET":
                response = await client.get(user_context, url, timeout=timeout)
            elif method == "DELETE":
                response = await client.delete(user_context, url, timeout=timeout)
            elif method == "POST":
                response = await client.post(
                    user_context, url, headers=headers, body=payload, timeout=timeout
                )
            else:
                response = await client.put(
                    user_context, url, headers=headers, body=payload, timeout=timeout
                )
        except httpx.TimeoutException as exc:
            raise ConnectionError_(f"Request timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Connection failed: {exc}") from exc

    format_api_response(response)
    raise_for_status(response)


async def _stream(response: httpx.Response) -> None:
    output = get_output()
    try:
        output.info(f"HTTP {response.status_code} {response.reason_phrase or ''}".rstrip())
        if response.is_error:
            await response.aread()
            raise_for_status(response)
        async for chunk in response.aiter_text():
            output.print_chunk(chunk)
    finally:
        await response.aclose()


def _build_request(
    method: str, url: str, headers: Optional[dict[str, str]], payload: Any
) -> httpx.Request:
    if isinstance(payload, dict):
        return httpx.Request(method, url, headers=headers, data=payload)
    return httpx.Request(method, url, headers=headers, content=payload)


def _parse_headers(values: list[str]) -> dict[str, str]:
    """Parse ``Name: value`` strings into a dict."""
    headers: dict[str, str] = {}
    for value in values:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            raise InvalidUsageError(f"Invalid header '{value}'. Expected 'Name: value'")
        headers[name.strip()] = content.strip()
    return headers


def _parse_form(values: list[str]) -> dict[str, str]:
    """Parse ``key=value`` strings into a dict of form fields."""
    fields: dict[str, str] = {}
    for value in values:
        key, sep, content = value.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Invalid form field '{value}'. Expected key=value")
        fields[key] = content
    return fields


def _resolve_url(url: str, base_url: Optional[str]) -> str:
    """Join a relative *url* onto *base_url* (RFC 3986 reference resolution)."""
    try:
        if base_url is None or httpx.URL(url).is_absolute_url:
            return url
        return str(httpx.URL(base_url).join(url))
    except httpx.InvalidURL as exc:
        raise InvalidUsageError(f"Invalid request URL {url!r}: {exc}") from exc

"""Typer application and CLI entry point for dualauth.

This module wires together the top-level Typer application and registers the
built-in sub-commands (``request``, ``status``, ``profile``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.  It installs a SIGINT handler, invokes the Typer app,
maps :class:`~dualauth.exceptions.DualAuthError` to its exit code, and
writes a crash log for anything unexpected.

See Also:
    :mod:`dualauth.config`: Profile resolution.
    :mod:`dualauth.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from dualauth import __version__
from dualauth.commands.profile import profile_app
from dualauth.commands.request import request_command, status_command
from dualauth.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="dualauth",
    help="Send OAuth 1.0a or OAuth 2.0 authenticated API requests.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("request")(request_command)
app.command("status")(status_command)
app.add_typer(profile_app, name="profile", help="Credential profile management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"dualauth {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Profile name to use."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~dualauth.output.OutputManager`, enables
    library debug logging for ``--verbose``, and stores the ``--profile``
    override in ``ctx.obj``.
    """
    from dualauth.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    )
    if verbose:
        _enable_debug_logging(no_color)

    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile


def _enable_debug_logging(no_color: bool) -> None:
    """Send ``dualauth.*`` DEBUG records to stderr through Rich."""
    logger = logging.getLogger("dualauth")
    logger.setLevel(logging.DEBUG)
    if not logger.handlers:
        console = Console(stderr=True, no_color=no_color)
        logger.addHandler(RichHandler(console=console, show_path=False))


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from dualauth.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``dualauth`` console script.

    :class:`~dualauth.exceptions.DualAuthError` instances cause a clean
    exit with the error's ``exit_code``.  All other exceptions produce a
    crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from dualauth.exceptions import DualAuthError
        from dualauth.output import error

        if isinstance(exc, DualAuthError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)

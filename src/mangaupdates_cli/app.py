"""Typer application and CLI entry point for mangaupdates_cli.

The root :data:`app` carries the built-in commands (``generate-help``,
``config``, ``help``). At startup :func:`main` loads the OpenAPI document,
builds the help catalog, and attaches one click group per subprogram
(``authors``, ``series``, ...) next to them via :func:`build_cli`.

:func:`main` is the console-script entry point declared in
``pyproject.toml``. :class:`~mangaupdates_cli.exceptions.MangaUpdatesError`
is reported as ``Error: <message>`` and exits with the error's code; any
other exception is written to a crash log under the data directory.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import click
import typer

from mangaupdates_cli import __version__
from mangaupdates_cli.client import ApiClient
from mangaupdates_cli.commands.config import config_app
from mangaupdates_cli.commands.generate import generate_help_command
from mangaupdates_cli.config import effective_spec_source, get_data_dir, resolve_settings
from mangaupdates_cli.dispatch import (
    ClientFactory,
    SubprogramGroup,
    build_subprogram_groups,
    top_level_help,
)
from mangaupdates_cli.exceptions import MangaUpdatesError
from mangaupdates_cli.exit_codes import EXIT_GENERIC_FAILURE
from mangaupdates_cli.help.catalog import generate_catalog
from mangaupdates_cli.models import DEFAULT_PROGRAM_NAME, ParsedSpec, Settings
from mangaupdates_cli.output import (
    OutputManager,
    configure_logging,
    error,
    print_data,
    set_output,
)
from mangaupdates_cli.parser import extract_spec, load_spec, validate_openapi_version

logger = logging.getLogger(__name__)

BUILTIN_COMMANDS = frozenset({"generate-help", "config", "help"})

app = typer.Typer(
    name=DEFAULT_PROGRAM_NAME,
    help="Command-line client for the MangaUpdates API.",
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("generate-help")(generate_help_command)
app.add_typer(config_app, name="config", help="Settings management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"{DEFAULT_PROGRAM_NAME} {__version__}")
        raise typer.Exit()


def _subprogram_names(ctx: click.Context) -> list[str]:
    root = ctx.find_root().command
    if not isinstance(root, click.Group):
        return []
    return [
        name for name, command in root.commands.items()
        if isinstance(command, SubprogramGroup)
    ]


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~mangaupdates_cli.output.OutputManager` and
    the logging handler. Without a sub-command, prints the top-level usage.
    """
    output = OutputManager(no_color=no_color, quiet=quiet)
    set_output(output)
    configure_logging(verbose=verbose, console=output.stderr_console)

    if ctx.invoked_subcommand is None:
        print_data(top_level_help(_subprogram_names(ctx)))
        raise typer.Exit()


@app.command("help")
def help_command(ctx: typer.Context) -> None:
    """Show the list of subprograms."""
    print_data(top_level_help(_subprogram_names(ctx)))


def load_api_spec(settings: Settings) -> ParsedSpec:
    """Load and extract the configured (or bundled) OpenAPI document."""
    source = effective_spec_source(settings)
    logger.debug("Loading API description from %s", source)
    raw = load_spec(source)
    return extract_spec(raw, validate_openapi_version(raw))


def build_cli(
    spec: Optional[ParsedSpec] = None,
    settings: Optional[Settings] = None,
    client_factory: Optional[ClientFactory] = None,
) -> click.Group:
    """The root click group, with one subprogram group per catalog entry.

    Args:
        spec: Parsed API description. Without it only the built-in commands
            are available.
        settings: Effective settings; defaults are used when omitted.
        client_factory: Builds the API client per request; defaults to
            :class:`~mangaupdates_cli.client.ApiClient` over *settings*.
    """
    command = typer.main.get_command(app)
    if not isinstance(command, click.Group):
        raise MangaUpdatesError(
            f"typer {typer.__version__} does not build commands on the installed click; "
            "subprogram groups cannot be attached (install typer<0.26)"
        )
    if spec is None:
        return command

    settings = settings or Settings()
    catalog = generate_catalog(spec, program=settings.program_name)
    factory = client_factory or (lambda: ApiClient(settings))
    for group in build_subprogram_groups(spec, catalog, factory, program=settings.program_name):
        if group.name in command.commands:
            logger.warning("Subprogram %r collides with a built-in command; skipped", group.name)
            continue
        command.add_command(group)
    return command


def _first_command(argv: list[str]) -> Optional[str]:
    """The first argument that is not a root option."""
    for arg in argv:
        if not arg.startswith("-"):
            return arg
    return None


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to the data directory and return its path."""
    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        encoding="utf-8",
    )
    return str(log_path)


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point invoked by the ``mangaupdatescli`` console script.

    1. Install signal handlers for clean Ctrl-C behaviour.
    2. Resolve settings and load the API description. A failure is fatal
       unless a built-in command was requested.
    3. Build the command tree and run it.

    Raises:
        SystemExit: Always raised (either by click or explicitly).
    """
    _setup_signal_handlers()
    args = list(sys.argv[1:] if argv is None else argv)
    configure_logging(verbose="--verbose" in args)
    try:
        settings = resolve_settings()
        spec: Optional[ParsedSpec] = None
        try:
            spec = load_api_spec(settings)
        except MangaUpdatesError as exc:
            if _first_command(args) not in BUILTIN_COMMANDS:
                raise
            logger.debug("API description unavailable: %s", exc)

        cli = build_cli(spec, settings)
        cli.main(args=args, prog_name=settings.program_name, standalone_mode=True)
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except MangaUpdatesError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)

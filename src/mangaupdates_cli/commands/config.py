"""Config commands -- view and modify user settings.

Provides the ``mangaupdatescli config`` sub-command group for reading,
updating, and resetting the user's settings file
(:class:`~mangaupdates_cli.models.Settings`).
"""

from __future__ import annotations

import json

import typer
from pydantic import ValidationError

from mangaupdates_cli.config import get_config_dir, load_settings, save_settings
from mangaupdates_cli.exit_codes import EXIT_INVALID_USAGE
from mangaupdates_cli.models import Settings
from mangaupdates_cli.output import error, info, print_json, success

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the saved settings as JSON.

    Example::

        mangaupdatescli config show
    """
    settings = load_settings()
    info(f"Config directory: {get_config_dir()}")
    print_json(json.dumps(settings.model_dump(mode="json")))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Settings key (dot notation, e.g. 'request.timeout')."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a settings value.

    The value is coerced to the type of the existing field (bool, int or
    str) and the result is validated before saving.

    Example::

        mangaupdatescli config set token abc123
        mangaupdatescli config set request.timeout 60
    """
    data = load_settings().model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    current = target[final_key]
    coerced: object = value
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=EXIT_INVALID_USAGE) from None
    target[final_key] = coerced

    try:
        settings = Settings.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_settings(settings)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset settings to defaults.

    Example::

        mangaupdatescli config reset --force
    """
    if not force and not typer.confirm("Reset all settings to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_settings(Settings())
    success("Settings reset to defaults.")

"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for mangaupdates_cli:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.mangaupdatescli/`` on macOS and Windows. See :func:`get_config_dir`
  and :func:`get_data_dir`.
* **User settings** -- A single :class:`~mangaupdates_cli.models.Settings`
  JSON file. Managed via :func:`load_settings` and :func:`save_settings`.
* **Precedence resolution** -- :func:`resolve_settings` merges CLI
  arguments, environment variables, project-local config, and user config
  into the effective settings.
* **Bundled document** -- :func:`default_spec_path` points at the OpenAPI
  document shipped inside the package.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from mangaupdates_cli.exceptions import ConfigError
from mangaupdates_cli.models import Settings

_APP_NAME = "mangaupdatescli"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "mangaupdatescli.json"

ENV_BASE_URL = "MANGAUPDATES_BASE_URL"
ENV_SPEC = "MANGAUPDATES_SPEC"
ENV_TOKEN = "MANGAUPDATES_TOKEN"

_BUNDLED_SPEC = Path(__file__).parent / "data" / "openapi.yaml"


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

    On Linux/BSD: ``$XDG_CONFIG_HOME/mangaupdatescli/`` (default
    ``~/.config/mangaupdatescli/``). On macOS/Windows: ``~/.mangaupdatescli/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/mangaupdatescli/`` (default
    ``~/.local/share/mangaupdatescli/``). On macOS/Windows:
    ``~/.mangaupdatescli/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def default_spec_path() -> Path:
    """Path to the OpenAPI document bundled with the package."""
    return _BUNDLED_SPEC


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is cleaned up.
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


# --- User settings ---


def settings_path() -> Path:
    """Path to the user settings file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_settings() -> Settings:
    """Load the user settings from the config directory.

    Returns:
        The deserialised :class:`~mangaupdates_cli.models.Settings`, or a
        default instance when the file does not exist.

    Raises:
        ConfigError: If the file contains invalid JSON or fails validation.
    """
    path = settings_path()
    if not path.is_file():
        return Settings()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Settings.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid settings at {path}: {exc}") from exc


def save_settings(settings: Settings) -> None:
    """Persist *settings* atomically to the config directory."""
    data = settings.model_dump(mode="json")
    _atomic_write(settings_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./mangaupdatescli.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file is not a valid JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Project config at {path} must be a JSON object")
    return data


# --- Precedence resolution ---


def resolve_settings(
    cli_spec: Optional[str] = None,
    cli_base_url: Optional[str] = None,
) -> Settings:
    """Resolve settings with the full precedence chain.

    Precedence (high to low):
        1. CLI arguments (``cli_spec``, ``cli_base_url``)
        2. Environment variables (``MANGAUPDATES_SPEC``,
           ``MANGAUPDATES_BASE_URL``, ``MANGAUPDATES_TOKEN``)
        3. Project config (``./mangaupdatescli.json``)
        4. User config (``~/.config/mangaupdatescli/config.json``)
        5. Defaults

    Returns:
        The effective :class:`~mangaupdates_cli.models.Settings`.

    Raises:
        ConfigError: If any layer holds invalid values.
    """
    merged = load_settings().model_dump()

    project = load_project_config()
    if project is not None:
        request = project.get("request")
        if isinstance(request, dict):
            merged["request"] = {**merged["request"], **request}
        merged.update({k: v for k, v in project.items() if k != "request"})

    for env_var, key in ((ENV_SPEC, "spec"), (ENV_BASE_URL, "base_url"), (ENV_TOKEN, "token")):
        value = os.environ.get(env_var)
        if value:
            merged[key] = value

    if cli_spec is not None:
        merged["spec"] = cli_spec
    if cli_base_url is not None:
        merged["base_url"] = cli_base_url

    try:
        return Settings.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def effective_spec_source(settings: Settings) -> str:
    """The document to load: the configured ``spec``, or the bundled copy."""
    return settings.spec or str(default_spec_path())

"""Shared test fixtures for mangaupdates_cli.

Provides the fixture document, isolated config environments, and cleanup of
the global output and logging state. These fixtures are discovered by pytest
and available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from mangaupdates_cli.models import ParsedSpec
from mangaupdates_cli.output import PACKAGE_LOGGER, reset_output
from mangaupdates_cli.parser import extract_spec

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> Any:
    """Reset the global OutputManager and the package log handlers after every test.

    Both hold references to the sys.stdout/sys.stderr in place when they
    were created. CliRunner swaps those streams per invocation, so stale
    references must not leak into the next test.
    """
    yield
    reset_output()
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Spec fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def catalog_api_path() -> Path:
    """Path to the catalog fixture document."""
    return FIXTURES_DIR / "catalog_api.json"


@pytest.fixture
def catalog_api_raw(catalog_api_path: Path) -> dict[str, Any]:
    """Raw catalog fixture document."""
    return json.loads(catalog_api_path.read_text(encoding="utf-8"))


@pytest.fixture
def catalog_api_spec(catalog_api_raw: dict[str, Any]) -> ParsedSpec:
    """Parsed catalog fixture document."""
    return extract_spec(catalog_api_raw, "3.0.3")


# ---------------------------------------------------------------------------
# Config isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every config location at *tmp_path* and clear ``MANGAUPDATES_*`` vars.

    The working directory is changed to ``tmp_path / "project"`` so the
    project-local ``mangaupdatescli.json`` lookup is isolated too.
    """
    monkeypatch.setattr("mangaupdates_cli.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ("MANGAUPDATES_BASE_URL", "MANGAUPDATES_SPEC", "MANGAUPDATES_TOKEN"):
        monkeypatch.delenv(var, raising=False)

    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return tmp_path

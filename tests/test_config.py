"""Tests for mangaupdates_cli.config and the ``config`` commands.

Covers:
- XDG directory resolution
- Settings round trip and invalid files
- Project-local config
- Precedence: CLI > env > project > user > defaults
- ``config show`` / ``config set`` / ``config reset``
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from mangaupdates_cli.app import app
from mangaupdates_cli.config import (
    _atomic_write,
    default_spec_path,
    effective_spec_source,
    get_config_dir,
    get_data_dir,
    load_project_config,
    load_settings,
    resolve_settings,
    save_settings,
    settings_path,
)
from mangaupdates_cli.exceptions import ConfigError
from mangaupdates_cli.models import DEFAULT_BASE_URL, RequestConfig, Settings

runner = CliRunner()


def _write_project(tmp_path: Path, data: object) -> None:
    (tmp_path / "project" / "mangaupdatescli.json").write_text(json.dumps(data), encoding="utf-8")


class TestDirectories:
    def test_xdg_dirs(self, isolated_config: Path) -> None:
        assert get_config_dir() == isolated_config / "config" / "mangaupdatescli"
        assert get_data_dir() == isolated_config / "data" / "mangaupdatescli"
        assert get_config_dir().is_dir()

    def test_fallback_dir(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("mangaupdates_cli.config._is_xdg_platform", lambda: False)
        monkeypatch.setenv("HOME", str(isolated_config / "home"))
        assert get_config_dir() == isolated_config / "home" / ".mangaupdatescli"
        assert get_data_dir() == isolated_config / "home" / ".mangaupdatescli" / "logs"

    def test_bundled_spec_exists(self) -> None:
        assert default_spec_path().is_file()


class TestSettingsFile:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        assert load_settings() == Settings()

    def test_round_trip(self, isolated_config: Path) -> None:
        settings = Settings(token="abc", request=RequestConfig(timeout=5))
        save_settings(settings)
        assert load_settings() == settings
        assert json.loads(settings_path().read_text(encoding="utf-8"))["token"] == "abc"

    def test_invalid_json(self, isolated_config: Path) -> None:
        settings_path().write_text("{broken", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid settings"):
            load_settings()

    def test_atomic_write_leaves_no_temp_files(self, tmp_path: Path) -> None:
        target = tmp_path / "sub" / "file.json"
        _atomic_write(target, "{}")
        assert target.read_text(encoding="utf-8") == "{}"
        assert [p.name for p in target.parent.iterdir()] == ["file.json"]


class TestProjectConfig:
    def test_absent(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_not_an_object(self, isolated_config: Path) -> None:
        _write_project(isolated_config, ["a"])
        with pytest.raises(ConfigError, match="must be a JSON object"):
            load_project_config()


class TestResolveSettings:
    def test_defaults(self, isolated_config: Path) -> None:
        settings = resolve_settings()
        assert settings.base_url == DEFAULT_BASE_URL
        assert settings.spec is None
        assert effective_spec_source(settings) == str(default_spec_path())

    def test_precedence(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        save_settings(Settings(base_url="https://user.example/", spec="user.yaml", token="user"))
        _write_project(isolated_config, {"base_url": "https://project.example/", "spec": "project.yaml"})
        monkeypatch.setenv("MANGAUPDATES_SPEC", "env.yaml")

        settings = resolve_settings(cli_base_url="https://cli.example/")
        assert settings.base_url == "https://cli.example/"
        assert settings.spec == "env.yaml"
        assert settings.token == "user"
        assert effective_spec_source(settings) == "env.yaml"

        assert resolve_settings(cli_spec="cli.yaml").spec == "cli.yaml"

    def test_project_request_merges(self, isolated_config: Path) -> None:
        save_settings(Settings(request=RequestConfig(timeout=5, verify_ssl=False)))
        _write_project(isolated_config, {"request": {"timeout": 60}})
        request = resolve_settings().request
        assert request.timeout == 60
        assert request.verify_ssl is False

    def test_env_token(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MANGAUPDATES_TOKEN", "secret")
        assert resolve_settings().token == "secret"

    def test_invalid_value(self, isolated_config: Path) -> None:
        _write_project(isolated_config, {"request": {"timeout": "soon"}})
        with pytest.raises(ConfigError, match="Invalid configuration"):
            resolve_settings()


class TestConfigCommands:
    def test_show(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["base_url"] == DEFAULT_BASE_URL
        assert "Config directory" in result.stderr

    def test_set_string(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "token", "abc123"])
        assert result.exit_code == 0
        assert load_settings().token == "abc123"

    def test_set_nested_int_and_bool(self, isolated_config: Path) -> None:
        assert runner.invoke(app, ["config", "set", "request.timeout", "60"]).exit_code == 0
        assert runner.invoke(app, ["config", "set", "request.verify_ssl", "false"]).exit_code == 0
        request = load_settings().request
        assert request.timeout == 60
        assert request.verify_ssl is False

    def test_set_bad_int(self, isolated_config: Path) -> None:
        result = runner.invoke(app, ["config", "set", "request.timeout", "soon"])
        assert result.exit_code == 2
        assert "Expected integer" in result.stderr

    @pytest.mark.parametrize("key", ["nope", "request.nope", "nope.timeout", "request"])
    def test_set_unknown_key(self, isolated_config: Path, key: str) -> None:
        result = runner.invoke(app, ["config", "set", key, "1"])
        assert result.exit_code == 2

    def test_reset_force(self, isolated_config: Path) -> None:
        save_settings(Settings(token="abc"))
        result = runner.invoke(app, ["config", "reset", "--force"])
        assert result.exit_code == 0
        assert load_settings() == Settings()

    def test_reset_cancelled(self, isolated_config: Path) -> None:
        save_settings(Settings(token="abc"))
        result = runner.invoke(app, ["config", "reset"], input="n\n")
        assert result.exit_code == 0
        assert load_settings().token == "abc"

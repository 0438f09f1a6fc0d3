"""Tests for mangaupdates_cli.output."""

from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from mangaupdates_cli.output import (
    PACKAGE_LOGGER,
    OutputManager,
    configure_logging,
    get_output,
    print_json,
    reset_output,
    set_output,
)


@pytest.fixture
def plain() -> OutputManager:
    return OutputManager(no_color=True)


class TestHighlighting:
    def test_plain_when_piped(self) -> None:
        assert not OutputManager().highlights

    def test_tty_highlights_unless_no_color(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        monkeypatch.setattr("mangaupdates_cli.output._is_tty", lambda: True)
        assert OutputManager().highlights
        assert not OutputManager(no_color=True).highlights

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        monkeypatch.setenv("NO_COLOR", "1")
        OutputManager().error("boom")
        assert capsys.readouterr().err == "Error: boom\n"


class TestPrintJSON:
    def test_reindents(self, plain: OutputManager, capsys: pytest.CaptureFixture[str]) -> None:
        plain.print_json(b'{"series_id":1,"title":"Berserk"}')
        assert capsys.readouterr().out == '{\n  "series_id": 1,\n  "title": "Berserk"\n}\n'

    def test_keeps_key_order_and_unicode(self, plain: OutputManager, capsys: pytest.CaptureFixture[str]) -> None:
        plain.print_json('{"z": "ワンピース", "a": 1}')
        assert capsys.readouterr().out == '{\n  "z": "ワンピース",\n  "a": 1\n}\n'

    def test_non_json_verbatim(self, plain: OutputManager, capsys: pytest.CaptureFixture[str]) -> None:
        feed = b"<?xml version='1.0'?><rss></rss>"
        plain.print_json(feed)
        assert capsys.readouterr().out == feed.decode() + "\n"


class TestDiagnostics:
    def test_stdout_stays_clean(self, plain: OutputManager, capsys: pytest.CaptureFixture[str]) -> None:
        plain.info("working")
        plain.warning("careful")
        plain.success("done")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == "working\nWarning: careful\ndone\n"

    def test_quiet(self, capsys: pytest.CaptureFixture[str]) -> None:
        output = OutputManager(no_color=True, quiet=True)
        output.info("hidden")
        output.success("hidden")
        output.warning("shown")
        output.error("shown")
        assert capsys.readouterr().err == "Warning: shown\nError: shown\n"
        assert output.is_quiet


class TestGlobalInstance:
    def test_set_and_reset(self, plain: OutputManager) -> None:
        set_output(plain)
        assert get_output() is plain
        reset_output()
        assert get_output() is not plain

    def test_module_helper_uses_global(self, plain: OutputManager, capsys: pytest.CaptureFixture[str]) -> None:
        set_output(plain)
        print_json("[1]")
        assert capsys.readouterr().out == "[\n  1\n]\n"


class TestConfigureLogging:
    def test_single_rich_handler(self) -> None:
        configure_logging()
        configure_logging(verbose=True)
        logger = logging.getLogger(PACKAGE_LOGGER)
        handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
        assert len(handlers) == 1
        assert logger.level == logging.DEBUG

    def test_default_level(self) -> None:
        configure_logging()
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.WARNING

    def test_records_reach_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_output(OutputManager(no_color=True))
        configure_logging()
        logging.getLogger("mangaupdates_cli.help.catalog").warning("Duplicate operationId")
        assert "Duplicate operationId" in capsys.readouterr().err

"""Tests for mangaupdates_cli.help.emitter.

Covers:
- Constant naming from operation ids
- Output file naming per emitter
- Generated Python modules execute and rebuild the same help records
- JSON documents keyed by operation id
- Cleaning previously generated files
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from mangaupdates_cli.help.catalog import HelpCatalog, emit_catalog, generate_catalog
from mangaupdates_cli.help.emitter import (
    JSONEmitter,
    PythonModuleEmitter,
    clean_generated_files,
    constant_name,
)
from mangaupdates_cli.models import ParsedSpec


@pytest.fixture
def catalog(catalog_api_spec: ParsedSpec) -> HelpCatalog:
    return generate_catalog(catalog_api_spec)


class TestConstantName:
    @pytest.mark.parametrize(
        "operation_id, expected",
        [
            ("searchSeriesPost", "HELP_SEARCH_SERIES_POST_CONTENT"),
            ("ping", "HELP_PING_CONTENT"),
            ("retrieveReleasesRssFeed", "HELP_RETRIEVE_RELEASES_RSS_FEED_CONTENT"),
            ("getHTTPStatus", "HELP_GET_HTTP_STATUS_CONTENT"),
            ("list-all.items", "HELP_LIST_ALL_ITEMS_CONTENT"),
        ],
    )
    def test_names(self, operation_id: str, expected: str) -> None:
        assert constant_name(operation_id) == expected


class TestPythonModuleEmitter:
    def test_output_path(self, tmp_path: Path) -> None:
        emitter = PythonModuleEmitter(tmp_path)
        assert emitter.output_path("series") == tmp_path / "series_generated_help.py"

    def test_module_rebuilds_records(self, tmp_path: Path, catalog: HelpCatalog) -> None:
        path = PythonModuleEmitter(tmp_path / "out").emit("series", catalog["series"])
        text = path.read_text(encoding="utf-8")
        assert text.startswith("# Code generated by mangaupdatescli generate-help; DO NOT EDIT.")

        namespace: dict[str, Any] = {}
        exec(compile(text, str(path), "exec"), namespace)
        contents = namespace["HELP_CONTENTS"]
        assert list(contents) == [e.operation_id for e in catalog["series"]]
        for entry in catalog["series"]:
            assert contents[entry.operation_id] == entry.record
        assert namespace["HELP_SEARCH_SERIES_POST_CONTENT"] is contents["searchSeriesPost"]

    def test_program_name_in_header(self, tmp_path: Path, catalog: HelpCatalog) -> None:
        text = PythonModuleEmitter(tmp_path, program="mu").render("misc", catalog["misc"])
        assert text.startswith("# Code generated by mu generate-help")


class TestJSONEmitter:
    def test_document(self, tmp_path: Path, catalog: HelpCatalog) -> None:
        path = JSONEmitter(tmp_path).emit("releases", catalog["releases"])
        assert path == tmp_path / "releases_generated_help.json"

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["subprogram"] == "releases"
        command = data["commands"]["retrieveReleasesRssFeed"]
        assert command["method"] == "get"
        assert command["path"] == "/releases/rss"
        assert command["record"]["output_schema"] == "XML Output (on 200)"
        assert command["record"]["arguments"] == []


class TestEmitAndClean:
    def test_one_file_per_subprogram(self, tmp_path: Path, catalog: HelpCatalog) -> None:
        written = emit_catalog(catalog, JSONEmitter(tmp_path))
        assert [p.name for p in written] == [
            "misc_generated_help.json",
            "releases_generated_help.json",
            "series_generated_help.json",
        ]

    def test_clean_removes_both_variants(self, tmp_path: Path, catalog: HelpCatalog) -> None:
        emit_catalog(catalog, JSONEmitter(tmp_path))
        emit_catalog(catalog, PythonModuleEmitter(tmp_path))
        keep = tmp_path / "notes.txt"
        keep.write_text("x", encoding="utf-8")

        removed = clean_generated_files(tmp_path, list(catalog))
        assert len(removed) == 6
        assert sorted(p.name for p in tmp_path.iterdir()) == ["notes.txt"]

    def test_clean_missing_directory(self, tmp_path: Path) -> None:
        assert clean_generated_files(tmp_path / "absent", ["series"]) == []

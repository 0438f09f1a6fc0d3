"""Tests for mangaupdates_cli.help.catalog.

Covers:
- Subprograms sorted by name, entries sorted by operation id
- Operations without an id or without tags are left out
- An operation is grouped under its first tag only
- Duplicate operation ids within a subprogram: the last one wins, with a warning
- Records are built with the document default security
- emit_catalog skips empty subprograms
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from mangaupdates_cli.help.catalog import (
    emit_catalog,
    generate_catalog,
    is_catalogued,
    subprogram_for,
)
from mangaupdates_cli.models import (
    APIInfo,
    APIOperation,
    CatalogEntry,
    HTTPMethod,
    ParsedSpec,
)


def _spec(*operations: APIOperation) -> ParsedSpec:
    return ParsedSpec(
        info=APIInfo(title="Test", version="1"),
        operations=list(operations),
        openapi_version="3.0.3",
    )


def _op(path: str, op_id: str | None, tags: list[str], method: HTTPMethod = HTTPMethod.GET) -> APIOperation:
    return APIOperation(path=path, method=method, operation_id=op_id, tags=tags, summary=op_id)


class _RecordingEmitter:
    def __init__(self, outdir: Path) -> None:
        self.outdir = outdir
        self.calls: list[tuple[str, list[str]]] = []

    def emit(self, subprogram: str, entries: list[CatalogEntry]) -> Path:
        self.calls.append((subprogram, [e.operation_id for e in entries]))
        return self.outdir / subprogram


class TestPolicies:
    def test_catalogued_needs_id_and_tag(self) -> None:
        assert is_catalogued(_op("/a", "a", ["x"]))
        assert not is_catalogued(_op("/a", None, ["x"]))
        assert not is_catalogued(_op("/a", "a", []))

    def test_first_tag(self) -> None:
        assert subprogram_for(_op("/a", "a", ["series", "extra"])) == "series"


class TestGenerateCatalog:
    def test_ordering(self) -> None:
        catalog = generate_catalog(_spec(
            _op("/b", "b", ["zeta"]),
            _op("/a", "a", ["zeta"]),
            _op("/c", "c", ["alpha"]),
        ))
        assert list(catalog) == ["alpha", "zeta"]
        assert [e.operation_id for e in catalog["zeta"]] == ["a", "b"]

    def test_fixture_document(self, catalog_api_spec: ParsedSpec) -> None:
        catalog = generate_catalog(catalog_api_spec)
        assert list(catalog) == ["misc", "releases", "series"]
        assert [e.operation_id for e in catalog["series"]] == [
            "retrieveSeries",
            "retrieveSeriesComments",
            "searchSeriesPost",
            "updateSeriesImage",
        ]
        assert [e.operation_id for e in catalog["misc"]] == ["ping"]

    def test_skipped_operations_absent(self, catalog_api_spec: ParsedSpec) -> None:
        catalog = generate_catalog(catalog_api_spec)
        ids = {e.operation_id for entries in catalog.values() for e in entries}
        assert "untaggedOperation" not in ids
        assert "extra" not in catalog

    def test_entry_keeps_path_and_method(self, catalog_api_spec: ParsedSpec) -> None:
        entry = generate_catalog(catalog_api_spec)["series"][2]
        assert entry.operation_id == "searchSeriesPost"
        assert entry.path == "/series/search"
        assert entry.method == HTTPMethod.POST

    def test_records_use_default_security(self, catalog_api_spec: ParsedSpec) -> None:
        catalog = generate_catalog(catalog_api_spec)
        assert all(e.record.auth_required for entries in catalog.values() for e in entries)

    def test_fixture_record(self, catalog_api_spec: ParsedSpec) -> None:
        record = generate_catalog(catalog_api_spec)["series"][0].record
        assert record.usage == (
            "mangaupdatescli series retrieveSeries --id <integer(int64)> [REQUIRES AUTH]"
        )
        assert record.input_schema == "Path/Query Parameters"
        assert record.output_schema == "Schema (on 200): <SeriesModelV1:L1>"
        assert record.error_examples == {"404": "Not found"}

    def test_program_name(self) -> None:
        catalog = generate_catalog(_spec(_op("/a", "a", ["x"])), program="mu")
        assert catalog["x"][0].record.usage == "mu x a"

    def test_duplicate_id_last_wins(self, caplog: pytest.LogCaptureFixture) -> None:
        spec = _spec(
            _op("/first", "dup", ["x"]),
            _op("/second", "dup", ["x"], method=HTTPMethod.POST),
        )
        with caplog.at_level(logging.WARNING, logger="mangaupdates_cli.help.catalog"):
            catalog = generate_catalog(spec)
        assert len(catalog["x"]) == 1
        assert catalog["x"][0].path == "/second"
        assert catalog["x"][0].method == HTTPMethod.POST
        assert "Duplicate operationId 'dup'" in caplog.text

    def test_same_id_in_different_subprograms(self) -> None:
        catalog = generate_catalog(_spec(_op("/a", "list", ["x"]), _op("/b", "list", ["y"])))
        assert catalog["x"][0].path == "/a"
        assert catalog["y"][0].path == "/b"

    def test_empty_document(self) -> None:
        assert generate_catalog(_spec()) == {}

    def test_deterministic(self, catalog_api_spec: ParsedSpec) -> None:
        assert generate_catalog(catalog_api_spec) == generate_catalog(catalog_api_spec)


class TestEmitCatalog:
    def test_skips_empty_groups(self, tmp_path: Path, catalog_api_spec: ParsedSpec) -> None:
        catalog = generate_catalog(catalog_api_spec)
        catalog["empty"] = []
        emitter = _RecordingEmitter(tmp_path)
        written = emit_catalog(catalog, emitter)  # type: ignore[arg-type]
        assert [name for name, _ in emitter.calls] == ["misc", "releases", "series"]
        assert written == [tmp_path / "misc", tmp_path / "releases", tmp_path / "series"]

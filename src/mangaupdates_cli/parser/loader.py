"""Read an OpenAPI document from a file, a URL, or stdin.

:func:`load_spec` returns the document as a plain dict. JSON is tried first
since every JSON document is also YAML and the JSON parser is stricter; YAML
is the fallback. A ``.json`` / ``.yaml`` extension or a JSON/YAML
``Content-Type`` narrows the choice.

:func:`validate_openapi_version` rejects Swagger 2.x and anything that is not
OpenAPI 3.x.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from mangaupdates_cli.exceptions import SpecParseError

logger = logging.getLogger(__name__)

STDIN_SOURCE = "-"
FETCH_TIMEOUT = 30.0


def load_spec(source: str) -> dict[str, Any]:
    """Load an OpenAPI document from *source*.

    Args:
        source: An ``http(s)://`` URL, a file path, or ``"-"`` for stdin.

    Returns:
        The parsed document.

    Raises:
        SpecParseError: If the source cannot be read or is not a JSON/YAML
            object.
    """
    if source == STDIN_SOURCE:
        logger.debug("Reading OpenAPI document from stdin")
        return _read_stdin()
    if source.startswith(("http://", "https://")):
        logger.debug("Fetching OpenAPI document from %s", source)
        return _fetch_url(source)
    logger.debug("Reading OpenAPI document from %s", source)
    return _read_file(source)


def _read_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc
    if not content.strip():
        raise SpecParseError("No input received from stdin")
    return parse_document(content)


def _fetch_url(url: str) -> dict[str, Any]:
    try:
        response = httpx.get(url, timeout=FETCH_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    return parse_document(response.text, hint=hint)


def _read_file(path: str) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc
    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}.get(suffix, "")
    return parse_document(content, hint=hint)


def parse_document(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON, then YAML.

    Args:
        content: Raw document text.
        hint: ``"json"`` to accept JSON only, ``"yaml"`` to skip the JSON
            attempt, empty to try both.

    Raises:
        SpecParseError: If neither parser yields a mapping.
    """
    errors: list[str] = []

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            errors.append(f"JSON error: {exc}")

    try:
        return _require_mapping(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        errors.append(f"YAML error: {exc}")

    raise SpecParseError("Failed to parse spec as JSON or YAML\n  " + "\n  ".join(errors))


def _require_mapping(document: Any) -> dict[str, Any]:
    if not isinstance(document, dict):
        got = "empty document" if document is None else type(document).__name__
        raise SpecParseError(f"Spec must be a JSON/YAML object (got {got})")
    return document


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Return the document's ``openapi`` version string.

    Raises:
        SpecParseError: For Swagger 2.x documents, a missing ``openapi``
            field, or a major version other than 3.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.x documents are supported."
        )

    version = spec.get("openapi")
    if version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(version)
    if not version_str.startswith("3."):
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version_str}. Only OpenAPI 3.x is supported."
        )
    return version_str

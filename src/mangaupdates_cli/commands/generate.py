"""``generate-help`` -- write the help catalog of an OpenAPI document to disk.

Loads the document, builds the catalog with
:func:`~mangaupdates_cli.help.catalog.generate_catalog`, and writes one
artifact per subprogram: a Python module of ``HelpRecord`` constants
(``--format python``, the default) or a JSON document (``--format json``).
With ``--clean`` the artifacts of earlier runs are removed first.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

import typer

from mangaupdates_cli.config import effective_spec_source, resolve_settings
from mangaupdates_cli.help.catalog import emit_catalog, generate_catalog
from mangaupdates_cli.help.emitter import (
    HelpEmitter,
    JSONEmitter,
    PythonModuleEmitter,
    clean_generated_files,
)
from mangaupdates_cli.output import success, warning
from mangaupdates_cli.parser import extract_spec, load_spec, validate_openapi_version


class EmitFormat(str, Enum):
    """Artifact format written by ``generate-help``."""

    PYTHON = "python"
    JSON = "json"


def generate_help_command(
    spec: Optional[str] = typer.Option(
        None,
        "--spec",
        help="OpenAPI document (file, URL or '-'). Defaults to the configured one.",
    ),
    outdir: Path = typer.Option(
        ..., "--outdir", help="Directory the generated files are written to."
    ),
    format: EmitFormat = typer.Option(
        EmitFormat.PYTHON, "--format", help="Artifact format."
    ),
    clean: bool = typer.Option(
        False, "--clean", help="Remove previously generated files first."
    ),
) -> None:
    """Generate help files for every subprogram of an OpenAPI document.

    Example::

        mangaupdatescli generate-help --spec openapi.yaml --outdir build/help --clean
    """
    settings = resolve_settings(cli_spec=spec)
    raw = load_spec(effective_spec_source(settings))
    parsed = extract_spec(raw, validate_openapi_version(raw))
    catalog = generate_catalog(parsed, program=settings.program_name)

    if clean:
        clean_generated_files(outdir, list(catalog))

    emitter: HelpEmitter
    if format == EmitFormat.JSON:
        emitter = JSONEmitter(outdir)
    else:
        emitter = PythonModuleEmitter(outdir, program=settings.program_name)

    written = emit_catalog(catalog, emitter)
    if not written:
        warning("No tagged operations with an operationId; nothing generated.")
        return
    success(f"Generated {len(written)} help file(s) in {outdir}")

"""Write generated help catalogs to disk.

An emitter receives one subprogram's ordered
:class:`~mangaupdates_cli.models.CatalogEntry` list and writes one file for
it. Two targets are provided:

* :class:`PythonModuleEmitter` -- a Python module of
  :class:`~mangaupdates_cli.models.HelpRecord` constants, rendered from the
  ``help_module.py.j2`` Jinja2 template, named
  ``<subprogram>_generated_help.py``.
* :class:`JSONEmitter` -- a JSON document named
  ``<subprogram>_generated_help.json``.

:func:`clean_generated_files` removes artifacts left by earlier runs.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from mangaupdates_cli.exceptions import RenderError
from mangaupdates_cli.models import DEFAULT_PROGRAM_NAME, CatalogEntry
from mangaupdates_cli.output import info

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``help/templates/``)."""

GENERATED_SUFFIX = "_generated_help"

_INVALID_CONST_RE = re.compile(r"[^A-Z0-9_]")


def constant_name(operation_id: str) -> str:
    """Module-level constant name for an operation's help record.

    Example::

        >>> constant_name("searchSeriesPost")
        'HELP_SEARCH_SERIES_POST_CONTENT'
    """
    result = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", operation_id)
    result = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", result).upper()
    result = _INVALID_CONST_RE.sub("_", result)
    result = re.sub(r"_+", "_", result).strip("_")
    return f"HELP_{result}_CONTENT"


class HelpEmitter:
    """Base class for catalog emitters.

    Subclasses set :attr:`extension` and implement :meth:`render`.

    Args:
        outdir: Directory the generated files are written to. Created on
            first use.
    """

    extension: str = ""

    def __init__(self, outdir: str | Path) -> None:
        self.outdir = Path(outdir)

    def output_path(self, subprogram: str) -> Path:
        """Where the artifact for *subprogram* is written."""
        return self.outdir / f"{subprogram}{GENERATED_SUFFIX}{self.extension}"

    def render(self, subprogram: str, entries: list[CatalogEntry]) -> str:
        raise NotImplementedError

    def emit(self, subprogram: str, entries: list[CatalogEntry]) -> Path:
        """Render *entries* and write them to :meth:`output_path`.

        Raises:
            RenderError: If rendering fails or the file cannot be written.
        """
        content = self.render(subprogram, entries)
        path = self.output_path(subprogram)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise RenderError(f"Error writing {path}: {exc}") from exc
        info(f"Generated help for {subprogram} at {path}")
        return path


class PythonModuleEmitter(HelpEmitter):
    """Emit a Python module of ``HelpRecord`` constants per subprogram.

    The module defines one ``HELP_<OPERATION_ID>_CONTENT`` constant per
    entry plus a ``HELP_CONTENTS`` dict keyed by operation id.
    """

    extension = ".py"

    def __init__(self, outdir: str | Path, program: str = DEFAULT_PROGRAM_NAME) -> None:
        super().__init__(outdir)
        self.program = program
        self._env = _create_jinja_env()

    def render(self, subprogram: str, entries: list[CatalogEntry]) -> str:
        items = [
            {
                "const_name": constant_name(entry.operation_id),
                "operation_id": entry.operation_id,
                "record": entry.record,
            }
            for entry in entries
        ]
        try:
            template = self._env.get_template("help_module.py.j2")
            return template.render(program=self.program, subprogram=subprogram, items=items)
        except TemplateError as exc:
            raise RenderError(
                f"Error executing template for subprogram {subprogram}: {exc}"
            ) from exc


class JSONEmitter(HelpEmitter):
    """Emit one JSON document per subprogram, keyed by operation id."""

    extension = ".json"

    def render(self, subprogram: str, entries: list[CatalogEntry]) -> str:
        data = {
            "subprogram": subprogram,
            "commands": {
                entry.operation_id: entry.model_dump(mode="json")
                for entry in entries
            },
        }
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def _create_jinja_env() -> Environment:
    """Jinja2 environment for the code templates, with a ``pyrepr`` filter."""
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("py.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["pyrepr"] = repr
    return env


def clean_generated_files(outdir: str | Path, subprograms: list[str]) -> list[Path]:
    """Delete previously generated help files for *subprograms* in *outdir*.

    Both the Python and the JSON variants are removed. Missing files and a
    missing directory are fine.

    Returns:
        The paths that were removed.
    """
    outdir = Path(outdir)
    removed: list[Path] = []
    if not outdir.is_dir():
        return removed
    for subprogram in sorted(subprograms):
        for extension in (PythonModuleEmitter.extension, JSONEmitter.extension):
            path = outdir / f"{subprogram}{GENERATED_SUFFIX}{extension}"
            if not path.is_file():
                continue
            try:
                path.unlink()
            except OSError as exc:
                raise RenderError(f"Could not remove {path}: {exc}") from exc
            info(f"Removed {path}")
            removed.append(path)
    return removed

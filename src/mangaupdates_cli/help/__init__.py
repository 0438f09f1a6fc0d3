"""Help pipeline -- derive, render and emit per-command help from an OpenAPI document.

Typical usage::

    from mangaupdates_cli.help import generate_catalog, render_text_help

    catalog = generate_catalog(parsed_spec)
    print(render_text_help(catalog["series"][0].record))

Sub-modules:

* :mod:`~mangaupdates_cli.help.schema` -- schema labels, JSON value kinds,
  depth-limited previews.
* :mod:`~mangaupdates_cli.help.builder` -- one operation to one
  :class:`~mangaupdates_cli.models.HelpRecord`.
* :mod:`~mangaupdates_cli.help.catalog` -- every operation, grouped by
  subprogram and ordered by operation id.
* :mod:`~mangaupdates_cli.help.render` -- JSON and text rendering, help-flag
  parsing.
* :mod:`~mangaupdates_cli.help.emitter` -- write generated help to disk as
  Python modules or JSON files.
"""

from mangaupdates_cli.help.builder import build_help_record
from mangaupdates_cli.help.catalog import emit_catalog, generate_catalog
from mangaupdates_cli.help.render import (
    check_help_flags,
    render_json_help,
    render_text_help,
)
from mangaupdates_cli.help.schema import limit_depth, resolve_schema_label

__all__ = [
    "build_help_record",
    "check_help_flags",
    "emit_catalog",
    "generate_catalog",
    "limit_depth",
    "render_json_help",
    "render_text_help",
    "resolve_schema_label",
]

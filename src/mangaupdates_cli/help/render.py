"""Render help records for JSON consumers and for humans.

* **Structured mode** (``-h``) -- :func:`build_json_help` produces a dict
  with ``description``, ``usage``, ``authentication_required``,
  ``arguments``, ``expected_input_schema``, ``expected_output_schema`` and
  ``error_examples``; :func:`render_json_help` serialises it with sorted
  keys and two-space indentation.
* **Text mode** (``-hh``) -- :func:`render_text_help` lays the record out as
  aligned plain text.

The ``print_*`` variants write the rendered text to stdout through
:mod:`mangaupdates_cli.output`.
"""

from __future__ import annotations

import json
from typing import Any

from mangaupdates_cli.exceptions import RenderError
from mangaupdates_cli.help.schema import limit_depth
from mangaupdates_cli.models import HelpRecord
from mangaupdates_cli.output import print_data

JSON_HELP_FLAG = "-h"
TEXT_HELP_FLAG = "-hh"

AUTH_NOTE = "  NOTE: This command requires authentication with the API."
HELP_HINT = "Use -h for JSON help, -hh for this human-readable help."

PREVIEW_MAX_LEVEL = 1


def check_help_flags(args: list[str]) -> tuple[bool, bool, list[str]]:
    """Split help flags out of *args*.

    Returns:
        ``(json_help, text_help, remaining)``. When both ``-h`` and ``-hh``
        are present, text help wins and ``json_help`` is ``False``.
    """
    json_help = False
    text_help = False
    remaining: list[str] = []
    for arg in args:
        if arg == JSON_HELP_FLAG:
            json_help = True
        elif arg == TEXT_HELP_FLAG:
            text_help = True
        else:
            remaining.append(arg)
    if text_help:
        json_help = False
    return json_help, text_help, remaining


def build_json_help(record: HelpRecord) -> dict[str, Any]:
    """Return the structured help document for *record*."""
    arguments: list[dict[str, Any]] = []
    for arg in record.arguments:
        item: dict[str, Any] = {
            "name": arg.name,
            "type": arg.type,
            "required": arg.required,
            "description": arg.description,
        }
        if arg.default:
            item["default"] = arg.default
        arguments.append(item)

    return {
        "description": record.description,
        "usage": record.usage,
        "authentication_required": record.auth_required,
        "arguments": arguments if arguments else "None",
        "expected_input_schema": limit_depth(record.input_schema, 1, PREVIEW_MAX_LEVEL),
        "expected_output_schema": limit_depth(record.output_schema, 1, PREVIEW_MAX_LEVEL),
        "error_examples": record.error_examples,
    }


def render_json_help(record: HelpRecord) -> str:
    """Serialise :func:`build_json_help` for *record*.

    Raises:
        RenderError: If the document cannot be serialised.
    """
    try:
        return json.dumps(build_json_help(record), indent=2, sort_keys=True, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise RenderError(f"Error generating JSON help: {exc}") from exc


def render_text_help(record: HelpRecord) -> str:
    """Lay *record* out for a terminal.

    Argument rows are aligned on the longest name and the longest ``<type>``
    column, then followed by the description, ``(required)`` and
    ``(default: X)`` markers.
    """
    lines = [f"Usage: {record.usage}", "", "Description:", f"  {record.description}".rstrip()]
    if record.auth_required:
        lines.append(AUTH_NOTE)

    if record.arguments:
        lines.extend(["", "Arguments:"])
        name_width = max(len(arg.name) for arg in record.arguments)
        type_width = max(len(arg.type) for arg in record.arguments) + 2
        for arg in record.arguments:
            row = f"  --{arg.name:<{name_width}} {'<' + arg.type + '>':<{type_width}}"
            extras = [arg.description]
            if arg.required:
                extras.append("(required)")
            if arg.default:
                extras.append(f"(default: {arg.default})")
            lines.append(f"{row} {' '.join(e for e in extras if e)}".rstrip())

    lines.extend(["", HELP_HINT])
    return "\n".join(lines)


def print_json_help(record: HelpRecord) -> None:
    """Write the structured help for *record* to stdout."""
    print_data(render_json_help(record))


def print_text_help(record: HelpRecord) -> None:
    """Write the text help for *record* to stdout."""
    print_data(render_text_help(record))

"""Build the ``<subprogram> <command>`` click tree from the help catalog.

Each subprogram in the catalog becomes a :class:`SubprogramGroup` and each
of its entries an :class:`OperationCommand`. The groups are attached to the
root Typer application in :func:`mangaupdates_cli.app.build_cli`.

**Help interception**

* ``<sub>`` and ``<sub> -h`` print the subprogram's command list as JSON;
  ``<sub> -hh`` and ``<sub> help`` print it as text.
* ``<sub> -h|-hh|help <command> [args...]`` is rewritten to
  ``<command> -h|-hh [args...]`` (``help`` means ``-hh``).
* ``<sub> <command> ... -h`` / ``-hh`` anywhere in the arguments prints the
  command's help record and exits before any option is validated.

**Request wiring**

Every parameter becomes an option named after it, with underscores turned
into hyphens (the original spelling is accepted too). Path parameters fill
the URL template, query parameters go into the query string, header and
cookie parameters into headers. Operations whose request body declares
content take ``--body`` as inline JSON or ``@file``; when a parameter is
already named ``body`` the option is ``--request-body`` instead.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional

import click

from mangaupdates_cli.client import ApiClient, raise_for_api_status
from mangaupdates_cli.exceptions import InvalidUsageError
from mangaupdates_cli.help.builder import JSON_CONTENT_TYPE, MULTIPART_CONTENT_TYPE, takes_body
from mangaupdates_cli.help.catalog import HelpCatalog
from mangaupdates_cli.help.render import (
    JSON_HELP_FLAG,
    TEXT_HELP_FLAG,
    check_help_flags,
    print_json_help,
    print_text_help,
)
from mangaupdates_cli.models import (
    DEFAULT_PROGRAM_NAME,
    APIOperation,
    APIParameter,
    CatalogEntry,
    HTTPMethod,
    ParameterLocation,
    ParsedSpec,
)
from mangaupdates_cli.output import print_data, print_json

logger = logging.getLogger(__name__)

HELP_KEYWORD = "help"
BODY_PARAM = "body"
BODY_FLAG = "--body"
FALLBACK_BODY_FLAG = "--request-body"

ClientFactory = Callable[[], ApiClient]

_CLICK_TYPES: dict[str, click.ParamType] = {
    "integer": click.INT,
    "number": click.FLOAT,
    "boolean": click.BOOL,
}


# ---------------------------------------------------------------------------
# Top-level and subprogram help text
# ---------------------------------------------------------------------------


def top_level_help(subprograms: list[str], program: str = DEFAULT_PROGRAM_NAME) -> str:
    """Usage text printed when the program runs without a subprogram."""
    lines = [
        "MangaUpdates API CLI Tool",
        f"Usage: {program} <subprogram> <command> [arguments...]",
        "",
        "Available Subprograms:",
    ]
    lines.extend(f"  {name}" for name in sorted(subprograms))
    lines.extend([
        "",
        f"Use '{program} <subprogram> -h' or '-hh' for command list and "
        "descriptions of a subprogram.",
        f"Use '{program} <subprogram> <command> -h' for JSON help on a specific command.",
        f"Use '{program} <subprogram> <command> -hh' for human-readable help on a "
        "specific command.",
    ])
    return "\n".join(lines)


def subprogram_help_json(
    subprogram: str,
    entries: list[CatalogEntry],
    program: str = DEFAULT_PROGRAM_NAME,
) -> str:
    """Command list of one subprogram as a JSON document."""
    document = {
        "subprogram": subprogram,
        "usage": f"{program} {subprogram} <command> [arguments...]",
        "commands": {
            entry.operation_id: {
                "description": entry.record.description,
                "authentication_required": entry.record.auth_required,
            }
            for entry in entries
        },
    }
    return json.dumps(document, indent=2, sort_keys=True, ensure_ascii=False)


def subprogram_help_text(
    subprogram: str,
    entries: list[CatalogEntry],
    program: str = DEFAULT_PROGRAM_NAME,
) -> str:
    """Command list of one subprogram as aligned text."""
    lines = [f"Usage: {program} {subprogram} <command> [arguments...]", "", "Available Commands:"]
    width = max((len(entry.operation_id) for entry in entries), default=0)
    for entry in entries:
        marker = " [REQUIRES AUTH]" if entry.record.auth_required else ""
        lines.append(
            f"  {entry.operation_id:<{width}}  {entry.record.description}{marker}".rstrip()
        )
    lines.extend([
        "",
        f"Use '{program} {subprogram} <command> -h' for JSON help, "
        "'-hh' for human-readable help.",
    ])
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _flags_for(param: APIParameter) -> list[str]:
    flags = [f"--{param.name.replace('_', '-')}"]
    if "_" in param.name:
        flags.append(f"--{param.name}")
    return flags


def _option_for(index: int, param: APIParameter) -> click.Option:
    """A click option for *param*, stored under the destination ``p<index>``."""
    decls = [*_flags_for(param), f"p{index}"]

    param_type: click.ParamType
    if param.enum_values and param.schema_type == "string":
        param_type = click.Choice(param.enum_values)
    else:
        param_type = _CLICK_TYPES.get(param.schema_type, click.STRING)

    return click.Option(
        decls,
        type=param_type,
        required=param.required,
        multiple=param.schema_type == "array",
        help=param.description or None,
    )


def body_flag(operation: APIOperation) -> str:
    """``--body``, or ``--request-body`` when a parameter already uses ``--body``."""
    if not any(BODY_FLAG in _flags_for(param) for param in operation.parameters):
        return BODY_FLAG
    logger.warning(
        "Operation %r has a parameter named 'body'; its request body is passed with %s",
        operation.operation_id,
        FALLBACK_BODY_FLAG,
    )
    return FALLBACK_BODY_FLAG


def _body_option(operation: APIOperation, flag: str) -> click.Option:
    assert operation.request_body is not None
    return click.Option(
        [flag, BODY_PARAM],
        type=click.STRING,
        required=operation.request_body.required,
        help="Request body as JSON string, or @filename to read from file.",
    )


def resolve_body(raw: str, flag: str = BODY_FLAG) -> Any:
    """Parse a request body value: inline JSON, or ``@path`` to a JSON file.

    Raises:
        InvalidUsageError: If the file is missing or the text is not JSON.
    """
    text = raw
    if raw.startswith("@"):
        file_path = Path(raw[1:])
        if not file_path.is_file():
            raise InvalidUsageError(f"Body file not found: {file_path}")
        text = file_path.read_text(encoding="utf-8")
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidUsageError(f"{flag} is not valid JSON: {exc}") from exc


class OperationCommand(click.Command):
    """One API operation as a click command.

    Args:
        entry: The catalog entry (help record, path, method).
        operation: The operation's parameters and request body.
        client_factory: Returns a fresh :class:`ApiClient` per invocation.
    """

    def __init__(
        self,
        entry: CatalogEntry,
        operation: APIOperation,
        client_factory: ClientFactory,
    ) -> None:
        self.entry = entry
        self.operation = operation
        self._client_factory = client_factory
        self._body_flag = body_flag(operation) if takes_body(operation.request_body) else None

        params: list[click.Parameter] = [
            _option_for(index, param) for index, param in enumerate(operation.parameters)
        ]
        if self._body_flag is not None:
            params.append(_body_option(operation, self._body_flag))

        super().__init__(
            name=entry.operation_id,
            params=params,
            callback=self._execute,
            help=entry.record.description or None,
            short_help=entry.record.description or None,
        )

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        json_help, text_help, remaining = check_help_flags(args)
        if text_help:
            print_text_help(self.entry.record)
            ctx.exit(0)
        if json_help:
            print_json_help(self.entry.record)
            ctx.exit(0)
        return super().parse_args(ctx, remaining)

    def _execute(self, **values: Any) -> None:
        path_params: dict[str, Any] = {}
        query: dict[str, Any] = {}
        headers: dict[str, str] = {}
        cookies: list[str] = []

        for index, param in enumerate(self.operation.parameters):
            value = values.get(f"p{index}")
            if value is None or value == ():
                continue
            if isinstance(value, bool):
                value = "true" if value else "false"
            if param.location == ParameterLocation.PATH:
                path_params[param.name] = value
            elif param.location == ParameterLocation.QUERY:
                query[param.name] = list(value) if isinstance(value, tuple) else value
            elif param.location == ParameterLocation.HEADER:
                headers[param.name] = _flatten(value)
            else:
                cookies.append(f"{param.name}={_flatten(value)}")
        if cookies:
            headers["Cookie"] = "; ".join(cookies)

        json_body: Any = None
        form: Optional[dict[str, Any]] = None
        raw_body = values.get(BODY_PARAM)
        if raw_body is not None:
            body = resolve_body(raw_body, self._body_flag or BODY_FLAG)
            if self._sends_multipart():
                if not isinstance(body, dict):
                    raise InvalidUsageError(f"Multipart {self._body_flag} must be a JSON object")
                form = body
            else:
                json_body = body

        with self._client_factory() as client:
            response = client.request(
                self.operation.method.value,
                self.operation.path,
                path_params=path_params,
                params=query,
                headers=headers or None,
                json_body=json_body,
                form=form,
            )
        if response.content:
            print_json(response.content)
        raise_for_api_status(response)

    def _sends_multipart(self) -> bool:
        body = self.operation.request_body
        content = body.content if body is not None and body.content is not None else {}
        return JSON_CONTENT_TYPE not in content and MULTIPART_CONTENT_TYPE in content


def _flatten(value: Any) -> str:
    if isinstance(value, tuple):
        return ",".join(str(v) for v in value)
    return str(value)


class SubprogramGroup(click.Group):
    """The commands of one subprogram, with JSON/text command-list help."""

    def __init__(
        self,
        name: str,
        entries: list[CatalogEntry],
        program: str = DEFAULT_PROGRAM_NAME,
    ) -> None:
        super().__init__(name=name, help=f"Commands for the {name} API.")
        self.entries = entries
        self.program = program

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        if not args or args[0] in (JSON_HELP_FLAG, TEXT_HELP_FLAG, HELP_KEYWORD):
            flag = args[0] if args else JSON_HELP_FLAG
            rest = args[1:]
            if not rest:
                if flag == JSON_HELP_FLAG:
                    print_data(subprogram_help_json(self.name or "", self.entries, self.program))
                else:
                    print_data(subprogram_help_text(self.name or "", self.entries, self.program))
                ctx.exit(0)
            help_flag = JSON_HELP_FLAG if flag == JSON_HELP_FLAG else TEXT_HELP_FLAG
            args = [rest[0], help_flag, *rest[1:]]
        return super().parse_args(ctx, args)


def build_subprogram_groups(
    spec: ParsedSpec,
    catalog: HelpCatalog,
    client_factory: ClientFactory,
    program: str = DEFAULT_PROGRAM_NAME,
) -> list[SubprogramGroup]:
    """One :class:`SubprogramGroup` per non-empty catalog group.

    Args:
        spec: The parsed document the catalog was generated from.
        catalog: As returned by
            :func:`~mangaupdates_cli.help.catalog.generate_catalog`.
        client_factory: Called once per command invocation.
        program: Program name used in help text.
    """
    operations: dict[tuple[str, HTTPMethod], APIOperation] = {
        (op.path, op.method): op for op in spec.operations
    }
    groups: list[SubprogramGroup] = []
    for subprogram, entries in catalog.items():
        if not entries:
            continue
        group = SubprogramGroup(subprogram, entries, program=program)
        for entry in entries:
            operation = operations[(entry.path, entry.method)]
            group.add_command(OperationCommand(entry, operation, client_factory))
        logger.debug("Registered %d commands under %s", len(entries), subprogram)
        groups.append(group)
    return groups

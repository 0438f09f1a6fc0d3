"""Build a :class:`~mangaupdates_cli.models.HelpRecord` for one API operation.

The builder is a pure function of the operation, the subprogram it belongs
to, and the document-wide default security list. It never raises: partial or
odd input degrades to fallback text (``"None"``, the generic response schema,
the generic error entry) instead.

**Record fields**

* ``usage`` -- ``<program> <subprogram> <operationId>`` followed by one
  ``--flag <type>`` token per parameter, optional ones in brackets, and a
  trailing ``[REQUIRES AUTH]`` marker for authenticated operations.
* ``arguments`` -- one :class:`~mangaupdates_cli.models.ArgHelp` per
  parameter, in declared order.
* ``input_schema`` / ``output_schema`` -- one-line summaries of the request
  body and the first success response.
* ``error_examples`` -- description of every 4xx/5xx response keyed by
  status code.
* ``auth_required`` -- see :func:`requires_auth`.
"""

from __future__ import annotations

from typing import Optional

from mangaupdates_cli.help.schema import resolve_schema_label, stringify_default
from mangaupdates_cli.models import (
    DEFAULT_PROGRAM_NAME,
    APIOperation,
    APIParameter,
    ArgHelp,
    HelpRecord,
    MediaType,
    RequestBodyInfo,
    ResponseInfo,
)

JSON_CONTENT_TYPE = "application/json"
MULTIPART_CONTENT_TYPE = "multipart/form-data"
XML_CONTENT_TYPE = "application/xml"

SUCCESS_STATUS_CODES = ("200", "201", "202", "204")
"""Success codes looked up, in order, when summarising the output."""

GENERIC_RESPONSE_SCHEMA = "ApiResponseV1"
"""The API's catch-all response envelope; never worth naming in error help."""

GENERIC_ERROR_EXAMPLES = {"Generic": "Standard API errors."}

AUTH_MARKER = " [REQUIRES AUTH]"
REQUIRED_SUFFIX = " (required)"


def build_help_record(
    operation: APIOperation,
    subprogram: str,
    default_security: Optional[list[dict[str, list[str]]]] = None,
    program: str = DEFAULT_PROGRAM_NAME,
) -> HelpRecord:
    """Build the complete help record for *operation*.

    Args:
        operation: The operation to describe. Its ``operation_id`` is used as
            the command name.
        subprogram: The subprogram (tag) the command lives under.
        default_security: The document-wide ``security`` list.
        program: Program name at the start of the usage line.

    Returns:
        A frozen :class:`~mangaupdates_cli.models.HelpRecord`.
    """
    auth_required = requires_auth(operation, default_security or [])
    arguments = tuple(_build_argument(param) for param in operation.parameters)

    usage_parts = [program, subprogram, operation.operation_id or ""]
    usage_parts.extend(_usage_token(param) for param in operation.parameters)
    usage = " ".join(usage_parts)
    if auth_required:
        usage += AUTH_MARKER

    return HelpRecord(
        usage=usage,
        description=operation.summary or "",
        arguments=arguments,
        input_schema=summarize_input(operation.request_body, bool(arguments)),
        output_schema=summarize_output(operation.responses),
        error_examples=collect_error_examples(operation.responses),
        auth_required=auth_required,
    )


def requires_auth(
    operation: APIOperation,
    default_security: list[dict[str, list[str]]],
) -> bool:
    """Return whether *operation* needs authentication.

    True when the operation lists its own security requirements, or when it
    lists none and the document declares a non-empty default.
    """
    if operation.security:
        return True
    return len(default_security) > 0


def parameter_type_label(param: APIParameter) -> str:
    """``type`` or ``type(format)`` for a parameter."""
    if param.schema_format:
        return f"{param.schema_type}({param.schema_format})"
    return param.schema_type


def _usage_token(param: APIParameter) -> str:
    flag = param.name.replace("_", "-")
    token = f"--{flag} <{parameter_type_label(param)}>"
    if not param.required:
        token = f"[{token}]"
    return token


def _build_argument(param: APIParameter) -> ArgHelp:
    return ArgHelp(
        name=param.name,
        type=parameter_type_label(param),
        required=param.required,
        description=param.description or "",
        default=stringify_default(param.default),
    )


# ---------------------------------------------------------------------------
# Input / output summaries
# ---------------------------------------------------------------------------


def takes_body(body: Optional[RequestBodyInfo]) -> bool:
    """Whether *body* declares a ``content`` map (possibly empty)."""
    return body is not None and body.content is not None


def summarize_input(body: Optional[RequestBodyInfo], has_parameters: bool) -> str:
    """One-line description of what the operation takes as input.

    A JSON body wins over a multipart body, which wins over any other body.
    A body without ``content`` counts as no body. Without a body, parameters
    give ``"Path/Query Parameters"``; with neither, ``"None"``.
    """
    if body is not None and body.content is not None:
        suffix = REQUIRED_SUFFIX if body.required else ""
        if JSON_CONTENT_TYPE in body.content:
            label = resolve_schema_label(body.content[JSON_CONTENT_TYPE].schema_)
            return f"Request Body Schema: <{label}:L1>{suffix}"
        if MULTIPART_CONTENT_TYPE in body.content:
            return f"Request Body: Multipart Form Data{suffix}"
        return f"Request Body: Present{suffix}"
    if has_parameters:
        return "Path/Query Parameters"
    return "None"


def first_success_status(responses: dict[str, ResponseInfo]) -> Optional[str]:
    """Return the first of ``200, 201, 202, 204`` present in *responses*."""
    for code in SUCCESS_STATUS_CODES:
        if code in responses:
            return code
    return None


def summarize_output(responses: dict[str, ResponseInfo]) -> str:
    """One-line description of the operation's success response."""
    code = first_success_status(responses)
    if code is None:
        return (
            f"Schema: <{GENERIC_RESPONSE_SCHEMA}:L1> "
            "(Default success, or specific success code)"
        )

    content = responses[code].content
    if content:
        if JSON_CONTENT_TYPE in content:
            label = resolve_schema_label(content[JSON_CONTENT_TYPE].schema_)
            return f"Schema (on {code}): <{label}:L1>"
        if XML_CONTENT_TYPE in content:
            return f"XML Output (on {code})"
        return f"Output (on {code}): {min(content)}"
    if code == "204":
        return f"No Content (on {code})"
    if content is None:
        return f"Success Response (on {code}, no content defined)"
    return f"Success Response (on {code}, content type unspecified or empty)"


def collect_error_examples(responses: dict[str, ResponseInfo]) -> dict[str, str]:
    """Map every 4xx/5xx status code to a short error message.

    The message is the response description, followed by the schema label
    when the response has a JSON schema other than the generic envelope.
    Keys come back in ascending order.
    """
    errors: dict[str, str] = {}
    for code in sorted(responses):
        if not code.startswith(("4", "5")):
            continue
        response = responses[code]
        label = _json_schema_label(response.content)
        if label and label != GENERIC_RESPONSE_SCHEMA:
            errors[code] = f"{response.description} (Schema: <{label}:L1>)"
        else:
            errors[code] = response.description
    return errors or dict(GENERIC_ERROR_EXAMPLES)


def _json_schema_label(content: Optional[dict[str, MediaType]]) -> Optional[str]:
    if not content or JSON_CONTENT_TYPE not in content:
        return None
    return resolve_schema_label(content[JSON_CONTENT_TYPE].schema_)

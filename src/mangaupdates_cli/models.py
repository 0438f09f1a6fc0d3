"""Canonical Pydantic models shared across all mangaupdates_cli modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Settings models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig` and :class:`Settings`.

**Parser output models** -- produced by the OpenAPI parser and consumed by
the help pipeline and the command dispatcher:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`SchemaRef`,
    :class:`APIParameter`, :class:`MediaType`, :class:`RequestBodyInfo`,
    :class:`ResponseInfo`, :class:`APIOperation`, :class:`APIInfo`, and
    :class:`ParsedSpec`.

**Help models** -- derived once per operation and never mutated:
    :class:`ArgHelp`, :class:`HelpRecord`, and :class:`CatalogEntry`.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BASE_URL = "https://api.mangaupdates.com/v1/"
DEFAULT_PROGRAM_NAME = "mangaupdatescli"


# --- Settings ---


class RequestConfig(BaseModel):
    """HTTP request settings applied to every API call."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class Settings(BaseModel):
    """User-wide settings persisted at ``~/.config/mangaupdatescli/config.json``.

    Loaded and saved by :func:`~mangaupdates_cli.config.load_settings` and
    :func:`~mangaupdates_cli.config.save_settings`. Fields here have the
    lowest precedence and can be overridden by the project file, environment
    variables, or CLI flags. See
    :func:`~mangaupdates_cli.config.resolve_settings` for the full chain.
    """

    base_url: str = Field(
        default=DEFAULT_BASE_URL, description="Base URL of the MangaUpdates API"
    )
    spec: Optional[str] = Field(
        default=None,
        description="Path or URL of the OpenAPI document (bundled copy when unset)",
    )
    token: Optional[str] = Field(
        default=None, description="Bearer token sent on every request"
    )
    program_name: str = Field(
        default=DEFAULT_PROGRAM_NAME, description="Program name shown in usage lines"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)


# --- Parser Output Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class SchemaRef(BaseModel):
    """A schema as far as help generation cares about it.

    Either a named reference (``{"$ref": "#/components/schemas/Series"}``),
    an inline type with optional ``items`` for arrays, or empty, which
    stands for a generic object. Everything else in the schema is ignored.
    """

    ref: Optional[str] = Field(default=None, alias="$ref")
    type: Optional[str] = None
    items: Optional[SchemaRef] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class APIParameter(BaseModel):
    """A single parameter extracted from an OpenAPI operation.

    Maps to an OpenAPI *Parameter Object*. Every parameter becomes a
    ``--flag`` on the generated command, whatever its location.
    """

    name: str
    location: ParameterLocation
    required: bool = False
    description: Optional[str] = None
    schema_type: str = Field(default="string", description="JSON Schema type")
    schema_format: Optional[str] = None
    default: Any = None
    enum_values: Optional[list[str]] = None


class MediaType(BaseModel):
    """One entry of a ``content`` map. A missing schema reads as an empty one."""

    schema_: SchemaRef = Field(default_factory=SchemaRef, alias="schema")

    model_config = ConfigDict(populate_by_name=True)


class RequestBodyInfo(BaseModel):
    """Parsed request body metadata for an :class:`APIOperation`.

    In the generated CLI the body is passed with ``--body`` as a JSON string
    or an ``@file`` reference. ``content`` is ``None`` when the body declares
    no ``content`` key; such a body takes no input and is not offered.
    """

    required: bool = False
    description: Optional[str] = None
    content: Optional[dict[str, MediaType]] = None


class ResponseInfo(BaseModel):
    """Parsed response metadata for a single HTTP status code.

    ``content`` is ``None`` when the response declares no ``content`` key at
    all, and an empty dict when the key is present but empty.
    """

    status_code: str
    description: str = ""
    content: Optional[dict[str, MediaType]] = None


class APIOperation(BaseModel):
    """A single parsed API operation (one URL path + HTTP method pair).

    ``security`` holds the operation's own requirement list. An empty list
    means the operation declares nothing and inherits the document default.
    """

    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    parameters: list[APIParameter] = Field(default_factory=list)
    request_body: Optional[RequestBodyInfo] = None
    responses: dict[str, ResponseInfo] = Field(default_factory=dict)
    security: list[dict[str, list[str]]] = Field(
        default_factory=list, description="Operation-level security requirements"
    )


class APIInfo(BaseModel):
    """API metadata extracted from the OpenAPI spec's *Info Object*."""

    title: str
    version: str
    description: Optional[str] = None


class ParsedSpec(BaseModel):
    """Complete parsed representation of an OpenAPI document.

    Produced by :func:`~mangaupdates_cli.parser.extractor.extract_spec` and
    consumed by the help catalog generator and the command dispatcher.

    See Also:
        :class:`APIOperation`: Individual operation within the document.
    """

    info: APIInfo
    operations: list[APIOperation] = Field(default_factory=list)
    security: list[dict[str, list[str]]] = Field(
        default_factory=list, description="Document-wide default security requirements"
    )
    openapi_version: str = Field(
        description="Original OpenAPI version string (e.g., '3.0.3', '3.1.0')"
    )


# --- Help Models ---


class ArgHelp(BaseModel):
    """Help entry for one command argument."""

    name: str
    type: str
    required: bool = False
    description: str = ""
    default: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class HelpRecord(BaseModel):
    """Renderer-ready help data for one operation.

    ``input_schema`` and ``output_schema`` are short descriptive summaries
    such as ``"Request Body Schema: <SeriesSearchRequestV1:L1>"``, not full
    schemas. ``error_examples`` maps status codes to messages, or holds the
    single ``{"Generic": ...}`` fallback.
    """

    usage: str
    description: str = ""
    arguments: tuple[ArgHelp, ...] = ()
    input_schema: str = "None"
    output_schema: str = ""
    error_examples: dict[str, str] = Field(default_factory=dict)
    auth_required: bool = False

    model_config = ConfigDict(frozen=True)


class CatalogEntry(BaseModel):
    """A :class:`HelpRecord` together with the operation it was built from."""

    operation_id: str
    path: str
    method: HTTPMethod
    record: HelpRecord

    model_config = ConfigDict(frozen=True)

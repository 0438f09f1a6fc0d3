"""Extract operations and the default security list from an OpenAPI document.

The single public entry point is :func:`extract_spec`. It resolves component
references with :func:`~mangaupdates_cli.parser.resolver.resolve_component_refs`
and then walks ``paths``, building one
:class:`~mangaupdates_cli.models.APIOperation` per path + method pair, in
document order for paths and in :class:`~mangaupdates_cli.models.HTTPMethod`
order within a path.

Parameter merging follows OpenAPI: path-level parameters apply to every
operation under the path, and an operation-level parameter with the same
``name`` and ``in`` replaces the path-level one.

Schemas are reduced to :class:`~mangaupdates_cli.models.SchemaRef` (reference
name, type, items). A parameter schema that is itself a reference is followed
so that the parameter's type, format, default and enum are known.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from mangaupdates_cli.exceptions import SpecParseError
from mangaupdates_cli.models import (
    APIInfo,
    APIOperation,
    APIParameter,
    HTTPMethod,
    MediaType,
    ParameterLocation,
    ParsedSpec,
    RequestBodyInfo,
    ResponseInfo,
    SchemaRef,
)
from mangaupdates_cli.parser.resolver import REF_KEY, deref, resolve_component_refs

logger = logging.getLogger(__name__)


def extract_spec(raw_spec: dict[str, Any], openapi_version: str) -> ParsedSpec:
    """Build a :class:`~mangaupdates_cli.models.ParsedSpec` from a raw document.

    Args:
        raw_spec: The document as returned by
            :func:`~mangaupdates_cli.parser.loader.load_spec`.
        openapi_version: As returned by
            :func:`~mangaupdates_cli.parser.loader.validate_openapi_version`.

    Raises:
        SpecParseError: If a component reference cannot be resolved.
    """
    spec = resolve_component_refs(raw_spec)
    security = spec.get("security") or []
    if not isinstance(security, list):
        raise SpecParseError("Top-level 'security' must be a list")

    return ParsedSpec(
        info=_extract_info(spec),
        operations=_extract_operations(spec),
        security=security,
        openapi_version=openapi_version,
    )


def _extract_info(spec: dict[str, Any]) -> APIInfo:
    info = spec.get("info") or {}
    return APIInfo(
        title=str(info.get("title", "Untitled API")),
        version=str(info.get("version", "0.0.0")),
        description=info.get("description"),
    )


def _extract_operations(spec: dict[str, Any]) -> list[APIOperation]:
    """Walk ``paths`` and build every operation.

    An operation's own ``security`` list is kept as declared. A missing or
    empty list means it inherits the document default; see
    :func:`~mangaupdates_cli.help.builder.requires_auth`.
    """
    operations: list[APIOperation] = []

    for path, path_item in (spec.get("paths") or {}).items():
        if not isinstance(path_item, dict):
            continue
        path_params = path_item.get("parameters") or []

        for method in HTTPMethod:
            operation = path_item.get(method.value)
            if not isinstance(operation, dict):
                continue

            merged = _merge_parameters(path_params, operation.get("parameters") or [])
            operations.append(
                APIOperation(
                    path=str(path),
                    method=method,
                    operation_id=operation.get("operationId"),
                    summary=operation.get("summary"),
                    description=operation.get("description"),
                    tags=[str(tag) for tag in operation.get("tags") or []],
                    parameters=_extract_parameters(merged, spec),
                    request_body=_extract_request_body(operation.get("requestBody")),
                    responses=_extract_responses(operation.get("responses") or {}),
                    security=operation.get("security") or [],
                )
            )

    logger.debug("Extracted %d operations", len(operations))
    return operations


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Path-level parameters not overridden by the operation, then the operation's own."""
    overridden = {(p.get("name", ""), p.get("in", "")) for p in op_params}
    merged = [
        p for p in path_params
        if (p.get("name", ""), p.get("in", "")) not in overridden
    ]
    merged.extend(op_params)
    return merged


def _extract_parameters(
    params_list: list[dict[str, Any]],
    root: dict[str, Any],
) -> list[APIParameter]:
    """Convert raw parameter objects into :class:`APIParameter` models.

    Parameters without a name or with an unknown ``in`` are skipped. Path
    parameters are always required.
    """
    parameters: list[APIParameter] = []

    for param in params_list:
        name = param.get("name")
        if not name:
            continue
        try:
            location = ParameterLocation(param.get("in", "query"))
        except ValueError:
            logger.debug("Skipping parameter %r with unknown location %r", name, param.get("in"))
            continue

        schema = deref(param.get("schema") or {}, root)
        if not isinstance(schema, dict):
            schema = {}
        enum = schema.get("enum")

        required = bool(param.get("required", False))
        if location == ParameterLocation.PATH:
            required = True

        parameters.append(
            APIParameter(
                name=str(name),
                location=location,
                required=required,
                description=param.get("description"),
                schema_type=_schema_type(schema) or "string",
                schema_format=schema.get("format"),
                default=schema.get("default"),
                enum_values=[_enum_text(v) for v in enum] if isinstance(enum, list) else None,
            )
        )

    return parameters


def _enum_text(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value)


def _schema_type(schema: dict[str, Any]) -> Optional[str]:
    """The declared type. For 3.1 type arrays, the first non-null entry."""
    type_value = schema.get("type")
    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != "null"]
        return str(non_null[0]) if non_null else None
    return str(type_value) if type_value else None


def to_schema_ref(schema: Any) -> SchemaRef:
    """Reduce a raw schema object to a :class:`SchemaRef`.

    Anything that is not a mapping becomes an empty ``SchemaRef``.
    """
    if not isinstance(schema, dict):
        return SchemaRef()
    if REF_KEY in schema:
        return SchemaRef(ref=str(schema[REF_KEY]))
    items = schema.get("items")
    return SchemaRef(
        type=_schema_type(schema),
        items=to_schema_ref(items) if isinstance(items, dict) else None,
    )


def _extract_content(content: Any) -> dict[str, MediaType]:
    if not isinstance(content, dict):
        return {}
    return {
        str(content_type): MediaType(
            schema=to_schema_ref(media.get("schema")) if isinstance(media, dict) else SchemaRef()
        )
        for content_type, media in content.items()
    }


def _extract_request_body(body: Any) -> Optional[RequestBodyInfo]:
    """The body, with ``content`` left ``None`` when none is declared."""
    if not isinstance(body, dict):
        return None
    content = body.get("content")
    return RequestBodyInfo(
        required=bool(body.get("required", False)),
        description=body.get("description"),
        content=_extract_content(content) if content is not None else None,
    )


def _extract_responses(responses: dict[str, Any]) -> dict[str, ResponseInfo]:
    """Responses keyed by status code.

    ``content`` stays ``None`` when the response has no ``content`` key.
    """
    result: dict[str, ResponseInfo] = {}
    for status_code, response in responses.items():
        if not isinstance(response, dict):
            continue
        code = str(status_code)
        result[code] = ResponseInfo(
            status_code=code,
            description=response.get("description") or "",
            content=_extract_content(response["content"]) if "content" in response else None,
        )
    return result

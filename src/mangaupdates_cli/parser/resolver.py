"""Resolve ``$ref`` pointers for parameter, request-body and response objects.

The help output names request and response schemas after their component
(``#/components/schemas/SeriesModelV1`` -> ``SeriesModelV1``), so schema
references must survive parsing. Everything else that can be referenced --
a parameter, a request body, a response -- is replaced by its target here,
on a deep copy of the document.

Only internal (``#/...``) pointers are supported. A pointer to a missing key,
an external pointer, or a reference cycle raises
:class:`~mangaupdates_cli.exceptions.SpecParseError`.
"""

from __future__ import annotations

import copy
from typing import Any

from mangaupdates_cli.exceptions import SpecParseError
from mangaupdates_cli.models import HTTPMethod

REF_KEY = "$ref"


def resolve_component_refs(spec: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of *spec* with component object references inlined.

    Path-level and operation-level ``parameters``, ``requestBody`` and every
    entry of ``responses`` are dereferenced. Schema objects are untouched.

    Raises:
        SpecParseError: If a reference cannot be resolved.

    Example::

        resolved = resolve_component_refs(raw)
        resolved["paths"]["/series/{id}"]["get"]["parameters"][0]["name"]
        # 'id', even when the raw document said
        # {"$ref": "#/components/parameters/SeriesId"}
    """
    root = copy.deepcopy(spec)
    paths = root.get("paths")
    if not isinstance(paths, dict):
        return root

    for path_item in paths.values():
        if not isinstance(path_item, dict):
            continue
        _resolve_parameter_list(path_item, root)
        for method in HTTPMethod:
            operation = path_item.get(method.value)
            if not isinstance(operation, dict):
                continue
            _resolve_parameter_list(operation, root)
            if "requestBody" in operation:
                operation["requestBody"] = deref(operation["requestBody"], root)
            responses = operation.get("responses")
            if isinstance(responses, dict):
                for code in list(responses):
                    responses[code] = deref(responses[code], root)
    return root


def _resolve_parameter_list(container: dict[str, Any], root: dict[str, Any]) -> None:
    params = container.get("parameters")
    if isinstance(params, list):
        container["parameters"] = [deref(param, root) for param in params]


def deref(obj: Any, root: dict[str, Any]) -> Any:
    """Follow ``$ref`` pointers from *obj* until a non-reference is reached.

    Raises:
        SpecParseError: On a cycle, a missing target, or an external pointer.
    """
    seen: set[str] = set()
    while isinstance(obj, dict) and REF_KEY in obj:
        ref = obj[REF_KEY]
        if ref in seen:
            raise SpecParseError(f"Circular $ref detected: {ref}")
        seen.add(ref)
        obj = resolve_pointer(str(ref), root)
    return obj


def resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Return the value *ref* (``#/a/b/c``) points at inside *root*.

    Handles the RFC 6901 escapes ``~1`` (``/``) and ``~0`` (``~``).

    Raises:
        SpecParseError: For external references or missing path segments.
    """
    if not ref.startswith("#/"):
        raise SpecParseError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for segment in ref[2:].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict):
            if segment not in current:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise SpecParseError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
            )
    return current

"""Schema labels, JSON value kinds, and depth-limited previews.

Three small, total functions used by the help pipeline:

* :func:`resolve_schema_label` -- turn a :class:`~mangaupdates_cli.models.SchemaRef`
  into a short type label (``"Series"``, ``"[]Release"``, ``"string"``).
* :func:`limit_depth` -- simplify an arbitrary JSON-shaped value so that only
  ``max_level`` levels of nesting survive; deeper nodes collapse into a
  ``"<Nested data: L{n}+>"`` marker.
* :func:`stringify_default` -- render a parameter default as plain text.

Values coming out of a JSON or YAML document are classified once by
:func:`json_kind` into a :class:`JSONKind`; callers branch on the kind rather
than on Python types.
"""

from __future__ import annotations

import enum
import json
from typing import Any, Optional

from mangaupdates_cli.models import SchemaRef

GENERIC_OBJECT_LABEL = "Any"
"""Label used when there is no schema at all."""

ARRAY_PREFIX = "[]"


class JSONKind(str, enum.Enum):
    """The six shapes a decoded JSON/YAML value can take."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    ARRAY = "array"
    OBJECT = "object"


def json_kind(value: Any) -> Optional[JSONKind]:
    """Classify *value* as one of the :class:`JSONKind` members.

    Tuples count as arrays. ``bool`` is checked before numbers since it is an
    ``int`` subclass.

    Returns:
        The matching kind, or ``None`` for values that cannot come out of a
        JSON or YAML document (dates parsed by YAML, arbitrary objects).
    """
    if value is None:
        return JSONKind.NULL
    if isinstance(value, bool):
        return JSONKind.BOOLEAN
    if isinstance(value, (int, float)):
        return JSONKind.NUMBER
    if isinstance(value, str):
        return JSONKind.STRING
    if isinstance(value, (list, tuple)):
        return JSONKind.ARRAY
    if isinstance(value, dict):
        return JSONKind.OBJECT
    return None


def resolve_schema_label(schema: Optional[SchemaRef]) -> str:
    """Return a short, human-readable type label for *schema*.

    * no schema -> ``"Any"``
    * ``$ref`` -> the last path segment (``#/components/schemas/Series`` -> ``Series``)
    * ``type: array`` with ``items`` -> ``"[]"`` + the label of the items
    * no type and no ref -> ``"object"``
    * otherwise the declared type, verbatim

    Example::

        >>> resolve_schema_label(SchemaRef(type="array", items=SchemaRef(ref="#/components/schemas/Genre")))
        '[]Genre'
    """
    if schema is None:
        return GENERIC_OBJECT_LABEL
    if schema.ref:
        return schema.ref.rsplit("/", 1)[-1]
    if schema.type == "array" and schema.items is not None:
        return ARRAY_PREFIX + resolve_schema_label(schema.items)
    if not schema.type:
        return "object"
    return schema.type


def limit_depth(node: Any, level: int = 1, max_level: int = 1) -> Any:
    """Return a shallow preview of *node*.

    Mappings are copied key by key: nested mappings recurse one level deeper,
    non-empty sequences keep only their first element (recursed one level
    deeper, wrapped in a one-element list), and every other value is replaced
    by a ``"<kind>"`` marker. Once ``level`` exceeds ``max_level`` the node
    becomes ``"<Nested data: L{level}+>"``. Strings and other top-level
    values pass through unchanged.

    Args:
        node: Any JSON-shaped value.
        level: Depth of *node*; callers start at 1.
        max_level: Deepest level that is still expanded.

    Example::

        >>> limit_depth({"a": {"b": {"c": 1}}}, 1, 1)
        {'a': '<Nested data: L2+>'}
    """
    if level > max_level:
        return f"<Nested data: L{level}+>"

    # Summary strings and scalars pass through untouched.
    if json_kind(node) is not JSONKind.OBJECT:
        return node

    simplified: dict[str, Any] = {}
    for key, value in node.items():
        value_kind = json_kind(value)
        if value_kind is JSONKind.OBJECT:
            simplified[key] = limit_depth(value, level + 1, max_level)
        elif value_kind is JSONKind.ARRAY and value:
            simplified[key] = [limit_depth(value[0], level + 1, max_level)]
        else:
            simplified[key] = _kind_marker(value_kind, value)
    return simplified


def _kind_marker(kind: Optional[JSONKind], value: Any) -> str:
    """Marker describing a value that is not expanded in a preview."""
    if kind is None:
        return f"<{type(value).__name__}>"
    return f"<{kind.value}>"


def stringify_default(value: Any) -> Optional[str]:
    """Render a parameter default for help output.

    ``None`` and the empty string mean "no default". Booleans use JSON
    spelling, numbers their ``str`` form, arrays and objects compact JSON
    with sorted keys.
    """
    kind = json_kind(value)
    if kind is JSONKind.NULL:
        return None
    if kind is JSONKind.STRING:
        return value or None
    if kind is JSONKind.BOOLEAN:
        return "true" if value else "false"
    if kind is JSONKind.NUMBER:
        return str(value)
    if kind in (JSONKind.ARRAY, JSONKind.OBJECT):
        return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
    return str(value)

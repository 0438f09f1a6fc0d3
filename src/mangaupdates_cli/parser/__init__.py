"""OpenAPI document parser -- load, resolve component ``$ref`` pointers, extract operations.

Turns a raw OpenAPI 3.x document (JSON or YAML, local file, remote URL or
stdin) into a :class:`~mangaupdates_cli.models.ParsedSpec` that the help
pipeline and the command dispatcher consume.

Typical usage::

    from mangaupdates_cli.parser import load_spec, validate_openapi_version, extract_spec

    raw = load_spec("openapi.yaml")
    parsed = extract_spec(raw, validate_openapi_version(raw))

Sub-modules:

* :mod:`~mangaupdates_cli.parser.loader` -- I/O and format detection.
* :mod:`~mangaupdates_cli.parser.resolver` -- ``$ref`` resolution for
  parameter, request-body and response objects. Schema references are left
  in place so their names reach the help output.
* :mod:`~mangaupdates_cli.parser.extractor` -- builds the
  :class:`~mangaupdates_cli.models.APIOperation` list.
"""

from mangaupdates_cli.parser.extractor import extract_spec
from mangaupdates_cli.parser.loader import load_spec, validate_openapi_version

__all__ = ["load_spec", "validate_openapi_version", "extract_spec"]

"""Generate the help catalog for a whole API document.

The catalog maps each subprogram name to the help entries of the commands
under it. Two policies decide what ends up there:

* :func:`is_catalogued` -- an operation needs an ``operationId`` and at
  least one tag. Anything else is left out without complaint.
* :func:`subprogram_for` -- an operation belongs to its *first* tag only.

Entries within a subprogram are ordered by operation id, and subprograms by
name, so generating twice from the same document yields the same catalog.

Writing the catalog out is left to an emitter (see
:mod:`mangaupdates_cli.help.emitter`); :func:`emit_catalog` walks the groups
and hands each non-empty one over.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from mangaupdates_cli.help.builder import build_help_record
from mangaupdates_cli.models import (
    DEFAULT_PROGRAM_NAME,
    APIOperation,
    CatalogEntry,
    ParsedSpec,
)

if TYPE_CHECKING:
    from mangaupdates_cli.help.emitter import HelpEmitter

logger = logging.getLogger(__name__)

HelpCatalog = dict[str, list[CatalogEntry]]


def is_catalogued(operation: APIOperation) -> bool:
    """Return whether *operation* gets a help entry (has an id and a tag)."""
    return bool(operation.operation_id) and bool(operation.tags)


def subprogram_for(operation: APIOperation) -> str:
    """Return the subprogram *operation* is grouped under: its first tag."""
    return operation.tags[0]


def generate_catalog(
    spec: ParsedSpec,
    program: str = DEFAULT_PROGRAM_NAME,
) -> HelpCatalog:
    """Build one :class:`~mangaupdates_cli.models.CatalogEntry` per catalogued operation.

    Args:
        spec: The parsed document.
        program: Program name used in the usage lines.

    Returns:
        A dict from subprogram name to entries sorted by operation id. Keys
        are in ascending order.

    Example::

        catalog = generate_catalog(extract_spec(load_spec("openapi.yaml"), "3.0.3"))
        for entry in catalog["series"]:
            print(entry.operation_id, entry.record.usage)
    """
    grouped: dict[str, dict[str, APIOperation]] = {}

    for operation in spec.operations:
        if not is_catalogued(operation):
            logger.debug(
                "Skipping %s %s: missing operationId or tags",
                operation.method.value.upper(),
                operation.path,
            )
            continue

        subprogram = subprogram_for(operation)
        ops = grouped.setdefault(subprogram, {})
        op_id = operation.operation_id
        assert op_id is not None  # is_catalogued() guarantees this
        if op_id in ops:
            logger.warning(
                "Duplicate operationId %r in %s; keeping %s %s",
                op_id,
                subprogram,
                operation.method.value.upper(),
                operation.path,
            )
        ops[op_id] = operation

    catalog: HelpCatalog = {}
    for subprogram in sorted(grouped):
        ops = grouped[subprogram]
        catalog[subprogram] = [
            CatalogEntry(
                operation_id=op_id,
                path=ops[op_id].path,
                method=ops[op_id].method,
                record=build_help_record(
                    ops[op_id], subprogram, spec.security, program=program
                ),
            )
            for op_id in sorted(ops)
        ]
    return catalog


def emit_catalog(catalog: HelpCatalog, emitter: HelpEmitter) -> list[Path]:
    """Hand every non-empty subprogram in *catalog* to *emitter*.

    Args:
        catalog: As returned by :func:`generate_catalog`.
        emitter: Destination for the generated artifacts.

    Returns:
        Paths of the files written, in subprogram order.
    """
    written: list[Path] = []
    for subprogram, entries in catalog.items():
        if not entries:
            logger.info(
                "No operations to generate help for in subprogram %s. Skipping.",
                subprogram,
            )
            continue
        written.append(emitter.emit(subprogram, entries))
    return written

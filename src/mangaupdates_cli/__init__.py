"""mangaupdates_cli -- command-line client for the MangaUpdates v1 API.

Every API operation described in the bundled OpenAPI document becomes a
``mangaupdatescli <subprogram> <command>`` invocation. Subprograms are the
operation tags (``authors``, ``series``, ``releases``, ...) and commands are
the operation ids. Each command carries two help modes derived from the same
document: ``-h`` prints a structured JSON help record, ``-hh`` prints an
aligned, human-readable one.

Typical workflow::

    mangaupdatescli series getSeries --id 12345
    mangaupdatescli series searchSeriesPost -hh
    mangaupdatescli generate-help --spec openapi.yaml --outdir build/help

Modules:
    app: Typer application and console entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware settings and precedence resolution.
    dispatch: Subprogram groups and per-operation commands.
    client: HTTP client for the MangaUpdates API.
    help: Help record generation, rendering and emission.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting.
"""

__version__ = "0.3.0"

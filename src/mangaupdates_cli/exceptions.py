"""Exception hierarchy for mangaupdates_cli.

All exceptions inherit from :class:`MangaUpdatesError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`mangaupdates_cli.exit_codes`. The top-level handler in
:func:`mangaupdates_cli.app.main` catches ``MangaUpdatesError`` and exits
with the matching code, while unexpected exceptions produce a crash log and
exit with :data:`EXIT_GENERIC_FAILURE`.

The help pipeline itself (schema labels, depth limiting, record building,
catalog generation) never raises: malformed input degrades to fallback
values. Only its boundaries raise -- loading the document
(:class:`SpecParseError`) and rendering or writing output
(:class:`RenderError`).

Subclass hierarchy::

    MangaUpdatesError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- AuthError           (exit 3)
    +-- NotFoundError       (exit 4)
    +-- ServerError         (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- SpecParseError      (exit 7)
    +-- RenderError         (exit 8)
    +-- ConfigError         (exit 1)
"""

from mangaupdates_cli.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_RENDER_ERROR,
    EXIT_SERVER_ERROR,
    EXIT_SPEC_PARSE_ERROR,
)


class MangaUpdatesError(Exception):
    """Base exception for all mangaupdates_cli errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`mangaupdates_cli.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(MangaUpdatesError):
    """Raised for invalid CLI arguments or a 4xx rejection of the request."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(MangaUpdatesError):
    """Raised when the API answers 401 or 403."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(MangaUpdatesError):
    """Raised when the API returns HTTP 404 (resource not found)."""

    exit_code = EXIT_NOT_FOUND


class ServerError(MangaUpdatesError):
    """Raised when the API returns an HTTP 5xx server error."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(MangaUpdatesError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class SpecParseError(MangaUpdatesError):
    """Raised when the OpenAPI document cannot be read, parsed or validated."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class RenderError(MangaUpdatesError):
    """Raised when help output cannot be serialised or generated files cannot be written."""

    exit_code = EXIT_RENDER_ERROR


class ConfigError(MangaUpdatesError):
    """Raised for configuration problems (invalid JSON, bad settings values)."""

    exit_code = EXIT_GENERIC_FAILURE


def error_for_status(status_code: int, message: str) -> MangaUpdatesError:
    """Map an HTTP error status to the matching exception instance.

    Args:
        status_code: The HTTP status code (expected to be ``>= 400``).
        message: The message to attach to the exception.

    Returns:
        An :class:`AuthError`, :class:`NotFoundError`, :class:`ServerError`
        or :class:`InvalidUsageError` instance.
    """
    if status_code in (401, 403):
        return AuthError(message)
    if status_code == 404:
        return NotFoundError(message)
    if status_code >= 500:
        return ServerError(message)
    return InvalidUsageError(message)

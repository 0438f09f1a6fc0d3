"""HTTP client for the MangaUpdates API.

:class:`ApiClient` wraps :class:`httpx.Client` with the API base URL, the
configured timeout and SSL verification, the ``Accept`` header the API
expects, and an optional bearer token. It must be used as a context manager
so that the underlying transport is opened and closed.

Responses are returned as-is; :func:`raise_for_api_status` maps an error
status to the matching :mod:`~mangaupdates_cli.exceptions` class once the
caller has printed the body.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from mangaupdates_cli.exceptions import ConnectionError_, error_for_status
from mangaupdates_cli.models import Settings

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "application/json, application/xml"


def expand_path(template: str, path_params: dict[str, Any]) -> str:
    """Substitute ``{name}`` placeholders in *template* with URL-quoted values.

    Example::

        >>> expand_path("/series/{id}/rss", {"id": 42})
        '/series/42/rss'
    """
    path = template
    for name, value in path_params.items():
        path = path.replace(f"{{{name}}}", quote(str(value), safe=""))
    return path


def build_url(base_url: str, path: str) -> str:
    """Join *path* onto *base_url*, keeping the base URL's own path prefix.

    Example::

        >>> build_url("https://api.mangaupdates.com/v1/", "/series/search")
        'https://api.mangaupdates.com/v1/series/search'
    """
    return base_url.rstrip("/") + "/" + path.lstrip("/")


class ApiClient:
    """Synchronous client for API calls.

    Args:
        settings: Effective settings (``base_url``, ``token``, ``request``).
        transport: Optional httpx transport, used by tests to inject an
            :class:`httpx.MockTransport`.

    Example::

        with ApiClient(settings) as client:
            response = client.request("GET", "/series/{id}", path_params={"id": 1})
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> ApiClient:
        headers = {"Accept": ACCEPT_HEADER}
        if self._settings.token:
            headers["Authorization"] = f"Bearer {self._settings.token}"
        self._client = httpx.Client(
            timeout=self._settings.request.timeout,
            verify=self._settings.request.verify_ssl,
            headers=headers,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def url_for(self, path: str, path_params: Optional[dict[str, Any]] = None) -> str:
        """Absolute URL for an operation path with its placeholders filled in."""
        return build_url(self._settings.base_url, expand_path(path, path_params or {}))

    def request(
        self,
        method: str,
        path: str,
        path_params: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        json_body: Optional[Any] = None,
        form: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send one request and return the response, whatever its status.

        Args:
            method: HTTP method.
            path: Operation path template (``/series/{id}``).
            path_params: Values for the path placeholders.
            params: Query parameters.
            headers: Extra request headers.
            json_body: JSON-serialisable body.
            form: Fields sent as a multipart/form-data body.

        Raises:
            ConnectionError_: On network errors and timeouts.
            RuntimeError: If the client is used outside a ``with`` block.
        """
        if self._client is None:
            raise RuntimeError("ApiClient must be used as a context manager")

        url = self.url_for(path, path_params)
        logger.debug("%s %s params=%s", method.upper(), url, params)
        try:
            response = self._client.request(
                method.upper(),
                url,
                params=params or None,
                headers=headers,
                json=json_body,
                files=_multipart_fields(form) if form else None,
            )
        except httpx.TimeoutException as exc:
            raise ConnectionError_(f"Request timed out: {method.upper()} {url}") from exc
        except httpx.RequestError as exc:
            raise ConnectionError_(f"Failed to execute request: {exc}") from exc

        logger.debug("Received HTTP %d from %s", response.status_code, url)
        return response


def raise_for_api_status(response: httpx.Response) -> None:
    """Raise the matching error for a 4xx/5xx *response*; do nothing otherwise.

    Raises:
        AuthError: On 401 / 403.
        NotFoundError: On 404.
        ServerError: On 5xx.
        InvalidUsageError: On any other 4xx.
    """
    if response.status_code < 400:
        return
    reason = response.reason_phrase or "error"
    raise error_for_status(
        response.status_code,
        f"API returned HTTP {response.status_code} ({reason}) for "
        f"{response.request.method} {response.request.url}",
    )


def _multipart_fields(form: dict[str, Any]) -> dict[str, tuple[None, str]]:
    """Plain multipart fields (no filename) for httpx's ``files`` argument."""
    return {
        name: (None, value if isinstance(value, str) else json.dumps(value))
        for name, value in form.items()
    }

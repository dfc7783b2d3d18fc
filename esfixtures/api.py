"""HTTP client for the search engine REST API."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

import httpx

from .config import config
from .exceptions import (
    AuthenticationError,
    IndexExistsError,
    IndexNotFoundError,
    NotFoundError,
    ScanExpiredError,
    TransportError,
)
from .models import DocumentId, ServerVersionInfo
from .utils import bool_param, normalize_host, scope_path

logger = logging.getLogger(__name__)

# Error types reported by the engine, lower-cased. Legacy (1.x) servers
# report Java exception names instead of snake_case types.
INDEX_EXISTS_TYPES = {
    "index_already_exists_exception",
    "resource_already_exists_exception",
    "indexalreadyexistsexception",
}
INDEX_NOT_FOUND_TYPES = {"index_not_found_exception", "indexmissingexception"}
SCAN_EXPIRED_TYPES = {
    "search_context_missing_exception",
    "searchcontextmissingexception",
}


def _extract_error(response: httpx.Response) -> tuple[list[str], Optional[str]]:
    """Extract error types and reason from an error response body.

    Returns:
        Tuple of (lower-cased error types, reason)
    """
    try:
        data = response.json() if response.content else {}
    except ValueError:
        return [], response.text or None

    if not isinstance(data, dict):
        return [], None

    error = data.get("error")
    if isinstance(error, str):
        # "IndexMissingException[[fixtures] missing]"
        return [error.split("[", 1)[0].lower()], error
    if not isinstance(error, dict):
        return [], None

    types = [str(error.get("type", "")).lower()]
    for cause in error.get("root_cause") or []:
        if isinstance(cause, dict) and cause.get("type"):
            types.append(str(cause["type"]).lower())
    reason = error.get("reason")
    return [t for t in types if t], reason


class SearchClient:
    """Client for the search engine REST API.

    The client holds a single ``httpx.Client`` that is shared by every
    request, including requests issued from worker threads.
    """

    def __init__(
        self,
        host: str | None = None,
        username: str | None = None,
        password: str | None = None,
        timeout: float | None = None,
    ):
        """Initialize the search engine client.

        Args:
            host: Host or base URL (uses config if not provided)
            username: Optional basic auth username (uses config if not provided)
            password: Optional basic auth password (uses config if not provided)
            timeout: Request timeout in seconds (uses config if not provided)
        """
        self.base_url = normalize_host(host or config.host)
        self.username = username or config.username
        self.password = password or config.password
        self.timeout = timeout if timeout is not None else config.timeout

        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None or self._client.is_closed:
            auth = None
            if self.username:
                auth = httpx.BasicAuth(self.username, self.password or "")
            self._client = httpx.Client(
                auth=auth,
                headers={"Accept": "application/json"},
                timeout=httpx.Timeout(self.timeout),
            )
        return self._client

    def close(self) -> None:
        """Close the client and release connections."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> SearchClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _handle_http_error(self, e: httpx.HTTPStatusError) -> TransportError:
        """Map an HTTP error response to an esfixtures exception.

        Args:
            e: The HTTP error exception

        Returns:
            Exception to raise
        """
        status_code = e.response.status_code
        types, reason = _extract_error(e.response)
        error_type = types[0] if types else None
        details = {
            "status_code": status_code,
            "error_type": error_type,
            "reason": reason,
        }
        suffix = f": {reason}" if reason else ""

        if any(t in SCAN_EXPIRED_TYPES for t in types):
            return ScanExpiredError(f"Scroll cursor expired{suffix}", **details)
        if any(t in INDEX_EXISTS_TYPES for t in types):
            return IndexExistsError(f"Index already exists{suffix}", **details)
        if any(t in INDEX_NOT_FOUND_TYPES for t in types):
            return IndexNotFoundError(f"Index not found{suffix}", **details)
        if status_code in (401, 403):
            return AuthenticationError(
                f"Authentication failed with status {status_code}{suffix}", **details
            )
        if status_code == 404:
            return NotFoundError(f"Resource not found{suffix}", **details)
        return TransportError(
            f"Request failed with status {status_code}{suffix}", **details
        )

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        """Make a request to the search engine.

        Failed requests are not retried.

        Args:
            method: HTTP method
            endpoint: Endpoint path, e.g. "/fixtures/_count"
            **kwargs: Additional arguments passed to httpx

        Returns:
            Response JSON data ({} for empty bodies)

        Raises:
            TransportError: If the request fails
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        client = self._get_client()
        logger.debug(f"{method} {url}")

        try:
            response = client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._handle_http_error(e) from e
        except httpx.RequestError as e:
            raise TransportError(f"Network error: {e}") from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON response from {url}", status_code=response.status_code
            ) from e

    # =========================
    # Cluster
    # =========================

    def info(self) -> dict[str, Any]:
        """Get cluster name and version information."""
        return self._request("GET", "/")

    def get_server_version(self) -> ServerVersionInfo:
        """Probe the server version."""
        try:
            return ServerVersionInfo.from_api_response(self.info())
        except ValueError as e:
            raise TransportError(str(e)) from e

    # =========================
    # Documents
    # =========================

    def bulk(
        self,
        entries: Iterable[Mapping[str, Any]],
        index: str | None = None,
        doc_type: str | None = None,
        refresh: bool = False,
    ) -> dict[str, Any]:
        """Submit newline-delimited action/payload entries to the bulk endpoint.

        Args:
            entries: Action and payload entries in wire order
            index: Default index for actions that do not name one
            doc_type: Default type for actions that do not name one
            refresh: Make the writes visible to search immediately

        Returns:
            Bulk response with "took", "errors" and "items"
        """
        body = "".join(json.dumps(entry) + "\n" for entry in entries)
        return self._request(
            "POST",
            f"{scope_path(index, doc_type)}/_bulk",
            params={"refresh": bool_param(refresh)},
            content=body.encode("utf-8"),
            headers={"Content-Type": "application/x-ndjson"},
        )

    def delete_document(
        self,
        index: str,
        doc_id: DocumentId,
        doc_type: str | None = None,
        refresh: bool = False,
    ) -> dict[str, Any]:
        """Delete a single document by identifier."""
        return self._request(
            "DELETE",
            f"/{index}/{doc_type or '_doc'}/{doc_id}",
            params={"refresh": bool_param(refresh)},
        )

    def delete_by_query(
        self,
        index: str,
        doc_type: str | None = None,
        query: Mapping[str, Any] | None = None,
        refresh: bool = False,
    ) -> dict[str, Any]:
        """Delete every document matching a query (server 5.x and later).

        The server aborts on the first version conflict and answers 409,
        which raises TransportError.
        """
        return self._request(
            "POST",
            f"{scope_path(index, doc_type)}/_delete_by_query",
            params={"refresh": bool_param(refresh)},
            json={"query": dict(query or {"match_all": {}})},
        )

    def count(self, index: str, doc_type: str | None = None) -> int:
        """Count the documents in an index (or index/type)."""
        result = self._request("GET", f"{scope_path(index, doc_type)}/_count")
        return int(result.get("count", 0))

    # =========================
    # Scroll
    # =========================

    def open_scroll(
        self,
        index: str,
        doc_type: str | None = None,
        scroll: str = "30s",
        size: int | None = None,
        source: bool = False,
    ) -> dict[str, Any]:
        """Open a scroll over every document in the scope.

        Args:
            index: Index to scan
            doc_type: Optional type to scan
            scroll: Cursor time-to-live, e.g. "30s"
            size: Page size (server default if None)
            source: Whether to return document sources

        Returns:
            First page of hits together with "_scroll_id"
        """
        body: dict[str, Any] = {
            "query": {"match_all": {}},
            "sort": ["_doc"],
            "_source": source,
        }
        if size is not None:
            body["size"] = size
        return self._request(
            "POST",
            f"{scope_path(index, doc_type)}/_search",
            params={"scroll": scroll},
            json=body,
        )

    def scroll(self, scroll_id: str, scroll: str = "30s") -> dict[str, Any]:
        """Fetch the next page of an open scroll."""
        return self._request(
            "POST",
            "/_search/scroll",
            json={"scroll": scroll, "scroll_id": scroll_id},
        )

    def clear_scroll(self, scroll_id: str) -> dict[str, Any]:
        """Release the server-side resources of a scroll."""
        return self._request(
            "DELETE", "/_search/scroll", json={"scroll_id": [scroll_id]}
        )

    # =========================
    # Indices
    # =========================

    def create_index(
        self, index: str, body: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Create an index with optional settings and mappings."""
        if body:
            return self._request("PUT", f"/{index}", json=dict(body))
        return self._request("PUT", f"/{index}")

    def delete_index(self, index: str) -> dict[str, Any]:
        """Delete an index."""
        return self._request("DELETE", f"/{index}")

    def index_exists(self, index: str) -> bool:
        """Check whether an index exists."""
        try:
            self._request("HEAD", f"/{index}")
        except NotFoundError:
            return False
        return True

    def put_mapping(
        self,
        index: str,
        body: Mapping[str, Any],
        doc_type: str | None = None,
    ) -> dict[str, Any]:
        """Add or update the mapping of an index (or of a type)."""
        path = f"/{index}/_mapping"
        if doc_type:
            path = f"{path}/{doc_type}"
        return self._request("PUT", path, json=dict(body))

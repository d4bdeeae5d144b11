"""HTTP client for the search engine REST API."""

import json
from typing import Any

import httpx
import structlog

from searchable.config import Settings

logger = structlog.get_logger()

SUCCESS_STATUSES = frozenset({200, 201})


class EngineError(Exception):
    """Raised when the search engine signals a failure.

    Attributes:
        status_code: HTTP status of the failed response, if one was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize engine error.

        Args:
            message: Engine-provided or synthesized error message.
            status_code: HTTP status of the response.
        """
        super().__init__(message)
        self.status_code = status_code


def _decode(response: httpx.Response) -> dict[str, Any]:
    """Decode a response body, treating non-object bodies as empty."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class IndexClient:
    """Synchronous single-attempt client for the search engine.

    Every operation issues exactly one request. Responses carrying an
    ``error`` field or a status other than 200/201 raise EngineError.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:9200",
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize index client.

        Args:
            base_url: Engine root URL.
            timeout: Transport timeout in seconds.
            client: Preconfigured httpx client (tests inject a mock transport).
        """
        self._client = client if client is not None else httpx.Client(
            base_url=base_url, timeout=timeout
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "IndexClient":
        """Build a client for the configured engine URL and timeout."""
        return cls(base_url=settings.engine_url, timeout=settings.engine_timeout)

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Perform a request and validate the engine response.

        Args:
            method: HTTP method.
            path: Path relative to the engine root.
            body: JSON-serializable request body.
            params: Query string parameters.

        Returns:
            Decoded response body.

        Raises:
            EngineError: If the transport fails or the engine reports an error.
        """
        content = json.dumps(body) if body is not None else None
        try:
            response = self._client.request(
                method,
                path,
                content=content,
                params=params,
                headers={"Content-Type": "application/json"} if content else None,
            )
        except httpx.HTTPError as e:
            raise EngineError(f"Error executing request: {e}") from e

        data = _decode(response)
        logger.debug(
            "engine_request",
            method=method,
            path=path,
            status=response.status_code,
            took_ms=data.get("took"),
        )

        if "error" in data or response.status_code not in SUCCESS_STATUSES:
            message = data.get("error") or (
                f"Error executing request: {response.status_code} {response.text}"
            )
            raise EngineError(str(message), status_code=response.status_code)
        return data

    def create_index(
        self, name: str, options: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Create an index with optional settings (analyzers, shards)."""
        return self.request("PUT", f"/{name}", body=options or {})

    def delete_index(self, name: str) -> dict[str, Any]:
        """Delete an index and every document in it."""
        return self.request("DELETE", f"/{name}")

    def index_status(self, name: str) -> dict[str, Any]:
        """Fetch index status, including its effective settings."""
        return self.request("GET", f"/{name}/_status")

    def put_mapping(
        self, index: str, doc_type: str, mapping: dict[str, Any]
    ) -> dict[str, Any]:
        """Install a field mapping for a document type."""
        return self.request(
            "PUT", f"/{index}/{doc_type}/_mapping", body={doc_type: mapping}
        )

    def get_mapping(self, index: str, doc_type: str) -> dict[str, Any]:
        """Fetch the field mapping of a document type."""
        return self.request("GET", f"/{index}/{doc_type}/_mapping")

    def put_document(
        self, index: str, doc_type: str, doc_id: Any, body: dict[str, Any]
    ) -> dict[str, Any]:
        """Index a document, overwriting any previous version with the same id."""
        return self.request("PUT", f"/{index}/{doc_type}/{doc_id}", body=body)

    def delete_document(self, index: str, doc_type: str, doc_id: Any) -> dict[str, Any]:
        """Delete a document. A missing document raises EngineError."""
        return self.request("DELETE", f"/{index}/{doc_type}/{doc_id}")

    def get_document(self, index: str, doc_type: str, doc_id: Any) -> dict[str, Any]:
        """Fetch a document; the indexed body is under ``_source``."""
        return self.request("GET", f"/{index}/{doc_type}/{doc_id}")

    def search(
        self,
        index: str,
        doc_type: str,
        query: dict[str, Any],
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Run a search.

        Args:
            index: Index name.
            doc_type: Document type name.
            query: Request body (``{"query": ...}``).
            params: Paging and sort parameters (``from``, ``size``, ``sort``).

        Returns:
            Engine response with ``hits.total`` and ``hits.hits``.
        """
        return self.request(
            "POST", f"/{index}/{doc_type}/_search", body=query, params=params
        )

    def percolate(
        self, index: str, doc_type: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        """Test a candidate document against the registered percolator filters."""
        return self.request("POST", f"/{index}/{doc_type}/_percolate", body=body)

    def register_percolator(
        self, index: str, name: str, query: dict[str, Any]
    ) -> dict[str, Any]:
        """Register a named standing query for an index."""
        return self.request("PUT", f"/_percolator/{index}/{name}", body=query)

    def refresh_percolator(self) -> dict[str, Any]:
        """Make newly registered percolator filters active."""
        return self.request("POST", "/_percolator/_refresh")

    def refresh(self, index: str) -> dict[str, Any]:
        """Make recent writes to an index visible to search."""
        return self.request("POST", f"/{index}/_refresh")

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._client.close()

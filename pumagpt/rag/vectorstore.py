"""Qdrant collection client over the REST API."""

import logging
from typing import Any

import requests

from ..config import ServerConfig
from .config import RAGConfig
from .models import Point, SearchResult

logger = logging.getLogger(__name__)


class QdrantCollection:
    """One Qdrant collection of fixed-size vectors compared by dot product."""

    def __init__(self, server_config: ServerConfig, rag_config: RAGConfig, session: requests.Session | None = None):
        """Initialize the collection client.

        Args:
            server_config: Provides the Qdrant URL, API key and timeouts
            rag_config: Provides collection name and vector size
            session: Optional requests session (defaults to the module-level requests API)
        """
        self.base_url = server_config.qdrant_base_url
        self.api_key = server_config.QDRANT_API_KEY
        self.timeout = server_config.backend_timeout
        self.name = rag_config.collection_name
        self.vector_size = rag_config.vector_size
        self.http = session or requests

    @property
    def collection_url(self) -> str:
        return f"{self.base_url}/collections/{self.name}"

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json", "api-key": self.api_key}

    def _request(self, method: str, path: str, payload: dict[str, Any] | None = None, **kwargs) -> requests.Response:
        response = self.http.request(
            method,
            f"{self.collection_url}{path}",
            json=payload,
            headers=self._headers(),
            timeout=self.timeout,
            **kwargs,
        )
        response.raise_for_status()
        return response

    def ensure_collection(self) -> None:
        """Create the collection if needed; an existing collection is left untouched."""
        payload = {"vectors": {"size": self.vector_size, "distance": "Dot"}}
        try:
            self._request("PUT", "", payload)
            logger.info(f"[QDRANT] Created collection {self.name} (size={self.vector_size}, distance=Dot)")
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 409:
                logger.info(f"[QDRANT] Collection {self.name} already exists")
                return
            raise

    def upsert(self, points: list[Point]) -> None:
        """Insert or overwrite points by id (last writer wins)."""
        self._request("PUT", "/points", {"points": [point.to_dict() for point in points]}, params={"wait": "true"})
        logger.debug(f"[QDRANT] Upserted {len(points)} point(s) into {self.name}")

    def count(self) -> int:
        """Exact number of points in the collection."""
        response = self._request("POST", "/points/count", {"exact": True})
        return response.json()["result"]["count"]

    def search(
        self, vector: list[float], limit: int, filter: dict[str, str | int] | None = None
    ) -> list[SearchResult]:
        """Nearest-neighbor search, ranked by descending similarity.

        Args:
            vector: Query embedding
            limit: Maximum number of results
            filter: Optional payload equality constraints, all of which must match

        Returns:
            Ranked search results with payloads
        """
        payload: dict[str, Any] = {"vector": vector, "limit": limit, "with_payload": True}
        if filter is not None:
            payload["filter"] = {"must": [{"key": key, "match": {"value": value}} for key, value in filter.items()]}

        response = self._request("POST", "/points/search", payload)
        return [
            SearchResult(id=hit["id"], score=hit["score"], payload=hit.get("payload") or {})
            for hit in response.json()["result"]
        ]

    def check_health(self, timeout: int = 5) -> tuple[bool, str]:
        """Check that Qdrant is reachable and the collection exists.

        Returns:
            Tuple of (is_healthy: bool, message: str)
        """
        try:
            response = self.http.request("GET", self.collection_url, headers=self._headers(), timeout=timeout)
            if response.status_code == 404:
                return False, f"Qdrant is reachable but collection '{self.name}' does not exist. Run the indexer."
            response.raise_for_status()
            return True, f"Qdrant is healthy. Collection '{self.name}' is available."
        except requests.Timeout:
            return False, f"Qdrant health check timed out after {timeout}s."
        except requests.ConnectionError:
            return False, f"Cannot connect to Qdrant at {self.base_url}."
        except Exception as e:
            return False, f"Qdrant health check failed: {e!s}"

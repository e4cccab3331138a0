"""Pinecone vector store provider adapter.

Talks to a Pinecone index's data-plane REST API over ``httpx`` to implement
:class:`IVectorStoreProvider`.  Each upsert is a single
``POST /vectors/upsert`` request carrying the whole batch; each query is a
single ``POST /query``.  Any non-2xx response becomes a :class:`StoreError`
that carries the status code and response body.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from docpipe.interfaces.vector_store_provider import IVectorStoreProvider
from docpipe.models.vector import QueryMatch, Vector
from docpipe.utils.errors import InvalidQueryError, NoVectorsError, StoreError

logger = structlog.get_logger(logger_name=__name__)

# Response bodies are echoed into error messages; keep them bounded.
_MAX_ERROR_BODY = 500


class PineconeVectorStore(IVectorStoreProvider):
    """Vector store backed by a Pinecone index.

    Parameters
    ----------
    api_key:
        Pinecone API key, sent as the ``Api-Key`` header.
    index_host:
        Data-plane host of the index, e.g.
        ``https://admin-docs-abc123.svc.us-east-1.pinecone.io``.
    http_client:
        Shared ``httpx.AsyncClient``.  One is created (and owned) when omitted.
    timeout:
        Per-request timeout in seconds for an owned client.
    """

    def __init__(
        self,
        api_key: str,
        index_host: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self._index_host = index_host.rstrip("/")
        if self._index_host and not self._index_host.startswith(("http://", "https://")):
            self._index_host = f"https://{self._index_host}"
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def upsert(self, vectors: list[Vector], namespace: str) -> int:
        if not vectors:
            raise NoVectorsError(provider_name=self.get_provider_name())

        payload: dict[str, Any] = {
            "vectors": [v.to_wire() for v in vectors],
            "namespace": namespace,
        }
        data = await self._post("/vectors/upsert", payload)
        upserted = int(data.get("upsertedCount", len(vectors)))
        logger.info(
            "pinecone_upsert_complete",
            namespace=namespace,
            vectors=len(vectors),
            upserted=upserted,
        )
        return upserted

    async def query(
        self,
        vector: list[float],
        top_k: int = 10,
        namespace: str = "",
        filter: dict[str, Any] | None = None,
    ) -> list[QueryMatch]:
        if not vector:
            raise InvalidQueryError(provider_name=self.get_provider_name())

        payload: dict[str, Any] = {
            "vector": vector,
            "topK": top_k,
            "includeMetadata": True,
            "namespace": namespace,
        }
        if filter:
            payload["filter"] = filter

        data = await self._post("/query", payload)
        matches = [
            QueryMatch(
                id=str(m.get("id", "")),
                score=float(m.get("score", 0.0)),
                values=m.get("values") or [],
                metadata=m.get("metadata") or {},
            )
            for m in data.get("matches", [])
        ]
        logger.debug("pinecone_query_complete", namespace=namespace, matches=len(matches))
        return matches

    def get_provider_name(self) -> str:
        return "pinecone"

    def is_available(self) -> bool:
        return bool(self._api_key and self._index_host)

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._index_host}{path}"
        headers = {"Api-Key": self._api_key, "Content-Type": "application/json"}
        try:
            response = await self._http.post(url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("pinecone_request_failed", path=path, error=str(exc))
            raise StoreError(
                message=f"Pinecone request to {path} failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not response.is_success:
            body = response.text[:_MAX_ERROR_BODY]
            logger.error("pinecone_error_response", path=path, status=response.status_code, body=body)
            raise StoreError(
                message=f"Pinecone error (status {response.status_code}): {body}",
                provider_name=self.get_provider_name(),
                store_status=response.status_code,
                body=body,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise StoreError(
                message=f"Pinecone returned an unreadable response for {path}",
                provider_name=self.get_provider_name(),
                store_status=response.status_code,
                body=response.text[:_MAX_ERROR_BODY],
            ) from exc

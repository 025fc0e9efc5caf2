"""
Full-text search over Meilisearch's REST API.

Search is a side channel: every call is best-effort, failures are logged
and the caller gets an empty result instead of an error.
"""

from logging import getLogger
from typing import Any

from httpx import AsyncClient, HTTPError
from pydantic import ValidationError

from inkblog.configs.settings import BLOG_PAGE_SIZE, Settings
from inkblog.schemas.blog import SearchHit
from inkblog.schemas.common import PageInfo
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))


class SearchClient:
    """
    Async client for one Meilisearch index.

    The underlying ``httpx.AsyncClient`` is created lazily and closed by
    ``close()`` from the application lifespan.
    """

    def __init__(self, settings: Settings, client: AsyncClient | None = None) -> None:
        self.enabled = settings.SEARCH_ENABLED
        self.index = settings.SEARCH_INDEX
        headers = {"Content-Type": "application/json"}
        if settings.SEARCH_API_KEY:
            headers["Authorization"] = f"Bearer {settings.SEARCH_API_KEY}"
        self._client = client or AsyncClient(
            base_url=settings.SEARCH_URL,
            headers=headers,
            timeout=settings.SEARCH_TIMEOUT,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, body: Any = None) -> dict[str, Any] | None:
        if not self.enabled:
            return None
        try:
            response = await self._client.request(method, path, json=body)
            response.raise_for_status()
            return response.json() if response.content else {}
        except (HTTPError, ValueError) as e:
            logger.warning(f"Search request {method} {path} failed: {e}")
            return None

    async def ensure_index(self) -> bool:
        """Create the index with ``id`` as primary key; existing indexes are left alone."""
        result = await self._request("POST", "/indexes", {"uid": self.index, "primaryKey": "id"})
        return result is not None

    async def index_blogs(self, docs: list[SearchHit]) -> bool:
        """Add or replace documents."""
        if not docs:
            return True
        payload = [doc.model_dump(mode="json") for doc in docs]
        result = await self._request("POST", f"/indexes/{self.index}/documents", payload)
        if result is not None:
            logger.info(f"Queued {len(docs)} documents for the search index")
        return result is not None

    async def delete_blogs(self, ids: list[int]) -> bool:
        if not ids:
            return True
        result = await self._request(
            "POST",
            f"/indexes/{self.index}/documents/delete-batch",
            ids,
        )
        return result is not None

    async def reindex(self, docs: list[SearchHit]) -> bool:
        """Drop every document, then index ``docs``."""
        if await self._request("DELETE", f"/indexes/{self.index}/documents") is None:
            return False
        return await self.index_blogs(docs)

    async def search(self, query: str, page: int = 1, size: int = BLOG_PAGE_SIZE) -> PageInfo[SearchHit]:
        """
        Search the index.

        Returns:
            A page of hits; empty when search is disabled or unreachable.
        """
        empty = PageInfo[SearchHit](page=page, size=size, total=0, data=[])
        result = await self._request(
            "POST",
            f"/indexes/{self.index}/search",
            {"q": query, "offset": (page - 1) * size, "limit": size},
        )
        if not result:
            return empty
        try:
            hits = [SearchHit.model_validate(hit) for hit in result.get("hits", [])]
        except ValidationError as e:
            logger.warning(f"Unexpected search response: {e}")
            return empty
        total = result.get("estimatedTotalHits", result.get("totalHits", len(hits)))
        return PageInfo[SearchHit](page=page, size=size, total=total, data=hits)

"""
Algolia REST client used for gate lookups.

Provides async methods for:
- Querying the index (first hit wins at the call site)
- Saving and deleting records in batches
- Clearing the index before a full rebuild
"""

from typing import Any, Optional

import httpx

from libs.common.config import Settings
from libs.common.error_handler import DownstreamServiceError
from libs.common.logging import get_logger

logger = get_logger(__name__)

DEFAULT_HITS_PER_PAGE = 10
BATCH_SIZE = 500


class AlgoliaSearchClient:
    """Async client for a single Algolia index."""

    def __init__(
        self,
        app_id: str,
        api_key: str,
        index_name: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.app_id = app_id
        self.index_name = index_name
        self.timeout = timeout
        self._transport = transport
        self._headers = {
            "X-Algolia-Application-Id": app_id,
            "X-Algolia-API-Key": api_key,
            "Content-Type": "application/json",
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "AlgoliaSearchClient":
        return cls(
            app_id=settings.ALGOLIA_APP_ID,
            api_key=settings.ALGOLIA_API_KEY,
            index_name=settings.ALGOLIA_INDEX_NAME,
            timeout=settings.ALGOLIA_TIMEOUT,
        )

    @property
    def configured(self) -> bool:
        return bool(self.app_id and self._headers["X-Algolia-API-Key"])

    def _host(self, read: bool) -> str:
        suffix = "-dsn" if read else ""
        return f"https://{self.app_id}{suffix}.algolia.net"

    async def _request(self, method: str, path: str, read: bool = False, json_data: Any = None) -> dict:
        if not self.configured:
            raise DownstreamServiceError("search", "Algolia credentials are not configured")

        url = f"{self._host(read)}/1/indexes/{self.index_name}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.request(
                    method=method, url=url, headers=self._headers, json=json_data
                )
        except httpx.HTTPError as e:
            raise DownstreamServiceError("search", f"request failed: {e}") from e

        if not response.is_success:
            logger.error(f"Algolia API error: {response.status_code} - {response.text}")
            raise DownstreamServiceError(
                "search",
                f"Algolia returned {response.status_code}",
                status_code=response.status_code,
            )
        return response.json()

    async def search(self, query: str, hits_per_page: int = DEFAULT_HITS_PER_PAGE) -> list[dict]:
        data = await self._request(
            "POST",
            "/query",
            read=True,
            json_data={"query": query, "hitsPerPage": hits_per_page},
        )
        return data.get("hits", [])

    async def save_objects(self, records: list[dict]) -> None:
        for start in range(0, len(records), BATCH_SIZE):
            chunk = records[start : start + BATCH_SIZE]
            await self._request(
                "POST",
                "/batch",
                json_data={
                    "requests": [{"action": "updateObject", "body": record} for record in chunk]
                },
            )

    async def delete_objects(self, object_ids: list[str]) -> None:
        for start in range(0, len(object_ids), BATCH_SIZE):
            chunk = object_ids[start : start + BATCH_SIZE]
            await self._request(
                "POST",
                "/batch",
                json_data={
                    "requests": [
                        {"action": "deleteObject", "body": {"objectID": object_id}}
                        for object_id in chunk
                    ]
                },
            )

    async def clear(self) -> None:
        await self._request("POST", "/clear")

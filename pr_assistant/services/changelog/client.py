"""Content store HTTP client - data layer."""

from typing import Optional

import httpx

from pr_assistant.config import settings
from pr_assistant.core.logging import get_logger

logger = get_logger("changelog.client")

DEFAULT_TIMEOUT = 30.0


class ContentStoreClient:
    """Creates content objects in the content store."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.content_store_url).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.content_store_api_key
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise ValueError("CONTENT_STORE_API_KEY not configured")
        return {"Authorization": f"Bearer {self._api_key}"}

    async def create_object(self, payload: dict) -> dict:
        """Create a content object and return the stored object."""
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=DEFAULT_TIMEOUT,
            transport=self._transport,
        ) as client:
            response = await client.post("/api/v1/objects", json=payload, headers=self._headers())
            response.raise_for_status()
            data = response.json()
        logger.info(f"Created content object {data.get('id')}")
        return data

    def object_url(self, object_id: str) -> str:
        return f"{self.base_url}/store/objects/{object_id}"

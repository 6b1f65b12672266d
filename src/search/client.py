"""Remote search client for the search-by-ingredients function.

Posts `{ingredients, limit, offset}` to the hosted search function and parses
the `{results, total, limit, offset}` response. Every failure mode (network
error, timeout, non-2xx status, malformed body) is raised as
RemoteSearchUnavailableError so the caller can fall back to local matching.
"""

import asyncio
import json
from typing import Sequence

import aiohttp
from pydantic import ValidationError

from src.models.models import DEFAULT_LIMIT, SearchResponse
from src.utils.errors import RemoteSearchUnavailableError
from src.utils.logger import logger


class RemoteSearchClient:
    """Call the remote search service over HTTP.

    Args:
        url: Full URL of the search function.
        api_key: Optional bearer token sent as Authorization header.
        timeout: Total request timeout in seconds (default: 5).

    Raises:
        ValueError: If url is empty.
    """

    def __init__(self, url: str, api_key: str = "", timeout: float = 5.0) -> None:
        if not url:
            raise ValueError("Remote search url is required")
        self.url = url
        self.api_key = api_key
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def search(self, ingredients: Sequence[str], limit: int = DEFAULT_LIMIT, offset: int = 0) -> SearchResponse:
        """Search recipes by ingredients remotely.

        Args:
            ingredients: Ingredient names (normalized by the caller).
            limit: Page size (the service caps it at 100).
            offset: Number of ranked results to skip.

        Returns:
            Validated SearchResponse.

        Raises:
            RemoteSearchUnavailableError: On any transport, status or payload failure.
        """
        payload = {"ingredients": list(ingredients), "limit": limit, "offset": offset}
        logger.debug(f"Remote search: {len(payload['ingredients'])} ingredients, limit={limit}, offset={offset}")

        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.post(self.url, json=payload, headers=self._headers()) as response:
                    if response.status >= 400:
                        body = await response.text()
                        raise RemoteSearchUnavailableError(
                            f"Search API error: {response.status}: {body[:200]}", status=response.status
                        )
                    data = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise RemoteSearchUnavailableError(f"Search API timeout after {self.timeout}s") from e
        except (aiohttp.ClientError, json.JSONDecodeError) as e:
            raise RemoteSearchUnavailableError(f"Search API unreachable: {e}") from e

        try:
            return SearchResponse.model_validate(data)
        except ValidationError as e:
            raise RemoteSearchUnavailableError(f"Search API returned malformed payload: {e.error_count()} errors") from e

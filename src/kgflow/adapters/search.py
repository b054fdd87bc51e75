"""Reference search over the Google Custom Search JSON API."""

import logging
from urllib.parse import urlparse

import httpx

from kgflow.core.exceptions import SearchError
from kgflow.core.types import Reference

logger = logging.getLogger(__name__)

CUSTOM_SEARCH_ENDPOINT = "https://www.googleapis.com/customsearch/v1"
MAX_RESULTS_PER_REQUEST = 10  # API limit for ``num``


def source_domain(url: str) -> str:
    host = urlparse(url).hostname
    return host.removeprefix("www.") if host else url


class GoogleSearchClient:
    """Async Custom Search client.

    Each ``search`` call is one API request. Quota accounting happens in the
    notability engine, not here.
    """

    def __init__(
        self,
        api_key: str,
        engine_id: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._engine_id = engine_id
        self._timeout = timeout
        self._transport = transport

    def _create_http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def search(self, query: str, max_results: int) -> list[Reference]:
        """Return up to ``max_results`` references; empty when nothing matched.

        Raises:
            SearchError: On transport failures and non-2xx responses.
        """
        params = {
            "key": self._api_key,
            "cx": self._engine_id,
            "q": query,
            "num": min(max(max_results, 1), MAX_RESULTS_PER_REQUEST),
        }
        try:
            async with self._create_http_client() as client:
                response = await client.get(CUSTOM_SEARCH_ENDPOINT, params=params)
                response.raise_for_status()
        except httpx.TimeoutException as e:
            raise SearchError(f"search request timed out: {query!r}") from e
        except httpx.HTTPStatusError as e:
            raise SearchError(
                f"HTTP error {e.response.status_code} for search {query!r}"
            ) from e
        except httpx.HTTPError as e:
            raise SearchError(f"search request failed for {query!r}: {e}") from e

        try:
            items = response.json().get("items") or []
        except ValueError as e:
            raise SearchError(f"search response was not JSON for {query!r}") from e

        references = [
            Reference(
                url=item["link"],
                title=item["title"],
                snippet=item["snippet"],
                source_domain=source_domain(item["link"]),
            )
            for item in items
            if item.get("link") and item.get("title") and item.get("snippet")
        ]
        logger.debug("Search %r returned %d references", query, len(references))
        return references[:max_results]

"""Async client for the Tavily search API.

Tavily provides AI-optimized web search with structured output.
Free tier: 1,000 searches/month. Paid: $0.008 per basic search.
"""

from __future__ import annotations

import httpx
import structlog
from typing_extensions import TypedDict

from beamwatch.errors import ProviderError

logger = structlog.get_logger()


class TavilySearchResult(TypedDict):
    title: str
    url: str
    content: str
    score: float


class TavilyClient:
    """Tavily API client. Returns mock data when API key is not configured.

    Transport errors, timeouts and malformed bodies raise ProviderError; callers
    decide whether that degrades or aborts.
    """

    def __init__(self, api_key: str = "", timeout: float = 20.0) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.base_url = "https://api.tavily.com"

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    async def search(self, query: str, max_results: int = 10) -> list[TavilySearchResult]:
        """Search the web using Tavily's AI-optimized search.

        Args:
            query: Search query string.
            max_results: Maximum number of results to return (1-20).

        Returns:
            List of search result dicts with keys: title, url, content, score.
        """
        if not self.is_available:
            logger.debug("Tavily not configured, returning mock data")
            return self._mock_search(query, max_results)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    f"{self.base_url}/search",
                    json={
                        "api_key": self.api_key,
                        "query": query,
                        "max_results": max_results,
                        "include_answer": True,
                        "search_depth": "basic",
                    },
                )
                resp.raise_for_status()
                data: dict[str, object] = resp.json()
        except httpx.HTTPError as exc:
            raise ProviderError("tavily", f"search failed: {exc!r}") from exc
        except ValueError as exc:
            raise ProviderError("tavily", f"malformed response body: {exc}") from exc

        raw_results = data.get("results", []) if isinstance(data, dict) else []
        if not isinstance(raw_results, list):
            raw_results = []
        results: list[TavilySearchResult] = []
        for item in raw_results:
            if not isinstance(item, dict):
                continue
            result: TavilySearchResult = {
                "title": str(item.get("title") or ""),
                "url": str(item.get("url") or ""),
                "content": str(item.get("content") or ""),
                "score": float(item.get("score") or 0.0),
            }
            results.append(result)
        return results

    # ------------------------------------------------------------------
    # Mock data
    # ------------------------------------------------------------------

    def _mock_search(self, query: str, max_results: int) -> list[TavilySearchResult]:
        return [
            {
                "title": f"Mock result {i + 1} for '{query}'",
                "url": f"https://example.com/result-{i + 1}",
                "content": (
                    f"This is mock content for search result {i + 1} "
                    f"related to '{query}'. In production, this would "
                    f"contain a relevant snippet from the web page."
                ),
                "score": round(0.95 - i * 0.1, 2),
            }
            for i in range(min(max_results, 3))
        ]

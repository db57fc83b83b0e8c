"""API clients for external services.

Each client follows the same pattern:
- Accepts API key(s) in __init__
- Exposes an `is_available` property (True when key is set)
- Returns realistic mock data when the API key is missing
- Uses httpx.AsyncClient for real HTTP calls
"""

from beamwatch.clients.tavily import TavilyClient, TavilySearchResult

__all__ = [
    "TavilyClient",
    "TavilySearchResult",
]

"""Port interfaces (Protocols) for the external collaborators of the pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from beamwatch.clients.tavily import TavilySearchResult


@runtime_checkable
class SearchProvider(Protocol):
    """Web search: one query in, a list of {title, url, content} hits out."""

    async def search(self, query: str, max_results: int = 10) -> list[TavilySearchResult]: ...


@runtime_checkable
class ReasoningService(Protocol):
    """Free-text completion whose response embeds a JSON object."""

    async def complete(self, prompt: str, system: str = "") -> str: ...


@runtime_checkable
class EmailSender(Protocol):
    """Delivers one HTML e-mail. Returns False instead of raising on delivery failure."""

    def send(self, to: str, subject: str, html: str) -> bool: ...

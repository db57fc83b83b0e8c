"""Shared test fixtures."""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING

import pytest
from pydantic_ai import models

from beamwatch.config import Settings
from beamwatch.db import Database
from beamwatch.errors import ProviderError
from beamwatch.models.business import Website

if TYPE_CHECKING:
    from collections.abc import Callable

    from beamwatch.clients.tavily import TavilySearchResult

# Safety net: block all real LLM API calls during tests.
# TestModel and FunctionModel are exempt from this check.
models.ALLOW_MODEL_REQUESTS = False

_CANDIDATE_LINE = re.compile(r"^\d+\. (.+) - (\S+)$", re.MULTILINE)


class FakeSearchProvider:
    """In-memory search provider.

    Every query returns one shared hit plus one hit unique to the query, unless
    ``results`` has an entry for it. Queries listed in ``failing`` raise.
    """

    def __init__(self) -> None:
        self.results: dict[str, list[TavilySearchResult]] = {}
        self.failing: set[str] = set()
        self.fail_all = False
        self.queries: list[str] = []

    async def search(self, query: str, max_results: int = 10) -> list[TavilySearchResult]:
        self.queries.append(query)
        if self.fail_all or query in self.failing:
            raise ProviderError("fake-search", f"unavailable for {query!r}")
        if query in self.results:
            return self.results[query]
        slug = re.sub(r"[^a-z0-9]+", "-", query.lower()).strip("-")
        return [
            {
                "title": "Common Grounds",
                "url": "https://commongrounds.example",
                "content": "Neighbourhood coffee bar",
                "score": 0.9,
            },
            {
                "title": f"Result for {query}",
                "url": f"https://example.com/{slug}",
                "content": "",
                "score": 0.5,
            },
        ]


class FakeReasoning:
    """Reasoning service that answers supervisor and threat prompts.

    By default every candidate in a supervisor prompt is confirmed with
    confidence 90, and every threat prompt gets sub-scores 20/15/10/5.
    Set ``supervisor_reply`` / ``threat_reply`` to a string, an exception or
    a callable taking the prompt to override.
    """

    def __init__(self) -> None:
        self.supervisor_reply: str | Exception | Callable[[str], str] | None = None
        self.threat_reply: str | Exception | Callable[[str], str] | None = None
        self.prompts: list[str] = []

    async def complete(self, prompt: str, system: str = "") -> str:
        self.prompts.append(prompt)
        if "validated_competitors" in prompt:
            reply = self.supervisor_reply
            default = self._confirm_all
        else:
            reply = self.threat_reply
            default = self._default_threat
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(prompt)
        if reply is not None:
            return reply
        return default(prompt)

    @staticmethod
    def _confirm_all(prompt: str) -> str:
        judged = [
            {
                "name": name,
                "url": url,
                "is_competitor": True,
                "business_model_match": 85,
                "geographic_relevance": 90,
                "market_relevance": 80,
                "confidence": 90,
                "reasoning": "Same category, same area",
            }
            for name, url in _CANDIDATE_LINE.findall(prompt)
        ]
        return json.dumps({"validated_competitors": judged})

    @staticmethod
    def _default_threat(_prompt: str) -> str:
        return (
            "Here is my analysis:\n"
            + json.dumps(
                {
                    "company_size_score": 20,
                    "growth_rate_score": 15,
                    "feature_parity_score": 10,
                    "market_presence_score": 5,
                    "total_threat_score": 50,
                    "threat_level": "MEDIUM",
                    "reasoning": "Established local player",
                }
            )
        )


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        anthropic_api_key="test-key",
        tavily_api_key="",
        smtp_host="",
        data_dir=tmp_path / "data",
        log_level="DEBUG",
        log_format="console",
        _env_file=None,
    )


@pytest.fixture()
def db(tmp_path) -> Database:
    db = Database(tmp_path / "test.db")
    db.init_schema()
    yield db
    db.close()


@pytest.fixture()
def search_provider() -> FakeSearchProvider:
    return FakeSearchProvider()


@pytest.fixture()
def reasoning() -> FakeReasoning:
    return FakeReasoning()


@pytest.fixture()
def website(db: Database) -> Website:
    db.upsert_business_type(
        "coffee shop",
        keywords=["espresso", "latte", "cafe"],
        typical_competitors=["Starbucks", "Peet's"],
    )
    user_id = db.create_user("owner@beanthere.example", owner_name="Sam")
    return db.create_website(
        Website(
            user_id=user_id,
            business_name="Bean There",
            business_type="coffee shop",
            location="Austin, TX",
            website_url="https://beanthere.example",
        )
    )

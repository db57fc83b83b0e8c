"""Candidate aggregation across research agents."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from beamwatch.models.competitor import Candidate


def merge_candidates(*candidate_lists: Iterable[Candidate]) -> list[Candidate]:
    """Merge agent outputs into one list with each URL exactly once.

    URL is the identity key; a later list's entry for the same URL replaces an
    earlier one. Order of the result is not significant downstream.
    """
    by_url: dict[str, Candidate] = {}
    for candidates in candidate_lists:
        for candidate in candidates:
            by_url[candidate.url] = candidate
    return list(by_url.values())


def format_candidates(candidates: list[Candidate]) -> str:
    """Numbered ``name - url`` lines for prompt construction."""
    return "\n".join(f"{i}. {c.name} - {c.url}" for i, c in enumerate(candidates, start=1))

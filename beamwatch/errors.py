"""Exception hierarchy for the discovery pipeline and automation jobs."""

from __future__ import annotations


class BeamwatchError(Exception):
    """Base class for all beamwatch errors."""


class WebsiteNotFoundError(BeamwatchError):
    """The target website is missing or soft-deleted."""

    def __init__(self, website_id: int) -> None:
        super().__init__(f"Website {website_id} not found")
        self.website_id = website_id


class ProviderError(BeamwatchError):
    """An external search or reasoning call failed or timed out."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class PersistenceError(BeamwatchError):
    """A write to the relational store failed."""


class DiscoveryInProgressError(BeamwatchError):
    """A discovery job for this website has not reached a terminal state yet."""

    def __init__(self, website_id: int, job_id: int) -> None:
        super().__init__(f"Discovery job {job_id} for website {website_id} is still running")
        self.website_id = website_id
        self.job_id = job_id


class BatchAlreadyRunningError(BeamwatchError):
    """A batch of the same kind is still iterating."""

    def __init__(self, job_name: str) -> None:
        super().__init__(f"Batch '{job_name}' is already running")
        self.job_name = job_name


class SchedulerStateError(BeamwatchError):
    """Invalid scheduler lifecycle transition (double start, stop before start)."""

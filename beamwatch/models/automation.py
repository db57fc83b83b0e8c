"""Automation batch results and scheduled-job status."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class BatchResult(BaseModel):
    """Outcome of one batch run. Items fail independently of each other."""

    model_config = ConfigDict(frozen=True)

    job: str
    success_count: int = 0
    error_count: int = 0
    started_at: datetime
    finished_at: datetime

    @property
    def total(self) -> int:
        return self.success_count + self.error_count


class JobStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    cron: str
    scheduled: bool = False
    running: bool = False
    last_result: BatchResult | None = None

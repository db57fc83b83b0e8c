"""Website records and the business context derived from them."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from beamwatch.models.base import utcnow


class WebsiteStatus(StrEnum):
    ACTIVE = "active"
    PAUSED = "paused"


class Website(BaseModel):
    """A client's business as registered with the service."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    user_id: int | None = None
    business_name: str
    business_type: str = ""
    location: str = ""
    website_url: str = ""
    status: WebsiteStatus = WebsiteStatus.ACTIVE
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: datetime | None = None

    # Populated from the owning user when listed for report delivery
    owner_email: str = ""
    owner_name: str = ""


class BusinessContext(BaseModel):
    """Read-only snapshot of a business used to drive search and scoring.

    Built fresh for every discovery run and never stored on its own.
    """

    model_config = ConfigDict(frozen=True)

    website_id: int
    business_name: str
    business_type: str = ""
    location: str = ""
    website_url: str = ""
    keywords: tuple[str, ...] = ()
    typical_competitors: tuple[str, ...] = ()

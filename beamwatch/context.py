"""Business context resolution for a discovery run."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from beamwatch.errors import WebsiteNotFoundError
from beamwatch.models.business import BusinessContext

if TYPE_CHECKING:
    from beamwatch.db import Database

logger = structlog.get_logger()


def resolve_business_context(db: Database, website_id: int) -> BusinessContext:
    """Build a read-only BusinessContext for *website_id*.

    A website whose business type has no taxonomy entry still resolves, with
    empty keyword and competitor-hint sets.

    Raises:
        WebsiteNotFoundError: The website does not exist or is soft-deleted.
    """
    website = db.get_website(website_id)
    if website is None or website.id is None:
        raise WebsiteNotFoundError(website_id)

    taxonomy = db.get_business_type(website.business_type) if website.business_type else None
    if taxonomy is None:
        logger.debug(
            "No taxonomy entry for business type",
            website_id=website_id,
            business_type=website.business_type,
        )

    return BusinessContext(
        website_id=website.id,
        business_name=website.business_name,
        business_type=website.business_type,
        location=website.location,
        website_url=website.website_url,
        keywords=tuple(taxonomy["keywords"]) if taxonomy else (),
        typical_competitors=tuple(taxonomy["typical_competitors"]) if taxonomy else (),
    )

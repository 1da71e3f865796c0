"""
Activity normalization.

Turns extraction output into canonical activity records: provenance stamping,
timestamps, deterministic identity and entity type classification. Nothing
here touches storage.
"""

import logging
from datetime import datetime
from urllib.parse import urlparse

from activities_common.constants import DEFAULT_RELIABILITY
from activities_common.models import (
    EntityType,
    NormalizedActivity,
    RawCandidate,
    SourceProvenance,
    generate_activity_id,
)
from activities_common.sources import display_name

logger = logging.getLogger(__name__)

_ENTITY_TYPE_BY_TAG = {
    "venue": EntityType.VENUE,
    "program": EntityType.PROGRAM,
    "class": EntityType.PROGRAM,
    "camp": EntityType.PROGRAM,
    "attraction": EntityType.ATTRACTION,
}


def extract_domain(url: str) -> str:
    """
    Host component of a URL, lower-cased.

    A URL that cannot be parsed or has no host yields the raw string.
    """
    try:
        netloc = urlparse(url).netloc
    except ValueError:
        logger.debug(f"Unparsable source URL, using it as domain: {url}")
        return url
    return netloc.lower() if netloc else url


def map_entity_type(tag: str | None) -> EntityType:
    """Classify a raw type tag; anything unrecognized is an event."""
    return _ENTITY_TYPE_BY_TAG.get((tag or "").strip().lower(), EntityType.EVENT)


def normalize(
    candidate: RawCandidate,
    source_url: str,
    source_name: str,
    now: datetime,
    *,
    source_id: str | None = None,
    previous: NormalizedActivity | None = None,
) -> NormalizedActivity:
    """
    Build the canonical record for one extracted candidate.

    Args:
        candidate: Extraction output for one activity
        source_url: URL the candidate was extracted from
        source_name: Human-readable source name
        now: Timestamp of this scrape
        source_id: Provider id recorded on the activity (slug of source_name if omitted)
        previous: Stored record with the same identity, if known

    Returns:
        NormalizedActivity; deterministic for identical inputs
    """
    entity_id = candidate.id or generate_activity_id(
        candidate.title, candidate.schedule.start_date, candidate.location.name
    )

    if previous is not None:
        created_at = previous.created_at
    else:
        created_at = candidate.created_at or now

    provider_id = source_id or source_name.strip().lower().replace(" ", "-")

    return NormalizedActivity(
        entity_id=entity_id,
        entity_type=map_entity_type(candidate.type),
        title=candidate.title,
        source=SourceProvenance(
            url=source_url,
            domain=extract_domain(source_url),
            scraped_at=now,
            last_checked=now,
            reliability=DEFAULT_RELIABILITY,
        ),
        created_at=created_at,
        updated_at=now,
        description=candidate.description,
        category=candidate.category,
        subcategory=candidate.subcategory,
        age_groups=list(candidate.age_groups),
        schedule=candidate.schedule,
        location=candidate.location,
        pricing=candidate.pricing,
        registration_url=candidate.registration_url,
        provider_id=provider_id,
        provider_name=display_name(provider_id) if provider_id else "",
    )

"""
Core data models for family activities.

These models represent activities as they flow through the pipeline:
extraction (RawCandidate) -> normalization (NormalizedActivity) -> storage
"""

import hashlib
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from activities_common.constants import (
    ACTIVITY_ID_HASH_LENGTH,
    ACTIVITY_ID_PREFIX,
    ACTIVITY_STATUS_ACTIVE,
    DEFAULT_RELIABILITY,
    SORT_KEY_METADATA,
)


class EntityType(str, Enum):
    """Entity classification in the family activities table."""

    EVENT = "event"
    VENUE = "venue"
    PROGRAM = "program"
    ATTRACTION = "attraction"

    @property
    def key_prefix(self) -> str:
        return self.value.upper()


def generate_activity_id(title: str, start_date: str, location_name: str) -> str:
    """
    Derive a stable activity identity from title, start date and location.

    Inputs are trimmed and lower-cased, so cosmetic differences between
    scrapes of the same listing map to the same identity.

    Args:
        title: Activity title
        start_date: Schedule start date (ISO date string)
        location_name: Venue name

    Returns:
        Identity string such as "act_3f2a9c0d1e4b5a69"
    """
    parts = [(value or "").strip().lower() for value in (title, start_date, location_name)]
    digest = hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()
    return f"{ACTIVITY_ID_PREFIX}{digest[:ACTIVITY_ID_HASH_LENGTH]}"


def _drop_empty(data: dict[str, Any]) -> dict[str, Any]:
    """Remove keys whose values are empty strings, lists or dicts."""
    return {k: v for k, v in data.items() if v not in ("", None, [], {})}


def _text(value: Any) -> str:
    """String field from an extraction payload; values of any other type are ignored."""
    return value.strip() if isinstance(value, str) else ""


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass
class Schedule:
    """When an activity happens (dates are ISO YYYY-MM-DD, times HH:MM)."""

    start_date: str = ""
    start_time: str = ""
    end_date: str = ""
    end_time: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _drop_empty(
            {
                "start_date": self.start_date,
                "start_time": self.start_time,
                "end_date": self.end_date,
                "end_time": self.end_time,
            }
        )

    @classmethod
    def from_dict(cls, data: Any) -> "Schedule":
        data = _mapping(data)
        return cls(
            start_date=_text(data.get("start_date")),
            start_time=_text(data.get("start_time")),
            end_date=_text(data.get("end_date")),
            end_time=_text(data.get("end_time")),
        )


@dataclass
class Location:
    """Where an activity happens."""

    name: str = ""
    address: str = ""
    city: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _drop_empty({"name": self.name, "address": self.address, "city": self.city})

    @classmethod
    def from_dict(cls, data: Any) -> "Location":
        data = _mapping(data)
        return cls(
            name=_text(data.get("name")),
            address=_text(data.get("address")),
            city=_text(data.get("city")),
        )


@dataclass
class Pricing:
    """Cost information (type is free|paid|donation|variable)."""

    type: str = ""
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _drop_empty({"type": self.type, "description": self.description})

    @classmethod
    def from_value(cls, value: Any) -> "Pricing":
        """Build pricing from either a free-text string or a structured dict."""
        if isinstance(value, str) and value.strip():
            text = value.strip()
            return cls(type="free" if text.lower() == "free" else "paid", description=text)
        data = _mapping(value)
        return cls(type=_text(data.get("type")), description=_text(data.get("description")))


@dataclass
class RawCandidate:
    """
    One activity as returned by the extraction service for a URL.

    Attributes:
        title: Activity name
        description: Free-text description
        type: Raw type tag (event|venue|program|class|camp|attraction)
        category: Top-level category (arts-creativity, active-sports, ...)
        subcategory: Finer category (music, soccer, ...)
        age_groups: Target audience labels
        schedule: Start/end dates and times
        location: Venue name, address and city
        pricing: Pricing type and description
        registration_url: Signup or details link
        id: Identity supplied by the service, if any
        created_at: Creation timestamp carried over from a previous record
    """

    title: str
    description: str = ""
    type: str = ""
    category: str = ""
    subcategory: str = ""
    age_groups: list[str] = field(default_factory=list)
    schedule: Schedule = field(default_factory=Schedule)
    location: Location = field(default_factory=Location)
    pricing: Pricing = field(default_factory=Pricing)
    registration_url: str = ""
    id: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RawCandidate":
        """
        Create RawCandidate from an extraction payload item.

        Fields holding a value of the wrong type are treated as absent.
        """
        age_groups = data.get("age_groups")
        if not isinstance(age_groups, list):
            age_groups = []
        return cls(
            title=_text(data.get("title")),
            description=_text(data.get("description")),
            type=_text(data.get("type")).lower(),
            category=_text(data.get("category")),
            subcategory=_text(data.get("subcategory")),
            age_groups=[group.strip() for group in age_groups if isinstance(group, str) and group.strip()],
            schedule=Schedule.from_dict(data.get("schedule")),
            location=Location.from_dict(data.get("location")),
            pricing=Pricing.from_value(data.get("pricing")),
            registration_url=_text(data.get("registration_url")),
            id=_text(data.get("id")) or None,
        )


@dataclass
class SourceProvenance:
    """Where and when an activity was scraped."""

    url: str
    domain: str
    scraped_at: datetime
    last_checked: datetime
    reliability: str = DEFAULT_RELIABILITY

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "domain": self.domain,
            "scraped_at": self.scraped_at.isoformat(),
            "last_checked": self.last_checked.isoformat(),
            "reliability": self.reliability,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SourceProvenance":
        return cls(
            url=data.get("url", ""),
            domain=data.get("domain", ""),
            scraped_at=datetime.fromisoformat(data["scraped_at"]),
            last_checked=datetime.fromisoformat(data["last_checked"]),
            reliability=data.get("reliability", DEFAULT_RELIABILITY),
        )


@dataclass
class NormalizedActivity:
    """
    Canonical activity record persisted to the family activities table.

    All attributes of one activity live under a single PK/SK pair:
    PK = "{ENTITY_TYPE}#{entity_id}", SK = "METADATA".
    """

    entity_id: str
    entity_type: EntityType
    title: str
    source: SourceProvenance
    created_at: datetime
    updated_at: datetime
    description: str = ""
    category: str = ""
    subcategory: str = ""
    age_groups: list[str] = field(default_factory=list)
    schedule: Schedule = field(default_factory=Schedule)
    location: Location = field(default_factory=Location)
    pricing: Pricing = field(default_factory=Pricing)
    registration_url: str = ""
    provider_id: str = ""
    provider_name: str = ""
    status: str = ACTIVITY_STATUS_ACTIVE

    @property
    def pk(self) -> str:
        return f"{self.entity_type.key_prefix}#{self.entity_id}"

    @property
    def sk(self) -> str:
        return SORT_KEY_METADATA

    def validation_errors(self) -> list[str]:
        """List the reasons this record must not be persisted."""
        errors = []
        if not self.entity_id:
            errors.append("missing entity_id")
        if not self.title:
            errors.append("missing title")
        if not self.source.url:
            errors.append("missing source url")
        if not self.source.domain:
            errors.append("missing source domain")
        return errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary (used for snapshots)."""
        data = {
            "id": self.entity_id,
            "entity_type": self.entity_type.value,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "subcategory": self.subcategory,
            "age_groups": self.age_groups,
            "schedule": self.schedule.to_dict(),
            "location": self.location.to_dict(),
            "pricing": self.pricing.to_dict(),
            "registration_url": self.registration_url,
            "provider_id": self.provider_id,
            "provider_name": self.provider_name,
            "status": self.status,
            "source": self.source.to_dict(),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        return _drop_empty(data)

    def to_item(self) -> dict[str, Any]:
        """Convert to dictionary for DynamoDB storage."""
        item = self.to_dict()
        item.pop("id")
        item["PK"] = self.pk
        item["SK"] = self.sk
        item["entity_id"] = self.entity_id
        return item

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> "NormalizedActivity":
        """Create NormalizedActivity from DynamoDB record."""
        return cls(
            entity_id=item["entity_id"],
            entity_type=EntityType(item["entity_type"]),
            title=item.get("title", ""),
            source=SourceProvenance.from_dict(item.get("source", {})),
            created_at=_parse_datetime(item.get("created_at")),
            updated_at=_parse_datetime(item.get("updated_at")),
            description=item.get("description", ""),
            category=item.get("category", ""),
            subcategory=item.get("subcategory", ""),
            age_groups=list(item.get("age_groups", [])),
            schedule=Schedule.from_dict(item.get("schedule")),
            location=Location.from_dict(item.get("location")),
            pricing=Pricing.from_value(item.get("pricing")),
            registration_url=item.get("registration_url", ""),
            provider_id=item.get("provider_id", ""),
            provider_name=item.get("provider_name", ""),
            status=item.get("status", ACTIVITY_STATUS_ACTIVE),
        )

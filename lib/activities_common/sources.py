"""
Source registry for family activity scraping.

The catalog of scrape targets is an external artifact (JSON file or DynamoDB
table) read once at process start. At run time the registry is read-only:
the pipeline looks sources up, it never mutates them.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from botocore.exceptions import ClientError

from activities_common.exceptions import SourceConfigError
from activities_common.storage import get_table, scan_all

logger = logging.getLogger(__name__)

BUNDLED_SOURCES_PATH = Path(__file__).parent / "sources.json"


class SourcePriority(str, Enum):
    """Scheduling priority of a source."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class Source:
    """
    A website the pipeline scrapes for activities.

    Attributes:
        id: Stable key (e.g. "parentmap-calendar")
        name: Human-readable name
        base_url: Site root
        target_urls: Pages to extract, in processing order
        enabled: Disabled sources are never processed
        priority: Scheduling priority
        category: Kind of content the source lists (events, classes, ...)
    """

    id: str
    name: str
    base_url: str
    target_urls: tuple[str, ...] = field(default_factory=tuple)
    enabled: bool = True
    priority: SourcePriority = SourcePriority.MEDIUM
    category: str = "events"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "base_url": self.base_url,
            "target_urls": list(self.target_urls),
            "enabled": self.enabled,
            "priority": self.priority.value,
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Source":
        """Create Source from a catalog entry."""
        missing = [key for key in ("id", "name", "base_url") if not data.get(key)]
        if missing:
            raise SourceConfigError(f"Source entry missing {', '.join(missing)}: {data}")

        try:
            priority = SourcePriority(data.get("priority", "medium"))
        except ValueError as e:
            raise SourceConfigError(f"Source {data['id']} has invalid priority") from e

        # Sources without explicit targets scrape their base URL
        target_urls = data.get("target_urls") or [data["base_url"]]

        return cls(
            id=data["id"],
            name=data["name"],
            base_url=data["base_url"],
            target_urls=tuple(target_urls),
            enabled=bool(data.get("enabled", True)),
            priority=priority,
            category=data.get("category", "events"),
        )


def display_name(provider_id: str) -> str:
    """
    Readable name for a provider id ("seattle-childrens-museum" -> "seattle childrens museum").

    Display only: the transform is lossy and cannot be reversed into an id.
    """
    return provider_id.replace("-", " ")


class SourceRegistry:
    """Read-only catalog of scrape targets, kept in catalog order."""

    def __init__(self, sources: list[Source]):
        seen: set[str] = set()
        for source in sources:
            if source.id in seen:
                raise SourceConfigError(f"Duplicate source id: {source.id}")
            seen.add(source.id)
        self._sources = tuple(sources)

    def __len__(self) -> int:
        return len(self._sources)

    def __iter__(self):
        return iter(self._sources)

    def get(self, source_id: str) -> Source | None:
        """Look a source up by id."""
        for source in self._sources:
            if source.id == source_id:
                return source
        return None

    def enabled_sources(self) -> list[Source]:
        """All enabled sources in catalog order."""
        return [source for source in self._sources if source.enabled]

    def select(self, source_id: str | None = None) -> list[Source]:
        """
        Resolve the working set for a batch.

        Args:
            source_id: Optional id restricting the batch to one source

        Returns:
            Enabled sources; at most one entry when source_id is given.
            An unknown or disabled id yields an empty list.
        """
        if not source_id:
            return self.enabled_sources()

        source = self.get(source_id)
        if source is None:
            logger.info(f"Source {source_id} not in registry, nothing to do")
            return []
        if not source.enabled:
            logger.info(f"Source {source_id} is disabled, nothing to do")
            return []
        return [source]

    @classmethod
    def from_dicts(cls, entries: list[dict[str, Any]]) -> "SourceRegistry":
        return cls([Source.from_dict(entry) for entry in entries])

    @classmethod
    def from_file(cls, path: str | Path) -> "SourceRegistry":
        """Load the catalog from a JSON document of the form {"sources": [...]}."""
        try:
            with open(path, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SourceConfigError(f"Cannot read source catalog {path}: {e}") from e

        entries = document.get("sources") if isinstance(document, dict) else None
        if not isinstance(entries, list):
            raise SourceConfigError(f"Source catalog {path} has no 'sources' list")

        registry = cls.from_dicts(entries)
        logger.info(f"Loaded {len(registry)} sources from {path}")
        return registry

    @classmethod
    def from_table(cls, table_name: str, dynamodb=None) -> "SourceRegistry":
        """Load the catalog from a DynamoDB table (one item per source)."""
        table = get_table(table_name, dynamodb)
        try:
            items = scan_all(table)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            logger.error(f"Failed to scan source table {table_name}: {error_code}")
            raise SourceConfigError(f"Cannot read source table {table_name}: {e}") from e

        registry = cls.from_dicts(items)
        logger.info(f"Loaded {len(registry)} sources from table {table_name}")
        return registry


def load_registry() -> SourceRegistry:
    """
    Load the registry from the location configured in the environment.

    SOURCES_TABLE takes precedence over SOURCES_CONFIG_PATH; with neither set
    the bundled catalog is used.
    """
    table_name = os.environ.get("SOURCES_TABLE")
    if table_name:
        return SourceRegistry.from_table(table_name)

    config_path = os.environ.get("SOURCES_CONFIG_PATH") or BUNDLED_SOURCES_PATH
    return SourceRegistry.from_file(config_path)

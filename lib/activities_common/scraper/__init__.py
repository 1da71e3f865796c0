"""
Scraping pipeline for family activities.

Architecture:
- Extractor: Firecrawl structured extraction with retries and usage counters
- Normalizer: Provenance, timestamps and deterministic identity
- Tasks: Scraping task lookup and lifecycle transitions
- Activity store: Upserts into the family activities table
- Snapshots: Latest and backup JSON snapshots in S3
"""

from activities_common.scraper.models import (
    BatchResult,
    BatchTrigger,
    ScrapingTask,
    TaskMessage,
    TaskStatus,
    TaskType,
    TriggerType,
)

__all__ = [
    "BatchResult",
    "BatchTrigger",
    "ScrapingTask",
    "TaskMessage",
    "TaskStatus",
    "TaskType",
    "TriggerType",
]

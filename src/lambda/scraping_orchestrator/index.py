"""
Scraping Orchestrator Lambda

Runs one scraping batch: extracts activities from every enabled source in
the registry (or a single named source), normalizes them, and publishes the
result as JSON snapshots to S3. Per-URL failures are collected rather than
aborting the batch.

Input event (EventBridge schedule or direct invocation):
{
    "trigger_type": "scheduled" | "manual" | "on-demand",
    "source_id": "parentmap-calendar"  // optional
}

Output:
{
    "statusCode": 200 | 207 | 500,
    "headers": {"Content-Type": "application/json"},
    "body": "{\"success\": true, \"message\": \"...\", \"total_sources\": 4, ...}"
}
"""

import json
import logging
import os
import time
from datetime import UTC, datetime

from activities_common.constants import STATUS_OK, STATUS_PARTIAL_SUCCESS, STATUS_SERVER_ERROR
from activities_common.exceptions import ExtractionFailure, SnapshotPublishError
from activities_common.logging_utils import log_summary, safe_log_event
from activities_common.scraper.extractor import ExtractionStats, FirecrawlExtractor
from activities_common.scraper.models import BatchResult, BatchTrigger
from activities_common.scraper.normalizer import normalize
from activities_common.scraper.snapshots import SnapshotPublisher
from activities_common.sources import load_registry

logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))

RESPONSE_HEADERS = {"Content-Type": "application/json"}

# Process-lifetime state (reused across warm invocations)
_registry = None
_extractor = None
_extraction_stats = ExtractionStats()


def _get_registry():
    """Get or load the source registry (lazy initialization)."""
    global _registry
    if _registry is None:
        _registry = load_registry()
    return _registry


def _get_extractor():
    """Get or create the extractor (lazy initialization)."""
    global _extractor
    if _extractor is None:
        _extractor = FirecrawlExtractor(stats=_extraction_stats)
    return _extractor


def run_batch(trigger, registry, extractor, publisher, now=None) -> BatchResult:
    """
    Scrape the sources selected by a trigger.

    Args:
        trigger: BatchTrigger naming the trigger kind and optional source
        registry: SourceRegistry to draw sources from
        extractor: Object with extract(url) -> list[RawCandidate]
        publisher: Object with publish(activities, now) -> list[str]
        now: Batch timestamp (defaults to the current time)

    Returns:
        BatchResult with counts, per-URL errors and written snapshot URIs
    """
    start = time.monotonic()
    now = now or datetime.now(UTC)

    sources = registry.select(trigger.source_id)
    result = BatchResult(trigger_type=trigger.trigger_type, total_sources=len(sources))
    logger.info(f"Processing {len(sources)} sources (trigger={trigger.trigger_type.value})")

    activities = []
    for source in sources:
        logger.info(f"Processing source: {source.name}")

        for url in source.target_urls:
            try:
                candidates = extractor.extract(url)
            except ExtractionFailure as e:
                error = f"Failed to extract from {source.name} ({url}): {e.cause}"
                logger.error(error)
                result.errors.append(error)
                continue

            logger.info(f"Extracted {len(candidates)} activities from {url}")
            for candidate in candidates:
                activities.append(normalize(candidate, url, source.name, now, source_id=source.id))

        result.processed_sources += 1

    result.total_activities = len(activities)

    if activities:
        try:
            result.snapshots = publisher.publish(activities, now)
        except SnapshotPublishError as e:
            logger.error(f"Snapshot not published: {e}")
    else:
        logger.info("No activities extracted, skipping snapshot")

    result.processing_time_ms = int((time.monotonic() - start) * 1000)
    return result


def build_response(result: BatchResult) -> dict:
    """Wrap a batch result in the HTTP-style response envelope."""
    try:
        body = json.dumps(result.to_dict())
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to serialize batch result: {e}")
        return {
            "statusCode": STATUS_SERVER_ERROR,
            "headers": RESPONSE_HEADERS,
            "body": json.dumps({"success": False, "message": "Failed to marshal response"}),
        }

    return {
        "statusCode": STATUS_OK if result.success else STATUS_PARTIAL_SUCCESS,
        "headers": RESPONSE_HEADERS,
        "body": body,
    }


def lambda_handler(event, context):
    """
    Main Lambda handler - runs one scraping batch.
    """
    bucket = os.environ.get("S3_BUCKET_NAME")
    if not bucket:
        raise ValueError("S3_BUCKET_NAME environment variable required")

    logger.info(f"Scraping orchestrator invoked: {safe_log_event(event)}")

    trigger = BatchTrigger.from_event(event or {})
    extractor = _get_extractor()

    result = run_batch(trigger, _get_registry(), extractor, SnapshotPublisher(bucket))

    logger.info(
        log_summary(
            "scraping_orchestrator",
            success=result.success,
            duration_ms=result.processing_time_ms,
            item_count=result.total_activities,
            error=result.errors[0] if result.errors else None,
            trigger_type=result.trigger_type.value,
            processed_sources=result.processed_sources,
            errors=result.errors,
            **extractor.stats.snapshot(),
        )
    )

    return build_response(result)

"""
Task Executor Lambda

Executes queued scraping tasks: resolves the task record, extracts every
target URL of its source, and upserts the normalized activities into the
family activities table. Task status moves to in_progress on start and to
completed or failed at the end.

Delivery is at-least-once. Activity identities are deterministic, so a
redelivered task overwrites the same rows instead of duplicating them.

Input event (SQS triggered):
{
    "Records": [{
        "messageId": "...",
        "body": "{\"task_id\": \"task-123\", \"source_id\": \"parentmap-calendar\", ...}"
    }]
}

Message body:
{
    "task_id": "task-123",
    "source_id": "parentmap-calendar",
    "source_name": "ParentMap Calendar",
    "base_url": "https://www.parentmap.com",
    "task_type": "full_scrape",
    "priority": "high",
    "scheduled_time": "2024-06-01T06:00:00Z",
    "target_urls": ["https://www.parentmap.com/calendar"]
}

Output (ReportBatchItemFailures):
{
    "batchItemFailures": [{"itemIdentifier": "..."}]
}
"""

import json
import logging
import os
import time
from datetime import UTC, datetime

from activities_common.constants import DEFAULT_TASK_ID_INDEX
from activities_common.exceptions import (
    ExtractionFailure,
    ExtractionServiceUnavailable,
    PersistenceFailure,
    ValidationError,
)
from activities_common.logging_utils import log_summary
from activities_common.scraper.activity_store import ActivityStore
from activities_common.scraper.extractor import ExtractionStats, FirecrawlExtractor
from activities_common.scraper.models import TaskMessage, TaskStatus
from activities_common.scraper.normalizer import normalize
from activities_common.scraper.tasks import TaskStateTracker

logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO"))

# Process-lifetime state (reused across warm invocations)
_extractor = None
_extraction_stats = ExtractionStats()


def _get_extractor():
    """Get or create the extractor (lazy initialization)."""
    global _extractor
    if _extractor is None:
        _extractor = FirecrawlExtractor(stats=_extraction_stats)
    return _extractor


def execute_task(message: TaskMessage, tracker, extractor, store, now=None) -> int:
    """
    Run one scraping task to completion.

    Args:
        message: Parsed task message
        tracker: TaskStateTracker for the scraping operations table
        extractor: Object with extract(url) -> list[RawCandidate]
        store: ActivityStore for the family activities table
        now: Scrape timestamp (defaults to the current time)

    Returns:
        Number of activities stored

    Raises:
        TaskNotFoundError: The task record does not exist (status untouched)
        ExtractionServiceUnavailable: Extraction cannot proceed (task marked failed)
    """
    task = tracker.get_task(message.task_id)
    tracker.start(task)

    target_urls = message.target_urls or task.target_urls
    source_name = message.source_name or task.source_name
    provider_id = message.provider_id or task.source_id
    scraped_at = now or datetime.now(UTC)

    stored = 0
    skipped = 0
    try:
        for url in target_urls:
            try:
                candidates = extractor.extract(url)
            except ExtractionServiceUnavailable:
                raise
            except ExtractionFailure as e:
                logger.warning(f"Task {task.task_id}: skipping {url}: {e.cause}")
                continue

            for candidate in candidates:
                activity = normalize(
                    candidate, url, source_name, scraped_at, source_id=provider_id
                )
                try:
                    store.put_activity(activity)
                except (PersistenceFailure, ValidationError) as e:
                    logger.warning(f"Task {task.task_id}: skipping activity: {e}")
                    skipped += 1
                    continue
                stored += 1

    except Exception as e:
        logger.error(f"Task {task.task_id} failed: {e}", exc_info=True)
        try:
            tracker.set_status(task, TaskStatus.FAILED, str(e))
        except Exception as status_error:
            logger.error(f"Failed to mark task {task.task_id} as failed: {status_error}")
        raise

    tracker.set_status(task, TaskStatus.COMPLETED)
    logger.info(
        f"Task {task.task_id} completed: {stored} activities stored, "
        f"{skipped} skipped from {len(target_urls)} URLs"
    )
    return stored


def lambda_handler(event, context):
    """
    Process SQS messages containing scraping tasks.
    """
    activities_table = os.environ.get("FAMILY_ACTIVITIES_TABLE")
    operations_table = os.environ.get("SCRAPING_OPERATIONS_TABLE")
    task_id_index = os.environ.get("TASK_ID_INDEX", DEFAULT_TASK_ID_INDEX)

    if not activities_table:
        raise ValueError("FAMILY_ACTIVITIES_TABLE environment variable required")
    if not operations_table:
        raise ValueError("SCRAPING_OPERATIONS_TABLE environment variable required")

    tracker = TaskStateTracker(operations_table, index_name=task_id_index)
    store = ActivityStore(activities_table)
    extractor = _get_extractor()

    batch_item_failures = []

    for record in event.get("Records", []):
        message_id = record.get("messageId")
        task_id = None
        start = time.monotonic()

        try:
            message = TaskMessage.from_dict(json.loads(record["body"]))
            task_id = message.task_id
            logger.info(f"Executing task {task_id} for source {message.provider_id}")

            stored = execute_task(message, tracker, extractor, store)

            logger.info(
                log_summary(
                    "execute_task",
                    success=True,
                    duration_ms=(time.monotonic() - start) * 1000,
                    item_count=stored,
                    task_id=task_id,
                )
            )

        except Exception as e:
            logger.error(f"Failed to process message {message_id}: {e}", exc_info=True)
            logger.info(
                log_summary(
                    "execute_task",
                    success=False,
                    duration_ms=(time.monotonic() - start) * 1000,
                    error=str(e),
                    task_id=task_id or "",
                )
            )
            # Reported failures are redelivered by SQS
            batch_item_failures.append({"itemIdentifier": message_id})

    return {"batchItemFailures": batch_item_failures}

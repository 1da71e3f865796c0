"""
Custom exceptions for the family activities scraping pipeline.

Per-URL and per-record errors are recovered locally by the orchestrator and
the task executor; task-level errors propagate so the queue redelivers.
"""


class ScraperError(Exception):
    """Base exception for scraping pipeline errors."""


class ExtractionFailure(ScraperError):
    """Extraction service failed for a single URL."""

    def __init__(self, url: str, cause: str | Exception):
        self.url = url
        self.cause = cause
        super().__init__(f"Extraction failed for {url}: {cause}")


class ExtractionServiceUnavailable(ExtractionFailure):
    """Extraction service rejected the request independently of the URL."""


class PersistenceFailure(ScraperError):
    """Store write rejected for a single record."""

    def __init__(self, key: str, cause: str | Exception):
        self.key = key
        self.cause = cause
        super().__init__(f"Failed to persist {key}: {cause}")


class TaskNotFoundError(ScraperError):
    """No scraping task exists for the requested id."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class DuplicateTaskError(ScraperError):
    """More than one scraping task matched a lookup by id."""

    def __init__(self, task_id: str, count: int):
        self.task_id = task_id
        self.count = count
        super().__init__(f"Found {count} task records for {task_id}")


class InvalidTransitionError(ScraperError):
    """Requested task status change is not allowed."""

    def __init__(self, task_id: str, current: str, requested: str):
        self.task_id = task_id
        self.current = current
        self.requested = requested
        super().__init__(f"Task {task_id} cannot move from {current} to {requested}")


class ValidationError(ScraperError):
    """Normalized activity is missing required fields."""


class SourceConfigError(ScraperError):
    """Source catalog could not be loaded."""


class SnapshotPublishError(ScraperError):
    """Snapshot upload to S3 failed."""

    def __init__(self, key: str, cause: str | Exception):
        self.key = key
        self.cause = cause
        super().__init__(f"Failed to publish snapshot {key}: {cause}")

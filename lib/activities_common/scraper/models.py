"""
Data models for the scraping task lifecycle.

A ScrapingTask is created by the scheduler with status "pending", enqueued as
a TaskMessage, and driven by the task executor:
pending -> in_progress -> completed | failed
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class TaskStatus(str, Enum):
    """Processing status for scraping tasks."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)

    def can_transition_to(self, new_status: "TaskStatus") -> bool:
        """Whether new_status may follow this status within one execution attempt."""
        return new_status in _ALLOWED_TRANSITIONS[self]


_ALLOWED_TRANSITIONS = {
    TaskStatus.PENDING: {TaskStatus.IN_PROGRESS},
    TaskStatus.IN_PROGRESS: {TaskStatus.COMPLETED, TaskStatus.FAILED},
    TaskStatus.COMPLETED: set(),
    TaskStatus.FAILED: set(),
}


class TriggerType(str, Enum):
    """What started a batch run."""

    SCHEDULED = "scheduled"
    MANUAL = "manual"
    ON_DEMAND = "on-demand"


class TaskType(str, Enum):
    """Kind of work a scraping task performs."""

    FULL_SCRAPE = "full_scrape"
    INCREMENTAL = "incremental"
    VALIDATION = "validation"
    DISCOVERY = "discovery"


def _parse_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


@dataclass
class ScrapingTask:
    """
    Work-unit record in the scraping operations table.

    Attributes:
        task_id: Unique task identifier
        source_id: Source the task scrapes
        source_name: Human-readable source name
        base_url: Source root URL
        task_type: Kind of scrape
        priority: high|medium|low
        scheduled_time: When the scheduler planned the run
        target_urls: URLs to extract
        status: Current lifecycle status
        error_message: Last failure detail (only set while failed)
        pk: Partition key of the stored record
        sk: Sort key of the stored record
        created_at: Record creation timestamp (write-once)
        updated_at: Last update timestamp
    """

    task_id: str
    source_id: str
    pk: str
    sk: str
    source_name: str = ""
    base_url: str = ""
    task_type: str = TaskType.FULL_SCRAPE.value
    priority: str = "medium"
    scheduled_time: datetime | None = None
    target_urls: list[str] = field(default_factory=list)
    status: TaskStatus = TaskStatus.PENDING
    error_message: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def key(self) -> dict[str, str]:
        return {"PK": self.pk, "SK": self.sk}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for DynamoDB storage."""
        data = {
            "PK": self.pk,
            "SK": self.sk,
            "task_id": self.task_id,
            "source_id": self.source_id,
            "task_type": self.task_type,
            "priority": self.priority,
            "target_urls": self.target_urls,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        if self.source_name:
            data["source_name"] = self.source_name
        if self.base_url:
            data["base_url"] = self.base_url
        if self.scheduled_time:
            data["scheduled_time"] = self.scheduled_time.isoformat()
        if self.error_message:
            data["error_message"] = self.error_message

        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScrapingTask":
        """Create ScrapingTask from DynamoDB record."""
        return cls(
            task_id=data["task_id"],
            source_id=data.get("source_id", ""),
            pk=data["PK"],
            sk=data["SK"],
            source_name=data.get("source_name", ""),
            base_url=data.get("base_url", ""),
            task_type=data.get("task_type", TaskType.FULL_SCRAPE.value),
            priority=data.get("priority", "medium"),
            scheduled_time=_parse_datetime(data.get("scheduled_time")),
            target_urls=list(data.get("target_urls", [])),
            status=TaskStatus(data.get("status", "pending")),
            error_message=data.get("error_message", ""),
            created_at=_parse_datetime(data.get("created_at")) or datetime.now(UTC),
            updated_at=_parse_datetime(data.get("updated_at")) or datetime.now(UTC),
        )


@dataclass
class TaskMessage:
    """Task-execution request delivered through SQS."""

    task_id: str
    source_id: str = ""
    source_name: str = ""
    base_url: str = ""
    task_type: str = TaskType.FULL_SCRAPE.value
    priority: str = "medium"
    scheduled_time: str = ""
    target_urls: list[str] = field(default_factory=list)

    @property
    def provider_id(self) -> str:
        """Source id, falling back to a slug of the source name."""
        if self.source_id:
            return self.source_id
        return self.source_name.strip().lower().replace(" ", "-")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TaskMessage":
        """Create TaskMessage from a decoded SQS message body."""
        task_id = data.get("task_id")
        if not task_id:
            raise ValueError("task_id is required")

        target_urls = data.get("target_urls") or []
        if not isinstance(target_urls, list):
            raise ValueError("target_urls must be a list")

        return cls(
            task_id=task_id,
            source_id=data.get("source_id") or "",
            source_name=data.get("source_name") or "",
            base_url=data.get("base_url") or "",
            task_type=data.get("task_type") or TaskType.FULL_SCRAPE.value,
            priority=data.get("priority") or "medium",
            scheduled_time=data.get("scheduled_time") or "",
            target_urls=target_urls,
        )


@dataclass
class BatchTrigger:
    """Input of a batch run."""

    trigger_type: TriggerType = TriggerType.MANUAL
    source_id: str | None = None

    @classmethod
    def from_event(cls, event: dict[str, Any]) -> "BatchTrigger":
        """
        Parse the orchestrator invocation event.

        EventBridge schedule events carry source "aws.events" and no
        trigger_type; they count as scheduled runs. An unrecognized
        trigger_type is treated as manual.
        """
        raw_type = event.get("trigger_type")
        if raw_type:
            try:
                trigger_type = TriggerType(raw_type)
            except ValueError:
                logger.warning(f"Unknown trigger_type {raw_type!r}, treating as manual")
                trigger_type = TriggerType.MANUAL
        elif event.get("source") == "aws.events":
            trigger_type = TriggerType.SCHEDULED
        else:
            trigger_type = TriggerType.MANUAL

        return cls(trigger_type=trigger_type, source_id=event.get("source_id") or None)


@dataclass
class BatchResult:
    """Outcome of a batch run."""

    trigger_type: TriggerType
    total_sources: int = 0
    processed_sources: int = 0
    total_activities: int = 0
    processing_time_ms: int = 0
    errors: list[str] = field(default_factory=list)
    snapshots: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def message(self) -> str:
        if self.success:
            return "Scraping completed successfully"
        return f"Scraping completed with {len(self.errors)} errors"

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "trigger_type": self.trigger_type.value,
            "total_sources": self.total_sources,
            "processed_sources": self.processed_sources,
            "total_activities": self.total_activities,
            "processing_time_ms": self.processing_time_ms,
            "errors": self.errors,
            "snapshots": self.snapshots,
        }

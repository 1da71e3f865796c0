"""Unit tests for scraping task lifecycle models."""

from datetime import UTC, datetime

import pytest

from activities_common.scraper import (
    BatchResult,
    BatchTrigger,
    ScrapingTask,
    TaskMessage,
    TaskStatus,
    TriggerType,
)
from tests.fixtures.activity_samples import task_message, task_record


class TestTaskStatus:
    """Tests for TaskStatus enum."""

    def test_enum_values(self):
        assert TaskStatus.PENDING.value == "pending"
        assert TaskStatus.IN_PROGRESS.value == "in_progress"
        assert TaskStatus.COMPLETED.value == "completed"
        assert TaskStatus.FAILED.value == "failed"

    def test_terminal_states(self):
        assert TaskStatus.COMPLETED.is_terminal
        assert TaskStatus.FAILED.is_terminal
        assert not TaskStatus.PENDING.is_terminal
        assert not TaskStatus.IN_PROGRESS.is_terminal

    def test_forward_transitions(self):
        assert TaskStatus.PENDING.can_transition_to(TaskStatus.IN_PROGRESS)
        assert TaskStatus.IN_PROGRESS.can_transition_to(TaskStatus.COMPLETED)
        assert TaskStatus.IN_PROGRESS.can_transition_to(TaskStatus.FAILED)

    def test_no_backward_transitions(self):
        assert not TaskStatus.IN_PROGRESS.can_transition_to(TaskStatus.PENDING)
        assert not TaskStatus.PENDING.can_transition_to(TaskStatus.COMPLETED)

    @pytest.mark.parametrize("terminal", [TaskStatus.COMPLETED, TaskStatus.FAILED])
    def test_terminal_states_never_move(self, terminal):
        for status in TaskStatus:
            assert not terminal.can_transition_to(status)


class TestScrapingTask:
    """Tests for ScrapingTask dataclass."""

    def test_from_dict(self):
        task = ScrapingTask.from_dict(task_record(status="in_progress"))
        assert task.task_id == "task-123"
        assert task.status == TaskStatus.IN_PROGRESS
        assert task.key == {"PK": "SOURCE#parentmap-calendar", "SK": "TASK#task-123"}
        assert task.created_at == datetime(2024, 6, 1, 6, 0, tzinfo=UTC)
        assert task.scheduled_time is None

    def test_to_dict(self):
        task = ScrapingTask.from_dict(
            task_record(scheduled_time="2024-06-01T06:00:00Z", error_message="boom")
        )
        data = task.to_dict()
        assert data["PK"] == "SOURCE#parentmap-calendar"
        assert data["status"] == "pending"
        assert data["scheduled_time"] == "2024-06-01T06:00:00+00:00"
        assert data["error_message"] == "boom"


class TestTaskMessage:
    """Tests for TaskMessage parsing."""

    def test_from_dict(self):
        message = TaskMessage.from_dict(task_message())
        assert message.task_id == "task-123"
        assert message.provider_id == "parentmap-calendar"
        assert message.target_urls == ["https://www.parentmap.com/calendar"]

    def test_requires_task_id(self):
        with pytest.raises(ValueError, match="task_id"):
            TaskMessage.from_dict(task_message(task_id=""))

    def test_target_urls_must_be_list(self):
        with pytest.raises(ValueError, match="target_urls"):
            TaskMessage.from_dict(task_message(target_urls="https://example.com"))

    def test_provider_id_falls_back_to_source_name(self):
        message = TaskMessage.from_dict(task_message(source_id="", source_name="PEPS Events"))
        assert message.provider_id == "peps-events"


class TestBatchTrigger:
    """Tests for orchestrator event parsing."""

    def test_explicit_trigger(self):
        trigger = BatchTrigger.from_event({"trigger_type": "on-demand", "source_id": "peps-events"})
        assert trigger.trigger_type == TriggerType.ON_DEMAND
        assert trigger.source_id == "peps-events"

    def test_eventbridge_schedule(self):
        trigger = BatchTrigger.from_event({"source": "aws.events", "detail-type": "Scheduled Event"})
        assert trigger.trigger_type == TriggerType.SCHEDULED
        assert trigger.source_id is None

    def test_defaults_to_manual(self):
        assert BatchTrigger.from_event({}).trigger_type == TriggerType.MANUAL

    def test_unknown_trigger_falls_back_to_manual(self):
        trigger = BatchTrigger.from_event({"trigger_type": "hourly", "source_id": "peps-events"})
        assert trigger.trigger_type == TriggerType.MANUAL
        assert trigger.source_id == "peps-events"


class TestBatchResult:
    """Tests for batch result summaries."""

    def test_success(self):
        result = BatchResult(trigger_type=TriggerType.MANUAL, total_sources=2, processed_sources=2)
        data = result.to_dict()
        assert data["success"] is True
        assert data["message"] == "Scraping completed successfully"
        assert data["trigger_type"] == "manual"
        assert data["errors"] == []

    def test_partial_success(self):
        result = BatchResult(trigger_type=TriggerType.SCHEDULED, errors=["a", "b"])
        assert result.success is False
        assert result.message == "Scraping completed with 2 errors"

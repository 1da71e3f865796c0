"""Unit tests for logging helpers."""

from activities_common.logging_utils import log_summary, mask_value, safe_log_event


class TestSafeLogEvent:
    """Tests for safe_log_event."""

    def test_masks_credentials(self):
        event = {
            "trigger_type": "manual",
            "headers": {"Authorization": "Bearer abc", "x-request-id": "r-1"},
            "firecrawl_api_key": "fc-0123456789abcdef0123456789",
        }

        masked = safe_log_event(event)

        assert masked["trigger_type"] == "manual"
        assert masked["headers"]["Authorization"] == "***"
        assert masked["headers"]["x-request-id"] == "r-1"
        assert masked["firecrawl_api_key"].startswith("fc-0...")
        assert "0123456789abcdef" not in masked["firecrawl_api_key"]

    def test_non_dict_event(self):
        assert safe_log_event("raw event") == {"_raw": "raw event"}

    def test_masks_inside_lists(self):
        event = {"Records": [{"body": "{}", "password": "hunter2"}]}
        assert safe_log_event(event)["Records"][0]["password"] == "***"

    def test_masks_collections(self):
        assert mask_value("cookies", {"session": "abc"}) == "[dict: masked]"


class TestLogSummary:
    """Tests for log_summary."""

    def test_basic_summary(self):
        summary = log_summary(
            "execute_task",
            success=True,
            duration_ms=1520.456,
            item_count=12,
            task_id="task-123",
        )
        assert summary == {
            "operation": "execute_task",
            "success": True,
            "duration_ms": 1520.46,
            "item_count": 12,
            "task_id": "task-123",
        }

    def test_error_is_truncated(self):
        summary = log_summary("scraping_orchestrator", success=False, error="x" * 2000)
        assert len(summary["error"]) == 500

    def test_sequences_are_counted(self):
        summary = log_summary("scraping_orchestrator", errors=["a", "b"], detail={"k": "v"})
        assert summary["errors"] == 2
        assert "detail" not in summary

"""
Scraping task state tracking.

Owns reads and status writes of ScrapingTask records in the scraping
operations table. Task records are created by the scheduler; this module
never creates or deletes them.
"""

import logging
from datetime import UTC, datetime

from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from activities_common.constants import DEFAULT_TASK_ID_INDEX, MAX_TASK_ERROR_LENGTH
from activities_common.exceptions import (
    DuplicateTaskError,
    InvalidTransitionError,
    TaskNotFoundError,
)
from activities_common.scraper.models import ScrapingTask, TaskStatus
from activities_common.storage import get_table, scan_all

logger = logging.getLogger(__name__)

# Error codes DynamoDB returns when the task id index does not exist
_MISSING_INDEX_CODES = {"ResourceNotFoundException", "ValidationException"}


class TaskStateTracker:
    """Lookup and lifecycle transitions of scraping tasks."""

    def __init__(self, table_name: str, index_name: str = DEFAULT_TASK_ID_INDEX, dynamodb=None):
        """
        Initialize the tracker.

        Args:
            table_name: Scraping operations table
            index_name: GSI whose partition key is task_id
            dynamodb: Optional DynamoDB resource
        """
        self.table_name = table_name
        self.index_name = index_name
        self.table = get_table(table_name, dynamodb)

    def get_task(self, task_id: str) -> ScrapingTask:
        """
        Look a task up by id.

        Raises:
            TaskNotFoundError: No record has this task id
            DuplicateTaskError: More than one record has this task id
        """
        items = self._find_items(task_id)

        if not items:
            raise TaskNotFoundError(task_id)
        if len(items) > 1:
            logger.error(f"Data integrity error: {len(items)} records for task {task_id}")
            raise DuplicateTaskError(task_id, len(items))

        return ScrapingTask.from_dict(items[0])

    def start(self, task: ScrapingTask) -> None:
        """
        Begin an execution attempt by moving the task to in_progress.

        Redelivered messages may find the task terminal or still in_progress
        from an abandoned attempt; a new attempt starts over from there.
        """
        if task.status != TaskStatus.PENDING:
            logger.warning(f"Task {task.task_id} restarted from {task.status.value}")
        self._write_status(task, TaskStatus.IN_PROGRESS, "")

    def set_status(
        self,
        task: ScrapingTask,
        new_status: TaskStatus | str,
        error_message: str = "",
    ) -> None:
        """
        Transition a task within the current execution attempt.

        The error message is kept only for failed; any other status clears it.

        Raises:
            InvalidTransitionError: If the transition is not allowed
        """
        new_status = TaskStatus(new_status)
        if not task.status.can_transition_to(new_status):
            raise InvalidTransitionError(task.task_id, task.status.value, new_status.value)

        message = error_message if new_status == TaskStatus.FAILED else ""
        self._write_status(task, new_status, message)

    def _find_items(self, task_id: str) -> list[dict]:
        """Query the task id index, scanning only if the index is missing."""
        kwargs = {
            "IndexName": self.index_name,
            "KeyConditionExpression": Key("task_id").eq(task_id),
        }
        items: list[dict] = []
        try:
            while True:
                response = self.table.query(**kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    return items
                kwargs["ExclusiveStartKey"] = last_key
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code not in _MISSING_INDEX_CODES:
                logger.error(f"DynamoDB error looking up task {task_id}: {error_code}")
                raise
            logger.warning(
                f"{self.index_name} unavailable on {self.table_name} ({error_code}), "
                "falling back to scan"
            )

        return scan_all(self.table, FilterExpression=Attr("task_id").eq(task_id))

    def _write_status(self, task: ScrapingTask, status: TaskStatus, error_message: str) -> None:
        now = datetime.now(UTC)
        values = {":status": status.value, ":ts": now.isoformat()}

        if error_message:
            update_expression = "SET #status = :status, updated_at = :ts, error_message = :err"
            values[":err"] = error_message[:MAX_TASK_ERROR_LENGTH]
        else:
            update_expression = "SET #status = :status, updated_at = :ts REMOVE error_message"

        try:
            self.table.update_item(
                Key=task.key,
                UpdateExpression=update_expression,
                ConditionExpression="attribute_exists(PK)",
                ExpressionAttributeNames={"#status": "status"},
                ExpressionAttributeValues=values,
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            if error_code == "ConditionalCheckFailedException":
                raise TaskNotFoundError(task.task_id) from e
            logger.error(f"Failed to update task {task.task_id} status: {error_code}")
            raise

        logger.info(f"Task {task.task_id}: {task.status.value} -> {status.value}")
        task.status = status
        task.error_message = error_message[:MAX_TASK_ERROR_LENGTH]
        task.updated_at = now

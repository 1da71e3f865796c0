"""
Snapshot publication of batch results to S3.

Each batch run that found activities writes the full set twice: to a stable
"latest" key that downstream readers poll, and to a timestamped backup key
retained under the bucket's lifecycle rules.
"""

import logging
from datetime import datetime, timedelta
from typing import Any

from botocore.exceptions import ClientError

from activities_common.constants import (
    BACKUP_SNAPSHOT_PREFIX,
    BACKUP_TIMESTAMP_FORMAT,
    LATEST_SNAPSHOT_KEY,
    SNAPSHOT_COVERAGE,
    SNAPSHOT_REFRESH_HOURS,
    SNAPSHOT_REGION,
    SNAPSHOT_VERSION,
)
from activities_common.exceptions import SnapshotPublishError
from activities_common.models import NormalizedActivity
from activities_common.storage import write_s3_json

logger = logging.getLogger(__name__)


def backup_key(now: datetime) -> str:
    """Backup object key for a run, e.g. activities/backups/2024-06-01T15-04-05Z.json."""
    return f"{BACKUP_SNAPSHOT_PREFIX}{now.strftime(BACKUP_TIMESTAMP_FORMAT)}.json"


def build_snapshot(activities: list[NormalizedActivity], now: datetime) -> dict[str, Any]:
    """Assemble the snapshot document."""
    domains = sorted({activity.source.domain for activity in activities if activity.source.domain})
    return {
        "activities": [activity.to_dict() for activity in activities],
        "metadata": {
            "last_updated": now.isoformat(),
            "total_activities": len(activities),
            "sources": domains,
            "region": SNAPSHOT_REGION,
            "coverage": SNAPSHOT_COVERAGE,
            "version": SNAPSHOT_VERSION,
            "next_update": (now + timedelta(hours=SNAPSHOT_REFRESH_HOURS)).isoformat(),
        },
    }


class SnapshotPublisher:
    """Writes latest and backup snapshots to a bucket."""

    def __init__(self, bucket: str, s3_client=None):
        self.bucket = bucket
        self.s3_client = s3_client

    def publish(self, activities: list[NormalizedActivity], now: datetime) -> list[str]:
        """
        Publish a snapshot of the given activities.

        Args:
            activities: Activities accumulated by the batch
            now: Batch timestamp (names the backup object)

        Returns:
            S3 URIs written (latest first, then the backup if it succeeded)

        Raises:
            SnapshotPublishError: If the latest snapshot could not be written.
                Backup failures are logged and never raised.
        """
        document = build_snapshot(activities, now)

        try:
            latest_uri = write_s3_json(self.bucket, LATEST_SNAPSHOT_KEY, document, self.s3_client)
        except ClientError as e:
            raise SnapshotPublishError(LATEST_SNAPSHOT_KEY, e) from e

        written = [latest_uri]

        key = backup_key(now)
        try:
            written.append(write_s3_json(self.bucket, key, document, self.s3_client))
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            logger.warning(f"Backup snapshot {key} not written: {error_code}")

        logger.info(f"Published snapshot of {len(activities)} activities to {self.bucket}")
        return written

"""Unit tests for snapshot publication."""

import json
from datetime import UTC, datetime
from unittest.mock import MagicMock

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from activities_common.exceptions import SnapshotPublishError
from activities_common.models import RawCandidate
from activities_common.scraper.normalizer import normalize
from activities_common.scraper.snapshots import SnapshotPublisher, backup_key, build_snapshot
from tests.fixtures.activity_samples import SOCCER_CAMP, STORY_TIME

BUCKET = "test-activities-bucket"
NOW = datetime(2024, 6, 1, 15, 4, 5, tzinfo=UTC)


def _activities():
    return [
        normalize(RawCandidate.from_dict(STORY_TIME), "https://www.parentmap.com/calendar", "x", NOW),
        normalize(RawCandidate.from_dict(SOCCER_CAMP), "https://tinybeans.com/seattle", "y", NOW),
    ]


def _client_error(operation):
    return ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, operation)


@pytest.fixture
def s3():
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=BUCKET)
        yield client


def test_backup_key():
    assert backup_key(NOW) == "activities/backups/2024-06-01T15-04-05Z.json"


def test_build_snapshot():
    document = build_snapshot(_activities(), NOW)

    assert len(document["activities"]) == 2
    assert document["activities"][0]["title"] == "Toddler Story Time"
    metadata = document["metadata"]
    assert metadata["total_activities"] == 2
    assert metadata["sources"] == ["tinybeans.com", "www.parentmap.com"]
    assert metadata["last_updated"] == NOW.isoformat()
    assert metadata["next_update"] == "2024-06-01T21:04:05+00:00"


def test_publish_writes_latest_and_backup(s3):
    uris = SnapshotPublisher(BUCKET, s3_client=s3).publish(_activities(), NOW)

    assert uris == [
        f"s3://{BUCKET}/activities/latest.json",
        f"s3://{BUCKET}/activities/backups/2024-06-01T15-04-05Z.json",
    ]
    latest = json.loads(s3.get_object(Bucket=BUCKET, Key="activities/latest.json")["Body"].read())
    backup = json.loads(
        s3.get_object(Bucket=BUCKET, Key="activities/backups/2024-06-01T15-04-05Z.json")[
            "Body"
        ].read()
    )
    assert latest == backup
    assert latest["metadata"]["total_activities"] == 2


def test_latest_is_overwritten(s3):
    publisher = SnapshotPublisher(BUCKET, s3_client=s3)
    publisher.publish(_activities(), NOW)
    publisher.publish(_activities()[:1], datetime(2024, 6, 1, 21, 0, tzinfo=UTC))

    latest = json.loads(s3.get_object(Bucket=BUCKET, Key="activities/latest.json")["Body"].read())
    backups = s3.list_objects_v2(Bucket=BUCKET, Prefix="activities/backups/")

    assert latest["metadata"]["total_activities"] == 1
    assert backups["KeyCount"] == 2


def test_backup_failure_is_not_raised():
    s3 = MagicMock()
    s3.put_object.side_effect = [None, _client_error("PutObject")]

    uris = SnapshotPublisher(BUCKET, s3_client=s3).publish(_activities(), NOW)

    assert uris == [f"s3://{BUCKET}/activities/latest.json"]
    assert s3.put_object.call_count == 2


def test_latest_failure_raises():
    s3 = MagicMock()
    s3.put_object.side_effect = _client_error("PutObject")

    with pytest.raises(SnapshotPublishError, match="latest.json"):
        SnapshotPublisher(BUCKET, s3_client=s3).publish(_activities(), NOW)
    assert s3.put_object.call_count == 1

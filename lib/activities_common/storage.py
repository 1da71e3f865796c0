"""
Storage utilities for S3 and DynamoDB operations.

Provides lazily created AWS clients and the small set of read/write helpers
the activity store, task tracker and snapshot publisher build on.
"""

import json
import logging
from decimal import Decimal
from typing import Any

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

# Lazy-loaded AWS clients (initialized on first use, reused across warm invocations)
_s3_client = None
_dynamodb = None


def get_s3_client():
    """Get or create S3 client."""
    global _s3_client
    if _s3_client is None:
        _s3_client = boto3.client("s3")
    return _s3_client


def get_dynamodb():
    """Get or create DynamoDB resource."""
    global _dynamodb
    if _dynamodb is None:
        _dynamodb = boto3.resource("dynamodb")
    return _dynamodb


def reset_clients() -> None:
    """Drop cached clients so the next call builds fresh ones."""
    global _s3_client, _dynamodb
    _s3_client = None
    _dynamodb = None


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder that handles Decimal types from DynamoDB."""

    def default(self, obj):
        if isinstance(obj, Decimal):
            if obj % 1 == 0:
                return int(obj)
            return float(obj)
        return super().default(obj)


# ============================================================================
# S3 Operations
# ============================================================================


def write_s3_json(bucket: str, key: str, data: Any, s3_client=None) -> str:
    """
    Write JSON content to S3.

    Args:
        bucket: Destination bucket
        key: Destination object key
        data: Data to write as JSON
        s3_client: Optional S3 client (defaults to the shared lazy client)

    Returns:
        The S3 URI that was written to
    """
    client = s3_client or get_s3_client()
    content = json.dumps(data, indent=2, cls=DecimalEncoder)
    try:
        client.put_object(
            Bucket=bucket,
            Key=key,
            Body=content.encode("utf-8"),
            ContentType="application/json",
        )
    except ClientError as e:
        logger.error(f"Failed to write S3 JSON to s3://{bucket}/{key}: {e}")
        raise

    s3_uri = f"s3://{bucket}/{key}"
    logger.info(f"Wrote JSON to {s3_uri}")
    return s3_uri


# ============================================================================
# DynamoDB Operations
# ============================================================================


def get_table(table_name: str, dynamodb=None):
    """Get DynamoDB table resource."""
    return (dynamodb or get_dynamodb()).Table(table_name)


def scan_all(table, **kwargs) -> list[dict[str, Any]]:
    """Scan a table following LastEvaluatedKey until exhausted."""
    items: list[dict[str, Any]] = []
    while True:
        response = table.scan(**kwargs)
        items.extend(response.get("Items", []))
        last_key = response.get("LastEvaluatedKey")
        if not last_key:
            return items
        kwargs["ExclusiveStartKey"] = last_key


def to_dynamodb_value(value: Any) -> Any:
    """Convert floats to Decimal recursively (boto3 rejects float)."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamodb_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_dynamodb_value(v) for v in value]
    return value

"""
Persistence of normalized activities in the family activities table.
"""

import logging

from botocore.exceptions import ClientError

from activities_common.constants import SORT_KEY_METADATA
from activities_common.exceptions import PersistenceFailure, ValidationError
from activities_common.models import EntityType, NormalizedActivity
from activities_common.storage import get_table, to_dynamodb_value

logger = logging.getLogger(__name__)

_KEY_ATTRIBUTES = ("PK", "SK", "created_at")

# Dropped from the item when empty; removed from the row so a re-scrape clears them
_OPTIONAL_ATTRIBUTES = (
    "description",
    "category",
    "subcategory",
    "age_groups",
    "schedule",
    "location",
    "pricing",
    "registration_url",
    "provider_id",
    "provider_name",
)


class ActivityStore:
    """Writes and reads NormalizedActivity rows (one PK/SK pair per activity)."""

    def __init__(self, table_name: str, dynamodb=None):
        self.table_name = table_name
        self.table = get_table(table_name, dynamodb)

    def put_activity(self, activity: NormalizedActivity) -> None:
        """
        Upsert an activity.

        Re-writing an existing identity overwrites its attributes, removes
        optional attributes the new record no longer carries, and keeps the
        created_at of the first write.

        Raises:
            ValidationError: If the activity lacks identity or provenance
            PersistenceFailure: If DynamoDB rejects the write
        """
        errors = activity.validation_errors()
        if errors:
            raise ValidationError(f"Activity {activity.entity_id or '?'} invalid: {', '.join(errors)}")

        item = to_dynamodb_value(activity.to_item())
        fields = {k: v for k, v in item.items() if k not in _KEY_ATTRIBUTES}

        set_clauses = [f"#{k} = :{k}" for k in fields]
        set_clauses.append("#created_at = if_not_exists(#created_at, :created_at)")

        names = {f"#{k}": k for k in fields}
        names["#created_at"] = "created_at"

        update_expression = "SET " + ", ".join(set_clauses)
        absent = [k for k in _OPTIONAL_ATTRIBUTES if k not in fields]
        if absent:
            names.update({f"#{k}": k for k in absent})
            update_expression += " REMOVE " + ", ".join(f"#{k}" for k in absent)

        values = {f":{k}": v for k, v in fields.items()}
        values[":created_at"] = item["created_at"]

        try:
            self.table.update_item(
                Key={"PK": activity.pk, "SK": activity.sk},
                UpdateExpression=update_expression,
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            logger.error(f"Failed to write activity {activity.pk}: {error_code}")
            raise PersistenceFailure(activity.pk, e) from e

        logger.debug(f"Stored activity {activity.pk}")

    def get_activity(self, entity_type: EntityType | str, entity_id: str) -> NormalizedActivity | None:
        """Fetch an activity by type and identity; None if absent."""
        pk = f"{EntityType(entity_type).key_prefix}#{entity_id}"
        try:
            response = self.table.get_item(Key={"PK": pk, "SK": SORT_KEY_METADATA})
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "")
            logger.error(f"Failed to read activity {pk}: {error_code}")
            raise

        item = response.get("Item")
        return NormalizedActivity.from_item(item) if item else None

"""
Logging utilities for Lambda functions.

Masks credentials before events reach CloudWatch Logs and builds
structured summaries of pipeline operations.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)

# Substring matches, so "token" also covers "access_token" and "x-api-token"
DEFAULT_SENSITIVE_KEYS = frozenset(
    {
        "token",
        "password",
        "secret",
        "authorization",
        "credential",
        "apikey",
        "api_key",
        "cookie",
    }
)

MAX_ERROR_LENGTH = 500


def _is_sensitive(key: str, sensitive_keys: frozenset[str]) -> bool:
    key_lower = key.lower()
    return any(s in key_lower for s in sensitive_keys)


def _mask_secret(value: Any) -> str:
    """Placeholder for a secret; long strings keep a 4-char prefix for debugging."""
    if isinstance(value, (list, dict)):
        return f"[{type(value).__name__}: masked]"
    if isinstance(value, str) and len(value) > 20:
        return f"{value[:4]}...({len(value)} chars)"
    return "***"


def mask_value(key: str, value: Any, sensitive_keys: frozenset[str] | None = None) -> Any:
    """
    Mask a value whose key names a credential, recursing into dicts and lists.

    List items inherit the key of the list they belong to.
    """
    keys = DEFAULT_SENSITIVE_KEYS if sensitive_keys is None else sensitive_keys

    if _is_sensitive(key, keys):
        return _mask_secret(value)
    if isinstance(value, dict):
        return {k: mask_value(k, v, keys) for k, v in value.items()}
    if isinstance(value, list):
        return [mask_value(key, item, keys) for item in value]
    return value


def safe_log_event(
    event: dict[str, Any],
    sensitive_keys: frozenset[str] | None = None,
) -> dict[str, Any]:
    """
    Copy of a Lambda event with credentials masked, for logging.

    Example:
        ```python
        def lambda_handler(event, context):
            logger.info(f"Scraping orchestrator invoked: {safe_log_event(event)}")
        ```
    """
    if not isinstance(event, dict):
        return {"_raw": str(event)[:100]}

    try:
        return mask_value("", event, sensitive_keys)
    except RecursionError:
        logger.warning("Event too deeply nested to mask")
        return {"_error": "Could not safely serialize event", "_keys": list(event.keys())[:10]}


def log_summary(
    operation: str,
    *,
    success: bool = True,
    duration_ms: float | None = None,
    item_count: int | None = None,
    error: str | None = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """
    Create a structured log summary for an operation.

    Args:
        operation: Name of the operation (e.g., "scraping_orchestrator", "execute_task")
        success: Whether the operation succeeded
        duration_ms: Optional duration in milliseconds
        item_count: Optional count of items processed
        error: Optional error message (will be truncated)
        **kwargs: Additional fields; primitives are kept, sequences are counted

    Returns:
        Dictionary suitable for structured logging

    Example:
        ```python
        logger.info(log_summary(
            "execute_task",
            success=True,
            duration_ms=1520.4,
            item_count=12,
            task_id="task-123",
        ))
        ```
    """
    summary: dict[str, Any] = {
        "operation": operation,
        "success": success,
    }

    if duration_ms is not None:
        summary["duration_ms"] = round(duration_ms, 2)

    if item_count is not None:
        summary["item_count"] = item_count

    if error:
        summary["error"] = error[:MAX_ERROR_LENGTH]

    for key, value in kwargs.items():
        if isinstance(value, (str, int, float, bool)):
            summary[key] = value
        elif isinstance(value, (list, tuple)):
            summary[key] = len(value)

    return summary

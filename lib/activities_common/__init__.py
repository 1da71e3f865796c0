"""Common Library

Shared models, storage helpers and scraping components for the family
activities pipeline.
"""

from activities_common import constants
from activities_common.logging_utils import log_summary, safe_log_event

__all__ = [
    "constants",
    "log_summary",
    "safe_log_event",
]

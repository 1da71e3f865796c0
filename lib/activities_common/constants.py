"""
Constants used throughout the family activities scraper.

Centralizes key formats, snapshot locations and extraction defaults so the
Lambda handlers and the shared library agree on them.
"""

# =============================================================================
# Family Activities Table
# =============================================================================

# Sort key for the single metadata row of an activity
SORT_KEY_METADATA = "METADATA"

# Prefix of generated activity identities
ACTIVITY_ID_PREFIX = "act_"

# Number of hex characters of the SHA-256 digest kept in an activity identity
ACTIVITY_ID_HASH_LENGTH = 8

# Status stamped on freshly scraped activities
ACTIVITY_STATUS_ACTIVE = "active"

# Reliability tier assigned to scraped provenance (no adaptive scoring)
DEFAULT_RELIABILITY = "medium"

# Provider type recorded for registry-driven sources
DEFAULT_PROVIDER_TYPE = "community-calendar"


# =============================================================================
# Scraping Operations Table
# =============================================================================

# GSI on task_id used for lookup-by-id
DEFAULT_TASK_ID_INDEX = "TaskIdIndex"

# Maximum stored length of a task error message
MAX_TASK_ERROR_LENGTH = 1000


# =============================================================================
# Snapshots (S3)
# =============================================================================

LATEST_SNAPSHOT_KEY = "activities/latest.json"
BACKUP_SNAPSHOT_PREFIX = "activities/backups/"

# strftime format of backup object names, e.g. 2024-06-01T15-04-05Z
BACKUP_TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%SZ"

SNAPSHOT_VERSION = "1.0.0"
SNAPSHOT_REGION = "us-west-2"
SNAPSHOT_COVERAGE = "Seattle Metro Area"

# Hours until the next scheduled refresh advertised in snapshot metadata
SNAPSHOT_REFRESH_HOURS = 6


# =============================================================================
# Extraction Service
# =============================================================================

DEFAULT_FIRECRAWL_API_URL = "https://api.firecrawl.dev"

# Request timeout for a single extraction call (seconds)
EXTRACTION_TIMEOUT = 60.0

# Timeout for the availability probe (seconds)
AVAILABILITY_PROBE_TIMEOUT = 5.0

# Retry attempts for retryable extraction errors
EXTRACTION_MAX_RETRIES = 3

# Credits assumed for a call when the service does not report usage
DEFAULT_CREDITS_PER_REQUEST = 1


# =============================================================================
# Batch Responses
# =============================================================================

STATUS_OK = 200
STATUS_PARTIAL_SUCCESS = 207
STATUS_SERVER_ERROR = 500

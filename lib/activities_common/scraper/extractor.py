"""
Structured activity extraction through the Firecrawl API.

The extraction service is a black box: a URL goes in, a JSON document of
candidate activities (or an error) comes out. This module drives it with
retries, turns its payload into RawCandidates, and keeps running usage
counters for observability.
"""

import logging
import os
import threading
import time
from typing import Any

import httpx

from activities_common.constants import (
    AVAILABILITY_PROBE_TIMEOUT,
    DEFAULT_CREDITS_PER_REQUEST,
    DEFAULT_FIRECRAWL_API_URL,
    EXTRACTION_MAX_RETRIES,
    EXTRACTION_TIMEOUT,
)
from activities_common.exceptions import ExtractionFailure, ExtractionServiceUnavailable
from activities_common.models import RawCandidate

logger = logging.getLogger(__name__)

ACTIVITY_EXTRACTION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "activities": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string"},
                    "description": {"type": "string"},
                    "type": {
                        "type": "string",
                        "enum": ["event", "venue", "program", "class", "camp", "attraction"],
                    },
                    "category": {"type": "string"},
                    "subcategory": {"type": "string"},
                    "location": {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string"},
                            "address": {"type": "string"},
                            "city": {"type": "string"},
                        },
                        "required": ["name"],
                    },
                    "schedule": {
                        "type": "object",
                        "properties": {
                            "start_date": {"type": "string"},
                            "start_time": {"type": "string"},
                            "end_date": {"type": "string"},
                            "end_time": {"type": "string"},
                        },
                    },
                    "age_groups": {"type": "array", "items": {"type": "string"}},
                    "pricing": {"type": "string"},
                    "registration_url": {"type": "string"},
                },
                "required": ["title", "location"],
            },
        },
    },
    "required": ["activities"],
}


class ExtractionStats:
    """
    Running counters for extraction calls.

    Owned by whoever builds the extractor; increments are lock-protected so
    one instance can be shared by threads within a process.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.requests = 0
        self.successes = 0
        self.failures = 0
        self.total_latency_ms = 0.0
        self.credits_used = 0
        self.activities_extracted = 0

    def record(
        self,
        success: bool,
        latency_ms: float,
        credits: int = 0,
        activities: int = 0,
    ) -> None:
        with self._lock:
            self.requests += 1
            self.total_latency_ms += latency_ms
            self.credits_used += credits
            self.activities_extracted += activities
            if success:
                self.successes += 1
            else:
                self.failures += 1

    def snapshot(self) -> dict[str, Any]:
        """Return a consistent copy of the counters."""
        with self._lock:
            avg = self.total_latency_ms / self.requests if self.requests else 0.0
            return {
                "total_requests": self.requests,
                "successful_requests": self.successes,
                "failed_requests": self.failures,
                "total_latency_ms": round(self.total_latency_ms, 2),
                "avg_latency_ms": round(avg, 2),
                "total_credits_used": self.credits_used,
                "total_activities_extracted": self.activities_extracted,
            }


def parse_candidates(payload: dict[str, Any], url: str) -> list[RawCandidate]:
    """
    Convert an extraction payload into RawCandidates.

    Items without a title or location name are dropped; they cannot be given
    a meaningful identity.

    Raises:
        ExtractionFailure: If the payload does not have the expected shape
    """
    extract = payload.get("extract")
    if not isinstance(extract, dict):
        raise ExtractionFailure(url, "Malformed response: missing extract object")

    items = extract.get("activities")
    if items is None:
        return []
    if not isinstance(items, list):
        raise ExtractionFailure(url, "Malformed response: activities is not a list")

    candidates = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            logger.debug(f"Ignoring non-object activity {index} from {url}")
            continue
        candidate = RawCandidate.from_dict(item)
        if not candidate.title or not candidate.location.name:
            logger.debug(f"Dropping activity {index} from {url}: missing title or location")
            continue
        candidates.append(candidate)

    return candidates


class FirecrawlExtractor:
    """Extraction adapter for the Firecrawl scrape endpoint."""

    RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

    # Credential or billing problems; no other URL would fare better
    UNAVAILABLE_STATUS_CODES = {401, 402, 403}

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        timeout: float = EXTRACTION_TIMEOUT,
        max_retries: int = EXTRACTION_MAX_RETRIES,
        stats: ExtractionStats | None = None,
    ):
        """
        Initialize the extractor.

        Args:
            api_key: Firecrawl API key (defaults to FIRECRAWL_API_KEY)
            api_url: API base URL (defaults to FIRECRAWL_API_URL or the public endpoint)
            timeout: Request timeout in seconds
            max_retries: Attempts for retryable errors
            stats: Counters to update (a fresh instance if omitted)

        Raises:
            ValueError: If no API key is available
        """
        self.api_key = api_key or os.environ.get("FIRECRAWL_API_KEY")
        if not self.api_key:
            raise ValueError("FIRECRAWL_API_KEY environment variable required")

        self.api_url = (
            api_url or os.environ.get("FIRECRAWL_API_URL") or DEFAULT_FIRECRAWL_API_URL
        ).rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.stats = stats or ExtractionStats()

    def extract(self, url: str) -> list[RawCandidate]:
        """
        Extract candidate activities from a URL.

        Args:
            url: Page to extract

        Returns:
            Candidates found on the page (possibly empty)

        Raises:
            ExtractionFailure: Service error, timeout or malformed payload
            ExtractionServiceUnavailable: Credential or billing rejection
        """
        if not url:
            raise ExtractionFailure(url, "URL cannot be empty")

        start = time.monotonic()
        logger.info(f"Starting extraction for {url}")

        try:
            body = self._request_extract(url)
            data = body.get("data")
            if not isinstance(data, dict):
                raise ExtractionFailure(url, "Malformed response: missing data object")
            candidates = parse_candidates(data, url)
        except ExtractionFailure as e:
            self.stats.record(False, _elapsed_ms(start))
            logger.warning(f"Extraction failed for {url}: {e.cause}")
            raise

        credits = _credits_used(data)
        elapsed = _elapsed_ms(start)
        self.stats.record(True, elapsed, credits=credits, activities=len(candidates))

        if not candidates:
            logger.info(f"No activities extracted from {url}")
        else:
            logger.info(
                f"Extracted {len(candidates)} activities from {url} "
                f"in {elapsed:.0f}ms (credits: {credits})"
            )
        return candidates

    def is_available(self) -> bool:
        """Cheap health check; never raises."""
        try:
            with httpx.Client(timeout=AVAILABILITY_PROBE_TIMEOUT) as client:
                response = client.get(self.api_url, headers=self._headers())
            return response.status_code < 500
        except httpx.HTTPError as e:
            logger.warning(f"Extraction service unreachable: {e}")
            return False

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _do_post(self, url: str) -> httpx.Response:
        """Perform a single extraction request."""
        request_body = {
            "url": url,
            "formats": ["extract"],
            "extract": {"schema": ACTIVITY_EXTRACTION_SCHEMA},
        }
        with httpx.Client(timeout=self.timeout) as client:
            return client.post(
                f"{self.api_url}/v1/scrape", json=request_body, headers=self._headers()
            )

    def _request_extract(self, url: str) -> dict[str, Any]:
        """POST the extraction request with retries; return the decoded body."""
        last_error = None

        for attempt in range(self.max_retries):
            try:
                response = self._do_post(url)
            except httpx.TimeoutException as e:
                last_error = f"Timeout: {e}"
                self._backoff(url, attempt, "timeout")
                continue
            except httpx.RequestError as e:
                last_error = f"Request error: {e}"
                self._backoff(url, attempt, f"error={e}")
                continue

            status = response.status_code
            if status in self.UNAVAILABLE_STATUS_CODES:
                raise ExtractionServiceUnavailable(url, f"HTTP {status}: {response.reason_phrase}")

            if status in self.RETRYABLE_STATUS_CODES:
                last_error = f"HTTP {status}: {response.reason_phrase}"
                self._backoff(url, attempt, f"status={status}", rate_limited=status == 429)
                continue

            if status >= 400:
                raise ExtractionFailure(url, f"HTTP {status}: {response.reason_phrase}")

            try:
                body = response.json()
            except ValueError as e:
                raise ExtractionFailure(url, f"Malformed response: {e}") from e

            if not isinstance(body, dict) or not body.get("success", False):
                error = body.get("error") if isinstance(body, dict) else None
                raise ExtractionFailure(url, error or "Service reported failure")

            return body

        raise ExtractionFailure(url, last_error or "Retries exhausted")

    def _backoff(self, url: str, attempt: int, reason: str, rate_limited: bool = False) -> None:
        """Sleep with exponential backoff unless this was the last attempt."""
        if attempt >= self.max_retries - 1:
            return
        backoff = (2**attempt) * 1.0
        if rate_limited:
            backoff *= 2
        logger.warning(
            f"Retry {attempt + 1}/{self.max_retries} for {url} ({reason}, backoff={backoff}s)"
        )
        time.sleep(backoff)


def _elapsed_ms(start: float) -> float:
    return (time.monotonic() - start) * 1000


def _credits_used(data: dict[str, Any]) -> int:
    metadata = data.get("metadata")
    credits = metadata.get("creditsUsed") if isinstance(metadata, dict) else None
    if isinstance(credits, (int, float)) and not isinstance(credits, bool):
        return int(credits)
    return DEFAULT_CREDITS_PER_REQUEST

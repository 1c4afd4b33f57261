"""
Learning service client — submits snippet pairs and builds the studio
link used to open the learned result.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from urllib.parse import urlencode, urlsplit, urlunsplit

import requests

from .learning.aggregator import LearningRequest

logger = logging.getLogger(__name__)


class LearningServiceError(Exception):
    """Raised when the learning service cannot accept a request."""


@dataclass
class SubmissionResult:
    """Identifier of the stored diff and the IV needed to decrypt it."""
    diff_id: str
    iv: str


class LearningServiceClient:

    def __init__(self, base_url: str, timeout: float = 30.0,
                 max_retries: int = 3, retry_delay: float = 1.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay

    def submit(self, request: LearningRequest) -> SubmissionResult:
        """Post *request* and return the stored diff's id and IV.

        Connection errors, 429 and 5xx responses are retried with jittered
        exponential backoff. Raises :class:`LearningServiceError` once
        retries are exhausted or the service rejects the request.
        """
        url = f"{self.base_url}/diffs"
        payload = request.to_payload()
        last_error: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                response = requests.post(url, json=payload, timeout=self.timeout)
            except requests.exceptions.RequestException as e:
                last_error = e
                logger.warning(
                    "[Service] Connection error on attempt %d/%d: %s",
                    attempt, self.max_retries, e)
                self._backoff(attempt)
                continue

            if response.status_code == 429 or response.status_code >= 500:
                last_error = LearningServiceError(
                    f"HTTP {response.status_code} from {url}")
                logger.warning(
                    "[Service] HTTP %d on attempt %d/%d",
                    response.status_code, attempt, self.max_retries)
                self._backoff(attempt, rate_limited=response.status_code == 429)
                continue

            if response.status_code >= 400:
                raise LearningServiceError(
                    f"Learning service rejected the request "
                    f"(HTTP {response.status_code}): {response.text[:200]}")

            return self._parse(response)

        raise LearningServiceError(
            f"Learning service failed after {self.max_retries} attempts: {last_error}")

    def _backoff(self, attempt: int, rate_limited: bool = False) -> None:
        if attempt >= self.max_retries:
            return
        wait = self.retry_delay * (2 ** (attempt - 1))
        if rate_limited:
            wait *= 2
            logger.info("[Service] Rate limit detected (429). Backing off for %.1fs", wait)
        time.sleep(wait + wait * 0.1 * random.random())

    @staticmethod
    def _parse(response: requests.Response) -> SubmissionResult:
        try:
            data = response.json()
        except ValueError as e:
            raise LearningServiceError(f"Invalid JSON from learning service: {e}") from e
        if not isinstance(data, dict):
            raise LearningServiceError("Unexpected response from learning service")
        diff_id, iv = data.get("id"), data.get("iv")
        if not isinstance(diff_id, str) or not isinstance(iv, str) or not diff_id:
            raise LearningServiceError("Learning service response lacks id/iv")
        return SubmissionResult(diff_id=diff_id, iv=iv)


def build_studio_url(studio_url: str, engine: str, diff_id: str, iv: str) -> str | None:
    """Link that opens the studio on the learned diff, or None if *studio_url* is invalid."""
    if not studio_url:
        return None
    try:
        parts = urlsplit(studio_url)
    except ValueError as e:
        logger.warning("Invalid studio URL %r: %s", studio_url, e)
        return None
    if parts.scheme not in ("http", "https") or not parts.netloc:
        logger.warning("Invalid studio URL %r", studio_url)
        return None
    query = urlencode([
        ("engine", engine),
        ("diffId", diff_id),
        ("iv", iv),
        ("command", "learn"),
    ])
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))

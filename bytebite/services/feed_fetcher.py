"""Conditional feed fetching.

This module downloads a feed document, asking the server to answer
"304 Not Modified" when nothing changed since the given baseline.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Optional

import httpx

from bytebite.errors import NetworkError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "bytebite/0.1 (RSS Feed Reader)"


@dataclass(frozen=True)
class FetchResult:
    status_code: int
    body: bytes

    @property
    def not_modified(self) -> bool:
        return self.status_code == httpx.codes.NOT_MODIFIED


def format_if_modified_since(baseline: datetime) -> str:
    """Render a baseline as an RFC 2822 date in GMT, e.g. ``Mon, 01 Jan 2024 12:00:00 GMT``."""
    return format_datetime(baseline.astimezone(timezone.utc), usegmt=True)


class FeedFetcher:
    """Issues one conditional GET per call. No retries."""

    def __init__(self, timeout: float = 30.0, user_agent: str = DEFAULT_USER_AGENT):
        self.timeout = timeout
        self.user_agent = user_agent

    async def fetch(self, url: str, if_modified_since: Optional[datetime] = None) -> FetchResult:
        """Fetch ``url``, conditionally on ``if_modified_since``.

        Args:
            url: Feed URL
            if_modified_since: Baseline timestamp, or None for an unconditional fetch

        Returns:
            FetchResult with the status code and body (empty on 304)

        Raises:
            NetworkError: If the URL is invalid, no response arrived, or the server
                answered with an error status
        """
        headers = {}
        if if_modified_since is not None:
            headers["If-Modified-Since"] = format_if_modified_since(if_modified_since)

        async with httpx.AsyncClient(
            follow_redirects=True,
            timeout=self.timeout,
            headers={"User-Agent": self.user_agent},
        ) as client:
            try:
                response = await client.get(url, headers=headers)
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                logger.error(f"Failed to fetch feed {url}: {e}")
                raise NetworkError(url, str(e) or type(e).__name__) from e

        logger.info(f"Response status code for {url}: {response.status_code}")

        if response.status_code == httpx.codes.NOT_MODIFIED:
            return FetchResult(status_code=response.status_code, body=b"")

        if response.status_code >= 400:
            raise NetworkError(
                url, f"HTTP {response.status_code}", status_code=response.status_code
            )

        return FetchResult(status_code=response.status_code, body=response.content)

"""USGS Feed Client - Imperative Shell.

This module handles HTTP communication with the USGS summary feeds.
All I/O is contained here; normalization is in the core module.
"""

import asyncio
import logging
from typing import Any

import requests

from quake_tracker.core.config import DEFAULT_TIME_RANGE, FEED_LOOKUP


logger = logging.getLogger(__name__)


# USGS GeoJSON summary feed base URL
USGS_FEED_BASE = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary"

# Default timeout for feed requests (seconds)
DEFAULT_TIMEOUT = 30


class FeedError(Exception):
    """The feed could not be loaded (network, status or body problem)."""


def feed_name(time_range: str) -> str:
    """Map a time range (hour/day/week) to a USGS feed name.

    Unknown ranges fall back to the day feed.
    """
    return FEED_LOOKUP.get(time_range, FEED_LOOKUP[DEFAULT_TIME_RANGE])


class USGSFeedClient:
    """Client for fetching earthquake summaries from the USGS feeds.

    This is part of the imperative shell - it handles HTTP I/O.
    """

    def __init__(
        self,
        base_url: str = USGS_FEED_BASE,
        timeout: int = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize USGS feed client.

        Args:
            base_url: USGS summary feed base URL
            timeout: Request timeout in seconds
            session: Optional requests session to reuse connections
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def feed_url(self, time_range: str) -> str:
        """Build the GeoJSON feed URL for a time range."""
        return f"{self.base_url}/{feed_name(time_range)}.geojson"

    def fetch_features(self, time_range: str = DEFAULT_TIME_RANGE) -> list[dict[str, Any]]:
        """Fetch the raw features of a summary feed.

        This method performs HTTP I/O.

        Args:
            time_range: hour, day or week

        Returns:
            Raw GeoJSON features

        Raises:
            FeedError: On network errors, non-success status or a malformed body
        """
        url = self.feed_url(time_range)

        logger.info("Fetching earthquakes from USGS", extra={"url": url})

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FeedError(f"USGS feed request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise FeedError("USGS feed returned invalid JSON") from e

        features = data.get("features") if isinstance(data, dict) else None
        if not isinstance(features, list):
            raise FeedError("Unexpected response format.")

        logger.info("Fetched %d features from %s", len(features), url)

        return features

    async def fetch(self, time_range: str = DEFAULT_TIME_RANGE) -> list[dict[str, Any]]:
        """Fetch features without blocking the event loop.

        The blocking request runs in a worker thread; the result is
        returned to the awaiting task on the loop thread.
        """
        return await asyncio.to_thread(self.fetch_features, time_range)

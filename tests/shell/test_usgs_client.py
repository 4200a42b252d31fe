"""Tests for the USGS feed client.

Uses the `responses` library to mock HTTP requests.
"""

import asyncio

import pytest
import requests
import responses

from quake_tracker.shell.usgs_client import (
    USGS_FEED_BASE,
    FeedError,
    USGSFeedClient,
    feed_name,
)


DAY_URL = f"{USGS_FEED_BASE}/all_day.geojson"

SAMPLE_BODY = {
    "type": "FeatureCollection",
    "metadata": {"count": 1},
    "features": [
        {
            "type": "Feature",
            "id": "ci40000001",
            "properties": {"mag": 2.4, "place": "5 km N of Ojai, CA", "time": 1703001600000},
            "geometry": {"type": "Point", "coordinates": [-119.24, 34.49, 8.1]},
        },
    ],
}


class TestFeedUrls:

    @pytest.mark.parametrize("time_range,name", [
        ("hour", "all_hour"),
        ("day", "all_day"),
        ("week", "all_week"),
        ("month", "all_day"),
    ])
    def test_feed_name(self, time_range, name):
        assert feed_name(time_range) == name

    def test_feed_url(self):
        client = USGSFeedClient(base_url="https://feeds.example.com/summary/")
        assert client.feed_url("week") == "https://feeds.example.com/summary/all_week.geojson"


class TestFetchFeatures:
    """Tests for USGSFeedClient.fetch_features()."""

    @responses.activate
    def test_returns_features(self):
        responses.add(responses.GET, DAY_URL, json=SAMPLE_BODY, status=200)

        features = USGSFeedClient().fetch_features("day")

        assert len(features) == 1
        assert features[0]["id"] == "ci40000001"

    @responses.activate
    def test_requests_selected_feed(self):
        hour_url = f"{USGS_FEED_BASE}/all_hour.geojson"
        responses.add(responses.GET, hour_url, json={"features": []}, status=200)

        USGSFeedClient().fetch_features("hour")

        assert responses.calls[0].request.url == hour_url

    @responses.activate
    def test_error_status_raises_feed_error(self):
        responses.add(responses.GET, DAY_URL, json={"error": "unavailable"}, status=503)

        with pytest.raises(FeedError):
            USGSFeedClient().fetch_features("day")

    @responses.activate
    def test_network_error_raises_feed_error(self):
        responses.add(responses.GET, DAY_URL, body=requests.ConnectionError("connection refused"))

        with pytest.raises(FeedError) as exc_info:
            USGSFeedClient().fetch_features("day")

        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)

    @responses.activate
    def test_invalid_json_raises_feed_error(self):
        responses.add(responses.GET, DAY_URL, body="<html>maintenance</html>", status=200)

        with pytest.raises(FeedError):
            USGSFeedClient().fetch_features("day")

    @responses.activate
    def test_missing_features_raises_feed_error(self):
        responses.add(responses.GET, DAY_URL, json={"type": "FeatureCollection"}, status=200)

        with pytest.raises(FeedError, match="Unexpected response format"):
            USGSFeedClient().fetch_features("day")

    @responses.activate
    def test_non_object_body_raises_feed_error(self):
        responses.add(responses.GET, DAY_URL, json=[1, 2, 3], status=200)

        with pytest.raises(FeedError):
            USGSFeedClient().fetch_features("day")


class TestFetchAsync:
    """Tests for the non-blocking USGSFeedClient.fetch()."""

    @responses.activate
    def test_fetch_returns_features(self):
        responses.add(responses.GET, DAY_URL, json=SAMPLE_BODY, status=200)

        features = asyncio.run(USGSFeedClient().fetch("day"))

        assert [f["id"] for f in features] == ["ci40000001"]

    @responses.activate
    def test_fetch_propagates_feed_error(self):
        responses.add(responses.GET, DAY_URL, status=500)

        with pytest.raises(FeedError):
            asyncio.run(USGSFeedClient().fetch("day"))

"""Unit tests for display formatting."""

import pytest

from quake_tracker.core.event import Event
from quake_tracker.core.formatter import (
    EMPTY_STATE_MESSAGE,
    MISSING,
    NO_MAGNITUDE_LOCATION,
    NO_MATCHES_LOCATION,
    escape_html,
    format_card_html,
    format_depth,
    format_list_html,
    format_magnitude,
    format_magnitude_badge,
    format_metrics,
    format_popup_html,
    format_relative_time,
    format_threshold,
    format_time,
)
from quake_tracker.core.metrics import summarize_events


NOW_MS = 1703001600000  # 2023-12-19 12:00:00 UTC
MINUTE_MS = 60 * 1000


def make_event(**overrides):
    values = {
        "id": "us7000abcd",
        "magnitude": 4.8,
        "place": "12 km S of Volcano, Hawaii",
        "time": NOW_MS - 5 * MINUTE_MS,
        "depth": 2.345,
        "latitude": 19.3,
        "longitude": -155.2,
        "url": "https://earthquake.usgs.gov/earthquakes/eventpage/us7000abcd",
    }
    values.update(overrides)
    return Event(**values)


class TestScalarFormatting:

    def test_format_magnitude(self):
        assert format_magnitude(4.26) == "4.3"
        assert format_magnitude(5.0) == "5.0"
        assert format_magnitude(None) == MISSING

    def test_format_depth(self):
        assert format_depth(10.04) == "10.0 km"
        assert format_depth(None) == MISSING

    def test_format_time(self):
        assert format_time(NOW_MS) == "Dec 19, 2023 12:00 UTC"
        assert format_time(None) == MISSING

    def test_format_time_out_of_range(self):
        assert format_time(10**18) == MISSING
        assert format_time(-(10**18)) == MISSING

    def test_format_threshold(self):
        assert format_threshold(2.5) == "2.5"
        assert format_threshold(0.0) == "0.0"

    def test_escape_html(self):
        assert escape_html('<b>"A" & \'B\'</b>') == "&lt;b&gt;&quot;A&quot; &amp; &#x27;B&#x27;&lt;/b&gt;"
        assert escape_html(None) == ""


class TestFormatRelativeTime:
    """Tests for format_relative_time()."""

    @pytest.mark.parametrize("age_ms,expected", [
        (0, "just now"),
        (20 * 1000, "just now"),
        (5 * MINUTE_MS, "5 min ago"),
        (59 * MINUTE_MS, "59 min ago"),
        (3 * 60 * MINUTE_MS, "3 hr ago"),
        (24 * 60 * MINUTE_MS, "1 day ago"),
        (3 * 24 * 60 * MINUTE_MS, "3 days ago"),
    ])
    def test_buckets(self, age_ms, expected):
        assert format_relative_time(NOW_MS - age_ms, NOW_MS) == expected

    def test_future_is_just_now(self):
        assert format_relative_time(NOW_MS + MINUTE_MS * 10, NOW_MS) == "just now"

    def test_missing_time_is_empty(self):
        assert format_relative_time(None, NOW_MS) == ""

    def test_unrepresentable_age(self):
        assert format_relative_time(-(10**400), NOW_MS) == ""

    def test_card_with_far_future_time(self):
        html = format_card_html(make_event(time=10**18), NOW_MS)
        assert MISSING in html


class TestCards:
    """Tests for list card HTML."""

    def test_card_carries_id_and_is_focusable(self):
        html = format_card_html(make_event(), NOW_MS)
        assert 'data-id="us7000abcd"' in html
        assert 'tabindex="0"' in html

    def test_card_contents(self):
        html = format_card_html(make_event(), NOW_MS)
        assert "quake-mag--moderate" in html
        assert "M 4.8" in html
        assert "5 min ago" in html
        assert "Depth: 2.3 km" in html
        assert 'href="https://earthquake.usgs.gov/earthquakes/eventpage/us7000abcd"' in html

    def test_place_is_escaped(self):
        html = format_card_html(make_event(place="<script>alert(1)</script>"), NOW_MS)
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_missing_magnitude_badge(self):
        assert format_magnitude_badge(None) == '<span class="quake-mag">M —</span>'

    def test_aftershock_badge_requires_toggle(self):
        small = make_event(magnitude=2.1)
        assert "Aftershock" not in format_card_html(small, NOW_MS, show_aftershocks=False)
        assert "Aftershock" in format_card_html(small, NOW_MS, show_aftershocks=True)

    def test_no_aftershock_badge_for_larger_or_missing(self):
        assert "Aftershock" not in format_card_html(make_event(magnitude=3.5), NOW_MS, True)
        assert "Aftershock" not in format_card_html(make_event(magnitude=None), NOW_MS, True)

    def test_missing_time_has_no_relative_part(self):
        html = format_card_html(make_event(time=None), NOW_MS)
        assert f'<span class="quake-time">{MISSING}</span>' in html


class TestListAndPopup:

    def test_empty_list_renders_placeholder(self):
        html = format_list_html((), NOW_MS)
        assert html == f'<p class="empty-state">{EMPTY_STATE_MESSAGE}</p>'

    def test_one_card_per_event(self):
        events = (make_event(id="a"), make_event(id="b"))
        html = format_list_html(events, NOW_MS)
        assert html.count('class="quake-card"') == 2
        assert html.index('data-id="a"') < html.index('data-id="b"')

    def test_popup(self):
        html = format_popup_html(make_event())
        assert html.startswith("<strong>12 km S of Volcano, Hawaii</strong>")
        assert "Magnitude 4.8" in html
        assert "Depth: 2.3 km" in html


class TestFormatMetrics:
    """Tests for format_metrics()."""

    def test_no_matches(self):
        display = format_metrics(summarize_events(()))
        assert display.total == "0"
        assert display.strongest == MISSING
        assert display.strongest_location == NO_MATCHES_LOCATION
        assert display.average_depth == MISSING

    def test_magnitude_unavailable(self):
        display = format_metrics(summarize_events((make_event(magnitude=None, depth=None),)))
        assert display.total == "1"
        assert display.strongest == MISSING
        assert display.strongest_location == NO_MAGNITUDE_LOCATION
        assert display.average_depth == MISSING

    def test_available(self):
        events = (make_event(id="a", magnitude=5.9, depth=10.0), make_event(id="b", depth=20.0))
        display = format_metrics(summarize_events(events))

        assert display.total == "2"
        assert display.strongest == "5.9"
        assert display.strongest_location == "12 km S of Volcano, Hawaii • Dec 19, 2023 11:55 UTC"
        assert display.average_depth == "15.0 km"

    def test_total_uses_thousands_separator(self):
        events = tuple(make_event(id=str(i)) for i in range(1200))
        assert format_metrics(summarize_events(events)).total == "1,200"

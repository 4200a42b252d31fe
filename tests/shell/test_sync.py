"""Tests for the Sync Projector.

Uses the in-memory map widget and HTML page surface, so no tiles are
fetched and no files are written.
"""

import pytest

from quake_tracker.core.config import MapViewConfig
from quake_tracker.core.event import Event
from quake_tracker.core.formatter import EMPTY_STATE_MESSAGE, LOADING_MESSAGE, UNAVAILABLE_MESSAGE
from quake_tracker.core.styling import ACTIVE_FILL_OPACITY, ACTIVE_WEIGHT, create_marker_style
from quake_tracker.shell.html_surface import HtmlPageSurface
from quake_tracker.shell.static_map_widget import StaticMapWidget
from quake_tracker.sync import (
    BLUR,
    CLICK,
    FOCUS,
    KEYDOWN,
    POINTER_ENTER,
    POINTER_LEAVE,
    HighlightState,
    InputEvent,
    SyncProjector,
)


NOW_SECONDS = 1703001600.0


def make_event(event_id, latitude, longitude, magnitude=4.0):
    return Event(
        id=event_id,
        magnitude=magnitude,
        place=f"Place {event_id}",
        time=1703001000000,
        depth=10.0,
        latitude=latitude,
        longitude=longitude,
    )


@pytest.fixture
def events():
    return (
        make_event("a", 10.0, 10.0, magnitude=5.8),
        make_event("b", 20.0, 20.0, magnitude=None),
        make_event("c", 15.0, 12.0, magnitude=3.0),
    )


@pytest.fixture
def map_widget():
    return StaticMapWidget(MapViewConfig())


@pytest.fixture
def page():
    return HtmlPageSurface()


@pytest.fixture
def projector(map_widget, page):
    return SyncProjector(map_widget, page, MapViewConfig(), clock=lambda: NOW_SECONDS)


def styles(map_widget):
    return [(m.style.weight, m.style.fill_opacity) for m in map_widget.markers]


class TestRender:
    """Tests for SyncProjector.render()."""

    def test_one_marker_and_card_per_event(self, projector, map_widget, page, events):
        projector.render(events)

        assert len(map_widget.markers) == 3
        assert set(projector.markers) == {"a", "b", "c"}
        assert page.content.count('class="quake-card"') == 3

    def test_registry_is_rebuilt_each_render(self, projector, map_widget, events):
        projector.render(events)
        old_marker = projector.marker_for("a")

        projector.render(events[1:])

        assert len(map_widget.markers) == 2
        assert projector.marker_for("a") is None
        assert old_marker not in map_widget.markers

    def test_marker_style_and_position(self, projector, events):
        projector.render(events)
        marker = projector.marker_for("a")

        assert (marker.latitude, marker.longitude) == (10.0, 10.0)
        assert marker.style == create_marker_style(5.8)
        assert "Place a" in marker.popup_html

    def test_empty_set_renders_placeholder_and_world_view(self, projector, map_widget, page):
        projector.render(())

        assert map_widget.markers == []
        assert EMPTY_STATE_MESSAGE in page.content
        assert (map_widget.latitude, map_widget.longitude, map_widget.zoom) == (20.0, 0.0, 2.2)

    def test_single_event_centers_map(self, projector, map_widget, events):
        projector.render(events[:1])

        assert (map_widget.latitude, map_widget.longitude) == (10.0, 10.0)
        assert map_widget.zoom == 6

    def test_several_events_fit_within_cap(self, projector, map_widget):
        projector.render((make_event("x", 10.0, 10.0), make_event("y", 20.0, 20.0)))

        assert map_widget.zoom <= 6
        assert 10.0 < map_widget.latitude < 20.0
        assert map_widget.longitude == 15.0

    def test_listeners_attached_per_card(self, projector, page, events):
        projector.render(events)

        assert sorted(page.listeners_for("a")) == sorted(
            [POINTER_ENTER, POINTER_LEAVE, FOCUS, BLUR, CLICK, KEYDOWN]
        )
        assert page.listener_count == 18

    def test_listeners_not_duplicated_across_renders(self, projector, page, events):
        projector.render(events)
        projector.render(events)
        projector.render(events[:1])

        assert page.listener_count == 6

    def test_returns_projection(self, projector, events):
        projection = projector.render(events, show_aftershocks=True)
        assert projector.projection is projection
        assert "Aftershock" in projection.list_html


class TestHighlight:
    """Tests for the highlight state machine."""

    def test_activate_changes_exactly_one_marker(self, projector, map_widget, page, events):
        projector.render(events)
        before = styles(map_widget)

        page.dispatch("a", POINTER_ENTER)

        after = styles(map_widget)
        changed = [i for i, (old, new) in enumerate(zip(before, after)) if old != new]
        assert changed == [0]
        assert after[0] == (ACTIVE_WEIGHT, ACTIVE_FILL_OPACITY)
        assert projector.highlight_state("a") is HighlightState.ACTIVE

    def test_activate_opens_callout(self, projector, page, events):
        projector.render(events)
        page.dispatch("b", FOCUS)
        assert projector.marker_for("b").popup_open is True

    def test_deactivate_restores_exact_style(self, projector, map_widget, page, events):
        projector.render(events)
        original = projector.marker_for("c").style

        page.dispatch("c", POINTER_ENTER)
        page.dispatch("c", POINTER_LEAVE)

        assert projector.marker_for("c").style == original
        assert projector.highlight_state("c") is HighlightState.IDLE

    def test_deactivate_leaves_callout_open(self, projector, page, events):
        projector.render(events)
        page.dispatch("a", FOCUS)
        page.dispatch("a", BLUR)
        assert projector.marker_for("a").popup_open is True

    def test_activate_twice_is_stable(self, projector, page, events):
        projector.render(events)
        page.dispatch("a", POINTER_ENTER)
        page.dispatch("a", FOCUS)
        page.dispatch("a", POINTER_LEAVE)
        assert projector.marker_for("a").style == create_marker_style(5.8)

    def test_deactivate_idle_is_noop(self, projector, events):
        projector.render(events)
        assert projector.deactivate("a") is True
        assert projector.marker_for("a").style == create_marker_style(5.8)

    def test_render_resets_states(self, projector, page, events):
        projector.render(events)
        page.dispatch("a", POINTER_ENTER)

        projector.render(events)

        assert projector.highlight_state("a") is HighlightState.IDLE
        assert projector.marker_for("a").style == create_marker_style(5.8)

    def test_unknown_id_is_noop(self, projector, map_widget, events):
        projector.render(events)
        before = styles(map_widget)

        assert projector.activate("missing") is False
        assert projector.deactivate("missing") is False
        assert projector.focus("missing") is False
        assert styles(map_widget) == before


class TestFocus:
    """Tests for the one-shot focus action."""

    def test_click_flies_to_marker(self, projector, map_widget, page, events):
        projector.render(events)

        assert page.dispatch("c", CLICK) is True

        assert (map_widget.latitude, map_widget.longitude) == (15.0, 12.0)
        assert 5 <= map_widget.zoom <= 7
        assert map_widget.last_animation_seconds == 0.7

    def test_focus_zoom_is_clamped_up(self, projector, map_widget, events):
        projector.render(events)
        map_widget.set_view(0.0, 0.0, 2)

        projector.focus("a")

        assert map_widget.zoom == 5

    def test_focus_zoom_is_clamped_down(self, projector, map_widget, events):
        projector.render(events)
        map_widget.set_view(0.0, 0.0, 9)

        projector.focus("a")

        assert map_widget.zoom == 7

    @pytest.mark.parametrize("key", ["Enter", " "])
    def test_activation_keys_focus(self, projector, map_widget, page, events, key):
        projector.render(events)
        assert page.dispatch("b", KEYDOWN, key=key) is True
        assert (map_widget.latitude, map_widget.longitude) == (20.0, 20.0)

    def test_other_keys_ignored(self, projector, page, events):
        projector.render(events)
        assert page.dispatch("b", KEYDOWN, key="Tab") is False

    def test_focus_does_not_change_highlight(self, projector, page, events):
        projector.render(events)
        page.dispatch("a", CLICK)
        assert projector.highlight_state("a") is HighlightState.IDLE

    def test_unknown_event_type(self, projector, events):
        projector.render(events)
        assert projector.handle_card_event("a", InputEvent(type="dblclick")) is False


class TestLoadingAndClear:

    def test_show_loading_keeps_markers(self, projector, map_widget, page, events):
        projector.render(events)
        projector.show_loading()

        assert LOADING_MESSAGE in page.content
        assert len(map_widget.markers) == 3

    def test_clear_removes_everything(self, projector, map_widget, page, events):
        projector.render(events)
        projector.clear()

        assert map_widget.markers == []
        assert projector.markers == {}
        assert page.listener_count == 0
        assert UNAVAILABLE_MESSAGE in page.content
        assert projector.projection is None

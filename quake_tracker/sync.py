"""Sync Projector - keeps the event list and the map markers in lockstep.

The pure render plan comes from core.projection. This module applies it
to the map widget and list surface, owns the marker registry (event ID
to marker handle) and runs the per-event highlight state machine that
links list cards to their markers.
"""

import functools
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Protocol

from quake_tracker.core.config import MapViewConfig
from quake_tracker.core.event import Event
from quake_tracker.core.formatter import (
    LOADING_MESSAGE,
    UNAVAILABLE_MESSAGE,
    format_placeholder_html,
)
from quake_tracker.core.projection import CardAction, CardBinding, Projection, build_projection
from quake_tracker.core.styling import MarkerStyle, highlighted_style
from quake_tracker.core.viewport import BoundingBox, ViewportKind, ViewportPlan, focus_zoom


logger = logging.getLogger(__name__)


# Card input event types
POINTER_ENTER = "pointerenter"
POINTER_LEAVE = "pointerleave"
FOCUS = "focus"
BLUR = "blur"
CLICK = "click"
KEYDOWN = "keydown"

ACTIVATION_KEYS = frozenset({"Enter", " "})

_ACTION_EVENT_TYPES = {
    CardAction.HIGHLIGHT: (POINTER_ENTER, POINTER_LEAVE, FOCUS, BLUR),
    CardAction.FOCUS: (CLICK, KEYDOWN),
}


@dataclass(frozen=True)
class InputEvent:
    """A pointer or keyboard event delivered to a list card.

    Attributes:
        type: Event type (pointerenter, pointerleave, focus, blur, click, keydown)
        key: Key name for keydown events
    """
    type: str
    key: str | None = None


class MarkerHandle(Protocol):
    """A live circular marker on the map."""

    @property
    def latitude(self) -> float: ...

    @property
    def longitude(self) -> float: ...

    def set_style(self, style: MarkerStyle) -> None: ...

    def open_popup(self) -> None: ...

    def close_popup(self) -> None: ...


class MapWidget(Protocol):
    """Map capability consumed by the projector."""

    @property
    def zoom(self) -> float: ...

    def add_circle_marker(
        self,
        latitude: float,
        longitude: float,
        style: MarkerStyle,
        popup_html: str,
    ) -> MarkerHandle: ...

    def remove_marker(self, marker: MarkerHandle) -> None: ...

    def set_view(self, latitude: float, longitude: float, zoom: float) -> None: ...

    def fit_bounds(self, bounds: BoundingBox, padding: int, max_zoom: float | None) -> None: ...

    def fly_to(self, latitude: float, longitude: float, zoom: float, duration: float) -> None: ...


InputHandler = Callable[[InputEvent], bool]


class ListSurface(Protocol):
    """List container capability consumed by the projector."""

    def replace_content(self, html: str) -> None: ...

    def add_listener(self, item_id: str, event_type: str, handler: InputHandler) -> Any: ...

    def remove_listener(self, token: Any) -> None: ...


class HighlightState(str, Enum):
    """Highlight state of one event across card and marker."""
    IDLE = "idle"
    ACTIVE = "active"


class BindingDispatcher:
    """Attaches and detaches card listeners from declarative bindings.

    Rendering decides which cards can highlight or focus; this class only
    turns those bindings into listener registrations on the surface.
    """

    def __init__(self, surface: ListSurface) -> None:
        self.surface = surface
        self._tokens: list[Any] = []

    @property
    def listener_count(self) -> int:
        return len(self._tokens)

    def attach(
        self,
        bindings: Iterable[CardBinding],
        handler: Callable[[str, InputEvent], bool],
    ) -> None:
        """Register listeners for every binding.

        Args:
            bindings: Card bindings from the projection
            handler: Called with (event_id, input_event)
        """
        for binding in bindings:
            callback = functools.partial(handler, binding.event_id)
            for action in sorted(binding.actions, key=lambda a: a.value):
                for event_type in _ACTION_EVENT_TYPES[action]:
                    token = self.surface.add_listener(binding.event_id, event_type, callback)
                    self._tokens.append(token)

    def detach_all(self) -> None:
        """Remove every listener registered by attach()."""
        for token in self._tokens:
            self.surface.remove_listener(token)
        self._tokens = []


class SyncProjector:
    """Renders working sets into the list and map and links the two.

    The marker registry, base styles and highlight states are replaced
    together on every render pass; nothing is carried across snapshots.
    """

    def __init__(
        self,
        map_widget: MapWidget,
        list_surface: ListSurface,
        map_config: MapViewConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the projector.

        Args:
            map_widget: Map capability
            list_surface: List capability
            map_config: Map viewport settings (defaults if not provided)
            clock: Returns the current time in seconds
        """
        self.map_widget = map_widget
        self.list_surface = list_surface
        self.map_config = map_config or MapViewConfig()
        self.clock = clock
        self.dispatcher = BindingDispatcher(list_surface)

        self._projection: Projection | None = None
        self._handles: list[MarkerHandle] = []
        self._markers: dict[str, MarkerHandle] = {}
        self._base_styles: dict[str, MarkerStyle] = {}
        self._states: dict[str, HighlightState] = {}

    @property
    def projection(self) -> Projection | None:
        """The projection currently on screen, None after clear()."""
        return self._projection

    @property
    def markers(self) -> Mapping[str, MarkerHandle]:
        """Read-only view of the marker registry."""
        return dict(self._markers)

    def marker_for(self, event_id: str) -> MarkerHandle | None:
        return self._markers.get(event_id)

    def highlight_state(self, event_id: str) -> HighlightState:
        return self._states.get(event_id, HighlightState.IDLE)

    def render(self, events: Iterable[Event], show_aftershocks: bool = False) -> Projection:
        """Render a working set into the map and the list.

        The plan is built first; applying it runs without yielding, so no
        other task can observe markers from one snapshot next to a list
        from another.

        Args:
            events: Working set (filtered and sorted)
            show_aftershocks: Annotate low-magnitude cards

        Returns:
            The applied projection
        """
        projection = build_projection(
            tuple(events),
            self.map_config,
            now_ms=int(self.clock() * 1000),
            show_aftershocks=show_aftershocks,
        )
        self._apply(projection)

        logger.info(
            "Rendered %d events (%d markers, viewport %s)",
            len(projection.events),
            len(self._handles),
            projection.viewport.kind.value,
        )
        return projection

    def show_loading(self) -> None:
        """Replace the list with the loading placeholder."""
        self.list_surface.replace_content(format_placeholder_html(LOADING_MESSAGE))

    def clear(self, message: str = UNAVAILABLE_MESSAGE) -> None:
        """Remove all markers and replace the list with a placeholder.

        Used when the feed is unavailable so stale data is not shown.
        """
        self.dispatcher.detach_all()
        self._remove_markers()
        self._projection = None
        self.list_surface.replace_content(format_placeholder_html(message))

    def _remove_markers(self) -> None:
        for handle in self._handles:
            self.map_widget.remove_marker(handle)
        self._handles = []
        self._markers = {}
        self._base_styles = {}
        self._states = {}

    def _apply(self, projection: Projection) -> None:
        self.dispatcher.detach_all()
        self._remove_markers()

        handles: list[MarkerHandle] = []
        markers: dict[str, MarkerHandle] = {}
        base_styles: dict[str, MarkerStyle] = {}

        for spec in projection.markers:
            handle = self.map_widget.add_circle_marker(
                spec.latitude,
                spec.longitude,
                spec.style,
                spec.popup_html,
            )
            handles.append(handle)
            markers[spec.event_id] = handle
            base_styles[spec.event_id] = spec.style

        self._handles = handles
        self._markers = markers
        self._base_styles = base_styles
        self._states = {event_id: HighlightState.IDLE for event_id in markers}

        self._apply_viewport(projection.viewport)
        self.list_surface.replace_content(projection.list_html)
        self.dispatcher.attach(projection.bindings, self.handle_card_event)
        self._projection = projection

    def _apply_viewport(self, plan: ViewportPlan) -> None:
        if plan.kind is ViewportKind.FIT and plan.bounds is not None:
            self.map_widget.fit_bounds(plan.bounds, plan.padding, plan.max_zoom)
        else:
            self.map_widget.set_view(plan.latitude, plan.longitude, plan.zoom)

    def activate(self, event_id: str) -> bool:
        """Move an event to ACTIVE: emphasize its marker and open its callout.

        Returns:
            False if the event has no marker (no-op)
        """
        marker = self._markers.get(event_id)
        if marker is None:
            return False
        if self._states.get(event_id) is HighlightState.ACTIVE:
            return True

        marker.set_style(highlighted_style(self._base_styles[event_id]))
        marker.open_popup()
        self._states[event_id] = HighlightState.ACTIVE
        logger.debug("Highlight %s: active", event_id)
        return True

    def deactivate(self, event_id: str) -> bool:
        """Move an event back to IDLE and restore its marker style.

        The callout is left as it is; closing it belongs to the map widget.

        Returns:
            False if the event has no marker (no-op)
        """
        marker = self._markers.get(event_id)
        if marker is None:
            return False
        if self._states.get(event_id) is not HighlightState.ACTIVE:
            return True

        marker.set_style(self._base_styles[event_id])
        self._states[event_id] = HighlightState.IDLE
        logger.debug("Highlight %s: idle", event_id)
        return True

    def focus(self, event_id: str) -> bool:
        """Fly the map to an event's marker at a clamped zoom.

        Independent of the highlight state.

        Returns:
            False if the event has no marker (no-op)
        """
        marker = self._markers.get(event_id)
        if marker is None:
            return False

        self.map_widget.fly_to(
            marker.latitude,
            marker.longitude,
            focus_zoom(self.map_widget.zoom, self.map_config),
            self.map_config.focus_duration_seconds,
        )
        return True

    def handle_card_event(self, event_id: str, event: InputEvent) -> bool:
        """Route a card input event to the matching action.

        Args:
            event_id: ID of the card that received the event
            event: The input event

        Returns:
            True if the event triggered an action (the caller should
            suppress the default behaviour for activation keys)
        """
        if event.type in (POINTER_ENTER, FOCUS):
            return self.activate(event_id)
        if event.type in (POINTER_LEAVE, BLUR):
            return self.deactivate(event_id)
        if event.type == CLICK:
            return self.focus(event_id)
        if event.type == KEYDOWN and event.key in ACTIVATION_KEYS:
            return self.focus(event_id)
        return False

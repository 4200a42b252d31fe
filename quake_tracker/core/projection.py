"""Render planning - Pure functions.

Builds everything a render pass needs (marker specs, list HTML, viewport
and card bindings) from one working set snapshot. Applying the plan to
the map and list is done by quake_tracker.sync.
"""

from dataclasses import dataclass
from enum import Enum

from quake_tracker.core.config import MapViewConfig
from quake_tracker.core.event import Event
from quake_tracker.core.formatter import format_list_html, format_popup_html
from quake_tracker.core.styling import MarkerStyle, create_marker_style
from quake_tracker.core.viewport import ViewportPlan, plan_viewport


class CardAction(str, Enum):
    """What a list card can do to its marker."""
    HIGHLIGHT = "highlight"
    FOCUS = "focus"


@dataclass(frozen=True)
class MarkerSpec:
    """A marker to place on the map.

    Attributes:
        event_id: ID of the event the marker represents
        latitude: Marker latitude
        longitude: Marker longitude
        style: Idle marker style
        popup_html: Callout content
    """
    event_id: str
    latitude: float
    longitude: float
    style: MarkerStyle
    popup_html: str


@dataclass(frozen=True)
class CardBinding:
    """Declarative link between a rendered card and its marker.

    Attributes:
        event_id: Card and marker ID
        actions: Actions the card's input events may trigger
    """
    event_id: str
    actions: frozenset[CardAction]


@dataclass(frozen=True)
class Projection:
    """Complete plan for one render pass.

    Attributes:
        events: The working set the plan was built from
        markers: One marker per event, in working set order
        list_html: List content (cards or the empty-state placeholder)
        viewport: Where the map should look
        bindings: One binding per card
    """
    events: tuple[Event, ...]
    markers: tuple[MarkerSpec, ...]
    list_html: str
    viewport: ViewportPlan
    bindings: tuple[CardBinding, ...]

    @property
    def is_empty(self) -> bool:
        return not self.events


CARD_ACTIONS = frozenset({CardAction.HIGHLIGHT, CardAction.FOCUS})


def create_marker_spec(event: Event) -> MarkerSpec:
    """Create the marker spec for an event."""
    return MarkerSpec(
        event_id=event.id,
        latitude=event.latitude,
        longitude=event.longitude,
        style=create_marker_style(event.magnitude),
        popup_html=format_popup_html(event),
    )


def build_projection(
    events: tuple[Event, ...],
    map_config: MapViewConfig,
    now_ms: int,
    show_aftershocks: bool = False,
) -> Projection:
    """Build the render plan for a working set.

    Pure function. Markers, cards and bindings all come from the same
    tuple of events, so the list and the map always agree.

    Args:
        events: Working set (already filtered and sorted)
        map_config: Map viewport settings
        now_ms: Current time in epoch milliseconds
        show_aftershocks: Annotate low-magnitude cards as aftershocks

    Returns:
        Projection for the render pass
    """
    events = tuple(events)
    markers = tuple(create_marker_spec(e) for e in events)
    marker_ids = {m.event_id for m in markers}

    bindings = tuple(
        CardBinding(event_id=e.id, actions=CARD_ACTIONS)
        for e in events
        if e.id in marker_ids
    )

    return Projection(
        events=events,
        markers=markers,
        list_html=format_list_html(events, now_ms, show_aftershocks),
        viewport=plan_viewport(events, map_config),
        bindings=bindings,
    )

"""Map viewport planning - Pure functions.

This module decides where the map should look for a set of events and
computes the zoom that fits a bounding box in Web Mercator tiles.
All functions are pure with no side effects.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from quake_tracker.core.config import MapViewConfig
from quake_tracker.core.event import Event


TILE_SIZE = 256

# Web Mercator cannot represent the poles
MAX_MERCATOR_LATITUDE = 85.05112878


@dataclass(frozen=True)
class BoundingBox:
    """Geographic bounding box.

    Attributes:
        min_latitude: Southern boundary
        max_latitude: Northern boundary
        min_longitude: Western boundary
        max_longitude: Eastern boundary
    """
    min_latitude: float
    max_latitude: float
    min_longitude: float
    max_longitude: float

    def contains(self, latitude: float, longitude: float) -> bool:
        """Check if a point is within this bounding box."""
        return (
            self.min_latitude <= latitude <= self.max_latitude
            and self.min_longitude <= longitude <= self.max_longitude
        )

    @property
    def center(self) -> tuple[float, float]:
        """Return the (latitude, longitude) midpoint of the box."""
        return (
            (self.min_latitude + self.max_latitude) / 2,
            (self.min_longitude + self.max_longitude) / 2,
        )


class ViewportKind(str, Enum):
    """How the viewport was chosen."""
    WORLD = "world"
    CENTER = "center"
    FIT = "fit"


@dataclass(frozen=True)
class ViewportPlan:
    """Where the map should look after a render pass.

    Attributes:
        kind: WORLD (no markers), CENTER (one marker) or FIT (several)
        latitude: Center latitude for WORLD and CENTER
        longitude: Center longitude for WORLD and CENTER
        zoom: Zoom for WORLD and CENTER
        bounds: Box to fit for FIT
        padding: Padding in pixels for FIT
        max_zoom: Zoom cap for FIT
    """
    kind: ViewportKind
    latitude: float | None = None
    longitude: float | None = None
    zoom: float | None = None
    bounds: BoundingBox | None = None
    padding: int = 0
    max_zoom: float | None = None


def bounds_for_points(points: Iterable[tuple[float, float]]) -> BoundingBox | None:
    """Get the smallest box covering all (latitude, longitude) points.

    Pure function.

    Returns:
        BoundingBox, or None if there are no points
    """
    points = list(points)
    if not points:
        return None

    latitudes = [lat for lat, _ in points]
    longitudes = [lon for _, lon in points]

    return BoundingBox(
        min_latitude=min(latitudes),
        max_latitude=max(latitudes),
        min_longitude=min(longitudes),
        max_longitude=max(longitudes),
    )


def plan_viewport(events: Iterable[Event], map_config: MapViewConfig) -> ViewportPlan:
    """Choose the viewport for a working set.

    Pure function.

    - No events: reset to the default world view
    - One event: center on it at the single event zoom
    - Several: fit their bounds with padding, capped at fit_max_zoom

    Args:
        events: Events that have markers
        map_config: Map settings

    Returns:
        ViewportPlan describing the view
    """
    points = [e.coordinates for e in events]

    if not points:
        return ViewportPlan(
            kind=ViewportKind.WORLD,
            latitude=map_config.default_latitude,
            longitude=map_config.default_longitude,
            zoom=map_config.default_zoom,
        )

    if len(points) == 1:
        latitude, longitude = points[0]
        return ViewportPlan(
            kind=ViewportKind.CENTER,
            latitude=latitude,
            longitude=longitude,
            zoom=map_config.single_event_zoom,
        )

    return ViewportPlan(
        kind=ViewportKind.FIT,
        bounds=bounds_for_points(points),
        padding=map_config.fit_padding,
        max_zoom=map_config.fit_max_zoom,
    )


def _mercator_y(latitude: float) -> float:
    """Project a latitude to the unit Web Mercator y axis (0 at the top)."""
    lat = max(-MAX_MERCATOR_LATITUDE, min(MAX_MERCATOR_LATITUDE, latitude))
    sin_lat = math.sin(math.radians(lat))
    return 0.5 - math.log((1 + sin_lat) / (1 - sin_lat)) / (4 * math.pi)


def _mercator_x(longitude: float) -> float:
    return (longitude + 180.0) / 360.0


def zoom_to_fit(
    bounds: BoundingBox,
    width: int,
    height: int,
    padding: int = 0,
    max_zoom: float | None = None,
    min_zoom: float = 0,
) -> int:
    """Compute the largest integer zoom at which bounds fit the viewport.

    Pure function. Padding is applied on every side.

    Args:
        bounds: Box that must be visible
        width: Viewport width in pixels
        height: Viewport height in pixels
        padding: Padding in pixels on each side
        max_zoom: Upper zoom cap
        min_zoom: Lower zoom floor

    Returns:
        Integer zoom level
    """
    usable_width = max(width - 2 * padding, 1)
    usable_height = max(height - 2 * padding, 1)

    span_x = abs(_mercator_x(bounds.max_longitude) - _mercator_x(bounds.min_longitude))
    span_y = abs(_mercator_y(bounds.min_latitude) - _mercator_y(bounds.max_latitude))

    candidates = []
    if span_x > 0:
        candidates.append(math.log2(usable_width / (TILE_SIZE * span_x)))
    if span_y > 0:
        candidates.append(math.log2(usable_height / (TILE_SIZE * span_y)))

    # A single point fits at any zoom
    zoom = math.floor(min(candidates)) if candidates else math.inf

    if max_zoom is not None:
        zoom = min(zoom, math.floor(max_zoom))
    if math.isinf(zoom):
        zoom = math.floor(min_zoom)

    return int(max(zoom, math.ceil(min_zoom)))


def clamp_zoom(zoom: float, lower: float, upper: float) -> float:
    """Clamp a zoom level into [lower, upper]."""
    return min(max(zoom, lower), upper)


def focus_zoom(current_zoom: float, map_config: MapViewConfig) -> float:
    """Zoom used when a list card asks the map to focus on its marker."""
    return clamp_zoom(current_zoom, map_config.focus_min_zoom, map_config.focus_max_zoom)

"""Event data model and normalization - Pure functions.

This module turns raw USGS GeoJSON features into typed Event objects.
Records without usable coordinates are dropped; any other field whose
type does not match is treated as absent. All functions are pure.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable


logger = logging.getLogger(__name__)

UNKNOWN_PLACE = "Unknown location"
PLACEHOLDER_URL = "#"

# Epoch milliseconds of 0001-01-01 and 9999-12-31T23:59:59.999 UTC
MIN_TIMESTAMP_MS = -62135596800000
MAX_TIMESTAMP_MS = 253402300799999


@dataclass(frozen=True)
class Event:
    """Immutable seismic event.

    Attributes:
        id: Feed event ID, the join key between list and map
        magnitude: Magnitude, None when the feed did not report one
        place: Human-readable location description
        time: Event timestamp in epoch milliseconds, None if unknown
        depth: Depth in kilometers, None if unknown
        latitude: Epicenter latitude (always finite)
        longitude: Epicenter longitude (always finite)
        url: Event detail URL
    """
    id: str
    magnitude: float | None
    place: str
    time: int | None
    depth: float | None
    latitude: float
    longitude: float
    url: str = PLACEHOLDER_URL

    @property
    def coordinates(self) -> tuple[float, float]:
        """Return (latitude, longitude) tuple."""
        return (self.latitude, self.longitude)

    @property
    def has_magnitude(self) -> bool:
        return self.magnitude is not None


def _is_real(value: Any) -> bool:
    # bool is an int subclass but never a measurement
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def as_finite_float(value: Any) -> float | None:
    """Return value as a float if it is a finite real number, else None.

    Pure function.
    """
    if not _is_real(value):
        return None
    try:
        number = float(value)
    except OverflowError:
        # int too large for a float
        return None
    if not math.isfinite(number):
        return None
    return number


def as_timestamp(value: Any) -> int | None:
    """Return value as integer epoch milliseconds, else None.

    Pure function. Integral floats are accepted; values outside the
    range of calendar dates (years 1 to 9999) are treated as absent.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        timestamp = value
    elif isinstance(value, float) and math.isfinite(value) and value.is_integer():
        timestamp = int(value)
    else:
        return None

    if not MIN_TIMESTAMP_MS <= timestamp <= MAX_TIMESTAMP_MS:
        return None
    return timestamp


def _as_mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_text(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def _event_id(raw_id: Any, index: int) -> str:
    if isinstance(raw_id, str) and raw_id:
        return raw_id
    if isinstance(raw_id, int) and not isinstance(raw_id, bool):
        return str(raw_id)
    return f"event-{index}"


def normalize_feature(feature: Any, index: int = 0) -> Event | None:
    """Normalize a single GeoJSON feature into an Event.

    Pure function: takes a raw dict, returns an Event or None if the
    feature has no finite latitude/longitude.

    Args:
        feature: GeoJSON feature dict from the USGS feed
        index: Position of the feature in the feed, used for a fallback ID

    Returns:
        Event object or None if the coordinates are invalid
    """
    record = _as_mapping(feature)
    props = _as_mapping(record.get("properties"))
    geometry = _as_mapping(record.get("geometry"))
    coords = geometry.get("coordinates")

    if not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None

    # GeoJSON order is longitude, latitude, depth
    longitude = as_finite_float(coords[0])
    latitude = as_finite_float(coords[1])
    if longitude is None or latitude is None:
        return None

    depth = as_finite_float(coords[2]) if len(coords) > 2 else None

    return Event(
        id=_event_id(record.get("id"), index),
        magnitude=as_finite_float(props.get("mag")),
        place=_as_text(props.get("place"), UNKNOWN_PLACE),
        time=as_timestamp(props.get("time")),
        depth=depth,
        latitude=latitude,
        longitude=longitude,
        url=_as_text(props.get("url"), PLACEHOLDER_URL),
    )


def normalize_features(features: Iterable[Any]) -> tuple[Event, ...]:
    """Normalize a sequence of GeoJSON features, dropping invalid ones.

    Pure function. Feed order is preserved.

    Args:
        features: Raw features from the feed

    Returns:
        Tuple of valid Events
    """
    events = []
    dropped = 0

    for index, feature in enumerate(features):
        event = normalize_feature(feature, index)
        if event is None:
            dropped += 1
            continue
        events.append(event)

    if dropped:
        logger.debug("Dropped %d features without valid coordinates", dropped)

    return tuple(events)


def normalize_feed(geojson: Any) -> tuple[Event, ...]:
    """Normalize a whole GeoJSON FeatureCollection body."""
    features = _as_mapping(geojson).get("features")
    if not isinstance(features, list):
        return ()
    return normalize_features(features)

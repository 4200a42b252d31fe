"""Working set derivation - Pure functions.

Filters the canonical event set by a minimum magnitude and orders it by
one of four sort modes. The canonical set is never mutated; every call
returns a new tuple.
"""

import math
from enum import Enum
from typing import Iterable

from quake_tracker.core.event import Event


class SortMode(str, Enum):
    """Ordering of the working set.

    Values match the sort selector options of the dashboard.
    """
    NEWEST_FIRST = "timeDesc"
    OLDEST_FIRST = "timeAsc"
    MAGNITUDE_DESC = "magDesc"
    MAGNITUDE_ASC = "magAsc"

    @classmethod
    def parse(cls, value: "str | SortMode | None") -> "SortMode":
        """Parse a selector value, falling back to newest-first."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.NEWEST_FIRST


def normalize_threshold(min_magnitude: float | None) -> float:
    """Return a usable threshold; missing or non-finite values mean 0."""
    if min_magnitude is None:
        return 0.0
    try:
        threshold = float(min_magnitude)
    except (TypeError, ValueError):
        return 0.0
    return threshold if math.isfinite(threshold) else 0.0


def passes_threshold(event: Event, min_magnitude: float) -> bool:
    """Check if an event passes the minimum magnitude filter.

    Pure function. An event without magnitude only passes when there is
    no minimum (threshold <= 0); absence cannot satisfy a positive floor.
    """
    if event.magnitude is None:
        return min_magnitude <= 0
    return event.magnitude >= min_magnitude


def filter_by_magnitude(
    events: Iterable[Event],
    min_magnitude: float | None = 0.0,
) -> tuple[Event, ...]:
    """Filter events by minimum magnitude (inclusive).

    Pure function.

    Args:
        events: Events to filter
        min_magnitude: Inclusive lower bound, None or non-finite for no minimum

    Returns:
        Events that pass, in input order
    """
    threshold = normalize_threshold(min_magnitude)
    return tuple(e for e in events if passes_threshold(e, threshold))


def _time_key(event: Event) -> tuple[int, int]:
    # Missing time is the earliest possible moment
    if event.time is None:
        return (0, 0)
    return (1, event.time)


def _newest_first_key(event: Event) -> tuple[int, int]:
    if event.time is None:
        return (1, 0)
    return (0, -event.time)


def _magnitude_desc_key(event: Event) -> tuple[float, tuple[int, int]]:
    magnitude = event.magnitude if event.magnitude is not None else -math.inf
    return (-magnitude, _newest_first_key(event))


def _magnitude_asc_key(event: Event) -> tuple[float, tuple[int, int]]:
    magnitude = event.magnitude if event.magnitude is not None else math.inf
    return (magnitude, _newest_first_key(event))


_SORT_KEYS = {
    SortMode.NEWEST_FIRST: _newest_first_key,
    SortMode.OLDEST_FIRST: _time_key,
    SortMode.MAGNITUDE_DESC: _magnitude_desc_key,
    SortMode.MAGNITUDE_ASC: _magnitude_asc_key,
}


def sort_events(
    events: Iterable[Event],
    mode: SortMode | str = SortMode.NEWEST_FIRST,
) -> tuple[Event, ...]:
    """Sort events by the given mode.

    Pure function. The sort is stable, so events with equal keys keep
    their input order.

    Args:
        events: Events to sort
        mode: Sort mode (or its selector value)

    Returns:
        New sorted tuple
    """
    key = _SORT_KEYS[SortMode.parse(mode)]
    return tuple(sorted(events, key=key))


def derive_working_set(
    events: Iterable[Event],
    min_magnitude: float | None = 0.0,
    mode: SortMode | str = SortMode.NEWEST_FIRST,
) -> tuple[Event, ...]:
    """Filter then sort the canonical set into the displayed working set.

    Pure function.
    """
    return sort_events(filter_by_magnitude(events, min_magnitude), mode)

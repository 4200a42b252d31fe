"""Working set summary statistics - Pure functions."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from quake_tracker.core.event import Event


class StrongestStatus(str, Enum):
    """Availability of the strongest event.

    NO_MATCHES: the working set is empty
    UNAVAILABLE: events exist but none reports a magnitude
    AVAILABLE: at least one event has a magnitude
    """
    NO_MATCHES = "no_matches"
    UNAVAILABLE = "unavailable"
    AVAILABLE = "available"


@dataclass(frozen=True)
class MetricsSummary:
    """Summary of a working set.

    Attributes:
        count: Number of events
        strongest: Event with the largest magnitude, if any
        strongest_status: Why strongest is or is not available
        mean_depth_km: Mean depth over events with a depth, if any
    """
    count: int
    strongest: Event | None
    strongest_status: StrongestStatus
    mean_depth_km: float | None

    @property
    def has_matches(self) -> bool:
        return self.count > 0


NO_MATCHES = MetricsSummary(
    count=0,
    strongest=None,
    strongest_status=StrongestStatus.NO_MATCHES,
    mean_depth_km=None,
)


def _strength_key(event: Event) -> tuple[float, tuple[bool, int], str]:
    # Missing time ranks below every known time
    time = (event.time is not None, event.time or 0)
    return (event.magnitude, time, event.id)


def find_strongest(events: Iterable[Event]) -> Event | None:
    """Return the event with the largest magnitude.

    Pure function. Ties go to the newest event, then to the larger ID,
    so the result depends only on which events are present.
    """
    candidates = [e for e in events if e.magnitude is not None]
    if not candidates:
        return None
    return max(candidates, key=_strength_key)


def mean_depth(events: Iterable[Event]) -> float | None:
    """Average depth in km over events that report a depth."""
    depths = [e.depth for e in events if e.depth is not None]
    if not depths:
        return None
    return sum(depths) / len(depths)


def summarize_events(events: Iterable[Event]) -> MetricsSummary:
    """Compute summary statistics for a working set.

    Pure function. Order does not affect the result.

    Args:
        events: Working set events

    Returns:
        MetricsSummary; NO_MATCHES when there are no events
    """
    events = tuple(events)
    if not events:
        return NO_MATCHES

    strongest = find_strongest(events)
    if strongest is not None:
        status = StrongestStatus.AVAILABLE
    else:
        status = StrongestStatus.UNAVAILABLE

    return MetricsSummary(
        count=len(events),
        strongest=strongest,
        strongest_status=status,
        mean_depth_km=mean_depth(events),
    )

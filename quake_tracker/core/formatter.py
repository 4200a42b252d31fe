"""Display formatting - Pure functions.

This module formats events and metrics into the text and HTML fragments
shown by the list surface and the map callouts. All functions are pure;
the current time is passed in explicitly.
"""

import html
import math
from dataclasses import dataclass
from datetime import datetime, timezone

from quake_tracker.core.event import Event
from quake_tracker.core.metrics import MetricsSummary, StrongestStatus
from quake_tracker.core.styling import get_badge_tier, is_aftershock


MISSING = "—"

EMPTY_STATE_MESSAGE = (
    "No earthquakes meet your filters. Try widening the time window "
    "or lowering the magnitude threshold."
)
LOADING_MESSAGE = "Loading the latest earthquake data…"
UNAVAILABLE_MESSAGE = "Unable to load earthquake data. Check your connection and try again."
FEED_ERROR_MESSAGE = "We could not load the latest earthquakes. Please try again later."

NO_MATCHES_LOCATION = "No earthquakes match the current filters."
NO_MAGNITUDE_LOCATION = "Magnitude unavailable for current selection."


@dataclass(frozen=True)
class MetricsDisplay:
    """Text shown in the summary panel.

    Attributes:
        total: Event count with thousands separators
        strongest: Strongest magnitude, or a dash
        strongest_location: Place and time of the strongest event, or a status message
        average_depth: Mean depth with unit, or a dash
    """
    total: str
    strongest: str
    strongest_location: str
    average_depth: str


def escape_html(value: object) -> str:
    """Escape a string for HTML text or attribute content.

    Pure function. Non-strings render as an empty string.
    """
    if not isinstance(value, str):
        return ""
    return html.escape(value, quote=True)


def format_magnitude(magnitude: float | None) -> str:
    """Format a magnitude with one decimal, or a dash if missing."""
    if magnitude is None or not math.isfinite(magnitude):
        return MISSING
    return f"{magnitude:.1f}"


def format_depth(depth_km: float | None) -> str:
    """Format a depth in kilometers, or a dash if missing."""
    if depth_km is None or not math.isfinite(depth_km):
        return MISSING
    return f"{depth_km:.1f} km"


def format_time(time_ms: int | None) -> str:
    """Format an epoch-millisecond timestamp as a UTC date and time.

    Pure function.

    Returns:
        e.g. "Dec 19, 2023 12:00 UTC", or a dash if missing or out of range
    """
    if time_ms is None:
        return MISSING
    try:
        moment = datetime.fromtimestamp(time_ms / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return MISSING
    return f"{moment:%b} {moment.day}, {moment:%Y %H:%M} UTC"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_relative_time(time_ms: int | None, now_ms: int) -> str:
    """Format how long ago an event happened.

    Pure function.

    Args:
        time_ms: Event time in epoch milliseconds
        now_ms: Current time in epoch milliseconds

    Returns:
        "just now", "12 min ago", "3 hr ago", "2 days ago", or "" if missing
    """
    if time_ms is None:
        return ""

    try:
        minutes = _round_half_up((now_ms - time_ms) / 60000)
    except OverflowError:
        return ""
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes} min ago"

    hours = _round_half_up(minutes / 60)
    if hours < 24:
        return f"{hours} hr ago"

    days = _round_half_up(hours / 24)
    return f"{days} day{'s' if days > 1 else ''} ago"


def format_threshold(min_magnitude: float) -> str:
    """Format the magnitude threshold shown next to the slider."""
    return f"{min_magnitude:.1f}"


def format_popup_html(event: Event) -> str:
    """Format the map callout content for an event."""
    return (
        f"<strong>{escape_html(event.place)}</strong><br>"
        f"Magnitude {format_magnitude(event.magnitude)}<br>"
        f"{format_time(event.time)}<br>"
        f"Depth: {format_depth(event.depth)}"
    )


def format_magnitude_badge(magnitude: float | None) -> str:
    """Format the magnitude badge of a list card."""
    tier = get_badge_tier(magnitude)
    if tier is None:
        return f'<span class="quake-mag">M {MISSING}</span>'
    return (
        f'<span class="quake-mag quake-mag--{tier.value}">'
        f"M {format_magnitude(magnitude)}</span>"
    )


def format_card_html(event: Event, now_ms: int, show_aftershocks: bool = False) -> str:
    """Format one list card.

    Pure function.

    Args:
        event: Event to render
        now_ms: Current time in epoch milliseconds (for the relative time)
        show_aftershocks: Annotate low-magnitude events as aftershocks

    Returns:
        HTML fragment for the card
    """
    aftershock_badge = ""
    if show_aftershocks and is_aftershock(event.magnitude):
        aftershock_badge = ' <span class="aftershock-badge">Aftershock</span>'

    when = format_time(event.time)
    relative = format_relative_time(event.time, now_ms)
    if relative:
        when = f"{when} • {relative}"

    return (
        f'<article class="quake-card" tabindex="0" data-id="{escape_html(event.id)}">'
        f'<div class="quake-card__header">'
        f"{format_magnitude_badge(event.magnitude)}"
        f'<span class="quake-time">{when}</span>'
        f"</div>"
        f'<p class="quake-location">{escape_html(event.place)}</p>'
        f'<p class="quake-depth">Depth: {format_depth(event.depth)}{aftershock_badge}</p>'
        f'<a class="hint" href="{escape_html(event.url)}" target="_blank" rel="noopener">'
        f"USGS event details</a>"
        f"</article>"
    )


def format_placeholder_html(message: str) -> str:
    """Format the single explanatory paragraph shown instead of cards."""
    return f'<p class="empty-state">{escape_html(message)}</p>'


def format_list_html(
    events: tuple[Event, ...],
    now_ms: int,
    show_aftershocks: bool = False,
) -> str:
    """Format the whole list; an empty working set gets the empty-state message."""
    if not events:
        return format_placeholder_html(EMPTY_STATE_MESSAGE)
    return "\n".join(format_card_html(e, now_ms, show_aftershocks) for e in events)


def format_metrics(summary: MetricsSummary) -> MetricsDisplay:
    """Format a metrics summary for the summary panel.

    Pure function. "No matches" and "magnitude unavailable" produce
    different location messages.
    """
    if summary.strongest_status is StrongestStatus.NO_MATCHES:
        return MetricsDisplay(
            total="0",
            strongest=MISSING,
            strongest_location=NO_MATCHES_LOCATION,
            average_depth=MISSING,
        )

    if summary.strongest is not None:
        strongest = format_magnitude(summary.strongest.magnitude)
        location = f"{summary.strongest.place} • {format_time(summary.strongest.time)}"
    else:
        strongest = MISSING
        location = NO_MAGNITUDE_LOCATION

    return MetricsDisplay(
        total=f"{summary.count:,}",
        strongest=strongest,
        strongest_location=location,
        average_depth=format_depth(summary.mean_depth_km),
    )

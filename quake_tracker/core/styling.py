"""Marker and badge styling - Pure functions.

Maps magnitudes to marker colors, radii and list badge tiers. The
actual drawing is handled by the map widget and list surface.
"""

from dataclasses import dataclass, replace
from enum import Enum


NEUTRAL_COLOR = "#4A5568"

MIN_MARKER_RADIUS = 6.0
RADIUS_PER_MAGNITUDE = 2.2

BASE_WEIGHT = 2
BASE_FILL_OPACITY = 0.6
ACTIVE_WEIGHT = 4
ACTIVE_FILL_OPACITY = 0.85

AFTERSHOCK_THRESHOLD = 3.5


class BadgeTier(str, Enum):
    """Severity tier of a list card magnitude badge."""
    STRONG = "strong"
    MODERATE = "moderate"
    LIGHT = "light"


@dataclass(frozen=True)
class MarkerStyle:
    """Immutable style of a circular map marker.

    Attributes:
        radius: Radius in pixels
        color: Outline hex color
        weight: Outline width in pixels
        fill_color: Fill hex color
        fill_opacity: Fill opacity (0-1)
    """
    radius: float
    color: str
    weight: int = BASE_WEIGHT
    fill_color: str = NEUTRAL_COLOR
    fill_opacity: float = BASE_FILL_OPACITY


def get_magnitude_color(magnitude: float | None) -> str:
    """Get hex color for magnitude visualization.

    Pure function. Five bands; missing magnitude is neutral gray.

    Args:
        magnitude: Event magnitude or None

    Returns:
        Hex color string (e.g., "#C53030")
    """
    if magnitude is None:
        return NEUTRAL_COLOR
    if magnitude >= 6.5:
        return "#C53030"  # red
    elif magnitude >= 5.5:
        return "#DD6B20"  # orange
    elif magnitude >= 4.5:
        return "#D69E2E"  # yellow
    elif magnitude >= 3.5:
        return "#38A169"  # green
    return "#3F63DD"  # blue


def get_marker_radius(magnitude: float | None) -> float:
    """Determine marker radius based on magnitude.

    Pure function. Grows linearly with magnitude, never below the floor.
    """
    if magnitude is None:
        return MIN_MARKER_RADIUS
    return max(MIN_MARKER_RADIUS, magnitude * RADIUS_PER_MAGNITUDE)


def create_marker_style(magnitude: float | None) -> MarkerStyle:
    """Create the idle marker style for an event magnitude.

    Pure function.
    """
    color = get_magnitude_color(magnitude)
    return MarkerStyle(
        radius=get_marker_radius(magnitude),
        color=color,
        fill_color=color,
    )


def highlighted_style(style: MarkerStyle) -> MarkerStyle:
    """Return the active (highlighted) variant of a marker style."""
    return replace(style, weight=ACTIVE_WEIGHT, fill_opacity=ACTIVE_FILL_OPACITY)


def get_badge_tier(magnitude: float | None) -> BadgeTier | None:
    """Get the list badge tier for a magnitude, None if it is missing."""
    if magnitude is None:
        return None
    if magnitude >= 5.5:
        return BadgeTier.STRONG
    elif magnitude >= 4.5:
        return BadgeTier.MODERATE
    return BadgeTier.LIGHT


def is_aftershock(magnitude: float | None) -> bool:
    """Check if a magnitude is low enough to be flagged as an aftershock."""
    return magnitude is not None and magnitude < AFTERSHOCK_THRESHOLD

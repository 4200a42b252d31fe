"""Functional Core - Pure functions with no side effects.

This module contains all business logic as pure functions:
- Event normalization
- Working set filtering and sorting
- Summary metrics
- Marker styling and viewport planning
- HTML and text formatting
- Render planning

All functions here are deterministic and have no I/O.
"""

from quake_tracker.core.event import Event, normalize_feature, normalize_features
from quake_tracker.core.working_set import SortMode, derive_working_set, filter_by_magnitude, sort_events
from quake_tracker.core.metrics import MetricsSummary, StrongestStatus, summarize_events
from quake_tracker.core.styling import MarkerStyle, create_marker_style, get_magnitude_color
from quake_tracker.core.viewport import BoundingBox, ViewportPlan, plan_viewport
from quake_tracker.core.formatter import format_card_html, format_metrics
from quake_tracker.core.projection import Projection, build_projection

__all__ = [
    # Event
    "Event",
    "normalize_feature",
    "normalize_features",
    # Working set
    "SortMode",
    "derive_working_set",
    "filter_by_magnitude",
    "sort_events",
    # Metrics
    "MetricsSummary",
    "StrongestStatus",
    "summarize_events",
    # Styling
    "MarkerStyle",
    "create_marker_style",
    "get_magnitude_color",
    # Viewport
    "BoundingBox",
    "ViewportPlan",
    "plan_viewport",
    # Formatter
    "format_card_html",
    "format_metrics",
    # Projection
    "Projection",
    "build_projection",
]

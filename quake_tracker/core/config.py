"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

import math
from dataclasses import dataclass, field

from quake_tracker.core.working_set import SortMode


# Time ranges offered by the dashboard, mapped to USGS summary feed names
FEED_LOOKUP = {
    "hour": "all_hour",
    "day": "all_day",
    "week": "all_week",
}

DEFAULT_TIME_RANGE = "day"


@dataclass(frozen=True)
class MapViewConfig:
    """Map viewport and rendering settings.

    Attributes:
        default_latitude: World view center latitude
        default_longitude: World view center longitude
        default_zoom: World view zoom (shown when there are no markers)
        min_zoom: Lowest zoom the map allows
        max_zoom: Highest zoom the map allows
        single_event_zoom: Zoom used when exactly one marker is shown
        fit_padding: Padding in pixels when fitting to several markers
        fit_max_zoom: Zoom cap when fitting to several markers
        focus_min_zoom: Lower clamp for the focus action
        focus_max_zoom: Upper clamp for the focus action
        focus_duration_seconds: Fly-to animation duration
        width: Rendered map width in pixels
        height: Rendered map height in pixels
        tile_url: Tile URL template
    """
    default_latitude: float = 20.0
    default_longitude: float = 0.0
    default_zoom: float = 2.2
    min_zoom: float = 2
    max_zoom: float = 10
    single_event_zoom: float = 6
    fit_padding: int = 40
    fit_max_zoom: float = 6
    focus_min_zoom: float = 5
    focus_max_zoom: float = 7
    focus_duration_seconds: float = 0.7
    width: int = 800
    height: int = 400
    tile_url: str = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        feed_base_url: Base URL of the USGS summary feeds
        request_timeout_seconds: HTTP timeout for feed requests
        time_range: Initial time range (hour, day or week)
        min_magnitude: Initial minimum magnitude threshold
        sort_mode: Initial sort mode
        show_aftershocks: Initial aftershock highlight toggle
        auto_refresh: Start with periodic refresh enabled
        refresh_interval_seconds: Period of the auto refresh timer
        discard_stale_responses: Drop feed responses superseded by a newer request
        map: Map viewport settings
    """
    feed_base_url: str = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary"
    request_timeout_seconds: int = 30
    time_range: str = DEFAULT_TIME_RANGE
    min_magnitude: float = 0.0
    sort_mode: SortMode = SortMode.NEWEST_FIRST
    show_aftershocks: bool = False
    auto_refresh: bool = False
    refresh_interval_seconds: int = 60
    discard_stale_responses: bool = False
    map: MapViewConfig = field(default_factory=MapViewConfig)


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_coordinates(lat: float, lon: float, field_name: str) -> list[ValidationError]:
    """Validate latitude/longitude coordinates.

    Pure function.

    Args:
        lat: Latitude value
        lon: Longitude value
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    if not -90 <= lat <= 90:
        errors.append(ValidationError(
            field=field_name,
            message=f"Latitude {lat} out of range [-90, 90]",
        ))

    if not -180 <= lon <= 180:
        errors.append(ValidationError(
            field=field_name,
            message=f"Longitude {lon} out of range [-180, 180]",
        ))

    return errors


def validate_map_config(map_config: MapViewConfig, field_name: str = "map") -> list[ValidationError]:
    """Validate map viewport settings.

    Pure function.
    """
    errors = validate_coordinates(
        map_config.default_latitude,
        map_config.default_longitude,
        f"{field_name}.default_center",
    )

    if map_config.min_zoom > map_config.max_zoom:
        errors.append(ValidationError(
            field=field_name,
            message=f"min_zoom ({map_config.min_zoom}) > max_zoom ({map_config.max_zoom})",
        ))

    if map_config.focus_min_zoom > map_config.focus_max_zoom:
        errors.append(ValidationError(
            field=field_name,
            message=(
                f"focus_min_zoom ({map_config.focus_min_zoom}) > "
                f"focus_max_zoom ({map_config.focus_max_zoom})"
            ),
        ))

    if map_config.fit_padding < 0:
        errors.append(ValidationError(
            field=f"{field_name}.fit_padding",
            message=f"Padding must not be negative, got {map_config.fit_padding}",
        ))

    if map_config.width <= 0 or map_config.height <= 0:
        errors.append(ValidationError(
            field=f"{field_name}.size",
            message=f"Map size must be positive, got {map_config.width}x{map_config.height}",
        ))

    if 2 * map_config.fit_padding >= min(map_config.width, map_config.height):
        errors.append(ValidationError(
            field=f"{field_name}.fit_padding",
            message="Padding leaves no room for markers at the configured map size",
            severity="warning",
        ))

    if map_config.fit_max_zoom > map_config.max_zoom:
        errors.append(ValidationError(
            field=f"{field_name}.fit_max_zoom",
            message=(
                f"fit_max_zoom ({map_config.fit_max_zoom}) exceeds "
                f"max_zoom ({map_config.max_zoom})"
            ),
            severity="warning",
        ))

    return errors


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    if config.time_range not in FEED_LOOKUP:
        errors.append(ValidationError(
            field="time_range",
            message=(
                f"Unknown time range '{config.time_range}', "
                f"expected one of {', '.join(FEED_LOOKUP)}"
            ),
        ))

    if not math.isfinite(config.min_magnitude):
        errors.append(ValidationError(
            field="min_magnitude",
            message=f"Minimum magnitude must be finite, got {config.min_magnitude}",
        ))
    elif config.min_magnitude < 0:
        errors.append(ValidationError(
            field="min_magnitude",
            message="Negative minimum magnitude behaves like no minimum",
            severity="warning",
        ))

    if config.refresh_interval_seconds <= 0:
        errors.append(ValidationError(
            field="refresh_interval_seconds",
            message=f"Refresh interval must be positive, got {config.refresh_interval_seconds}",
        ))

    if config.request_timeout_seconds <= 0:
        errors.append(ValidationError(
            field="request_timeout_seconds",
            message=f"Request timeout must be positive, got {config.request_timeout_seconds}",
        ))

    if not config.feed_base_url.startswith(("http://", "https://")):
        errors.append(ValidationError(
            field="feed_base_url",
            message=f"Feed URL must be http(s), got '{config.feed_base_url}'",
        ))

    errors.extend(validate_map_config(config.map))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )

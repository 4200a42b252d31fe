"""Static Map Widget - Imperative Shell.

An in-memory map widget that tracks markers, callouts and the viewport,
and renders snapshots as PNG images using OpenStreetMap tiles.
All I/O (tile fetching) happens in render_png().
"""

import io
import logging
import math
from dataclasses import dataclass

from staticmap import CircleMarker, StaticMap

from quake_tracker.core.config import MapViewConfig
from quake_tracker.core.styling import MarkerStyle
from quake_tracker.core.viewport import BoundingBox, clamp_zoom, zoom_to_fit


logger = logging.getLogger(__name__)


@dataclass
class MapImageResult:
    """Result of map image generation.

    Attributes:
        success: Whether the image was generated successfully
        image_bytes: PNG image data if successful
        error: Error message if failed
    """
    success: bool
    image_bytes: bytes | None = None
    error: str | None = None


class StaticMarker:
    """A circular marker held by StaticMapWidget."""

    def __init__(
        self,
        latitude: float,
        longitude: float,
        style: MarkerStyle,
        popup_html: str,
    ) -> None:
        self._latitude = latitude
        self._longitude = longitude
        self.style = style
        self.popup_html = popup_html
        self.popup_open = False

    @property
    def latitude(self) -> float:
        return self._latitude

    @property
    def longitude(self) -> float:
        return self._longitude

    def set_style(self, style: MarkerStyle) -> None:
        self.style = style

    def open_popup(self) -> None:
        self.popup_open = True

    def close_popup(self) -> None:
        self.popup_open = False


def _mercator_midpoint(bounds: BoundingBox) -> tuple[float, float]:
    """Center of a box as seen on a Web Mercator map (latitude, longitude)."""
    def to_y(lat: float) -> float:
        return math.log(math.tan(math.pi / 4 + math.radians(lat) / 2))

    y = (to_y(bounds.min_latitude) + to_y(bounds.max_latitude)) / 2
    latitude = math.degrees(2 * math.atan(math.exp(y)) - math.pi / 2)
    return latitude, (bounds.min_longitude + bounds.max_longitude) / 2


class StaticMapWidget:
    """Map widget backed by the staticmap renderer.

    This is part of the imperative shell - render_png() fetches map tiles.
    """

    def __init__(self, map_config: MapViewConfig | None = None) -> None:
        """Initialize the widget at the default world view.

        Args:
            map_config: Map settings (size, zoom limits, tile URL)
        """
        self.map_config = map_config or MapViewConfig()
        self.latitude = self.map_config.default_latitude
        self.longitude = self.map_config.default_longitude
        self._zoom = self.map_config.default_zoom
        self.last_animation_seconds: float | None = None
        self._markers: list[StaticMarker] = []

    @property
    def zoom(self) -> float:
        return self._zoom

    @property
    def markers(self) -> list[StaticMarker]:
        return list(self._markers)

    def _clamp(self, zoom: float) -> float:
        return clamp_zoom(zoom, self.map_config.min_zoom, self.map_config.max_zoom)

    def add_circle_marker(
        self,
        latitude: float,
        longitude: float,
        style: MarkerStyle,
        popup_html: str,
    ) -> StaticMarker:
        marker = StaticMarker(latitude, longitude, style, popup_html)
        self._markers.append(marker)
        return marker

    def remove_marker(self, marker: StaticMarker) -> None:
        # Removing a marker that is not on the map is a no-op
        if marker in self._markers:
            self._markers.remove(marker)

    def set_view(self, latitude: float, longitude: float, zoom: float) -> None:
        self.latitude = latitude
        self.longitude = longitude
        self._zoom = self._clamp(zoom)
        self.last_animation_seconds = None

    def fit_bounds(self, bounds: BoundingBox, padding: int, max_zoom: float | None) -> None:
        self.latitude, self.longitude = _mercator_midpoint(bounds)
        self._zoom = self._clamp(zoom_to_fit(
            bounds,
            self.map_config.width,
            self.map_config.height,
            padding=padding,
            max_zoom=max_zoom,
            min_zoom=self.map_config.min_zoom,
        ))
        self.last_animation_seconds = None

    def fly_to(self, latitude: float, longitude: float, zoom: float, duration: float) -> None:
        # A static snapshot has no animation; the duration is only recorded
        self.latitude = latitude
        self.longitude = longitude
        self._zoom = self._clamp(zoom)
        self.last_animation_seconds = duration

    def render_png(self) -> MapImageResult:
        """Render the current view and markers as a PNG image.

        This method performs I/O (fetches map tiles from tile server).

        Returns:
            MapImageResult with image bytes or error
        """
        zoom = int(round(self._zoom))

        logger.info(
            "Rendering map at (%.4f, %.4f) zoom %d with %d markers",
            self.latitude,
            self.longitude,
            zoom,
            len(self._markers),
        )

        try:
            static_map = StaticMap(
                self.map_config.width,
                self.map_config.height,
                url_template=self.map_config.tile_url,
            )

            for marker in self._markers:
                # (lon, lat) order for staticmap
                coordinate = (marker.longitude, marker.latitude)
                # Outline ring first so the fill renders on top of it
                static_map.add_marker(CircleMarker(
                    coordinate,
                    marker.style.color,
                    int(round(marker.style.radius + marker.style.weight)),
                ))
                static_map.add_marker(CircleMarker(
                    coordinate,
                    marker.style.fill_color,
                    int(round(marker.style.radius)),
                ))

            image = static_map.render(zoom=zoom, center=(self.longitude, self.latitude))

            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
            image_bytes = buffer.getvalue()

            logger.info("Generated map image: %d bytes", len(image_bytes))

            return MapImageResult(success=True, image_bytes=image_bytes)

        except Exception as e:
            logger.error("Failed to generate map: %s", str(e))
            return MapImageResult(success=False, error=str(e))

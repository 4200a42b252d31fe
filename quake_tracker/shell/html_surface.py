"""HTML Page Surface - Imperative Shell.

Holds the list container, summary panel and error banner of the
dashboard as HTML, keeps a registry of per-card input listeners and
writes the assembled page to disk.
"""

import itertools
import logging
from pathlib import Path

from quake_tracker.core.formatter import MISSING, MetricsDisplay, escape_html
from quake_tracker.sync import InputEvent, InputHandler


logger = logging.getLogger(__name__)


PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
<header><h1>{title}</h1></header>
<p id="error-message" class="error"{error_hidden}>{error}</p>
<section class="controls">
<span>Minimum magnitude: <output id="magnitude-value">{threshold}</output></span>
</section>
<section class="metrics">
<div><h2>Total earthquakes</h2><p id="total-quakes">{total}</p></div>
<div><h2>Strongest</h2><p id="strongest-quake">{strongest}</p>
<p id="strongest-location">{strongest_location}</p></div>
<div><h2>Average depth</h2><p id="average-depth">{average_depth}</p></div>
</section>
{map_block}
<section id="quake-list">
{content}
</section>
</body>
</html>
"""


class HtmlPageSurface:
    """List and status surface that renders to a static HTML page."""

    def __init__(self, title: str = "Earthquake Tracker") -> None:
        self.title = title
        self.content = ""
        self.error_message: str | None = None
        self.threshold_text = MISSING
        self.metrics = MetricsDisplay(
            total="0",
            strongest=MISSING,
            strongest_location="",
            average_depth=MISSING,
        )
        self._listeners: dict[int, tuple[str, str, InputHandler]] = {}
        self._tokens = itertools.count(1)

    # List surface

    def replace_content(self, html: str) -> None:
        self.content = html

    def add_listener(self, item_id: str, event_type: str, handler: InputHandler) -> int:
        token = next(self._tokens)
        self._listeners[token] = (item_id, event_type, handler)
        return token

    def remove_listener(self, token: int) -> None:
        self._listeners.pop(token, None)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def listeners_for(self, item_id: str) -> list[str]:
        """Event types with a listener on an item."""
        return [t for i, t, _ in self._listeners.values() if i == item_id]

    def dispatch(self, item_id: str, event_type: str, key: str | None = None) -> bool:
        """Deliver an input event to the listeners of an item.

        Returns:
            True if a listener handled it (default action suppressed)
        """
        event = InputEvent(type=event_type, key=key)
        handled = False
        for listener_item, listener_type, handler in list(self._listeners.values()):
            if listener_item == item_id and listener_type == event_type:
                handled = handler(event) or handled
        return handled

    # Status surface

    def show_metrics(self, display: MetricsDisplay) -> None:
        self.metrics = display

    def show_error(self, message: str | None) -> None:
        self.error_message = message or None

    def show_threshold(self, text: str) -> None:
        self.threshold_text = text

    # Output

    def render_document(self, map_image: str | None = None) -> str:
        """Assemble the full HTML page.

        Args:
            map_image: Relative path of the map snapshot, if any
        """
        map_block = ""
        if map_image:
            map_block = (
                f'<section id="map"><img src="{escape_html(map_image)}" '
                f'alt="Map of earthquake locations"></section>'
            )

        return PAGE_TEMPLATE.format(
            title=escape_html(self.title),
            error=escape_html(self.error_message or ""),
            error_hidden="" if self.error_message else " hidden",
            threshold=escape_html(self.threshold_text),
            total=escape_html(self.metrics.total),
            strongest=escape_html(self.metrics.strongest),
            strongest_location=escape_html(self.metrics.strongest_location),
            average_depth=escape_html(self.metrics.average_depth),
            map_block=map_block,
            content=self.content,
        )

    def write(self, path: str | Path, map_image: str | None = None) -> Path:
        """Write the page to a file.

        This method performs file I/O.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render_document(map_image), encoding="utf-8")
        logger.info("Wrote dashboard page to %s", path)
        return path

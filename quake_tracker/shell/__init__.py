"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- USGS feed client (HTTP)
- Map widget (tile fetching and PNG rendering)
- HTML page surface (file output)
- Periodic timers (event loop)
- Configuration loading (environment/files)

Keep this layer thin and simple. All business logic should be in core.
"""

from quake_tracker.shell.usgs_client import FeedError, USGSFeedClient
from quake_tracker.shell.static_map_widget import StaticMapWidget
from quake_tracker.shell.html_surface import HtmlPageSurface
from quake_tracker.shell.timer import AsyncioTimerFactory
from quake_tracker.shell.config_loader import load_config, Config

__all__ = [
    "FeedError",
    "USGSFeedClient",
    "StaticMapWidget",
    "HtmlPageSurface",
    "AsyncioTimerFactory",
    "load_config",
    "Config",
]

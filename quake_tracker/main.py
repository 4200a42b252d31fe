"""Command-line entry point.

Loads configuration, wires the feed client, map widget and HTML page
into a RefreshController and runs it on an asyncio event loop. After
every refresh the page (index.html) and map snapshot (map.png) are
written to the output directory.

Usage:
    # One refresh of the past day, strongest first
    python -m quake_tracker --sort magDesc --output out/

    # Keep refreshing every minute, stop after 5 refreshes
    python -m quake_tracker --range hour --watch --cycles 5

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml)
    LOG_LEVEL: Logging level (default: INFO)
"""

import argparse
import asyncio
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path

from quake_tracker.controller import RefreshController, RefreshResult
from quake_tracker.core.config import FEED_LOOKUP, Config, validate_config
from quake_tracker.core.working_set import SortMode
from quake_tracker.shell.config_loader import load_config, load_config_from_env
from quake_tracker.shell.html_surface import HtmlPageSurface
from quake_tracker.shell.static_map_widget import StaticMapWidget
from quake_tracker.shell.timer import AsyncioTimerFactory
from quake_tracker.shell.usgs_client import USGSFeedClient
from quake_tracker.sync import SyncProjector


logger = logging.getLogger(__name__)

MAP_IMAGE_NAME = "map.png"
PAGE_NAME = "index.html"


def configure_logging() -> None:
    """Configure logging from the LOG_LEVEL environment variable."""
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quake-tracker",
        description="Render recent USGS earthquakes as a ranked list and a map",
    )
    parser.add_argument("--config", help="Path to YAML config file")
    parser.add_argument("--range", dest="time_range", choices=sorted(FEED_LOOKUP))
    parser.add_argument("--min-magnitude", type=float)
    parser.add_argument("--sort", choices=[m.value for m in SortMode])
    parser.add_argument(
        "--aftershocks",
        action="store_true",
        default=None,
        help="Annotate events below M3.5 as aftershocks",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Enable auto refresh and keep running",
    )
    parser.add_argument(
        "--cycles",
        type=int,
        default=0,
        help="Stop after this many refreshes in watch mode (0 = run forever)",
    )
    parser.add_argument("--output", default="out", help="Output directory")
    parser.add_argument(
        "--no-map-image",
        action="store_true",
        help="Skip rendering the map snapshot (no tile downloads)",
    )
    return parser


def _get_config(config_path: str | None) -> Config:
    """Load configuration from file or environment."""
    config_path = config_path or os.environ.get("CONFIG_PATH")

    if config_path:
        return load_config(config_path)
    if Path("config/config.yaml").exists():
        return load_config()
    return load_config_from_env()


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Apply command-line options on top of the loaded configuration."""
    overrides = {}
    if args.time_range is not None:
        overrides["time_range"] = args.time_range
    if args.min_magnitude is not None:
        overrides["min_magnitude"] = args.min_magnitude
    if args.sort is not None:
        overrides["sort_mode"] = SortMode(args.sort)
    if args.aftershocks is not None:
        overrides["show_aftershocks"] = args.aftershocks
    if args.watch:
        overrides["auto_refresh"] = True
    return replace(config, **overrides)


class OutputWriter:
    """Writes the page and map snapshot after each refresh."""

    def __init__(
        self,
        output_dir: Path,
        page: HtmlPageSurface,
        map_widget: StaticMapWidget,
        render_map: bool = True,
    ) -> None:
        self.output_dir = output_dir
        self.page = page
        self.map_widget = map_widget
        self.render_map = render_map
        self.results: list[RefreshResult] = []

    def __call__(self, result: RefreshResult) -> None:
        self.results.append(result)
        if result.stale:
            return

        map_image = None
        if self.render_map:
            image = self.map_widget.render_png()
            if image.success and image.image_bytes:
                self.output_dir.mkdir(parents=True, exist_ok=True)
                (self.output_dir / MAP_IMAGE_NAME).write_bytes(image.image_bytes)
                map_image = MAP_IMAGE_NAME
            else:
                logger.warning("Map snapshot skipped: %s", image.error)

        self.page.write(self.output_dir / PAGE_NAME, map_image=map_image)


async def run(config: Config, args: argparse.Namespace) -> list[RefreshResult]:
    """Run the dashboard until the requested number of refreshes is done."""
    map_widget = StaticMapWidget(config.map)
    page = HtmlPageSurface()
    writer = OutputWriter(
        Path(args.output),
        page,
        map_widget,
        render_map=not args.no_map_image,
    )

    done = asyncio.Event()

    def on_refresh(result: RefreshResult) -> None:
        writer(result)
        if args.cycles and len(writer.results) >= args.cycles:
            done.set()

    controller = RefreshController(
        config,
        feed_source=USGSFeedClient(config.feed_base_url, config.request_timeout_seconds),
        projector=SyncProjector(map_widget, page, config.map),
        status_surface=page,
        timer_factory=AsyncioTimerFactory(),
        on_refresh=on_refresh,
    )

    try:
        await controller.start()
        if args.watch:
            await done.wait()
    finally:
        controller.stop()

    return writer.results


def main(argv: list[str] | None = None) -> int:
    """Run the command-line interface.

    Returns:
        Process exit code (0 ok, 1 last refresh failed, 2 invalid config)
    """
    configure_logging()
    args = build_parser().parse_args(argv)

    config = apply_overrides(_get_config(args.config), args)

    validation = validate_config(config)
    for warning in validation.warnings:
        logger.warning("Config %s: %s", warning.field, warning.message)
    if not validation.valid:
        for error in validation.critical_errors:
            logger.error("Config %s: %s", error.field, error.message)
        return 2

    try:
        results = asyncio.run(run(config, args))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 0

    if results and not results[-1].success:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

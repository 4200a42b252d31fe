"""Refresh Controller - Wires Functional Core and Imperative Shell.

This module owns the dashboard state snapshot and decides when to
re-fetch the feed and when to only re-run the filter/sort/render
pipeline over the events already held.

Everything runs on one asyncio event loop. The feed fetch is the only
suspension point; render passes never await.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol

from quake_tracker.core.config import DEFAULT_TIME_RANGE, FEED_LOOKUP, Config
from quake_tracker.core.event import Event, normalize_features
from quake_tracker.core.formatter import (
    FEED_ERROR_MESSAGE,
    MetricsDisplay,
    format_metrics,
    format_threshold,
)
from quake_tracker.core.metrics import NO_MATCHES, MetricsSummary, summarize_events
from quake_tracker.core.working_set import SortMode, derive_working_set, normalize_threshold
from quake_tracker.sync import SyncProjector


logger = logging.getLogger(__name__)


class FeedSource(Protocol):
    """Anything that can fetch raw features for a time range."""

    def fetch(self, time_range: str) -> Awaitable[list[dict[str, Any]]]: ...


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class TimerFactory(Protocol):
    def start(self, interval_seconds: float, callback: Callable[[], Any]) -> TimerHandle: ...


class StatusSurface(Protocol):
    """Summary panel, error banner and threshold label."""

    def show_metrics(self, display: MetricsDisplay) -> None: ...

    def show_error(self, message: str | None) -> None: ...

    def show_threshold(self, text: str) -> None: ...


class RefreshStatus(str, Enum):
    """State of the fetch cycle."""
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


@dataclass(frozen=True)
class DashboardState:
    """Immutable snapshot of the canonical events and the view criteria.

    Attributes:
        events: Canonical event set from the last successful fetch
        time_range: Selected time range (hour, day or week)
        min_magnitude: Minimum magnitude threshold
        sort_mode: Working set ordering
        show_aftershocks: Aftershock annotation toggle
        auto_refresh: Periodic refresh toggle
    """
    events: tuple[Event, ...] = ()
    time_range: str = DEFAULT_TIME_RANGE
    min_magnitude: float = 0.0
    sort_mode: SortMode = SortMode.NEWEST_FIRST
    show_aftershocks: bool = False
    auto_refresh: bool = False

    @classmethod
    def from_config(cls, config: Config) -> "DashboardState":
        return cls(
            time_range=config.time_range if config.time_range in FEED_LOOKUP else DEFAULT_TIME_RANGE,
            min_magnitude=normalize_threshold(config.min_magnitude),
            sort_mode=SortMode.parse(config.sort_mode),
            show_aftershocks=config.show_aftershocks,
            auto_refresh=config.auto_refresh,
        )


@dataclass
class RefreshResult:
    """Result of one fetch-normalize-render cycle.

    Attributes:
        time_range: Time range that was requested
        success: Whether the feed was loaded
        events_fetched: Valid events normalized from the feed
        events_shown: Events in the rendered working set
        error: Error message if the fetch failed
        stale: True if the response was discarded because a newer
            request had been issued
    """
    time_range: str
    success: bool
    events_fetched: int = 0
    events_shown: int = 0
    error: str | None = None
    stale: bool = False

    @property
    def summary(self) -> str:
        """Human-readable summary of the refresh."""
        if self.stale:
            return f"Discarded stale {self.time_range} response"
        if not self.success:
            return f"Failed to load {self.time_range} feed: {self.error}"
        return (
            f"Loaded {self.events_fetched} events ({self.time_range}), "
            f"{self.events_shown} shown"
        )


class RefreshController:
    """Coordinates fetching, the derivation pipeline and rendering.

    This class wires together:
    - Feed source (fetches raw features)
    - Core functions (normalization, filter/sort, metrics, formatting)
    - Sync projector (list and map)
    - Status surface (metrics panel, error banner, threshold label)
    - Timer factory (periodic refresh)
    """

    def __init__(
        self,
        config: Config,
        feed_source: FeedSource,
        projector: SyncProjector,
        status_surface: StatusSurface | None = None,
        timer_factory: TimerFactory | None = None,
        on_refresh: Callable[[RefreshResult], None] | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            config: Application configuration
            feed_source: Source of raw features
            projector: Renders working sets into list and map
            status_surface: Optional summary/error surface
            timer_factory: Creates the periodic refresh timer
            on_refresh: Called after every completed refresh
        """
        self.config = config
        self.feed_source = feed_source
        self.projector = projector
        self.status_surface = status_surface
        self.timer_factory = timer_factory
        self.on_refresh = on_refresh

        self._state = DashboardState.from_config(config)
        self._status = RefreshStatus.IDLE
        self._error: str | None = None
        self._working_set: tuple[Event, ...] = ()
        self._metrics: MetricsSummary = NO_MATCHES
        self._timer: TimerHandle | None = None
        self._generation = 0

    @property
    def state(self) -> DashboardState:
        return self._state

    @property
    def status(self) -> RefreshStatus:
        return self._status

    @property
    def error_message(self) -> str | None:
        return self._error

    @property
    def working_set(self) -> tuple[Event, ...]:
        return self._working_set

    @property
    def metrics(self) -> MetricsSummary:
        return self._metrics

    @property
    def timer_active(self) -> bool:
        return self._timer is not None

    async def start(self) -> RefreshResult:
        """Show the initial threshold, arm the timer and load the feed."""
        self._show_threshold()
        self.set_auto_refresh(self._state.auto_refresh)
        return await self.refresh()

    def stop(self) -> None:
        """Tear down the refresh timer."""
        self._cancel_timer()

    async def refresh(self) -> RefreshResult:
        """Fetch the feed for the current time range and re-run the pipeline.

        Overlapping refreshes are not deduplicated: whichever response
        arrives last replaces the canonical set, unless
        config.discard_stale_responses is set.

        Returns:
            RefreshResult describing what happened
        """
        self._generation += 1
        generation = self._generation
        time_range = self._state.time_range

        self._status = RefreshStatus.LOADING
        self._error = None
        self.projector.show_loading()
        if self.status_surface is not None:
            self.status_surface.show_error(None)

        logger.info("Refreshing %s feed (request %d)", time_range, generation)

        try:
            features = await self.feed_source.fetch(time_range)
        except Exception as e:
            if self._is_stale(generation):
                return self._finish(RefreshResult(time_range, success=False, error=str(e), stale=True))
            logger.error("Failed to fetch %s feed: %s", time_range, e)
            self._fail()
            return self._finish(RefreshResult(time_range, success=False, error=str(e)))

        if self._is_stale(generation):
            return self._finish(RefreshResult(time_range, success=True, stale=True))

        try:
            events = normalize_features(features)
            self._state = replace(self._state, events=events)
            self._status = RefreshStatus.IDLE
            working_set = self.rerun()
        except Exception as e:
            logger.exception("Failed to render %s feed", time_range)
            self._fail()
            return self._finish(RefreshResult(time_range, success=False, error=str(e)))

        return self._finish(RefreshResult(
            time_range,
            success=True,
            events_fetched=len(events),
            events_shown=len(working_set),
        ))

    def _is_stale(self, generation: int) -> bool:
        if self.config.discard_stale_responses and generation != self._generation:
            logger.info("Discarding response for request %d (latest is %d)", generation, self._generation)
            return True
        return False

    def _finish(self, result: RefreshResult) -> RefreshResult:
        logger.info("Completed: %s", result.summary)
        if self.on_refresh is not None:
            self.on_refresh(result)
        return result

    def _fail(self) -> None:
        # Canonical events and criteria are kept; only the views are cleared
        self._status = RefreshStatus.ERROR
        self._error = FEED_ERROR_MESSAGE
        self._working_set = ()
        self._metrics = NO_MATCHES
        self.projector.clear()
        if self.status_surface is not None:
            self.status_surface.show_error(FEED_ERROR_MESSAGE)
            self.status_surface.show_metrics(format_metrics(NO_MATCHES))

    def rerun(self) -> tuple[Event, ...]:
        """Re-derive the working set from the held events and render it.

        Never fetches.

        Returns:
            The rendered working set
        """
        state = self._state
        working_set = derive_working_set(state.events, state.min_magnitude, state.sort_mode)
        metrics = summarize_events(working_set)

        self.projector.render(working_set, show_aftershocks=state.show_aftershocks)
        if self.status_surface is not None:
            self.status_surface.show_metrics(format_metrics(metrics))

        self._working_set = working_set
        self._metrics = metrics
        return working_set

    def _show_threshold(self) -> str:
        text = format_threshold(self._state.min_magnitude)
        if self.status_surface is not None:
            self.status_surface.show_threshold(text)
        return text

    def set_min_magnitude(self, value: float | str | None) -> str:
        """Change the magnitude threshold and re-run the pipeline.

        Missing or unparsable values mean no minimum.

        Returns:
            Threshold text for the slider label
        """
        self._state = replace(self._state, min_magnitude=normalize_threshold(value))
        text = self._show_threshold()
        self.rerun()
        return text

    def set_sort_mode(self, mode: SortMode | str) -> None:
        """Change the ordering and re-run the pipeline."""
        self._state = replace(self._state, sort_mode=SortMode.parse(mode))
        self.rerun()

    def set_show_aftershocks(self, enabled: bool) -> None:
        """Toggle the aftershock annotation and re-run the pipeline."""
        self._state = replace(self._state, show_aftershocks=bool(enabled))
        self.rerun()

    async def set_time_range(self, time_range: str) -> RefreshResult:
        """Change the time range and re-fetch.

        An earlier request still in flight is not cancelled. Unknown
        ranges fall back to the default range.
        """
        if time_range not in FEED_LOOKUP:
            logger.warning("Unknown time range %r, using %s", time_range, DEFAULT_TIME_RANGE)
            time_range = DEFAULT_TIME_RANGE
        self._state = replace(self._state, time_range=time_range)
        return await self.refresh()

    def set_auto_refresh(self, enabled: bool) -> None:
        """Enable or disable periodic refresh.

        The current timer is always torn down first, so at most one
        timer exists at any time.
        """
        self._cancel_timer()
        self._state = replace(self._state, auto_refresh=bool(enabled))

        if not enabled:
            return
        if self.timer_factory is None:
            logger.warning("Auto refresh requested but no timer factory is configured")
            return

        self._timer = self.timer_factory.start(
            self.config.refresh_interval_seconds,
            self.refresh,
        )

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

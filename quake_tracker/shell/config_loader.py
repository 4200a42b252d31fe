"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, MapViewConfig) are defined in quake_tracker/core/config.py
to avoid information leakage between layers.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from quake_tracker.core.config import Config, MapViewConfig
from quake_tracker.core.working_set import SortMode


logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _parse_bool(value: Any, default: bool = False) -> bool:
    """Parse a YAML or environment boolean."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def _parse_map(data: dict[str, Any]) -> MapViewConfig:
    """Parse map settings from config data."""
    defaults = MapViewConfig()
    center = data.get("default_center", {})

    return MapViewConfig(
        default_latitude=float(center.get("latitude", defaults.default_latitude)),
        default_longitude=float(center.get("longitude", defaults.default_longitude)),
        default_zoom=float(data.get("default_zoom", defaults.default_zoom)),
        min_zoom=float(data.get("min_zoom", defaults.min_zoom)),
        max_zoom=float(data.get("max_zoom", defaults.max_zoom)),
        single_event_zoom=float(data.get("single_event_zoom", defaults.single_event_zoom)),
        fit_padding=int(data.get("fit_padding", defaults.fit_padding)),
        fit_max_zoom=float(data.get("fit_max_zoom", defaults.fit_max_zoom)),
        focus_min_zoom=float(data.get("focus_min_zoom", defaults.focus_min_zoom)),
        focus_max_zoom=float(data.get("focus_max_zoom", defaults.focus_max_zoom)),
        focus_duration_seconds=float(
            data.get("focus_duration_seconds", defaults.focus_duration_seconds)
        ),
        width=int(data.get("width", defaults.width)),
        height=int(data.get("height", defaults.height)),
        tile_url=data.get("tile_url", defaults.tile_url),
    )


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    Pure function apart from logging.

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    defaults = Config()

    sort_value = data.get("sort_mode", defaults.sort_mode.value)
    sort_mode = SortMode.parse(sort_value)
    if sort_mode.value != sort_value:
        logger.warning("Unknown sort mode %r, using %s", sort_value, sort_mode.value)

    return Config(
        feed_base_url=data.get("feed_base_url", defaults.feed_base_url),
        request_timeout_seconds=int(
            data.get("request_timeout_seconds", defaults.request_timeout_seconds)
        ),
        time_range=data.get("time_range", defaults.time_range),
        min_magnitude=float(data.get("min_magnitude", defaults.min_magnitude)),
        sort_mode=sort_mode,
        show_aftershocks=_parse_bool(data.get("show_aftershocks"), defaults.show_aftershocks),
        auto_refresh=_parse_bool(data.get("auto_refresh"), defaults.auto_refresh),
        refresh_interval_seconds=int(
            data.get("refresh_interval_seconds", defaults.refresh_interval_seconds)
        ),
        discard_stale_responses=_parse_bool(
            data.get("discard_stale_responses"), defaults.discard_stale_responses
        ),
        map=_parse_map(data.get("map") or {}),
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return Config()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: range=%s, min magnitude=%.1f, sort=%s, auto refresh=%s",
        config.time_range,
        config.min_magnitude,
        config.sort_mode.value,
        config.auto_refresh,
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        QUAKE_FEED_BASE_URL: Base URL of the summary feeds
        QUAKE_TIME_RANGE: hour, day or week
        QUAKE_MIN_MAGNITUDE: Initial minimum magnitude
        QUAKE_SORT_MODE: timeDesc, timeAsc, magDesc or magAsc
        QUAKE_SHOW_AFTERSHOCKS: Highlight aftershocks (true/false)
        QUAKE_AUTO_REFRESH: Enable periodic refresh (true/false)
        QUAKE_REFRESH_INTERVAL_SECONDS: Refresh period

    Returns:
        Config object from environment
    """
    keys = {
        "QUAKE_FEED_BASE_URL": "feed_base_url",
        "QUAKE_TIME_RANGE": "time_range",
        "QUAKE_MIN_MAGNITUDE": "min_magnitude",
        "QUAKE_SORT_MODE": "sort_mode",
        "QUAKE_SHOW_AFTERSHOCKS": "show_aftershocks",
        "QUAKE_AUTO_REFRESH": "auto_refresh",
        "QUAKE_REFRESH_INTERVAL_SECONDS": "refresh_interval_seconds",
    }

    data = {
        field_name: os.environ[env_name]
        for env_name, field_name in keys.items()
        if os.environ.get(env_name)
    }

    return load_config_from_dict(data)

"""Earthquake tracker: a filtered, sorted event list kept in sync with a map."""

__version__ = "0.1.0"

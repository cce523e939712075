"""Shared type definitions for build_tracker.

This module contains enums shared across subpackages to avoid circular
imports.
"""

from enum import Enum


class FetchStatus(str, Enum):
    """Status of a dashboard data fetch."""

    NONE = "none"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class ValueType(str, Enum):
    """Size measurement shown by the dashboard."""

    GZIP = "gzip"
    STAT = "stat"


class ChartType(str, Enum):
    """Chart style for the build history."""

    AREA = "area"
    BAR = "bar"


class XScaleType(str, Enum):
    """Horizontal axis of the build history."""

    COMMIT = "commit"
    TIME = "time"


class YScaleType(str, Enum):
    """Vertical axis scale of the build history."""

    LINEAR = "linear"
    LOG = "log"


class CompareMode(str, Enum):
    """Which build each build is compared against."""

    BASELINE = "baseline"
    CONSECUTIVE = "consecutive"


__all__ = [
    "ChartType",
    "CompareMode",
    "FetchStatus",
    "ValueType",
    "XScaleType",
    "YScaleType",
]

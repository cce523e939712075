"""Human-readable formatting of sizes, percents and revisions."""

from __future__ import annotations

import math

from build_tracker.compare.models import DeltaCell

BYTE_UNITS = ["B", "KiB", "MiB", "GiB", "TiB"]
SHORT_SHA_LENGTH = 7
HASH_CHANGE_PREFIX = "Unexpected hash change! "


def format_bytes(value: int) -> str:
    """Format a (possibly negative) byte count with 1024-based units."""
    magnitude = float(abs(value))
    if magnitude < 1024:
        return f"{value} {BYTE_UNITS[0]}"
    unit = 0
    while magnitude >= 1024 and unit < len(BYTE_UNITS) - 1:
        magnitude /= 1024
        unit += 1
    sign = "-" if value < 0 else ""
    return f"{sign}{magnitude:.2f} {BYTE_UNITS[unit]}"


def format_percent(value: float) -> str:
    """Format a fractional change as a percentage with three decimals."""
    if math.isinf(value):
        return "∞%" if value > 0 else "-∞%"
    return f"{value * 100:.3f}%"


def format_sha(revision: str) -> str:
    """Short form of a revision as used in dashboard URLs."""
    return revision[:SHORT_SHA_LENGTH]


def describe_delta(cell: DeltaCell, kind: str) -> str:
    """Describe a delta cell, flagging hash changes that kept the same size."""
    size = cell.size(kind)
    text = f"{size} bytes ({format_percent(cell.percent(kind))})"
    if cell.hash_changed and size == 0:
        return HASH_CHANGE_PREFIX + text
    return text


__all__ = [
    "HASH_CHANGE_PREFIX",
    "describe_delta",
    "format_bytes",
    "format_percent",
    "format_sha",
]

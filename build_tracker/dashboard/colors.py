"""Color encoding for comparison cells and artifacts.

Delta cells are colored by direction and magnitude: increases in red,
decreases in green, with the opacity proportional to the percent change
(clamped to ``[0, 1]``). A cell whose size did not change but whose hash did
is drawn in full red as a warning; a true no-change cell stays white.

Artifacts get distinct hues from a sequential rainbow scale.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace

from build_tracker.compare.formatting import format_bytes
from build_tracker.compare.models import DeltaCell

HASH_CHANGE_GLYPH = "⚠️"

# Cubehelix coefficients (Green, 2011)
_A = -0.14861
_B = 1.78277
_C = -0.29227
_D = -0.90649
_E = 1.97294


def _channel(value: float) -> int:
    return max(0, min(255, math.floor(value + 0.5)))


@dataclass(frozen=True)
class Color:
    """An RGB color with opacity."""

    red: int
    green: int
    blue: int
    alpha: float = 1.0

    def to_css(self) -> str:
        """CSS ``rgba()`` notation."""
        return f"rgba({self.red},{self.green},{self.blue},{self.alpha:g})"

    def to_hex(self) -> str:
        """Hex notation of the color composited over white."""
        flat = self.flatten()
        return f"#{flat.red:02x}{flat.green:02x}{flat.blue:02x}"

    def flatten(self, background: Color | None = None) -> Color:
        """Composite over an opaque background (white by default)."""
        if background is None:
            background = WHITE
        a = self.alpha
        return Color(
            _channel(self.red * a + background.red * (1 - a)),
            _channel(self.green * a + background.green * (1 - a)),
            _channel(self.blue * a + background.blue * (1 - a)),
        )


GREEN = Color(6, 176, 41)
RED = Color(249, 84, 84)
WHITE = Color(255, 255, 255)


def scale(color: Color, percent: float) -> Color:
    """Set the opacity of ``color`` from the magnitude of a percent change."""
    return replace(color, alpha=max(min(abs(percent), 1.0), 0.0))


def delta_color(cell: DeltaCell, kind: str) -> Color:
    """Background color of a delta cell for one size kind."""
    size = cell.size(kind)
    percent = cell.percent(kind)
    if percent > 0:
        return scale(RED, percent)
    if size == 0:
        return scale(RED, 1.0) if cell.hash_changed else WHITE
    return scale(GREEN, percent)


def delta_label(cell: DeltaCell, kind: str) -> str:
    """Short text for a delta cell: empty, a hash warning, or the byte delta."""
    size = cell.size(kind)
    if size == 0:
        return HASH_CHANGE_GLYPH if cell.hash_changed else ""
    return format_bytes(size)


def interpolate_rainbow(t: float) -> Color:
    """Sample the cubehelix rainbow at ``t`` (cyclic, period 1)."""
    if t < 0 or t > 1:
        t -= math.floor(t)
    ts = abs(t - 0.5)
    hue = math.radians(360 * t - 100 + 120)
    saturation = 1.5 - 1.5 * ts
    lightness = 0.8 - 0.9 * ts
    amplitude = saturation * lightness * (1 - lightness)
    cos_h = math.cos(hue)
    sin_h = math.sin(hue)
    return Color(
        _channel(255 * (lightness + amplitude * (_A * cos_h + _B * sin_h))),
        _channel(255 * (lightness + amplitude * (_C * cos_h + _D * sin_h))),
        _channel(255 * (lightness + amplitude * (_E * cos_h))),
    )


def color_for_index(index: int, total: int) -> Color:
    """Distinct color for item ``index`` of ``total`` on a sequential scale."""
    if total <= 0:
        return interpolate_rainbow(0.0)
    return interpolate_rainbow(index / total)


__all__ = [
    "GREEN",
    "HASH_CHANGE_GLYPH",
    "RED",
    "WHITE",
    "Color",
    "color_for_index",
    "delta_color",
    "delta_label",
    "interpolate_rainbow",
    "scale",
]

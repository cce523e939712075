"""Tests for dashboard/colors.py module."""

import math

import pytest

from build_tracker.compare.models import DeltaCell
from build_tracker.dashboard.colors import (
    GREEN,
    HASH_CHANGE_GLYPH,
    RED,
    WHITE,
    Color,
    color_for_index,
    delta_color,
    delta_label,
    interpolate_rainbow,
    scale,
)


def cell(size, percent, hash_changed=False):
    return DeltaCell(
        sizes={"gzip": size}, percents={"gzip": percent}, hash_changed=hash_changed
    )


class TestColor:
    """Tests for Color dataclass."""

    def test_to_css(self):
        assert Color(1, 2, 3, 0.5).to_css() == "rgba(1,2,3,0.5)"
        assert Color(1, 2, 3).to_css() == "rgba(1,2,3,1)"

    def test_flatten_over_white(self):
        assert Color(0, 0, 0, 0.5).flatten() == Color(128, 128, 128)
        assert Color(0, 0, 0, 0.0).flatten() == WHITE

    def test_to_hex(self):
        assert RED.to_hex() == "#f95454"
        assert WHITE.to_hex() == "#ffffff"


class TestScale:
    """Tests for scale function."""

    def test_alpha_is_magnitude(self):
        assert scale(RED, 0.25).alpha == 0.25
        assert scale(GREEN, -0.25).alpha == 0.25

    def test_alpha_is_clamped(self):
        assert scale(RED, 3.0).alpha == 1.0
        assert scale(RED, math.inf).alpha == 1.0


class TestDeltaColor:
    """Tests for delta_color function."""

    def test_increase_is_red(self):
        color = delta_color(cell(50, 0.5), "gzip")
        assert (color.red, color.green, color.blue) == (RED.red, RED.green, RED.blue)
        assert color.alpha == 0.5

    def test_decrease_is_green(self):
        color = delta_color(cell(-25, -0.25), "gzip")
        assert (color.red, color.green, color.blue) == (GREEN.red, GREEN.green, GREEN.blue)
        assert color.alpha == 0.25

    def test_no_change_is_white(self):
        assert delta_color(cell(0, 0.0), "gzip") == WHITE

    def test_hash_change_is_full_red(self):
        assert delta_color(cell(0, 0.0, hash_changed=True), "gzip") == scale(RED, 1.0)

    def test_new_artifact_is_full_red(self):
        assert delta_color(cell(10, math.inf), "gzip").alpha == 1.0


class TestDeltaLabel:
    """Tests for delta_label function."""

    def test_no_change(self):
        assert delta_label(cell(0, 0.0), "gzip") == ""

    def test_hash_change(self):
        assert delta_label(cell(0, 0.0, hash_changed=True), "gzip") == HASH_CHANGE_GLYPH

    def test_size_change(self):
        assert delta_label(cell(2048, 0.1), "gzip") == "2.00 KiB"


class TestColorForIndex:
    """Tests for interpolate_rainbow and color_for_index."""

    def test_rainbow_endpoints(self):
        assert interpolate_rainbow(0.0) == Color(110, 64, 170)
        assert interpolate_rainbow(0.5) == Color(175, 240, 91)

    def test_rainbow_is_cyclic(self):
        assert interpolate_rainbow(1.25) == interpolate_rainbow(0.25)

    def test_first_index_starts_scale(self):
        assert color_for_index(0, 10) == Color(110, 64, 170)

    def test_distinct_colors(self):
        colors = {color_for_index(i, 6) for i in range(6)}
        assert len(colors) == 6

    @pytest.mark.parametrize("total", [0, -1])
    def test_empty_scale(self, total):
        assert color_for_index(0, total) == interpolate_rainbow(0.0)

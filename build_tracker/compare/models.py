"""Comparison result types.

These are plain frozen dataclasses: derived values produced by the
comparator and thrown away whenever the compared builds change.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any

from build_tracker.types import CompareMode


@dataclass(frozen=True)
class ArtifactCell:
    """Absolute measurements of one artifact in one build.

    An artifact absent from the build has all sizes at 0 and no hash.
    """

    name: str
    sizes: dict[str, int]
    hash: str | None = None

    def size(self, kind: str) -> int:
        return self.sizes.get(kind, 0)


@dataclass(frozen=True)
class DeltaCell:
    """Change of one artifact between a baseline build and a current build.

    Attributes:
        sizes: Signed byte delta per size kind (current - baseline).
        percents: Signed fractional change per size kind (delta / baseline).
        hash_changed: Whether the content hash differs, regardless of size.
        baseline_index: Index of the baseline build.
        current_index: Index of the current build.
    """

    sizes: dict[str, int]
    percents: dict[str, float]
    hash_changed: bool = False
    baseline_index: int = 0
    current_index: int = 0

    def size(self, kind: str) -> int:
        return self.sizes.get(kind, 0)

    def percent(self, kind: str) -> float:
        return self.percents.get(kind, 0.0)

    def is_unchanged(self, kind: str) -> bool:
        """True when neither the size nor the hash changed."""
        return self.size(kind) == 0 and not self.hash_changed


@dataclass(frozen=True)
class ComparisonRow:
    """All cells for one artifact: one absolute cell per build, one delta per pair."""

    name: str
    cells: list[ArtifactCell] = field(default_factory=list)
    deltas: list[DeltaCell] = field(default_factory=list)


@dataclass(frozen=True)
class Comparison:
    """Comparison matrix for an ordered list of builds."""

    revisions: list[str]
    size_kinds: list[str]
    mode: CompareMode
    baseline_index: int
    rows: list[ComparisonRow]
    total: ComparisonRow | None = None

    @property
    def artifact_names(self) -> list[str]:
        return [row.name for row in self.rows]

    def get_row(self, name: str) -> ComparisonRow | None:
        for row in self.rows:
            if row.name == name:
                return row
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary.

        Infinite percents (artifacts new since the baseline) are encoded as
        the strings ``"inf"`` / ``"-inf"``, since JSON has no infinity.
        """
        data = asdict(self)
        data["mode"] = self.mode.value
        rows = data["rows"] + ([data["total"]] if data["total"] else [])
        for row in rows:
            for delta in row["deltas"]:
                delta["percents"] = {
                    kind: _json_percent(value)
                    for kind, value in delta["percents"].items()
                }
        return data


def _json_percent(value: float) -> float | str:
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return value


__all__ = ["ArtifactCell", "Comparison", "ComparisonRow", "DeltaCell"]

"""Build comparator.

Given builds ordered oldest (baseline) first, the comparator produces one
row per artifact with the absolute sizes in every build and a delta cell for
every compared pair of builds. Two pairing modes are supported:

- ``CompareMode.BASELINE``: every build against one designated baseline
- ``CompareMode.CONSECUTIVE``: every build against the build before it

Missing data is never an error: an artifact absent from a build counts as
size 0 with no hash, and malformed sizes are normalized to 0.

Percent policy when the baseline size is 0: the percent is 0.0 if the
current size is also 0, and ``NEW_ARTIFACT_PERCENT`` (positive infinity)
otherwise.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence

from build_tracker.builds.schema import (
    BuildSchema,
    collect_artifact_names,
    normalize_size,
)
from build_tracker.compare.models import (
    ArtifactCell,
    Comparison,
    ComparisonRow,
    DeltaCell,
)
from build_tracker.types import CompareMode

logger = logging.getLogger(__name__)

TOTAL_ROW_NAME = "All"
NEW_ARTIFACT_PERCENT = math.inf


def percent_change(baseline: int, current: int) -> float:
    """Return the fractional change from ``baseline`` to ``current``.

    Args:
        baseline: Baseline size in bytes.
        current: Current size in bytes.

    Returns:
        ``(current - baseline) / baseline``; 0.0 when both are 0 and
        ``NEW_ARTIFACT_PERCENT`` when only the baseline is 0.
    """
    if baseline == 0:
        return 0.0 if current == 0 else NEW_ARTIFACT_PERCENT
    return (current - baseline) / baseline


def compute_delta(
    baseline: ArtifactCell,
    current: ArtifactCell,
    size_kinds: Iterable[str],
    baseline_index: int = 0,
    current_index: int = 0,
) -> DeltaCell:
    """Compute the delta cell between two absolute cells."""
    sizes: dict[str, int] = {}
    percents: dict[str, float] = {}
    for kind in size_kinds:
        base = baseline.size(kind)
        cur = current.size(kind)
        sizes[kind] = cur - base
        percents[kind] = percent_change(base, cur)
    return DeltaCell(
        sizes=sizes,
        percents=percents,
        hash_changed=baseline.hash != current.hash,
        baseline_index=baseline_index,
        current_index=current_index,
    )


class Comparator:
    """Compare artifact sizes across an ordered list of builds.

    Args:
        builds: Builds ordered oldest first. May be empty.
        artifact_names: Artifact names to compare. Defaults to the sorted
            union of names across all builds.
    """

    def __init__(
        self,
        builds: Sequence[BuildSchema],
        artifact_names: Sequence[str] | None = None,
    ) -> None:
        self.builds = list(builds)
        if artifact_names is None:
            self.artifact_names = collect_artifact_names(self.builds)
        else:
            self.artifact_names = list(artifact_names)

        kinds: set[str] = set()
        for build in self.builds:
            for artifact in build.artifacts:
                kinds.update(artifact.sizes)
        self.size_kinds = sorted(kinds)

    @property
    def revisions(self) -> list[str]:
        return [build.revision for build in self.builds]

    def cell(self, name: str, build_index: int) -> ArtifactCell:
        """Absolute measurements of an artifact in one build."""
        artifact = self.builds[build_index].get_artifact(name)
        if artifact is None:
            return ArtifactCell(name=name, sizes={k: 0 for k in self.size_kinds})
        sizes = {k: normalize_size(artifact.sizes.get(k)) for k in self.size_kinds}
        return ArtifactCell(name=name, sizes=sizes, hash=artifact.hash)

    def delta(self, name: str, baseline_index: int, current_index: int) -> DeltaCell:
        """Delta of an artifact between two builds."""
        return compute_delta(
            self.cell(name, baseline_index),
            self.cell(name, current_index),
            self.size_kinds,
            baseline_index=baseline_index,
            current_index=current_index,
        )

    def pairs(
        self, mode: CompareMode = CompareMode.BASELINE, baseline_index: int = 0
    ) -> list[tuple[int, int]]:
        """Return the ``(baseline, current)`` build index pairs to compare.

        Raises:
            IndexError: If ``baseline_index`` does not address a build.
        """
        count = len(self.builds)
        if count == 0:
            return []
        if not 0 <= baseline_index < count:
            raise IndexError(f"Baseline index {baseline_index} out of range for {count} builds")
        if mode == CompareMode.CONSECUTIVE:
            return [(i - 1, i) for i in range(1, count)]
        return [(baseline_index, i) for i in range(count) if i != baseline_index]

    def row(
        self,
        name: str,
        mode: CompareMode = CompareMode.BASELINE,
        baseline_index: int = 0,
    ) -> ComparisonRow:
        """Comparison row for a single artifact."""
        cells = [self.cell(name, i) for i in range(len(self.builds))]
        deltas = [
            compute_delta(cells[b], cells[c], self.size_kinds, b, c)
            for b, c in self.pairs(mode, baseline_index)
        ]
        return ComparisonRow(name=name, cells=cells, deltas=deltas)

    def total_row(
        self,
        names: Sequence[str] | None = None,
        mode: CompareMode = CompareMode.BASELINE,
        baseline_index: int = 0,
    ) -> ComparisonRow:
        """Row summing the given artifacts (all compared artifacts by default).

        A total delta reports a hash change when any member artifact's hash
        changed between the same two builds.
        """
        if names is None:
            names = self.artifact_names
        rows = [self.row(name, mode, baseline_index) for name in names]

        cells = []
        for i in range(len(self.builds)):
            sizes = {
                kind: sum(row.cells[i].size(kind) for row in rows)
                for kind in self.size_kinds
            }
            cells.append(ArtifactCell(name=TOTAL_ROW_NAME, sizes=sizes))

        deltas = []
        for position, (b, c) in enumerate(self.pairs(mode, baseline_index)):
            summed = compute_delta(cells[b], cells[c], self.size_kinds, b, c)
            hash_changed = any(row.deltas[position].hash_changed for row in rows)
            deltas.append(
                DeltaCell(
                    sizes=summed.sizes,
                    percents=summed.percents,
                    hash_changed=hash_changed,
                    baseline_index=b,
                    current_index=c,
                )
            )
        return ComparisonRow(name=TOTAL_ROW_NAME, cells=cells, deltas=deltas)

    def compare(
        self,
        mode: CompareMode = CompareMode.BASELINE,
        baseline_index: int = 0,
        include_total: bool = True,
    ) -> Comparison:
        """Build the full comparison matrix.

        Args:
            mode: How builds are paired.
            baseline_index: Baseline build for ``CompareMode.BASELINE``.
            include_total: Whether to add the summed "All" row.

        Returns:
            Comparison with one row per artifact.
        """
        rows = [self.row(name, mode, baseline_index) for name in self.artifact_names]
        total = (
            self.total_row(mode=mode, baseline_index=baseline_index)
            if include_total and self.builds
            else None
        )
        logger.debug(
            "Compared %d artifacts across %d builds (%s)",
            len(rows),
            len(self.builds),
            mode.value,
        )
        return Comparison(
            revisions=self.revisions,
            size_kinds=list(self.size_kinds),
            mode=mode,
            baseline_index=baseline_index,
            rows=rows,
            total=total,
        )


__all__ = [
    "NEW_ARTIFACT_PERCENT",
    "TOTAL_ROW_NAME",
    "Comparator",
    "compute_delta",
    "normalize_size",
    "percent_change",
]

"""Build comparison module.

Computes per-artifact size deltas between builds and formats them.
"""

from build_tracker.compare.comparator import Comparator
from build_tracker.compare.models import (
    ArtifactCell,
    Comparison,
    ComparisonRow,
    DeltaCell,
)

__all__ = ["ArtifactCell", "Comparator", "Comparison", "ComparisonRow", "DeltaCell"]

"""Dashboard state model.

``DashboardState`` holds everything the dashboard displays and derives the
visible artifacts, the compared builds and the URL from user actions. The
configuration (default artifact filters and toggle groups) is passed in
explicitly as a ``DashboardConfig``.

Fetches are tagged with a generation token. Only the response to the most
recently started fetch may update the state; a slower, older response that
resolves later is dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from re import Pattern
from typing import TYPE_CHECKING

from build_tracker.builds.schema import BuildSchema
from build_tracker.compare.comparator import Comparator
from build_tracker.dashboard.client import ApiError, BuildSet, FetchRequest
from build_tracker.dashboard.colors import Color, color_for_index
from build_tracker.dashboard.filters import (
    ALL_TOKEN,
    active_artifact_names,
    compare_builds,
    compile_filters,
    encode_artifact_names,
    encode_compare_revisions,
    filter_artifact_names,
)
from build_tracker.types import (
    ChartType,
    FetchStatus,
    ValueType,
    XScaleType,
    YScaleType,
)

if TYPE_CHECKING:
    from build_tracker.config import Settings
    from build_tracker.dashboard.client import BuildTrackerClient

logger = logging.getLogger(__name__)

# Histories this short are easier to read as bars
BAR_CHART_MAX_BUILDS = 4

_TOGGLES: dict[str, type[ValueType | ChartType | XScaleType | YScaleType]] = {
    "value_type": ValueType,
    "chart": ChartType,
    "x_scale": XScaleType,
    "y_scale": YScaleType,
}


@dataclass(frozen=True)
class DashboardConfig:
    """Dashboard configuration.

    Attributes:
        artifact_filters: Regular expressions hiding artifacts by default.
        toggle_groups: Named groups of artifacts toggled together.
    """

    artifact_filters: tuple[str, ...] = ()
    toggle_groups: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: Settings) -> DashboardConfig:
        return cls(
            artifact_filters=tuple(settings.artifact_filters),
            toggle_groups=dict(settings.toggle_groups),
        )


class DashboardState:
    """State of one dashboard view.

    Args:
        config: Dashboard configuration.
        revisions: Revisions pinned by the ``/revisions/...`` URL prefix.
        artifacts_param: Artifact segment of the URL.
        compare_param: Compared-revisions segment of the URL.
    """

    def __init__(
        self,
        config: DashboardConfig | None = None,
        revisions: Sequence[str] | None = None,
        artifacts_param: str | None = None,
        compare_param: str | None = None,
    ) -> None:
        self.config = config or DashboardConfig()
        self.default_filters: list[Pattern[str]] = compile_filters(
            self.config.artifact_filters
        )
        self.artifact_filters: list[Pattern[str]] = list(self.default_filters)
        self.revisions = list(revisions or [])
        self.artifacts_param = artifacts_param
        self.compare_param = compare_param

        self.builds: list[BuildSchema] = []
        self.artifact_names: list[str] = []
        self.filtered_artifact_names: list[str] = []
        self.active_artifact_names: list[str] = []
        self.compare_builds: list[BuildSchema] = []
        self.selected_build: BuildSchema | None = None
        self.hovered_artifact: str | None = None
        self.start_date: datetime | None = None
        self.end_date: datetime | None = None

        self.fetch_status = FetchStatus.NONE
        self.value_type = ValueType.GZIP
        self.chart = ChartType.AREA
        self.x_scale = XScaleType.COMMIT
        self.y_scale = YScaleType.LINEAR

        self._generation = 0

    # Fetching

    @property
    def generation(self) -> int:
        return self._generation

    def default_request(self) -> FetchRequest:
        """Fetch request for the pinned revisions (or recent builds)."""
        return FetchRequest(revisions=list(self.revisions))

    def begin_fetch(self) -> int:
        """Start a fetch and return its generation token."""
        self._generation += 1
        self.fetch_status = FetchStatus.LOADING
        return self._generation

    def _is_current(self, token: int) -> bool:
        if token != self._generation:
            logger.debug(
                "Dropping stale fetch %d (current is %d)", token, self._generation
            )
            return False
        return True

    def complete_fetch(self, token: int, result: BuildSet) -> bool:
        """Apply a fetch result if it belongs to the latest fetch.

        Returns:
            True if the state was updated.
        """
        if not self._is_current(token):
            return False
        self.builds = list(result.builds)
        self.artifact_names = list(result.artifact_names)
        self._derive_artifacts()
        self.compare_builds = compare_builds(self.compare_param, self.builds)
        self.chart = (
            ChartType.BAR if len(self.builds) <= BAR_CHART_MAX_BUILDS else ChartType.AREA
        )
        self.fetch_status = FetchStatus.LOADED
        return True

    def fail_fetch(self, token: int) -> bool:
        """Mark the latest fetch as failed.

        Returns:
            True if the state was updated.
        """
        if not self._is_current(token):
            return False
        self.fetch_status = FetchStatus.FAILED
        return True

    def refresh(
        self, client: BuildTrackerClient, request: FetchRequest | None = None
    ) -> bool:
        """Fetch builds through ``client`` and apply the result.

        A failed request sets the FAILED status; nothing is retried.

        Returns:
            True if the state was updated with new builds.
        """
        token = self.begin_fetch()
        try:
            result = client.get_builds(request or self.default_request())
        except ApiError as e:
            logger.warning("Fetching builds failed (%s): %s", e.code, e)
            self.fail_fetch(token)
            return False
        return self.complete_fetch(token, result)

    # Derivation

    def _derive_artifacts(self) -> None:
        self.filtered_artifact_names = filter_artifact_names(
            self.artifact_names, self.artifact_filters
        )
        self.active_artifact_names = active_artifact_names(
            self.artifacts_param, self.filtered_artifact_names
        )

    def _sync_location(self) -> None:
        self.artifacts_param = encode_artifact_names(
            self.active_artifact_names, self.filtered_artifact_names
        )
        self.compare_param = encode_compare_revisions(self.compare_builds) or None

    def apply_location(
        self, artifacts_param: str | None, compare_param: str | None
    ) -> None:
        """Re-derive the selection after the URL changed."""
        self.artifacts_param = artifacts_param
        self.compare_param = compare_param
        self._derive_artifacts()
        self.compare_builds = compare_builds(compare_param, self.builds)

    def url_path(self) -> str:
        """Dashboard path encoding the current selection."""
        prefix = f"/revisions/{','.join(self.revisions)}" if self.revisions else ""
        artifacts = encode_artifact_names(
            self.active_artifact_names, self.filtered_artifact_names
        )
        return f"{prefix}/{artifacts}/{encode_compare_revisions(self.compare_builds)}"

    # User actions

    def change_filters(
        self,
        patterns: Sequence[str | Pattern[str]],
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> FetchRequest:
        """Apply new artifact filters and date range.

        Returns:
            The fetch request to run next: a time range when the dates
            changed, the default request otherwise.
        """
        previous = (self.start_date, self.end_date)
        self.artifact_filters = compile_filters(patterns)
        self.start_date = start_date
        self.end_date = end_date
        self._derive_artifacts()

        if start_date and end_date and previous != (start_date, end_date):
            return FetchRequest(
                start_time=int(start_date.timestamp() * 1000),
                end_time=int(end_date.timestamp() * 1000),
            )
        return self.default_request()

    def reset_filters(self) -> FetchRequest:
        """Restore the configured default filters."""
        return self.change_filters(self.default_filters, self.start_date, self.end_date)

    def change_artifacts(self, names: Sequence[str]) -> None:
        """Set the active artifacts; ``["All"]`` selects every artifact."""
        if list(names) == [ALL_TOKEN]:
            names = self.artifact_names
        self.active_artifact_names = filter_artifact_names(
            list(names), self.artifact_filters
        )
        self._sync_location()

    def toggle_group(self, group: str) -> None:
        """Activate a configured artifact group, or deactivate it if fully active.

        Raises:
            KeyError: If the group is not configured.
        """
        members = [
            name
            for name in self.config.toggle_groups[group]
            if name in self.filtered_artifact_names
        ]
        active = set(self.active_artifact_names)
        if members and all(name in active for name in members):
            active.difference_update(members)
        else:
            active.update(members)
        self.change_artifacts(
            [name for name in self.filtered_artifact_names if name in active]
        )

    def toggle_build(self, build: BuildSchema) -> None:
        """Add a build to the comparison, or remove it if already compared."""
        revisions = [b.revision for b in self.compare_builds]
        if build.revision in revisions:
            self.compare_builds = [
                b for b in self.compare_builds if b.revision != build.revision
            ]
        else:
            self.compare_builds = [*self.compare_builds, build]
        if self.selected_build is not None and self.selected_build.revision == build.revision:
            self.selected_build = None
        else:
            self.selected_build = build
        self._sync_location()

    def remove_revision(self, revision: str) -> None:
        """Remove a build from the comparison."""
        self.compare_builds = [b for b in self.compare_builds if b.revision != revision]
        self.selected_build = self.compare_builds[0] if self.compare_builds else None
        self._sync_location()

    def show_build(self, revision: str) -> None:
        """Select a compared build for the info panel."""
        self.selected_build = next(
            (b for b in self.compare_builds if b.revision == revision), None
        )

    def hover(self, artifact_name: str | None) -> None:
        self.hovered_artifact = artifact_name

    def toggle(self, kind: str, value: str) -> None:
        """Switch a display option (value_type, chart, x_scale, y_scale).

        Raises:
            KeyError: If ``kind`` is not a display option.
            ValueError: If ``value`` is not valid for it.
        """
        enum_type = _TOGGLES[kind]
        setattr(self, kind, enum_type(value))

    # Views

    def artifact_color(self, name: str) -> Color:
        """Chart color of a visible artifact."""
        names = self.filtered_artifact_names
        index = names.index(name) if name in names else 0
        return color_for_index(index, len(names))

    def comparator(self) -> Comparator:
        """Comparator over the compared builds (oldest first) and active artifacts."""
        builds = sorted(self.compare_builds, key=lambda b: b.timestamp)
        return Comparator(builds, self.active_artifact_names)


__all__ = ["BAR_CHART_MAX_BUILDS", "DashboardConfig", "DashboardState"]

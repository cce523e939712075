"""Query collaborator consumed by the HTTP API.

The API does not talk to storage directly: it is handed an object with two
attributes, ``build`` and ``builds``, whose methods return build records (or
awaitables resolving to them). Any object with this shape can be injected;
``SqlQueries`` is the default implementation on top of the build store.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Protocol

from sqlalchemy.orm import Session, sessionmaker

from build_tracker.builds.service import (
    get_build_by_revision,
    list_builds_by_revision_range,
    list_builds_by_revisions,
    list_builds_by_time_range,
    list_recent_builds,
)

logger = logging.getLogger(__name__)

BuildPayload = dict[str, Any]


class InvalidLimitError(ValueError):
    """Raised when a recent-builds limit cannot be used."""

    def __init__(self, limit: str, code: str = "invalid_limit") -> None:
        super().__init__(f"Invalid limit: {limit!r}")
        self.limit = limit
        self.code = code


class BuildQueries(Protocol):
    """Single-build lookups."""

    def by_revision(self, revision: str) -> BuildPayload | Awaitable[BuildPayload]:
        ...


class BuildsQueries(Protocol):
    """Multi-build lookups."""

    def by_revisions(
        self, revisions: list[str]
    ) -> list[BuildPayload] | Awaitable[list[BuildPayload]]:
        ...

    def by_revision_range(
        self, start_revision: str, end_revision: str
    ) -> list[BuildPayload] | Awaitable[list[BuildPayload]]:
        ...

    def by_time_range(
        self, start: int, end: int
    ) -> list[BuildPayload] | Awaitable[list[BuildPayload]]:
        ...

    def recent(
        self, limit: str | None = None
    ) -> list[BuildPayload] | Awaitable[list[BuildPayload]]:
        ...


@dataclass
class Queries:
    """Container for the two query groups handed to the API."""

    build: BuildQueries
    builds: BuildsQueries


def parse_limit(limit: str | int | None, default: int) -> int:
    """Parse a recent-builds limit as received from a URL.

    Args:
        limit: Raw limit, or None for the default.
        default: Limit used when none is given.

    Returns:
        Positive integer limit.

    Raises:
        InvalidLimitError: If the limit is not a positive integer.
    """
    if limit is None or limit == "":
        return default
    try:
        value = int(limit)
    except (TypeError, ValueError):
        raise InvalidLimitError(str(limit)) from None
    if value < 1:
        raise InvalidLimitError(str(limit))
    return value


class _SqlBuildQueries:
    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def by_revision(self, revision: str) -> BuildPayload:
        with self._session_factory() as session:
            return get_build_by_revision(session, revision).to_dict()


class _SqlBuildsQueries:
    def __init__(self, session_factory: sessionmaker[Session], default_limit: int) -> None:
        self._session_factory = session_factory
        self._default_limit = default_limit

    def by_revisions(self, revisions: list[str]) -> list[BuildPayload]:
        with self._session_factory() as session:
            builds = list_builds_by_revisions(session, revisions)
        return [b.to_dict() for b in builds]

    def by_revision_range(
        self, start_revision: str, end_revision: str
    ) -> list[BuildPayload]:
        with self._session_factory() as session:
            builds = list_builds_by_revision_range(session, start_revision, end_revision)
        return [b.to_dict() for b in builds]

    def by_time_range(self, start: int, end: int) -> list[BuildPayload]:
        with self._session_factory() as session:
            builds = list_builds_by_time_range(session, start, end)
        return [b.to_dict() for b in builds]

    def recent(self, limit: str | None = None) -> list[BuildPayload]:
        count = parse_limit(limit, self._default_limit)
        logger.debug("Querying %d recent builds", count)
        with self._session_factory() as session:
            builds = list_recent_builds(session, count)
        return [b.to_dict() for b in builds]


class SqlQueries(Queries):
    """Query collaborator backed by the SQL build store.

    Each call opens its own short-lived session, so one instance can be
    shared by all requests.
    """

    def __init__(
        self, session_factory: sessionmaker[Session], default_limit: int = 20
    ) -> None:
        super().__init__(
            build=_SqlBuildQueries(session_factory),
            builds=_SqlBuildsQueries(session_factory, default_limit),
        )


__all__ = [
    "BuildPayload",
    "BuildQueries",
    "BuildsQueries",
    "InvalidLimitError",
    "Queries",
    "SqlQueries",
    "parse_limit",
]

"""Build store service module.

This module provides the storage operations behind the default query
collaborator:
- Lookup by revision, revision list, revision range and time range
- Most recent builds
- Saving builds (insert or replace by revision)

Query results are ordered oldest first, which is the order the comparator
and the charts expect.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from build_tracker.builds.models import ArtifactRecord, BuildRecord
from build_tracker.builds.schema import ArtifactSchema, BuildMetaSchema, BuildSchema

logger = logging.getLogger(__name__)


class BuildNotFoundError(Exception):
    """Raised when a build is not found."""

    def __init__(self, revision: str, code: str = "build_not_found") -> None:
        super().__init__(f"Build not found: {revision}")
        self.revision = revision
        self.code = code


def record_to_build(record: BuildRecord) -> BuildSchema:
    """Convert a stored build to its schema representation.

    Args:
        record: BuildRecord ORM instance.

    Returns:
        Immutable BuildSchema.
    """
    meta = BuildMetaSchema(
        revision=record.revision,
        parent_revision=record.parent_revision,
        timestamp=record.timestamp,
        **(record.extra_meta or {}),
    )
    artifacts = [
        ArtifactSchema(name=a.name, hash=a.hash, sizes=dict(a.sizes or {}))
        for a in record.artifacts
    ]
    return BuildSchema(meta=meta, artifacts=artifacts)


def _get_record(session: Session, revision: str) -> BuildRecord | None:
    stmt = select(BuildRecord).where(BuildRecord.revision == revision)
    return session.execute(stmt).scalar_one_or_none()


def save_build(session: Session, build: BuildSchema) -> BuildRecord:
    """Insert a build, replacing any stored build with the same revision.

    Args:
        session: Database session.
        build: Build to store.

    Returns:
        The persisted BuildRecord.
    """
    record = _get_record(session, build.revision)
    if record is None:
        record = BuildRecord(revision=build.revision)
        session.add(record)
        logger.info("Storing build %s", build.revision)
    else:
        logger.info("Replacing build %s", build.revision)

    record.parent_revision = build.parent_revision
    record.timestamp = build.timestamp
    record.extra_meta = dict(build.meta.model_extra or {})
    record.artifacts = [
        ArtifactRecord(
            position=position,
            name=artifact.name,
            hash=artifact.hash,
            sizes=dict(artifact.sizes),
        )
        for position, artifact in enumerate(build.artifacts)
    ]
    session.flush()
    return record


def get_build_by_revision(session: Session, revision: str) -> BuildSchema:
    """Get a build by revision.

    Args:
        session: Database session.
        revision: Revision identifier.

    Returns:
        BuildSchema instance.

    Raises:
        BuildNotFoundError: If no build has this revision.
    """
    record = _get_record(session, revision)
    if record is None:
        raise BuildNotFoundError(revision)
    return record_to_build(record)


def list_builds_by_revisions(
    session: Session, revisions: list[str]
) -> list[BuildSchema]:
    """List the builds with the given revisions.

    Unknown revisions are skipped.

    Args:
        session: Database session.
        revisions: Revision identifiers.

    Returns:
        Matching builds, oldest first.
    """
    if not revisions:
        return []
    stmt = (
        select(BuildRecord)
        .where(BuildRecord.revision.in_(revisions))
        .order_by(BuildRecord.timestamp.asc(), BuildRecord.id.asc())
    )
    return [record_to_build(r) for r in session.execute(stmt).scalars().all()]


def list_builds_by_time_range(
    session: Session, start: int, end: int
) -> list[BuildSchema]:
    """List builds with a timestamp in ``[start, end]``.

    Args:
        session: Database session.
        start: Start of the range in milliseconds (inclusive).
        end: End of the range in milliseconds (inclusive).

    Returns:
        Matching builds, oldest first.
    """
    stmt = (
        select(BuildRecord)
        .where(BuildRecord.timestamp >= start, BuildRecord.timestamp <= end)
        .order_by(BuildRecord.timestamp.asc(), BuildRecord.id.asc())
    )
    return [record_to_build(r) for r in session.execute(stmt).scalars().all()]


def list_builds_by_revision_range(
    session: Session, start_revision: str, end_revision: str
) -> list[BuildSchema]:
    """List the builds between two revisions, both included.

    The range is resolved through the timestamps of the two endpoint
    builds, so the endpoints may be given in either order.

    Args:
        session: Database session.
        start_revision: First revision of the range.
        end_revision: Last revision of the range.

    Returns:
        Builds in the range, oldest first.

    Raises:
        BuildNotFoundError: If either endpoint is not stored.
    """
    start = _get_record(session, start_revision)
    if start is None:
        raise BuildNotFoundError(start_revision)
    end = _get_record(session, end_revision)
    if end is None:
        raise BuildNotFoundError(end_revision)

    low, high = sorted((start.timestamp, end.timestamp))
    return list_builds_by_time_range(session, low, high)


def list_recent_builds(session: Session, limit: int) -> list[BuildSchema]:
    """List the most recent builds.

    Args:
        session: Database session.
        limit: Maximum number of builds.

    Returns:
        Up to ``limit`` latest builds, oldest first.
    """
    stmt = (
        select(BuildRecord)
        .order_by(BuildRecord.timestamp.desc(), BuildRecord.id.desc())
        .limit(limit)
    )
    records = list(session.execute(stmt).scalars().all())
    records.reverse()
    return [record_to_build(r) for r in records]


__all__ = [
    "BuildNotFoundError",
    "get_build_by_revision",
    "list_builds_by_revision_range",
    "list_builds_by_revisions",
    "list_builds_by_time_range",
    "list_recent_builds",
    "record_to_build",
    "save_build",
]

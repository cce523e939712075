"""Tests for FastAPI web API.

Uses TestClient with a mocked query collaborator for the query routes, and
a SQLite-backed collaborator for an end-to-end check.
"""

import time
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from build_tracker import __version__
from build_tracker.builds.queries import Queries, SqlQueries
from build_tracker.builds.schema import BuildSchema
from build_tracker.builds.service import save_build
from build_tracker.config import Settings
from build_tracker.db import Base, get_engine
from web.app import create_app


@pytest.fixture
def build():
    """A build payload as returned by the collaborator."""
    return {
        "meta": {
            "revision": "123",
            "parentRevision": "456",
            "timestamp": int(time.time() * 1000),
        },
        "artifacts": [],
    }


@pytest.fixture
def queries(build):
    """Mock query collaborator resolving every query to ``build``."""
    build_queries = MagicMock()
    build_queries.by_revision.return_value = build
    builds_queries = MagicMock()
    builds_queries.by_revisions.return_value = [build]
    builds_queries.by_revision_range.return_value = [build]
    builds_queries.by_time_range.return_value = [build]
    builds_queries.recent.return_value = [build]
    return Queries(build=build_queries, builds=builds_queries)


@pytest.fixture
def settings():
    return Settings(
        db_url="sqlite:///:memory:",
        artifact_filters=[r"\.map$"],
        toggle_groups={"vendor": ["vendor", "react"]},
        recent_limit=5,
    )


@pytest.fixture
def client(queries, settings):
    app = create_app(queries=queries, settings=settings)
    with TestClient(app) as test_client:
        yield test_client


class TestHealthEndpoints:
    """Tests for health and root endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["version"] == __version__

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "Build Tracker API"


class TestConfigEndpoint:
    """Tests for the dashboard configuration endpoint."""

    def test_get_config(self, client):
        response = client.get("/api/config")
        assert response.status_code == 200
        assert response.json() == {
            "artifactFilters": [r"\.map$"],
            "toggleGroups": {"vendor": ["vendor", "react"]},
            "recentLimit": 5,
        }


class TestQueryByRevision:
    """GET /api/build/{revision}."""

    def test_queries_by_revision(self, client, queries, build):
        response = client.get("/api/build/1234567890")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        queries.build.by_revision.assert_called_once_with("1234567890")
        assert response.json() == build

    def test_500_on_failure(self, client, queries):
        queries.build.by_revision.side_effect = RuntimeError("tacos")
        response = client.get("/api/build/1234567890")
        assert response.status_code == 500
        assert response.json()["detail"]["code"] == "query_failed"


class TestQueryByRevisionRange:
    """GET /api/builds/range/{start}..{end}."""

    def test_queries_by_revision_range(self, client, queries, build):
        response = client.get("/api/builds/range/1234567..abcdef")
        assert response.status_code == 200
        queries.builds.by_revision_range.assert_called_once_with("1234567", "abcdef")
        assert response.json() == [build]

    def test_500_on_failure(self, client, queries):
        queries.builds.by_revision_range.side_effect = RuntimeError("tacos")
        response = client.get("/api/builds/range/1234567..abcdef")
        assert response.status_code == 500


class TestQueryByTimeRange:
    """GET /api/builds/time/{start}..{end}."""

    def test_queries_by_time_range(self, client, queries, build):
        response = client.get("/api/builds/time/1234567..2345678")
        assert response.status_code == 200
        queries.builds.by_time_range.assert_called_once_with(1234567, 2345678)
        assert response.json() == [build]

    def test_non_numeric_range_is_not_routed(self, client, queries):
        response = client.get("/api/builds/time/abc..def")
        assert response.status_code == 404
        queries.builds.by_time_range.assert_not_called()

    def test_500_on_failure(self, client, queries):
        queries.builds.by_time_range.side_effect = RuntimeError("tacos")
        response = client.get("/api/builds/time/1234567..2345678")
        assert response.status_code == 500


class TestQueryByRevisions:
    """GET /api/builds/list/{r1}/{r2}/..."""

    def test_queries_by_revisions(self, client, queries, build):
        response = client.get("/api/builds/list/1234567/abcdef/239587")
        assert response.status_code == 200
        queries.builds.by_revisions.assert_called_once_with(
            ["1234567", "abcdef", "239587"]
        )
        assert response.json() == [build]

    def test_single_revision(self, client, queries):
        client.get("/api/builds/list/1234567")
        queries.builds.by_revisions.assert_called_once_with(["1234567"])

    def test_500_on_failure(self, client, queries):
        queries.builds.by_revisions.side_effect = RuntimeError("tacos")
        response = client.get("/api/builds/list/1234567/abcdef/239587")
        assert response.status_code == 500


class TestQueryByRecent:
    """GET /api/builds and /api/builds/{limit}."""

    def test_queries_recent(self, client, queries, build):
        response = client.get("/api/builds")
        assert response.status_code == 200
        queries.builds.recent.assert_called_once_with(None)
        assert response.json() == [build]

    def test_queries_recent_with_limit(self, client, queries, build):
        response = client.get("/api/builds/4")
        assert response.status_code == 200
        queries.builds.recent.assert_called_once_with("4")
        assert response.json() == [build]

    def test_500_on_failure(self, client, queries):
        queries.builds.recent.side_effect = RuntimeError("tacos")
        response = client.get("/api/builds")
        assert response.status_code == 500


class TestAsyncCollaborator:
    """Collaborators may return awaitables instead of values."""

    def test_coroutine_function(self, queries, settings, build):
        queries.build.by_revision = AsyncMock(return_value=build)
        app = create_app(queries=queries, settings=settings)
        with TestClient(app) as client:
            response = client.get("/api/build/abc")
        assert response.status_code == 200
        assert response.json() == build

    def test_rejected_coroutine(self, queries, settings):
        queries.builds.recent = AsyncMock(side_effect=LookupError("gone"))
        app = create_app(queries=queries, settings=settings)
        with TestClient(app) as client:
            response = client.get("/api/builds/4")
        assert response.status_code == 500


class TestSqlCollaborator:
    """End-to-end routes over the SQLite-backed collaborator."""

    @pytest.fixture
    def sql_client(self, tmp_path, settings):
        engine = get_engine(f"sqlite:///{tmp_path / 'api.db'}")
        Base.metadata.create_all(engine)
        factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
        with factory() as session:
            for i, revision in enumerate(["aaa", "bbb", "ccc"]):
                save_build(
                    session,
                    BuildSchema.model_validate(
                        {
                            "meta": {"revision": revision, "timestamp": 1000 * (i + 1)},
                            "artifacts": [
                                {"name": "main", "hash": revision, "sizes": {"gzip": 100 + i}}
                            ],
                        }
                    ),
                )
            session.commit()

        app = create_app(queries=SqlQueries(factory, default_limit=2), settings=settings)
        with TestClient(app) as test_client:
            yield test_client
        engine.dispose()

    def test_build_by_revision(self, sql_client):
        response = sql_client.get("/api/build/bbb")
        assert response.status_code == 200
        data = response.json()
        assert data["meta"]["revision"] == "bbb"
        assert data["meta"]["parentRevision"] is None
        assert data["artifacts"][0]["sizes"] == {"gzip": 101}

    def test_unknown_revision_is_500(self, sql_client):
        response = sql_client.get("/api/build/zzz")
        assert response.status_code == 500

    def test_revision_range(self, sql_client):
        response = sql_client.get("/api/builds/range/aaa..bbb")
        assert [b["meta"]["revision"] for b in response.json()] == ["aaa", "bbb"]

    def test_recent_uses_default_limit(self, sql_client):
        response = sql_client.get("/api/builds")
        assert [b["meta"]["revision"] for b in response.json()] == ["bbb", "ccc"]

    def test_recent_with_invalid_limit_is_500(self, sql_client):
        response = sql_client.get("/api/builds/many")
        assert response.status_code == 500

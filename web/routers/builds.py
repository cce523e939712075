"""Build query endpoints.

Each route is a thin adapter over the injected query collaborator:
- GET /api/build/{revision} - Build by revision
- GET /api/builds/range/{start}..{end} - Builds in a revision range
- GET /api/builds/time/{start}..{end} - Builds in a time range (ms)
- GET /api/builds/list/{r1}/{r2}/... - Builds by revision list
- GET /api/builds and /api/builds/{limit} - Most recent builds

The collaborator's result is returned as JSON. Any failure becomes a 500;
nothing is retried and not-found is not distinguished from other errors.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi import status as http_status
from starlette.concurrency import run_in_threadpool

from build_tracker.builds.queries import Queries
from web.deps import get_queries

logger = logging.getLogger(__name__)

router = APIRouter()


async def _run_query(name: str, query: Callable[..., Any], *args: Any) -> Any:
    """Call a collaborator method and resolve its result.

    Coroutine functions are awaited; plain callables run in the thread pool,
    and an awaitable they return is awaited as well.

    Raises:
        HTTPException: 500 if the query raises.
    """
    try:
        if inspect.iscoroutinefunction(query):
            result = await query(*args)
        else:
            result = await run_in_threadpool(query, *args)
            if inspect.isawaitable(result):
                result = await result
    except Exception as e:
        logger.error("Query %s%r failed: %s", name, args, e)
        raise HTTPException(
            status_code=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "code": "query_failed",
                "message": f"Query {name} failed",
            },
        ) from e
    return result


@router.get("/build/{revision}")
async def get_build_by_revision(
    revision: str,
    queries: Queries = Depends(get_queries),
) -> Any:
    """Get a single build by revision."""
    return await _run_query("build.by_revision", queries.build.by_revision, revision)


@router.get("/builds/range/{start_revision}..{end_revision}")
async def list_builds_by_revision_range(
    start_revision: str,
    end_revision: str,
    queries: Queries = Depends(get_queries),
) -> Any:
    """List builds between two revisions (inclusive)."""
    return await _run_query(
        "builds.by_revision_range",
        queries.builds.by_revision_range,
        start_revision,
        end_revision,
    )


@router.get("/builds/time/{start:int}..{end:int}")
async def list_builds_by_time_range(
    start: int,
    end: int,
    queries: Queries = Depends(get_queries),
) -> Any:
    """List builds between two timestamps in milliseconds (inclusive)."""
    return await _run_query(
        "builds.by_time_range", queries.builds.by_time_range, start, end
    )


@router.get("/builds/list/{revisions:path}")
async def list_builds_by_revisions(
    revisions: str,
    queries: Queries = Depends(get_queries),
) -> Any:
    """List builds for an arbitrary number of revision path segments."""
    revision_list = [r for r in revisions.split("/") if r]
    return await _run_query(
        "builds.by_revisions", queries.builds.by_revisions, revision_list
    )


@router.get("/builds")
async def list_recent_builds(
    queries: Queries = Depends(get_queries),
) -> Any:
    """List the most recent builds (collaborator default limit)."""
    return await _run_query("builds.recent", queries.builds.recent, None)


@router.get("/builds/{limit}")
async def list_recent_builds_with_limit(
    limit: str,
    queries: Queries = Depends(get_queries),
) -> Any:
    """List the most recent builds; the limit is passed through unparsed."""
    return await _run_query("builds.recent", queries.builds.recent, limit)

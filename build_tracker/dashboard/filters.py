"""Artifact filtering and URL-driven selection.

The dashboard derives the visible artifacts in two steps:

1. ``filter_artifact_names`` hides every artifact matched by any configured
   filter (regular expressions, searched anywhere in the name).
2. ``active_artifact_names`` narrows the result to the names selected in the
   URL, where the artifact segment is either ``All`` or a ``+``-joined list of
   percent-encoded names.

The compared builds are selected the same way, from a ``+``-joined list of
short revisions.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from re import Pattern
from urllib.parse import quote, unquote

from build_tracker.builds.schema import BuildSchema
from build_tracker.compare.formatting import format_sha

logger = logging.getLogger(__name__)

ALL_TOKEN = "All"
NONE_TOKEN = "None"
URL_SEPARATOR = "+"

# Characters left unescaped, matching encodeURIComponent
_URL_SAFE = "-_.!~*'()"


class InvalidFilterError(ValueError):
    """Raised when an artifact filter is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str, code: str = "invalid_filter") -> None:
        super().__init__(f"Invalid artifact filter {pattern!r}: {reason}")
        self.pattern = pattern
        self.code = code


def compile_filters(patterns: Iterable[str | Pattern[str]]) -> list[Pattern[str]]:
    """Compile artifact filter expressions.

    Args:
        patterns: Regular expression strings or already compiled patterns.

    Returns:
        Compiled patterns, in the given order.

    Raises:
        InvalidFilterError: If a pattern does not compile.
    """
    compiled: list[Pattern[str]] = []
    for pattern in patterns:
        if isinstance(pattern, Pattern):
            compiled.append(pattern)
            continue
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            raise InvalidFilterError(pattern, str(e)) from e
    return compiled


def filter_artifact_names(
    artifact_names: Sequence[str], filters: Sequence[Pattern[str]]
) -> list[str]:
    """Drop every name matched by any filter, keeping the original order."""
    return [
        name
        for name in artifact_names
        if not any(f.search(name) for f in filters)
    ]


def active_artifact_names(
    url_param: str | None, artifact_names: Sequence[str]
) -> list[str]:
    """Resolve the artifact segment of a dashboard URL.

    Args:
        url_param: Raw artifact segment, e.g. ``All`` or ``main+vendor%2Fa``.
        artifact_names: Names that may be shown (already filtered).

    Returns:
        The selected names in ``artifact_names`` order, or all of
        ``artifact_names`` when nothing usable is selected.
    """
    if not url_param:
        return list(artifact_names)

    tokens = [t for t in url_param.split(URL_SEPARATOR) if t and t != ALL_TOKEN]
    try:
        selected = {unquote(token, errors="strict") for token in tokens}
    except UnicodeDecodeError:
        logger.warning("Could not decode artifact selection: %s", url_param)
        return list(artifact_names)

    selected.discard("")
    if not selected:
        return list(artifact_names)
    return [name for name in artifact_names if name in selected]


def compare_builds(
    url_param: str | None, builds: Sequence[BuildSchema]
) -> list[BuildSchema]:
    """Resolve the compared-revisions segment of a dashboard URL.

    Args:
        url_param: ``+``-joined short revisions, or None.
        builds: Loaded builds.

    Returns:
        The loaded builds whose short revision is listed, in load order.
    """
    if not url_param:
        return []
    revisions = set(url_param.split(URL_SEPARATOR))
    return [b for b in builds if format_sha(b.revision) in revisions]


def encode_artifact_names(
    active_names: Sequence[str], filtered_names: Sequence[str]
) -> str:
    """Encode the artifact selection for a dashboard URL.

    ``All`` when every filtered name is active, ``None`` when nothing is,
    otherwise the percent-encoded names joined with ``+``.
    """
    if len(active_names) == len(filtered_names):
        tokens = [ALL_TOKEN]
    elif not active_names:
        tokens = [NONE_TOKEN]
    else:
        tokens = list(active_names)
    return URL_SEPARATOR.join(quote(token, safe=_URL_SAFE) for token in tokens)


def encode_compare_revisions(builds: Sequence[BuildSchema]) -> str:
    """Encode compared builds as sorted short revisions joined with ``+``."""
    return URL_SEPARATOR.join(sorted(format_sha(b.revision) for b in builds))


__all__ = [
    "ALL_TOKEN",
    "NONE_TOKEN",
    "InvalidFilterError",
    "active_artifact_names",
    "compare_builds",
    "compile_filters",
    "encode_artifact_names",
    "encode_compare_revisions",
    "filter_artifact_names",
]

"""Reference table construction: cached snapshot first, live rebuild second.

The table maps release tags to their pinned dependencies. It is built once at
startup and only read afterwards, so it is exposed as a read-only mapping.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Mapping

from pydantic import TypeAdapter, ValidationError

from gosum_validator.adapters.upstream.base import AbstractUpstreamClient
from gosum_validator.core.errors import AppError, ReferenceCacheError, UpstreamAppError
from gosum_validator.schemas.versions import DependencySet, ReferenceTable
from gosum_validator.services.reconciler import build_dependency_set

logger = logging.getLogger(__name__)

_TABLE_ADAPTER = TypeAdapter(dict[str, DependencySet])


def freeze_table(table: Mapping[str, DependencySet]) -> ReferenceTable:
    """Return a read-only view over a copy of ``table``."""
    return MappingProxyType(dict(table))


def load_reference_table(path: str | Path) -> ReferenceTable:
    """Load a cached reference table from a JSON snapshot.

    Args:
        path: Snapshot location (usually ``versions.json``).

    Returns:
        ReferenceTable: The decoded table.

    Raises:
        ReferenceCacheError: If the file is missing, unreadable, or invalid.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ReferenceCacheError(
            code="reference_cache_unreadable",
            message=f"Cannot read reference cache: {exc.strerror or exc}",
            details={"path": str(path)},
        ) from exc

    try:
        table = _TABLE_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise ReferenceCacheError(
            code="reference_cache_invalid",
            message="Reference cache is not a valid release table",
            details={"path": str(path), "context": {"errors": exc.error_count()}},
        ) from exc

    return freeze_table(table)


def dump_reference_table(table: Mapping[str, DependencySet], path: str | Path) -> None:
    """Write ``table`` in the snapshot format read by :func:`load_reference_table`."""
    payload = {tag: deps.model_dump(by_alias=True) for tag, deps in table.items()}
    Path(path).write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def build_reference_table(upstream: AbstractUpstreamClient) -> ReferenceTable:
    """Rebuild the table from the upstream tags and per-release lockfiles.

    Failures never abort the rebuild: if the tags listing fails the table is
    empty, and a release whose lockfile cannot be fetched is left out.

    Args:
        upstream: Client used to list tags and download lockfiles.

    Returns:
        ReferenceTable: Releases whose lockfile could be read. Their Go
            version is empty since lockfiles do not record it.
    """
    try:
        tags = upstream.list_tags()
    except UpstreamAppError as exc:
        logger.error(
            "reference_table.tags_failed",
            extra={"error_code": exc.code, "error_msg": exc.message},
        )
        return freeze_table({})

    table: dict[str, DependencySet] = {}
    for tag in tags:
        logger.info("reference_table.checking_release", extra={"release": tag})
        try:
            data = upstream.fetch_lockfile(tag)
        except UpstreamAppError as exc:
            logger.warning(
                "reference_table.release_skipped",
                extra={"release": tag, "error_code": exc.code, "error_msg": exc.message},
            )
            continue
        table[tag] = build_dependency_set(data)

    logger.info(
        "reference_table.rebuilt",
        extra={"releases": len(table), "tags": len(tags)},
    )
    return freeze_table(table)


def initialize_reference_table(
    path: str | Path,
    upstream_factory: Callable[[], AbstractUpstreamClient],
) -> ReferenceTable:
    """Load the cached table, rebuilding it live when the cache is unusable.

    Args:
        path: Snapshot location.
        upstream_factory: Creates the upstream client, only called on rebuild.

    Returns:
        ReferenceTable: Table to serve for the lifetime of the process. Empty
            when the upstream client cannot be created or the rebuild fails.
    """
    try:
        table = load_reference_table(path)
    except ReferenceCacheError as exc:
        logger.info(
            "reference_table.cache_unavailable",
            extra={"path": str(path), "reason": exc.code},
        )
    else:
        logger.info(
            "reference_table.loaded",
            extra={"path": str(path), "releases": len(table)},
        )
        return table

    try:
        upstream = upstream_factory()
    except AppError as exc:
        logger.error(
            "reference_table.rebuild_failed",
            extra={"error_code": exc.code, "error_msg": exc.message},
        )
        return freeze_table({})

    try:
        return build_reference_table(upstream)
    except AppError as exc:
        logger.error(
            "reference_table.rebuild_failed",
            extra={"error_code": exc.code, "error_msg": exc.message},
        )
        return freeze_table({})
    finally:
        upstream.close()

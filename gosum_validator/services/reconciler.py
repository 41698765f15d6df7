"""Lockfile reconciliation against a reference dependency set.

This module turns lockfile lines into a normalized DependencySet and computes
the mismatches between a reference set and a candidate. It handles:
- Normalization of ``/go.mod`` checksum entries
- Deduplication, keeping the highest version recorded per module
- Diffing, reporting only modules present on both sides with different versions

Versions are compared as plain strings, both for deduplication and for the
diff, so ``"1.10.0" < "1.9.0"``. Existing snapshots were built that way.
"""

from __future__ import annotations

import logging
from typing import Iterable, Union

from gosum_validator.schemas.versions import RUNTIME_NAME, DependencySet, Mismatch
from gosum_validator.utils.lockfile_reader import parse_lockfile_lines

logger = logging.getLogger(__name__)

GO_MOD_SUFFIX = "/go.mod"


def clean_version(version: str) -> str:
    """Strip one trailing ``/go.mod`` from a lockfile version field.

    ``go.sum`` records a second checksum per module version for its manifest
    only, written as ``<version>/go.mod``; both lines name the same version.

    Examples:
        >>> clean_version("v1.2.0/go.mod")
        'v1.2.0'
        >>> clean_version("v1.2.0")
        'v1.2.0'
    """
    if len(version) > len(GO_MOD_SUFFIX) and version.endswith(GO_MOD_SUFFIX):
        return version[: -len(GO_MOD_SUFFIX)]
    return version


def fold_modules(lines: Iterable[str]) -> dict[str, str]:
    """Fold lockfile lines into a module -> version mapping.

    Lines with fewer than two whitespace-separated fields are skipped and
    logged. When a module appears more than once, the greater version string
    wins.

    Args:
        lines: Lockfile lines, terminators already removed.

    Returns:
        dict[str, str]: One entry per distinct module.
    """
    modules: dict[str, str] = {}
    for line_no, line in enumerate(lines, start=1):
        fields = line.split()
        if len(fields) < 2:
            logger.info(
                "lockfile.line_ignored",
                extra={"line_no": line_no, "line": line[:120]},
            )
            continue

        name, version = fields[0], clean_version(fields[1])
        current = modules.get(name)
        if current is not None and current >= version:
            continue
        modules[name] = version
    return modules


def build_dependency_set(data: Union[bytes, str], go_version: str = "") -> DependencySet:
    """Parse raw lockfile content into a DependencySet."""
    return DependencySet(
        go_version=go_version,
        modules=fold_modules(parse_lockfile_lines(data)),
    )


def check_version(reference: DependencySet, candidate: DependencySet) -> list[Mismatch]:
    """Compare a candidate set with a reference set.

    The runtime mismatch, if any, comes first; module mismatches follow in
    module name order. Modules missing from the candidate and modules only
    the candidate has are not reported.

    Args:
        reference: Trusted set of a release.
        candidate: Set built from the submitted lockfile.

    Returns:
        list[Mismatch]: Empty when everything present on both sides agrees.
    """
    diffs: list[Mismatch] = []
    if reference.go_version != candidate.go_version:
        diffs.append(
            Mismatch(
                name=RUNTIME_NAME,
                expected=reference.go_version,
                actual=candidate.go_version,
            )
        )

    for name in sorted(reference.modules):
        actual = candidate.modules.get(name)
        if actual is None:
            continue
        expected = reference.modules[name]
        if actual != expected:
            diffs.append(Mismatch(name=name, expected=expected, actual=actual))

    return diffs


def check_lockfile(
    reference: DependencySet,
    go_version: str,
    data: Union[bytes, str],
) -> list[Mismatch]:
    """Build the candidate set from a lockfile and diff it against a reference.

    Args:
        reference: Trusted set of the release the lockfile claims to match.
        go_version: Go version the candidate was built with.
        data: Raw lockfile content.

    Returns:
        list[Mismatch]: See :func:`check_version`.
    """
    candidate = build_dependency_set(data, go_version=go_version)
    diffs = check_version(reference, candidate)

    logger.info(
        "reconcile.done",
        extra={
            "candidate_modules": len(candidate.modules),
            "reference_modules": len(reference.modules),
            "mismatches": len(diffs),
        },
    )
    return diffs

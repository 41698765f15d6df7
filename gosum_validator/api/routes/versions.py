import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from gosum_validator.api.dependencies import get_reference_table
from gosum_validator.core.errors import NotFoundAppError
from gosum_validator.core.file_validation import read_lockfile_body_limited
from gosum_validator.schemas.versions import DependencySet, Mismatch, ReferenceTable
from gosum_validator.services.reconciler import check_lockfile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/versions", tags=["Versions"])

TableDep = Annotated[ReferenceTable, Depends(get_reference_table)]


def _lookup_release(table: ReferenceTable, release: str) -> DependencySet:
    reference = table.get(release)
    if reference is None:
        raise NotFoundAppError(
            code="release_not_found",
            message=f"Unknown release: '{release}'",
            details={"release": release},
        )
    return reference


@router.get("", response_model=dict[str, DependencySet])
def list_versions(table: TableDep) -> dict[str, DependencySet]:
    """Return every known release with its reference dependency set."""
    return dict(table)


@router.get("/{release}", response_model=DependencySet)
def get_version(release: str, table: TableDep) -> DependencySet:
    """Return the reference dependency set of one release.

    Raises:
        NotFoundAppError: 404 if the release is unknown.
    """
    return _lookup_release(table, release)


@router.post(
    "/{release}/{runtime_version}",
    response_model=list[Mismatch],
    responses={
        400: {"description": "The lockfile disagrees with the release; body lists the mismatches."},
        404: {"description": "Unknown release."},
        413: {"description": "Lockfile body too large."},
    },
)
async def validate_lockfile(
    release: str,
    runtime_version: str,
    request: Request,
    response: Response,
    table: TableDep,
) -> list[Mismatch]:
    """Compare a raw lockfile (request body) with a release's reference set.

    Args:
        release: Release tag the lockfile is expected to match.
        runtime_version: Go version the lockfile was resolved with.

    Returns:
        list[Mismatch]: ``[]`` with 200 when everything agrees, otherwise the
            mismatches with 400.
    """
    reference = _lookup_release(table, release)
    body = await read_lockfile_body_limited(request)

    diffs = check_lockfile(reference, runtime_version, body)
    if diffs:
        response.status_code = 400
        logger.info(
            "validate.mismatch",
            extra={"release": release, "go_version": runtime_version, "mismatches": len(diffs)},
        )
    return diffs

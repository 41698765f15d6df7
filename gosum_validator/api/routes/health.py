from __future__ import annotations

from fastapi import APIRouter, Depends

from gosum_validator.api.dependencies import get_reference_table
from gosum_validator.schemas.versions import HealthResponse, ReferenceTable

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health_check(table: ReferenceTable = Depends(get_reference_table)) -> HealthResponse:
    """Health check endpoint.

    Reports liveness and how many releases the reference table holds, which
    makes an empty table after a failed rebuild visible to monitoring.
    """

    return HealthResponse(status="ok", releases=len(table))

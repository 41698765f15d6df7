from __future__ import annotations

from fastapi import Request

from gosum_validator.schemas.versions import ReferenceTable


def get_reference_table(request: Request) -> ReferenceTable:
    """Return the reference table the application was started with.

    Handlers receive the table through ``Depends`` so tests can override it
    without a running upstream.
    """

    return request.app.state.reference_table

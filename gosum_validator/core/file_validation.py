"""Request body validation for submitted lockfiles."""
from __future__ import annotations

import logging

from fastapi import Request
from gosum_validator.core.config import settings
from gosum_validator.core.errors import PayloadTooLargeAppError

logger = logging.getLogger(__name__)


def _too_large(max_bytes: int, actual_bytes: int) -> PayloadTooLargeAppError:
    return PayloadTooLargeAppError(
        code="lockfile_too_large",
        message=f"Lockfile too large. Maximum size: {settings.app.max_lockfile_size_kb}KB",
        details={"max_bytes": max_bytes, "actual_bytes": actual_bytes},
    )


async def read_lockfile_body_limited(request: Request) -> bytes:
    """Read a raw lockfile request body enforcing the max size limit.

    Rejects early when the declared Content-Length is too large, then keeps
    counting while streaming in case the header is absent or wrong.

    Args:
        request: Incoming request whose body is the lockfile text.

    Returns:
        Body content as bytes if within the allowed size limit.

    Raises:
        PayloadTooLargeAppError: 413 if the body exceeds the configured size limit.
    """
    max_bytes = settings.app.max_lockfile_size_kb * 1024

    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        logger.warning(
            "lockfile_validation.rejected_by_header",
            extra={"declared_bytes": int(declared), "max_bytes": max_bytes},
        )
        raise _too_large(max_bytes, int(declared))

    size = 0
    chunks: list[bytes] = []
    async for chunk in request.stream():
        size += len(chunk)
        if size > max_bytes:
            logger.warning(
                "lockfile_validation.rejected_by_stream",
                extra={"size": size, "max_bytes": max_bytes},
            )
            raise _too_large(max_bytes, size)
        chunks.append(chunk)

    return b"".join(chunks)

"""Application factory for FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) and the
reference table lifecycle, so tests can build an app around an injected table.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Mapping

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool

from gosum_validator.adapters.upstream.base import AbstractUpstreamClient
from gosum_validator.adapters.upstream.factory import create_upstream_client
from gosum_validator.api.routes import health_router, versions_router
from gosum_validator.core.config import settings
from gosum_validator.core.exception_handlers import setup_exception_handlers
from gosum_validator.core.logging import configure_logging
from gosum_validator.core.middleware import request_id_middleware
from gosum_validator.core.openapi import apply_openapi_customizations
from gosum_validator.schemas.versions import DependencySet
from gosum_validator.services.reference_table import freeze_table, initialize_reference_table

logger = logging.getLogger(__name__)


def create_app(
    reference_table: Mapping[str, DependencySet] | None = None,
    *,
    upstream_factory: Callable[[], AbstractUpstreamClient] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        reference_table: Table to serve. When omitted, it is initialized at
            startup from the cached snapshot, or rebuilt from upstream.
        upstream_factory: Client factory used for a live rebuild.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.reference_table is None:
            app.state.reference_table = await run_in_threadpool(
                initialize_reference_table,
                settings.app.versions_file,
                upstream_factory or create_upstream_client,
            )
        logger.info(
            "app.ready",
            extra={"releases": len(app.state.reference_table)},
        )
        yield

    app = FastAPI(
        title="go.sum Validator API",
        description=(
            "Compares a submitted go.sum against the pinned dependencies of an "
            "upstream release and lists every module whose version differs."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        lifespan=lifespan,
    )
    app.state.reference_table = (
        freeze_table(reference_table) if reference_table is not None else None
    )

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(versions_router, prefix="/api")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app

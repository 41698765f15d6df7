from __future__ import annotations

from gosum_validator.api.routes.health import router as health_router
from gosum_validator.api.routes.versions import router as versions_router

__all__ = ["health_router", "versions_router"]

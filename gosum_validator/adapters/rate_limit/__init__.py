"""Outbound request gating.

Upstream refreshes go through a fetcher that dispatches at most one request
per interval, keeping unauthenticated API usage under the upstream limit.
"""

from gosum_validator.adapters.rate_limit.base import (
    AbstractFetcher,
    FetcherClosedError,
    FetchRequest,
)
from gosum_validator.adapters.rate_limit.tick_gate import TickGatedFetcher

__all__ = [
    "AbstractFetcher",
    "FetchRequest",
    "FetcherClosedError",
    "TickGatedFetcher",
]

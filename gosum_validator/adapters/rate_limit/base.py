"""Rate-limited fetcher interfaces.

Upstream clients depend on this abstraction (not the concrete gate) so tests
and alternative schedulers can be swapped in without touching them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Mapping

import httpx


@dataclass(frozen=True)
class FetchRequest:
    """Descriptor of one outbound GET.

    Attributes:
        url: Absolute URL to fetch.
        headers: Extra request headers (e.g. User-Agent).
    """

    url: str
    headers: Mapping[str, str] = field(default_factory=dict)


class FetcherClosedError(RuntimeError):
    """Raised for calls made to, or still waiting on, a closed fetcher."""


class AbstractFetcher(ABC):
    """Interface for fetchers that gate outbound requests."""

    @abstractmethod
    def fetch(self, request: FetchRequest) -> httpx.Response:
        """Perform the request once the gate allows it.

        Args:
            request: What to fetch.

        Returns:
            The upstream response (any status code).

        Raises:
            httpx.HTTPError: Transport failures, re-raised in the caller.
            FetcherClosedError: If the fetcher is closed.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release background resources. Default: nothing to release."""

"""Factory for the upstream client used to rebuild the reference table."""

from gosum_validator.adapters.rate_limit.tick_gate import TickGatedFetcher
from gosum_validator.adapters.upstream.base import AbstractUpstreamClient
from gosum_validator.adapters.upstream.github_client import GitHubClient
from gosum_validator.core.config import settings
from gosum_validator.core.errors import ValidationAppError


def create_upstream_client() -> AbstractUpstreamClient:
    """Build a GitHub client behind a tick-gated fetcher.

    Reads configuration from gosum_validator.core.config.settings.

    Returns:
        AbstractUpstreamClient: Ready-to-use client; the caller closes it.

    Raises:
        ValidationAppError: If the configured repository is not ``owner/name``.
    """
    upstream = settings.upstream

    owner, _, name = upstream.repository.strip("/").partition("/")
    if not owner or not name:
        raise ValidationAppError(
            code="upstream_invalid_repository",
            message=(
                f"Invalid upstream repository: '{upstream.repository}'. "
                "Expected the form owner/name"
            ),
        )

    fetcher = TickGatedFetcher(
        interval_seconds=upstream.fetch_interval_seconds,
        timeout_seconds=upstream.timeout_seconds,
    )
    return GitHubClient(
        fetcher,
        repository=upstream.repository,
        user_agent=upstream.user_agent,
        api_base_url=upstream.api_base_url,
        raw_base_url=upstream.raw_base_url,
        lockfile_name=upstream.lockfile_name,
    )

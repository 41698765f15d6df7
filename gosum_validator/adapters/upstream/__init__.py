"""Upstream adapter layer - reads release tags and lockfiles."""

from gosum_validator.adapters.upstream.base import AbstractUpstreamClient
from gosum_validator.adapters.upstream.factory import create_upstream_client
from gosum_validator.adapters.upstream.github_client import GitHubClient

__all__ = [
    "AbstractUpstreamClient",
    "GitHubClient",
    "create_upstream_client",
]

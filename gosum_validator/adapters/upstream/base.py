from abc import ABC, abstractmethod


class AbstractUpstreamClient(ABC):
	"""Interface for clients reading releases of the upstream project."""

	@abstractmethod
	def list_tags(self) -> list[str]:
		"""List release tag names, in the order the upstream returns them.

		Returns:
			list[str]: Tag names (e.g. ``["v1.3.0", "v1.2.0"]``).

		Raises:
			UpstreamAppError: If the listing cannot be fetched or decoded.
		"""
		...

	@abstractmethod
	def fetch_lockfile(self, tag: str) -> bytes:
		"""Download the raw lockfile of one release.

		Args:
			tag: Release tag name.

		Returns:
			bytes: Lockfile content.

		Raises:
			UpstreamAppError: If the file cannot be fetched.
		"""
		...

	def close(self) -> None:
		"""Release resources held by the client."""

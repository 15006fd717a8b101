"""Fire-and-forget notifications to the code cache service."""

from __future__ import annotations

import asyncio
import logging
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

CACHE_ENDPOINT = "/api/v2/repositories/cache"


def build_cache_url(base_url: str, git_url: str, branch: str, legacy_query: bool = False) -> str:
	"""
	Build the cache-update URL for a repository branch.

	The git URL is kept readable (``:`` and ``/`` are not escaped) because the
	cache service matches it literally. With ``legacy_query`` the branch is
	appended after a second ``?``, the form older deployments of the service
	were fed.

	Args:
	    base_url: Cache service base URL
	    git_url: Clone URL of the repository
	    branch: Branch that was updated
	    legacy_query: Reproduce the historical ``?branch=`` separator

	Returns:
	    Fully built URL

	"""
	separator = "?" if legacy_query else "&"
	return (
		f"{base_url.rstrip('/')}{CACHE_ENDPOINT}"
		f"?dfScmUrl={quote(git_url, safe=':/')}{separator}branch={quote(branch, safe='/')}"
	)


class CacheNotifier:
	"""
	Tells the cache service that a branch was updated.

	``notify`` schedules the POST as a detached task and returns immediately; the
	replay loop never waits on it, so the notification for one stride may land
	after the next stride's push. The task is returned so callers can observe it,
	and ``drain`` waits (bounded) for whatever is still in flight.

	"""

	def __init__(
		self,
		base_url: str,
		git_url: str,
		branch: str,
		timeout: float = 30.0,
		legacy_query: bool = False,
	) -> None:
		"""
		Initialize the notifier.

		Args:
		    base_url: Cache service base URL
		    git_url: Clone URL of the repository
		    branch: Branch being onboarded
		    timeout: Seconds before a single HTTP request is abandoned
		    legacy_query: Use the historical ``?branch=`` query form

		"""
		self.url = build_cache_url(base_url, git_url, branch, legacy_query=legacy_query)
		self.timeout = timeout
		self._pending: set[asyncio.Task[bool]] = set()

	@property
	def pending(self) -> int:
		"""Number of notifications still in flight."""
		return len(self._pending)

	def _post(self) -> bool:
		response = requests.post(self.url, timeout=self.timeout)
		response.raise_for_status()
		return True

	async def _send(self, commit_id: str) -> bool:
		try:
			await asyncio.to_thread(self._post)
		except requests.RequestException as e:
			logger.error("Error on update code-cache after %s: %s", commit_id, e)
			return False
		except Exception:
			logger.exception("Unexpected error on update code-cache after %s", commit_id)
			return False
		logger.info("Code cache was updated after %s", commit_id)
		return True

	def notify(self, commit_id: str) -> asyncio.Task[bool]:
		"""
		Schedule a cache update without waiting for it.

		Must be called from a running event loop. The task never raises; its
		result is True when the service accepted the update.

		Args:
		    commit_id: Boundary commit that was just pushed, for logging

		Returns:
		    The detached task performing the request

		"""
		logger.info("Updating code cache in %s", self.url)
		task = asyncio.create_task(self._send(commit_id))
		self._pending.add(task)
		task.add_done_callback(self._pending.discard)
		return task

	async def drain(self, timeout: float | None = None) -> int:
		"""
		Wait for outstanding notifications.

		Args:
		    timeout: Maximum seconds to wait; None waits for all of them

		Returns:
		    Number of notifications still unfinished when the wait ended

		"""
		if not self._pending:
			return 0
		logger.debug("Waiting for %d cache notification(s)", len(self._pending))
		_, not_done = await asyncio.wait(set(self._pending), timeout=timeout)
		if not_done:
			logger.warning("%d cache notification(s) did not finish in time", len(not_done))
		return len(not_done)

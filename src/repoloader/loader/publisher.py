"""Push the target branch to origin."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from repoloader.git.utils import GitError, GitOutputTooLargeError

if TYPE_CHECKING:
	from repoloader.git.utils import GitRepository

logger = logging.getLogger(__name__)


async def push_branch(git: GitRepository, branch: str, commit_id: str) -> bool:
	"""
	Push ``branch`` to origin, logging rather than raising on failure.

	Args:
	    git: Repository to push from
	    branch: Branch to push
	    commit_id: Boundary commit of the current stride, for logging

	Returns:
	    True if git reported a successful push

	"""
	logger.info("Pushing %s to origin", branch)
	try:
		result = await git.push(branch)
	except GitOutputTooLargeError as e:
		if e.returncode != 0:
			logger.error("Push of %s after %s failed: %s", branch, commit_id, e)
			return False
		logger.warning("Push of %s after %s succeeded; its output was discarded: %s", branch, commit_id, e)
		logger.info("Pushed %s to origin", branch)
		return True
	except GitError:
		logger.exception("Push of %s after %s raised", branch, commit_id)
		return False

	if result.failed:
		logger.error("Push of %s after %s failed: %s", branch, commit_id, result.diagnostic)
		return False

	# git reports push progress on stderr even when it succeeds
	output = result.stdout.strip() or result.stderr.strip()
	if output:
		logger.debug(output)
	logger.info("Pushed %s to origin", branch)
	return True

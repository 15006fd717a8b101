"""Put the target branch into a clean, checked-out state."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from repoloader.git.utils import BranchPreparationError, GitError, GitOutputTooLargeError

if TYPE_CHECKING:
	from repoloader.git.utils import GitRepository

logger = logging.getLogger(__name__)


async def prepare_branch(git: GitRepository, branch: str) -> None:
	"""
	Abort any in-progress merge and check out ``branch``.

	The abort is attempted unconditionally and its failure is ignored, since in the
	common case there is simply no merge to abort. A failed checkout is fatal: every
	later step assumes ``branch`` is the current branch.

	Args:
	    git: Repository to prepare
	    branch: Branch to check out

	Raises:
	    BranchPreparationError: If the checkout fails

	"""
	logger.info("Checking out to branch %s", branch)

	try:
		result = await git.abort_merge()
	except GitError as e:
		logger.debug("Ignoring merge --abort error: %s", e)
	else:
		if result.failed:
			logger.debug("No merge to abort: %s", result.diagnostic)

	try:
		result = await git.checkout(branch)
	except GitOutputTooLargeError as e:
		if e.returncode != 0:
			msg = f"Failed to check out branch {branch}: {e}"
			raise BranchPreparationError(msg) from e
		logger.warning("Checked out %s but discarded its output: %s", branch, e)
	except GitError as e:
		msg = f"Failed to check out branch {branch}: {e}"
		raise BranchPreparationError(msg) from e
	else:
		if result.failed:
			msg = f"Failed to check out branch {branch}: {result.diagnostic}"
			raise BranchPreparationError(msg)

	logger.info("Checked out to branch %s", branch)

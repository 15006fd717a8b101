"""Merge a single boundary commit into the checked-out branch."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from repoloader.git.utils import GitError, GitOutputTooLargeError

if TYPE_CHECKING:
	from repoloader.git.utils import GitRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergeOutcome:
	"""Result of merging one commit."""

	commit: str
	merged: bool
	diagnostic: str = ""


async def _abort(git: GitRepository, commit_id: str) -> None:
	try:
		result = await git.abort_merge()
	except GitError:
		logger.exception("merge --abort after failed merge of %s raised", commit_id)
		return
	if result.failed:
		logger.error("merge --abort after failed merge of %s failed: %s", commit_id, result.diagnostic)


async def merge_commit(git: GitRepository, commit_id: str, branch: str) -> MergeOutcome:
	"""
	Three-way merge ``commit_id`` into the current branch.

	Failure means git exited non-zero, whether or not its output fit the buffer.
	On failure the merge is aborted exactly once so the working tree is clean for
	the next stride, and the commit's changes are left out of the branch. Failures
	never raise; the caller decides what to do with the outcome.

	Args:
	    git: Repository with ``branch`` checked out
	    commit_id: Boundary commit to merge
	    branch: Name of the checked-out branch, for logging

	Returns:
	    MergeOutcome describing whether the merge was committed

	"""
	logger.info("Merging %s to %s", commit_id, branch)
	try:
		result = await git.merge(commit_id)
	except GitOutputTooLargeError as e:
		if e.returncode == 0:
			# The merge was committed before git finished printing its diffstat
			logger.warning("Commit %s was merged to %s; its output was discarded: %s", commit_id, branch, e)
			return MergeOutcome(commit=commit_id, merged=True, diagnostic=str(e))
		diagnostic = str(e)
	except GitError as e:
		diagnostic = str(e)
	else:
		if not result.failed:
			logger.info("Commit %s was merged to %s successfully", commit_id, branch)
			return MergeOutcome(commit=commit_id, merged=True)
		diagnostic = result.diagnostic

	await _abort(git, commit_id)
	logger.error("Merge of %s into %s failed and was aborted: %s", commit_id, branch, diagnostic)
	return MergeOutcome(commit=commit_id, merged=False, diagnostic=diagnostic)

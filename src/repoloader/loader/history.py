"""Enumerate the commits that still have to be onboarded."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from repoloader.git.utils import EnumerationError, GitOutputTooLargeError, parse_commit_list

if TYPE_CHECKING:
	from repoloader.git.utils import GitRepository, GitResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitSequence:
	"""Commits on the source branch missing from the target branch, oldest first."""

	commits: tuple[str, ...]
	reported_count: int

	def __len__(self) -> int:
		"""Return the number of commits in the sequence."""
		return len(self.commits)

	def __getitem__(self, index: int) -> str:
		"""Return the commit id at ``index``."""
		return self.commits[index]

	@property
	def is_empty(self) -> bool:
		"""Whether there is nothing to onboard."""
		return not self.commits


def _check(result: GitResult, what: str) -> None:
	if result.failed or result.stderr.strip():
		msg = f"Failed to {what}: {result.diagnostic}"
		raise EnumerationError(msg)


async def count_commits(git: GitRepository, source: str, target: str) -> int:
	"""
	Count the commits reachable from ``source`` but not from ``target``.

	Raises:
	    EnumerationError: If git reports an error or prints something that is not a count

	"""
	try:
		result = await git.count_commits_between(target, source)
	except GitOutputTooLargeError as e:
		msg = f"Failed to count commits between {target} and {source}: {e}"
		raise EnumerationError(msg) from e
	_check(result, f"count commits between {target} and {source}")
	try:
		return int(result.stdout.strip())
	except ValueError as e:
		msg = f"Unexpected commit count from git: {result.stdout.strip()!r}"
		raise EnumerationError(msg) from e


async def list_commits(git: GitRepository, source: str, target: str) -> list[str]:
	"""
	List the commits reachable from ``source`` but not from ``target``, oldest first.

	Raises:
	    EnumerationError: If git reports an error, the output overflows the buffer,
	        or the same commit is listed twice

	"""
	try:
		result = await git.list_commits_between(target, source)
	except GitOutputTooLargeError as e:
		msg = f"Failed to list commits between {target} and {source}: {e}"
		raise EnumerationError(msg) from e
	_check(result, f"list commits between {target} and {source}")

	commits = parse_commit_list(result.stdout)
	if len(set(commits)) != len(commits):
		msg = f"git listed duplicate commits between {target} and {source}"
		raise EnumerationError(msg)
	return commits


async def enumerate_commits(git: GitRepository, source: str, target: str) -> CommitSequence:
	"""
	Compute the commits to onboard from ``source`` onto ``target``.

	The count is queried first; when it is zero the list is not fetched. There is
	no partial enumeration: any failure raises and the run must stop.

	Args:
	    git: Repository to query
	    source: Branch the commits come from
	    target: Branch the commits will be merged into

	Returns:
	    CommitSequence, oldest commit first

	Raises:
	    EnumerationError: If either ancestry query fails

	"""
	total = await count_commits(git, source, target)
	if total == 0:
		return CommitSequence(commits=(), reported_count=0)

	commits = await list_commits(git, source, target)
	if len(commits) != total:
		logger.warning(
			"git counted %d commits but listed %d; onboarding the %d listed",
			total,
			len(commits),
			len(commits),
		)
	return CommitSequence(commits=tuple(commits), reported_count=total)

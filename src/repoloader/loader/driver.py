"""The batched replay loop."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from repoloader.git.utils import GitRepository
from repoloader.loader.branch import prepare_branch
from repoloader.loader.history import CommitSequence, enumerate_commits
from repoloader.loader.merge import merge_commit
from repoloader.loader.notifier import CacheNotifier
from repoloader.loader.pacer import Pacer
from repoloader.loader.publisher import push_branch
from repoloader.loader.strides import boundary_indices, stride_count

if TYPE_CHECKING:
	from repoloader.loader.run_config import RunConfig

logger = logging.getLogger(__name__)


class ReplayState(str, Enum):
	"""States of the replay loop."""

	INIT = "init"
	ENUMERATING = "enumerating"
	DONE = "done"
	REPLAYING = "replaying"
	MERGING = "merging"
	PUSHING = "pushing"
	NOTIFYING = "notifying"
	PACING = "pacing"
	COMPLETE = "complete"


@dataclass(frozen=True)
class StrideOutcome:
	"""What happened to one stride."""

	stride: int
	index: int
	commit: str
	merged: bool
	pushed: bool
	diagnostic: str = ""


@dataclass
class ReplayReport:
	"""Summary of a replay run, built as strides complete."""

	total_commits: int = 0
	strides: list[StrideOutcome] = field(default_factory=list)
	state: ReplayState = ReplayState.INIT

	@property
	def merged(self) -> int:
		"""Number of strides whose boundary commit was merged."""
		return sum(1 for outcome in self.strides if outcome.merged)

	@property
	def failed_merges(self) -> list[StrideOutcome]:
		"""Strides whose merge failed and was aborted."""
		return [outcome for outcome in self.strides if not outcome.merged]

	@property
	def pushed(self) -> int:
		"""Number of strides whose push succeeded."""
		return sum(1 for outcome in self.strides if outcome.pushed)


class ReplayDriver:
	"""
	Replays the source branch onto the target branch in fixed-size strides.

	For every stride only the last commit is merged; git pulls its ancestors in
	with it. Each stride then pushes, fires a cache notification and waits before
	the next one. Stride failures are logged and the loop moves on; only branch
	preparation and enumeration failures stop the run. The cursor is never
	persisted: a rerun re-enumerates, which skips whatever was already merged.

	"""

	def __init__(
		self,
		config: RunConfig,
		git: GitRepository | None = None,
		notifier: CacheNotifier | None = None,
		pacer: Pacer | None = None,
	) -> None:
		"""
		Initialize the driver.

		Args:
		    config: Run configuration
		    git: Repository wrapper; built from ``config`` when omitted
		    notifier: Cache notifier; built from ``config`` when omitted
		    pacer: Inter-stride pacer; built from ``config`` when omitted

		"""
		self.config = config
		self.git = git or GitRepository(config.repo_dir, max_buffer=config.max_buffer)
		self.notifier = notifier or CacheNotifier(
			config.code_cache_api,
			config.git_url,
			config.branch_target,
			timeout=config.notify_timeout,
			legacy_query=config.legacy_query,
		)
		self.pacer = pacer or Pacer(config.interval)
		self.report = ReplayReport()

	@property
	def state(self) -> ReplayState:
		"""Current state of the loop."""
		return self.report.state

	def _transition(self, state: ReplayState) -> None:
		logger.debug("Replay state %s -> %s", self.report.state.value, state.value)
		self.report.state = state

	async def run(self) -> ReplayReport:
		"""
		Run the whole onboarding.

		Returns:
		    ReplayReport with one entry per processed stride

		Raises:
		    BranchPreparationError: If the target branch cannot be checked out
		    EnumerationError: If the commits to onboard cannot be listed

		"""
		target = self.config.branch_target
		await prepare_branch(self.git, target)

		self._transition(ReplayState.ENUMERATING)
		commits = await enumerate_commits(self.git, self.config.branch_origin, target)
		self.report.total_commits = len(commits)
		if commits.is_empty:
			logger.info("There are no commits to onboard")
			self._transition(ReplayState.DONE)
			return self.report

		logger.info("Total of commits to onboard: %d", len(commits))
		await self._replay(commits)
		return self.report

	async def _replay(self, commits: CommitSequence) -> None:
		batch_size = self.config.batch_size
		total_strides = stride_count(len(commits), batch_size)
		self._transition(ReplayState.REPLAYING)

		try:
			for stride, index in enumerate(boundary_indices(len(commits), batch_size), start=1):
				if stride > 1:
					self._transition(ReplayState.PACING)
					await self.pacer.wait()
					self._transition(ReplayState.REPLAYING)
				logger.info("Stride %d/%d: boundary commit %d of %d", stride, total_strides, index + 1, len(commits))
				self.report.strides.append(await self._process(stride, index, commits[index]))
		finally:
			await self.notifier.drain(timeout=self.config.notify_timeout)

		self._transition(ReplayState.COMPLETE)

	async def _process(self, stride: int, index: int, commit_id: str) -> StrideOutcome:
		target = self.config.branch_target

		self._transition(ReplayState.MERGING)
		outcome = await merge_commit(self.git, commit_id, target)

		self._transition(ReplayState.PUSHING)
		pushed = await push_branch(self.git, target, commit_id)

		self._transition(ReplayState.NOTIFYING)
		self.notifier.notify(commit_id)

		return StrideOutcome(
			stride=stride,
			index=index,
			commit=commit_id,
			merged=outcome.merged,
			pushed=pushed,
			diagnostic=outcome.diagnostic,
		)

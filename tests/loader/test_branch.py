"""Tests for target branch preparation."""

from __future__ import annotations

import pytest

from repoloader.git.utils import BranchPreparationError, GitError
from repoloader.loader.branch import prepare_branch
from tests.base import FakeGit, fail, overflow


@pytest.mark.unit
@pytest.mark.git
class TestPrepareBranch:
	"""Abort-then-checkout sequence."""

	@pytest.mark.asyncio
	async def test_aborts_then_checks_out(self, fake_git: FakeGit) -> None:
		"""The merge abort always runs before checkout."""
		await prepare_branch(fake_git, "feature1")

		assert fake_git.events == [("abort_merge",), ("checkout", "feature1")]

	@pytest.mark.asyncio
	async def test_abort_failure_is_swallowed(self, fake_git: FakeGit) -> None:
		"""'There is no merge to abort' is the common case and is ignored."""
		fake_git.results["abort_merge"] = fail("fatal: There is no merge to abort (MERGE_HEAD missing).", 128)

		await prepare_branch(fake_git, "feature1")

		assert fake_git.calls("checkout") == [("checkout", "feature1")]

	@pytest.mark.asyncio
	async def test_abort_exception_is_swallowed(self, fake_git: FakeGit) -> None:
		"""Even a git error raised by the abort does not stop preparation."""

		def boom() -> None:
			msg = "Unable to run git"
			raise GitError(msg)

		fake_git.results["abort_merge"] = boom

		await prepare_branch(fake_git, "feature1")

		assert fake_git.calls("checkout") == [("checkout", "feature1")]

	@pytest.mark.asyncio
	async def test_checkout_failure_is_fatal(self, fake_git: FakeGit) -> None:
		"""Later steps assume the target branch is checked out, so a failed checkout stops the run."""
		fake_git.results["checkout"] = fail("error: pathspec 'feature1' did not match any file(s) known to git")

		with pytest.raises(BranchPreparationError, match="did not match"):
			await prepare_branch(fake_git, "feature1")

	@pytest.mark.asyncio
	async def test_abort_with_oversized_output_is_swallowed(self, fake_git: FakeGit) -> None:
		"""An abort whose output was too large is ignored like any other abort failure."""
		fake_git.results["abort_merge"] = overflow(128)

		await prepare_branch(fake_git, "feature1")

		assert fake_git.calls("checkout") == [("checkout", "feature1")]

	@pytest.mark.asyncio
	async def test_checkout_with_oversized_output(self, fake_git: FakeGit) -> None:
		"""A checkout that exited 0 succeeded even if its output was dropped; otherwise it is fatal."""
		fake_git.results["checkout"] = overflow(0)
		await prepare_branch(fake_git, "feature1")

		fake_git.results["checkout"] = overflow(1)
		with pytest.raises(BranchPreparationError, match="maximum buffer"):
			await prepare_branch(fake_git, "feature1")

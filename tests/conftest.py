"""Global test fixtures and configuration."""

from __future__ import annotations

import os
import shutil
from typing import TYPE_CHECKING

import pytest

from repoloader.loader.run_config import RunConfig
from tests.base import FakeGit, git

if TYPE_CHECKING:
	from collections.abc import Callable, Iterator
	from pathlib import Path


@pytest.fixture
def fake_git() -> FakeGit:
	"""A FakeGit with no history."""
	return FakeGit()


@pytest.fixture
def run_config(tmp_path: Path) -> RunConfig:
	"""A run configuration pointing at an empty temporary directory."""
	return RunConfig(
		code_cache_api="https://cache.example.com",
		branch_target="feature1",
		owner="acme",
		repo="widgets",
		repo_dir=tmp_path,
		batch_size=50,
		interval=0,
		notify_timeout=1,
	)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
	"""Keep user config files and REPOLOADER_* variables out of every test."""
	for name in list(os.environ):
		if name.startswith("REPOLOADER_"):
			monkeypatch.delenv(name)
	monkeypatch.setattr("repoloader.utils.config_loader.xdg_config_home", str(tmp_path / "xdg"))
	monkeypatch.chdir(tmp_path)
	yield


@pytest.fixture
def git_repo(tmp_path: Path) -> Callable[[int], Path]:
	"""
	Factory for a clone whose ``master`` is ``n`` commits ahead of ``feature1``.

	The clone has a bare ``origin`` next to it so pushes succeed.

	"""
	if shutil.which("git") is None:
		pytest.skip("git is not installed")

	def build(n: int) -> Path:
		origin = tmp_path / "origin.git"
		work = tmp_path / "work"
		git(tmp_path, "init", "--bare", str(origin))
		git(tmp_path, "clone", str(origin), str(work))
		git(work, "config", "user.email", "loader@example.com")
		git(work, "config", "user.name", "Loader Tests")
		git(work, "config", "commit.gpgsign", "false")
		git(work, "symbolic-ref", "HEAD", "refs/heads/master")

		(work / "README").write_text("base\n")
		git(work, "add", "README")
		git(work, "commit", "-m", "base")
		git(work, "branch", "feature1")

		for i in range(n):
			(work / f"file{i}.txt").write_text(f"{i}\n")
			git(work, "add", f"file{i}.txt")
			git(work, "commit", "-m", f"commit {i}")

		git(work, "push", "origin", "master", "feature1")
		return work

	return build

"""Git utilities for RepoLoader."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Default ceiling for a single stream of git output (2 MiB)
DEFAULT_MAX_BUFFER = 1024 * 1024 * 2

# Bytes read from a subprocess pipe per iteration
READ_CHUNK_SIZE = 64 * 1024


class GitError(Exception):
	"""Custom exception for Git-related errors."""


class GitOutputTooLargeError(GitError):
	"""Raised when a git command writes more output than the configured buffer allows."""

	def __init__(self, message: str, returncode: int | None = None) -> None:
		"""
		Initialize the error.

		Args:
		    message: Which stream overflowed and the limit
		    returncode: Exit status git finished with, if it was waited for

		"""
		super().__init__(message)
		self.returncode = returncode


class EnumerationError(GitError):
	"""Raised when the commits to onboard cannot be listed."""


class BranchPreparationError(GitError):
	"""Raised when the target branch cannot be checked out."""


@dataclass(frozen=True)
class GitResult:
	"""Outcome of a single git invocation."""

	args: tuple[str, ...]
	returncode: int
	stdout: str
	stderr: str

	@property
	def failed(self) -> bool:
		"""Whether git exited with a non-zero status."""
		return self.returncode != 0

	@property
	def diagnostic(self) -> str:
		"""Best available error text for logging."""
		return self.stderr.strip() or self.stdout.strip() or f"git exited with status {self.returncode}"


async def _read_bounded(stream: asyncio.StreamReader, max_buffer: int) -> tuple[bytes, bool]:
	"""
	Read a subprocess stream to EOF, holding at most ``max_buffer`` bytes.

	Once the limit is passed the rest of the stream is still consumed, so git is
	never blocked on a full pipe, but it is discarded.

	Returns:
	    The captured bytes and whether the stream overflowed

	"""
	chunks: list[bytes] = []
	size = 0
	overflowed = False
	while True:
		chunk = await stream.read(READ_CHUNK_SIZE)
		if not chunk:
			break
		if overflowed:
			continue
		size += len(chunk)
		if size > max_buffer:
			overflowed = True
			chunks.clear()
			continue
		chunks.append(chunk)
	return b"".join(chunks), overflowed


async def run_git_command(args: list[str], cwd: Path, max_buffer: int = DEFAULT_MAX_BUFFER) -> GitResult:
	"""
	Run a Git command against a repository and capture its output.

	The command is executed without a shell as ``git -C <cwd> <args>``. A non-zero
	exit status is reported through the returned ``GitResult`` rather than raised,
	since callers differ in which failures are fatal.

	Output past ``max_buffer`` is drained and dropped while git runs to completion;
	the error raised afterwards carries git's real exit status, because a command
	such as ``merge`` may already have changed the repository by then.

	Args:
	    args: Git arguments, without the leading ``git``
	    cwd: Repository directory
	    max_buffer: Maximum number of bytes accepted per output stream

	Returns:
	    GitResult with decoded stdout and stderr

	Raises:
	    GitOutputTooLargeError: If either stream exceeds ``max_buffer``
	    GitError: If the git executable cannot be started

	"""
	command = ["git", "-C", str(cwd), *args]
	logger.debug("Running: %s", " ".join(command))
	try:
		process = await asyncio.create_subprocess_exec(
			*command,
			stdout=asyncio.subprocess.PIPE,
			stderr=asyncio.subprocess.PIPE,
		)
	except OSError as e:
		msg = f"Unable to run git: {e}"
		raise GitError(msg) from e

	if process.stdout is None or process.stderr is None:
		msg = "git subprocess was started without output pipes"
		raise GitError(msg)

	try:
		(stdout, stdout_overflow), (stderr, stderr_overflow) = await asyncio.gather(
			_read_bounded(process.stdout, max_buffer),
			_read_bounded(process.stderr, max_buffer),
		)
		returncode = await process.wait()
	except BaseException:
		# Cancelled mid-read; git may have exited on its own already
		if process.returncode is None:
			with contextlib.suppress(ProcessLookupError):
				process.kill()
		raise

	if stdout_overflow or stderr_overflow:
		name = "stdout" if stdout_overflow else "stderr"
		msg = f"git {name} exceeded the maximum buffer of {max_buffer} bytes"
		logger.error("Git command output too large (exit status %d): %s", returncode, " ".join(command))
		raise GitOutputTooLargeError(msg, returncode=returncode)

	return GitResult(
		args=tuple(args),
		returncode=returncode,
		stdout=stdout.decode("utf-8", errors="replace"),
		stderr=stderr.decode("utf-8", errors="replace"),
	)


class GitRepository:
	"""The version-control operations the loader consumes, bound to one working tree."""

	def __init__(self, path: Path, max_buffer: int = DEFAULT_MAX_BUFFER) -> None:
		"""
		Initialize the repository wrapper.

		Args:
		    path: Filesystem path of the working checkout
		    max_buffer: Maximum bytes of output accepted from any git command

		"""
		self.path = path
		self.max_buffer = max_buffer

	async def run(self, *args: str) -> GitResult:
		"""Run an arbitrary git command in this repository."""
		return await run_git_command(list(args), self.path, self.max_buffer)

	async def abort_merge(self) -> GitResult:
		"""Abort an in-progress merge, if any."""
		return await self.run("merge", "--abort")

	async def checkout(self, branch: str) -> GitResult:
		"""Check out ``branch``."""
		return await self.run("checkout", branch)

	async def count_commits_between(self, target: str, source: str) -> GitResult:
		"""Count commits reachable from ``source`` but not from ``target``."""
		return await self.run("rev-list", "--count", f"{target}..{source}")

	async def list_commits_between(self, target: str, source: str) -> GitResult:
		"""List commits reachable from ``source`` but not from ``target``, oldest first."""
		return await self.run("rev-list", "--reverse", f"{target}..{source}")

	async def merge(self, commit_id: str) -> GitResult:
		"""Three-way merge ``commit_id`` into the checked-out branch."""
		return await self.run("merge", "--no-edit", commit_id)

	async def push(self, branch: str, remote: str = "origin") -> GitResult:
		"""Push ``branch`` to ``remote``."""
		return await self.run("push", remote, branch)


def parse_commit_list(output: str) -> list[str]:
	"""
	Split ``rev-list`` output into commit ids.

	Args:
	    output: Raw stdout of ``git rev-list``

	Returns:
	    Commit ids in the order git reported them, blank lines removed

	"""
	return [line.strip() for line in output.splitlines() if line.strip()]

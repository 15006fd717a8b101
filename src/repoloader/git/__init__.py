"""Git command layer for RepoLoader."""

from .utils import (
	DEFAULT_MAX_BUFFER,
	BranchPreparationError,
	EnumerationError,
	GitError,
	GitOutputTooLargeError,
	GitRepository,
	GitResult,
	parse_commit_list,
	run_git_command,
)

__all__ = [
	"DEFAULT_MAX_BUFFER",
	"BranchPreparationError",
	"EnumerationError",
	"GitError",
	"GitOutputTooLargeError",
	"GitRepository",
	"GitResult",
	"parse_commit_list",
	"run_git_command",
]

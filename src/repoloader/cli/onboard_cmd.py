"""Command for onboarding the history of one branch onto another."""

import logging
from pathlib import Path
from typing import Annotated, Any

import asyncer
import typer

logger = logging.getLogger(__name__)

# --- Command Option Annotations ---

CodeCacheApiOpt = Annotated[
	str | None,
	typer.Option(
		"--code-cache-api",
		help="Base URL of the code cache service. Defaults to the dev environment.",
		show_default=False,
	),
]
BranchOriginOpt = Annotated[
	str | None,
	typer.Option("--branch-origin", help="Branch the commits come from. Defaults to master.", show_default=False),
]
BranchTargetOpt = Annotated[
	str | None,
	typer.Option("--branch-target", help="Branch the commits will be merged into.", show_default=False),
]
OwnerOpt = Annotated[
	str | None,
	typer.Option("--owner", help="Owner or organization of the repository.", show_default=False),
]
RepoOpt = Annotated[
	str | None,
	typer.Option("--repo", help="Name of the repository.", show_default=False),
]
RepoDirOpt = Annotated[
	Path | None,
	typer.Option("--repo-dir", help="Local path of the git repository.", show_default=False),
]
BatchSizeOpt = Annotated[
	int | None,
	typer.Option("--batch-size", help="Commits per stride. Defaults to 50.", show_default=False),
]
IntervalOpt = Annotated[
	float | None,
	typer.Option("--interval", help="Seconds to wait between strides. Defaults to 600.", show_default=False),
]
MaxBufferOpt = Annotated[
	int | None,
	typer.Option("--max-buffer", help="Maximum bytes of output accepted from a git command.", show_default=False),
]
NotifyTimeoutOpt = Annotated[
	float | None,
	typer.Option("--notify-timeout", help="Seconds before a cache update request is abandoned.", show_default=False),
]
LegacyQueryOpt = Annotated[
	bool | None,
	typer.Option(
		"--legacy-query/--no-legacy-query",
		help="Append the branch to the cache URL after a second '?' as older services expect.",
		show_default=False,
	),
]
ConfigFileOpt = Annotated[
	Path | None,
	typer.Option("--config", "-c", help="Path to a YAML configuration file.", show_default=False),
]

# Usage text for each required setting: flag, description, example
USAGE_HINTS = {
	"branch_target": (
		"--branch-target",
		"The name of the branch to merge and push commits",
		"--branch-target=feature1",
	),
	"owner": ("--owner", "The repository owner or organization", "--owner=trilogy-group"),
	"repo": ("--repo", "The repository name", "--repo=my-repository-name"),
	"repo_dir": ("--repo-dir", "The local path of repository", "--repo-dir=/home/repo/path"),
}


def missing_parameter_message(name: str) -> str:
	"""Build the usage message printed when a required setting is missing."""
	flag, description, example = USAGE_HINTS.get(name, (f"--{name.replace('_', '-')}", "", f"--{name}=..."))
	return f"Missing parameter {flag}\n{description}\nUsage example: repoloader onboard {example}"


# --- Registration Function ---


def register_command(app: typer.Typer) -> None:
	"""Register the onboard command with the CLI app."""

	@app.command(name="onboard")
	@asyncer.runnify
	async def onboard_command(
		code_cache_api: CodeCacheApiOpt = None,
		branch_origin: BranchOriginOpt = None,
		branch_target: BranchTargetOpt = None,
		owner: OwnerOpt = None,
		repo: RepoOpt = None,
		repo_dir: RepoDirOpt = None,
		batch_size: BatchSizeOpt = None,
		interval: IntervalOpt = None,
		max_buffer: MaxBufferOpt = None,
		notify_timeout: NotifyTimeoutOpt = None,
		legacy_query: LegacyQueryOpt = None,
		config_file: ConfigFileOpt = None,
	) -> None:
		"""
		Replay the commits of one branch onto another in paced batches.

		Every batch merges its last commit into the target branch, pushes to
		origin and tells the code cache service the branch changed, then waits
		before the next batch. Merge failures are aborted and skipped.

		"""
		await _onboard_command_impl(
			config_file=config_file,
			overrides={
				"code_cache_api": code_cache_api,
				"branch_origin": branch_origin,
				"branch_target": branch_target,
				"owner": owner,
				"repo": repo,
				"repo_dir": repo_dir,
				"batch_size": batch_size,
				"interval": interval,
				"max_buffer": max_buffer,
				"notify_timeout": notify_timeout,
				"legacy_query": legacy_query,
			},
		)


# --- Implementation Function (Heavy imports deferred here) ---


async def _onboard_command_impl(config_file: Path | None, overrides: dict[str, Any]) -> None:
	"""Actual implementation of the onboard command."""
	from repoloader.git.utils import GitError
	from repoloader.loader.driver import ReplayDriver
	from repoloader.utils.cli_utils import USAGE_EXIT_CODE, exit_with_error, handle_keyboard_interrupt
	from repoloader.utils.config_loader import ConfigError, ConfigLoader, MissingParameterError
	from repoloader.utils.log_setup import display_run_summary

	# Settings are validated before any git or network call
	try:
		config = ConfigLoader(config_file).build_run_config(overrides)
	except MissingParameterError as e:
		exit_with_error(missing_parameter_message(e.name), exit_code=USAGE_EXIT_CODE)
		return
	except ConfigError as e:
		exit_with_error(str(e), exit_code=USAGE_EXIT_CODE)
		return

	if not config.repo_dir.is_dir():
		exit_with_error(f"Repository directory not found: {config.repo_dir}", exit_code=USAGE_EXIT_CODE)
		return

	logger.debug("Run configuration: %s", config.model_dump())

	try:
		report = await ReplayDriver(config).run()
	except KeyboardInterrupt:
		handle_keyboard_interrupt()
		return
	except GitError as e:
		logger.debug("Onboarding stopped", exc_info=True)
		exit_with_error(f"Onboarding of {config.branch_origin} into {config.branch_target} stopped: {e}")
		return

	if report.strides:
		display_run_summary(report)

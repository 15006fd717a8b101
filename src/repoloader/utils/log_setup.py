"""
Logging setup for RepoLoader.

An onboarding run is long and unattended, so its log lines are the only record
of what happened to each stride. Console output always carries timestamps.

"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
	from repoloader.loader.driver import ReplayReport

console = Console(stderr=True)

LOG_TIME_FORMAT = "[%Y-%m-%d %H:%M:%S]"

FILE_LOG_FORMAT = "%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s"

# Libraries whose debug output would drown the per-stride lines
QUIET_LOGGERS = ("urllib3", "requests", "asyncio")


def _file_handler(log_file_path: Path | str) -> logging.FileHandler:
	"""Open ``log_file_path`` for appending, creating its directory."""
	path = Path(log_file_path)
	path.parent.mkdir(parents=True, exist_ok=True)
	handler = logging.FileHandler(path, mode="a", encoding="utf-8")
	handler.setLevel(logging.DEBUG)
	handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, "%Y-%m-%d %H:%M:%S"))
	return handler


def setup_logging(
	is_verbose: bool = False,
	log_to_console: bool = True,
	log_file_path: Path | str | None = None,
) -> None:
	"""
	Set up logging for a run.

	The console shows INFO and above, or everything with ``is_verbose``. A log
	file, when requested, always receives DEBUG records. If the file cannot be
	opened the run goes on with console logging only.

	Args:
	    is_verbose: Enable debug logging on the console
	    log_to_console: Whether to log to the console
	    log_file_path: Optional path to a file for logging. If None, no file logging.

	"""
	log_level = logging.DEBUG if is_verbose else logging.INFO

	root_logger = logging.getLogger()
	for handler in root_logger.handlers[:]:
		root_logger.removeHandler(handler)
	root_logger.setLevel(log_level)

	if log_to_console:
		root_logger.addHandler(
			RichHandler(
				console=console,
				level=log_level,
				rich_tracebacks=True,
				show_time=True,
				show_path=is_verbose,
				log_time_format=LOG_TIME_FORMAT,
			)
		)

	for name in QUIET_LOGGERS:
		logging.getLogger(name).setLevel(logging.DEBUG if is_verbose else logging.WARNING)

	if not log_file_path:
		return
	try:
		file_handler = _file_handler(log_file_path)
	except OSError as e:
		console.print(f"File logging to {log_file_path} disabled: {e}", style="yellow", markup=False)
		return
	root_logger.addHandler(file_handler)
	root_logger.setLevel(logging.DEBUG)
	root_logger.debug("Logging to file: %s", log_file_path)


def display_error_summary(error_message: str) -> None:
	"""
	Display an error summary with a divider and a title.

	Args:
	    error_message: The error message to display

	"""
	title = Text("Error Summary", style="bold red")

	console.print()
	console.print(Rule(title, style="red"))
	console.print(f"\n{error_message}\n", markup=False)
	console.print(Rule(style="red"))
	console.print()


def display_run_summary(report: ReplayReport) -> None:
	"""
	Display the per-stride outcome of a replay run.

	Args:
	    report: Report returned by the replay driver

	"""
	failed = report.failed_merges
	style = "yellow" if failed else "green"
	title = Text("Onboarding Summary", style=f"bold {style}")

	console.print()
	console.print(Rule(title, style=style))
	console.print(
		f"Commits onboarded: {report.total_commits}  "
		f"Strides: {len(report.strides)}  Merged: {report.merged}  Pushed: {report.pushed}"
	)
	if failed:
		table = Table(title="Merges aborted", show_lines=False)
		table.add_column("Stride", justify="right")
		table.add_column("Commit")
		table.add_column("Error")
		for outcome in failed:
			first_line = outcome.diagnostic.splitlines()[0] if outcome.diagnostic else ""
			table.add_row(str(outcome.stride), outcome.commit, first_line)
		console.print(table)
	console.print(Rule(style=style))
	console.print()

"""Immutable run configuration for a history onboarding run."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from repoloader.git.utils import DEFAULT_MAX_BUFFER

DEFAULT_CODE_CACHE_API = "https://codeserver-framework-dev.devfactory.com"
DEFAULT_BRANCH_ORIGIN = "master"
DEFAULT_BATCH_SIZE = 50
DEFAULT_INTERVAL_SECONDS = 60 * 10.0
DEFAULT_NOTIFY_TIMEOUT_SECONDS = 30.0


class RunConfig(BaseModel):
	"""
	Settings for one onboarding run.

	Constructed once at startup from CLI flags and the config file, then handed
	to every component. Frozen, so nothing can change it mid-run.

	"""

	model_config = ConfigDict(frozen=True, extra="forbid")

	code_cache_api: str = DEFAULT_CODE_CACHE_API
	branch_origin: str = DEFAULT_BRANCH_ORIGIN
	branch_target: str
	owner: str
	repo: str
	repo_dir: Path
	batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1)
	interval: float = Field(default=DEFAULT_INTERVAL_SECONDS, ge=0)
	max_buffer: int = Field(default=DEFAULT_MAX_BUFFER, ge=1)
	notify_timeout: float = Field(default=DEFAULT_NOTIFY_TIMEOUT_SECONDS, gt=0)
	legacy_query: bool = False

	@field_validator("code_cache_api", "branch_origin", "branch_target", "owner", "repo")
	@classmethod
	def _not_blank(cls, value: str) -> str:
		value = value.strip()
		if not value:
			msg = "must not be empty"
			raise ValueError(msg)
		return value

	@field_validator("code_cache_api")
	@classmethod
	def _strip_trailing_slash(cls, value: str) -> str:
		return value.rstrip("/")

	@property
	def git_url(self) -> str:
		"""GitHub clone URL identifying the repository to the cache service."""
		return f"https://github.com/{self.owner}/{self.repo}.git"

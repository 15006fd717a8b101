"""Batched history replay for RepoLoader."""

from .driver import ReplayDriver, ReplayReport, ReplayState, StrideOutcome
from .history import CommitSequence, enumerate_commits
from .notifier import CacheNotifier, build_cache_url
from .pacer import Pacer
from .run_config import RunConfig
from .strides import boundary_indices

__all__ = [
	"CacheNotifier",
	"CommitSequence",
	"Pacer",
	"ReplayDriver",
	"ReplayReport",
	"ReplayState",
	"RunConfig",
	"StrideOutcome",
	"boundary_indices",
	"build_cache_url",
	"enumerate_commits",
]

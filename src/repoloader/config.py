"""Default configuration settings for the repoloader tool."""

from repoloader.git.utils import DEFAULT_MAX_BUFFER
from repoloader.loader.run_config import (
	DEFAULT_BATCH_SIZE,
	DEFAULT_BRANCH_ORIGIN,
	DEFAULT_CODE_CACHE_API,
	DEFAULT_INTERVAL_SECONDS,
	DEFAULT_NOTIFY_TIMEOUT_SECONDS,
)

DEFAULT_CONFIG = {
	# Repository being onboarded
	"repository": {
		# Branch the commits come from
		"branch_origin": DEFAULT_BRANCH_ORIGIN,
		# Branch the commits are merged into (required)
		"branch_target": None,
		# Owner or organization on GitHub (required)
		"owner": None,
		# Repository name on GitHub (required)
		"repo": None,
		# Local path of the working checkout (required)
		"repo_dir": None,
	},
	# Replay pacing
	"loader": {
		# Commits per stride; only the last one of each stride is merged
		"batch_size": DEFAULT_BATCH_SIZE,
		# Seconds to wait between strides
		"interval": DEFAULT_INTERVAL_SECONDS,
		# Maximum bytes of output accepted from a single git command
		"max_buffer": DEFAULT_MAX_BUFFER,
	},
	# Code cache service
	"cache": {
		# Base URL of the cache service, defaults to the dev environment
		"code_cache_api": DEFAULT_CODE_CACHE_API,
		# Seconds before a cache update request is abandoned
		"notify_timeout": DEFAULT_NOTIFY_TIMEOUT_SECONDS,
		# Send the branch after a second '?' like older deployments expect
		"legacy_query": False,
	},
}

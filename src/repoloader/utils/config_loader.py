"""
Configuration loader for RepoLoader.

This module provides functionality for loading and managing
configuration settings.

"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, TypeVar, cast

import yaml
from pydantic import ValidationError
from xdg.BaseDirectory import xdg_config_home

from repoloader.config import DEFAULT_CONFIG
from repoloader.loader.run_config import RunConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

ENV_PREFIX = "REPOLOADER_"

# Constant for minimum number of parts in environment variable
MIN_ENV_VAR_PARTS = 2

# Checked in this order, so the first missing one is reported
REQUIRED_SETTINGS = ("branch_target", "owner", "repo", "repo_dir")

# Type for configuration values
ConfigValue = str | int | float | bool | dict[str, Any] | list[Any] | None


class ConfigError(Exception):
	"""Exception raised for configuration errors."""


class MissingParameterError(ConfigError):
	"""Raised when a required setting has no value from any source."""

	def __init__(self, name: str) -> None:
		"""
		Initialize the error.

		Args:
		    name: Config key that is missing

		"""
		self.name = name
		super().__init__(f"Missing parameter {name}")


def _coerce(value: str, default: ConfigValue) -> ConfigValue:
	"""Convert an environment string to the type of the default it overrides."""
	lowered = value.lower()
	if isinstance(default, bool):
		if lowered in ("true", "yes", "1"):
			return True
		if lowered in ("false", "no", "0"):
			return False
		msg = f"Expected a boolean, got {value!r}"
		raise ConfigError(msg)
	if isinstance(default, int):
		try:
			return int(value)
		except ValueError as e:
			msg = f"Expected an integer, got {value!r}"
			raise ConfigError(msg) from e
	if isinstance(default, float):
		try:
			return float(value)
		except ValueError as e:
			msg = f"Expected a number, got {value!r}"
			raise ConfigError(msg) from e
	return value


class ConfigLoader:
	"""
	Loads and manages configuration for RepoLoader.

	Values come from the built-in defaults, then a YAML file, then
	``REPOLOADER_<SECTION>_<KEY>`` environment variables. Command line flags are
	applied last by ``build_run_config``.

	"""

	def __init__(self, config_file: Path | None = None) -> None:
		"""
		Initialize the configuration loader.

		Args:
		    config_file: Path to configuration file (optional)

		"""
		self.config: dict[str, Any] = {}
		self.config_file = self._resolve_config_file(config_file)
		self.load_config()

	def _resolve_config_file(self, config_file: Path | None = None) -> Path | None:
		"""
		Resolve the configuration file path.

		If a config file is specified, use that. Otherwise, look in standard locations:
		1. ./.repoloader.yml in the current directory
		2. $XDG_CONFIG_HOME/repoloader/config.yml

		Args:
		    config_file: Explicitly provided config file path (optional)

		Returns:
		    Resolved config file path or None if no suitable file found

		"""
		if config_file:
			return Path(config_file).expanduser().resolve()

		local_config = Path(".repoloader.yml")
		if local_config.exists():
			return local_config

		xdg_config_file = Path(xdg_config_home) / "repoloader" / "config.yml"
		if xdg_config_file.exists():
			return xdg_config_file

		return None

	def load_config(self) -> dict[str, Any]:
		"""
		Load configuration from file and apply environment variable overrides.

		Returns:
		    Loaded configuration

		Raises:
		    ConfigError: If the configuration file is missing or cannot be parsed

		"""
		self.config = copy.deepcopy(DEFAULT_CONFIG)

		if self.config_file:
			if not self.config_file.exists():
				msg = f"Configuration file not found: {self.config_file}"
				raise ConfigError(msg)
			try:
				with self.config_file.open(encoding="utf-8") as f:
					file_config = yaml.safe_load(f)
			except (OSError, yaml.YAMLError) as e:
				error_msg = f"Error loading configuration from {self.config_file}: {e}"
				logger.exception(error_msg)
				raise ConfigError(error_msg) from e
			if file_config:
				if not isinstance(file_config, dict):
					msg = f"Configuration in {self.config_file} must be a mapping"
					raise ConfigError(msg)
				self._merge_configs(self.config, file_config)
			logger.debug("Loaded configuration from %s", self.config_file)

		self._apply_env_overrides()
		return self.config

	def _merge_configs(self, base: dict[str, Any], override: dict[str, Any]) -> None:
		"""
		Recursively merge two configuration dictionaries.

		Args:
		    base: Base configuration dictionary to merge into
		    override: Override configuration to apply

		"""
		for key, value in override.items():
			if isinstance(value, dict) and key in base and isinstance(base[key], dict):
				self._merge_configs(base[key], value)
			else:
				base[key] = value

	def _apply_env_overrides(self) -> None:
		"""Apply environment variable overrides to configuration."""
		for env_var, value in os.environ.items():
			if not env_var.startswith(ENV_PREFIX):
				continue
			parts = env_var[len(ENV_PREFIX) :].lower().split("_")
			if len(parts) < MIN_ENV_VAR_PARTS:
				continue
			section, key = parts[0], "_".join(parts[1:])
			if section not in DEFAULT_CONFIG:
				logger.debug("Ignoring unknown configuration section in %s", env_var)
				continue

			if key not in DEFAULT_CONFIG[section]:
				logger.warning("Ignoring %s: %s has no setting named %s", env_var, section, key)
				continue

			default = DEFAULT_CONFIG[section][key]
			try:
				typed_value = _coerce(value, default)
			except ConfigError as e:
				msg = f"Invalid value for {env_var}: {e}"
				raise ConfigError(msg) from e

			self.config.setdefault(section, {})[key] = typed_value
			logger.debug("Applied environment override %s: %s", env_var, typed_value)

	def get(self, key: str, default: T | None = None) -> T | None:
		"""
		Get a configuration value using dot notation.

		Examples:
		    config.get("loader.batch_size")

		Args:
		    key: Configuration key, can include dots for nested access
		    default: Default value if key not found

		Returns:
		    Configuration value or default

		"""
		current: Any = self.config
		for part in key.split("."):
			if isinstance(current, dict) and part in current:
				current = current[part]
			else:
				return default
		return cast("T", current)

	def flat_settings(self) -> dict[str, Any]:
		"""
		Merge all sections into one mapping keyed like ``RunConfig`` fields.

		Each section contributes only the settings it defines, so a key placed in
		the wrong section cannot shadow the real one.

		"""
		settings: dict[str, Any] = {}
		for section, defaults in DEFAULT_CONFIG.items():
			values = self.config.get(section) or {}
			settings.update({key: value for key, value in values.items() if key in defaults})
		return settings

	def build_run_config(self, overrides: dict[str, Any] | None = None) -> RunConfig:
		"""
		Build the immutable run configuration.

		Args:
		    overrides: Values from the command line; None entries are ignored

		Returns:
		    Validated RunConfig

		Raises:
		    MissingParameterError: If a required setting has no value
		    ConfigError: If a value fails validation

		"""
		settings = self.flat_settings()
		settings.update({key: value for key, value in (overrides or {}).items() if value is not None})

		for name in REQUIRED_SETTINGS:
			value = settings.get(name)
			if value is None or (isinstance(value, str) and not value.strip()):
				raise MissingParameterError(name)

		try:
			return RunConfig(**{key: value for key, value in settings.items() if value is not None})
		except ValidationError as e:
			problems = "; ".join(
				f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in e.errors()
			)
			msg = f"Invalid configuration: {problems}"
			raise ConfigError(msg) from e

"""Tests for configuration loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from repoloader.config import DEFAULT_CONFIG
from repoloader.git.utils import DEFAULT_MAX_BUFFER
from repoloader.utils.config_loader import ConfigError, ConfigLoader, MissingParameterError

REQUIRED = {"branch_target": "feature1", "owner": "acme", "repo": "widgets", "repo_dir": "/srv/widgets"}


@pytest.fixture
def temp_config_file(tmp_path: Path) -> Path:
	"""Path for a temporary config file."""
	return tmp_path / "loader.yml"


@pytest.mark.unit
class TestConfigLoader:
	"""Layered configuration."""

	def test_default_config_loading(self) -> None:
		"""Without a file or environment the defaults are used."""
		config_loader = ConfigLoader(None)

		assert config_loader.config_file is None
		for key in DEFAULT_CONFIG:
			assert config_loader.config[key] == DEFAULT_CONFIG[key], f"Mismatch in {key} section"

	def test_defaults_fill_optional_settings(self) -> None:
		"""Only the required settings have to be supplied."""
		config = ConfigLoader(None).build_run_config(REQUIRED)

		assert config.branch_origin == "master"
		assert config.code_cache_api == "https://codeserver-framework-dev.devfactory.com"
		assert config.batch_size == 50
		assert config.interval == 600
		assert config.max_buffer == DEFAULT_MAX_BUFFER == 2 * 1024 * 1024
		assert config.legacy_query is False
		assert config.repo_dir == Path("/srv/widgets")
		assert config.git_url == "https://github.com/acme/widgets.git"

	def test_custom_config_loading(self, temp_config_file: Path) -> None:
		"""Values from a YAML file override the defaults section by section."""
		temp_config_file.write_text(
			yaml.dump(
				{
					"repository": {"branch_origin": "develop", **REQUIRED},
					"loader": {"batch_size": 20},
				}
			)
		)

		config_loader = ConfigLoader(temp_config_file)
		config = config_loader.build_run_config()

		assert config_loader.get("loader.batch_size") == 20
		assert config_loader.get("loader.interval") == DEFAULT_CONFIG["loader"]["interval"]
		assert config.branch_origin == "develop"
		assert config.batch_size == 20

	def test_local_file_is_discovered(self, tmp_path: Path) -> None:
		"""A .repoloader.yml in the working directory is picked up."""
		(tmp_path / ".repoloader.yml").write_text(yaml.dump({"repository": {"owner": "acme"}}))

		config_loader = ConfigLoader(None)

		assert config_loader.config_file == Path(".repoloader.yml")
		assert config_loader.get("repository.owner") == "acme"

	def test_environment_overrides_file(self, temp_config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
		"""REPOLOADER_<SECTION>_<KEY> wins over the file and is converted to the default's type."""
		temp_config_file.write_text(yaml.dump({"loader": {"batch_size": 20}}))
		monkeypatch.setenv("REPOLOADER_LOADER_BATCH_SIZE", "5")
		monkeypatch.setenv("REPOLOADER_LOADER_INTERVAL", "0.5")
		monkeypatch.setenv("REPOLOADER_CACHE_LEGACY_QUERY", "yes")
		monkeypatch.setenv("REPOLOADER_REPOSITORY_REPO", "1")

		config_loader = ConfigLoader(temp_config_file)

		assert config_loader.get("loader.batch_size") == 5
		assert config_loader.get("loader.interval") == 0.5
		assert config_loader.get("cache.legacy_query") is True
		assert config_loader.get("repository.repo") == "1"

	def test_environment_key_in_wrong_section_is_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
		"""A setting named under another section does not shadow the real one."""
		monkeypatch.setenv("REPOLOADER_CACHE_BATCH_SIZE", "7")

		config_loader = ConfigLoader(None)

		assert config_loader.get("cache.batch_size") is None
		assert config_loader.build_run_config(REQUIRED).batch_size == DEFAULT_CONFIG["loader"]["batch_size"]

	def test_file_key_in_wrong_section_is_ignored(self, temp_config_file: Path) -> None:
		"""The same holds for keys misplaced in the YAML file."""
		temp_config_file.write_text(yaml.dump({"loader": {"batch_size": 20}, "cache": {"batch_size": 7}}))

		config = ConfigLoader(temp_config_file).build_run_config(REQUIRED)

		assert config.batch_size == 20

	def test_invalid_environment_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
		"""A value that cannot be converted is a configuration error."""
		monkeypatch.setenv("REPOLOADER_LOADER_BATCH_SIZE", "many")

		with pytest.raises(ConfigError, match="REPOLOADER_LOADER_BATCH_SIZE"):
			ConfigLoader(None)

	def test_cli_overrides_win(self, temp_config_file: Path) -> None:
		"""Command line values beat the file; None means 'not given'."""
		temp_config_file.write_text(yaml.dump({"repository": REQUIRED, "loader": {"batch_size": 20}}))

		config = ConfigLoader(temp_config_file).build_run_config({"batch_size": 7, "owner": None})

		assert config.batch_size == 7
		assert config.owner == "acme"

	@pytest.mark.parametrize("missing", ["branch_target", "owner", "repo", "repo_dir"])
	def test_missing_required_setting(self, missing: str) -> None:
		"""Each required setting is reported by name."""
		values = {key: value for key, value in REQUIRED.items() if key != missing}

		with pytest.raises(MissingParameterError) as excinfo:
			ConfigLoader(None).build_run_config(values)

		assert excinfo.value.name == missing

	def test_blank_required_setting(self) -> None:
		"""An empty string counts as missing."""
		with pytest.raises(MissingParameterError, match="owner"):
			ConfigLoader(None).build_run_config({**REQUIRED, "owner": "  "})

	@pytest.mark.parametrize(
		("field", "value"),
		[("batch_size", 0), ("interval", -1), ("max_buffer", 0), ("notify_timeout", 0)],
	)
	def test_out_of_range_values(self, field: str, value: float) -> None:
		"""Validation failures surface as ConfigError naming the field."""
		with pytest.raises(ConfigError, match=field):
			ConfigLoader(None).build_run_config({**REQUIRED, field: value})

	def test_missing_config_file(self, tmp_path: Path) -> None:
		"""An explicitly named file that does not exist is an error."""
		with pytest.raises(ConfigError, match="not found"):
			ConfigLoader(tmp_path / "absent.yml")

	def test_malformed_config_file(self, temp_config_file: Path) -> None:
		"""YAML that is not a mapping is rejected."""
		temp_config_file.write_text("- just\n- a list\n")

		with pytest.raises(ConfigError, match="must be a mapping"):
			ConfigLoader(temp_config_file)

	def test_run_config_is_frozen(self) -> None:
		"""The run configuration cannot change once built."""
		config = ConfigLoader(None).build_run_config(REQUIRED)

		with pytest.raises(ValidationError):
			config.batch_size = 1  # type: ignore[misc]

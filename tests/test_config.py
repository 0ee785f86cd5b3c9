"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from poolhalt.core.config import (
    Config,
    ConfigManager,
    HostsConfig,
    LoggingConfig,
    WorkloadConfig,
    get_default_config_path,
)
from poolhalt.core.exceptions import ConfigurationError


class TestLoggingConfig:
    """Tests for LoggingConfig model."""

    def test_default_values(self) -> None:
        """Test default logging configuration values."""
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.file == "/var/log/poolhalt.log"

    def test_valid_log_levels(self) -> None:
        """Test that valid log levels are accepted."""
        for level in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            config = LoggingConfig(level=level)
            assert config.level == level

    def test_log_level_case_insensitive(self) -> None:
        """Test that log levels are case-insensitive."""
        config = LoggingConfig(level="debug")
        assert config.level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        """Test that invalid log levels raise an error."""
        with pytest.raises(ValueError, match="Invalid log level"):
            LoggingConfig(level="INVALID")

    def test_file_can_be_disabled(self) -> None:
        """Test logging to console only."""
        assert LoggingConfig(file=None).file is None


class TestWorkloadConfig:
    """Tests for WorkloadConfig model."""

    def test_default_values(self) -> None:
        """Test the stock escalation timings."""
        config = WorkloadConfig()
        assert config.deferral_tag == "Late-Shutdown"
        assert config.graceful_timeout == 180
        assert config.forceful_timeout == 80
        assert config.power_reset_timeout == 60
        assert config.dispatch_stagger == 1
        assert config.settle_delay == 10
        assert config.poll_interval == 10

    def test_zero_timeout_rejected(self) -> None:
        """Test timeouts must be positive."""
        with pytest.raises(ValueError):
            WorkloadConfig(graceful_timeout=0)

    def test_negative_delay_rejected(self) -> None:
        """Test delays cannot be negative."""
        with pytest.raises(ValueError):
            WorkloadConfig(settle_delay=-1)

    def test_zero_delay_allowed(self) -> None:
        """Test delays may be zero."""
        assert WorkloadConfig(dispatch_stagger=0).dispatch_stagger == 0

    def test_empty_deferral_tag_rejected(self) -> None:
        """Test the deferral tag must not be empty."""
        with pytest.raises(ValueError):
            WorkloadConfig(deferral_tag="")


class TestHostsConfig:
    """Tests for HostsConfig model."""

    def test_default_values(self) -> None:
        """Test the stock host sequencing timings."""
        config = HostsConfig()
        assert config.member_timeout == 240
        assert config.probe_settle_delay == 10
        assert config.probe_interval == 10
        assert config.probe_lost_delay == 2
        assert config.probe_timeout == 1

    def test_probe_lost_delay_independent(self) -> None:
        """Test the post-loss pause is configured separately from the interval."""
        config = HostsConfig(probe_interval=15, probe_lost_delay=0)
        assert config.probe_interval == 15
        assert config.probe_lost_delay == 0


class TestConfig:
    """Tests for the main Config model."""

    def test_default_config(self) -> None:
        """Test default configuration."""
        config = Config()
        assert config.xe.binary == "xe"
        assert config.role.pool_conf == "/etc/xensource/pool.conf"
        assert config.role.inventory == "/etc/xensource-inventory"
        assert config.storage.volume_types == ["nfs"]
        assert config.logging.level == "INFO"

    def test_partial_sections_keep_defaults(self) -> None:
        """Test a partial section only overrides what it names."""
        config = Config.model_validate({"workloads": {"graceful_timeout": 300}})
        assert config.workloads.graceful_timeout == 300
        assert config.workloads.forceful_timeout == 80


class TestConfigManager:
    """Tests for ConfigManager class."""

    def test_load_config(self, config_manager: ConfigManager, tmp_path: Path) -> None:
        """Test loading configuration from file."""
        assert config_manager.config.workloads.deferral_tag == "Late-Shutdown"
        assert config_manager.config.role.pool_conf == str(tmp_path / "pool.conf")

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        """Test a missing file is not an error and is not created."""
        config_path = tmp_path / "nonexistent" / "config.yaml"

        manager = ConfigManager(config_path)

        assert manager.config == Config()
        assert not config_path.exists()
        assert not config_path.parent.exists()

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        """Test an empty file yields defaults."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("")

        assert ConfigManager(config_path).config == Config()

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Test that invalid YAML raises ConfigurationError."""
        config_path = tmp_path / "invalid.yaml"
        config_path.write_text("workloads: [\ninvalid yaml")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            ConfigManager(config_path)

    def test_invalid_values(self, tmp_path: Path) -> None:
        """Test that out-of-range values raise ConfigurationError."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({"hosts": {"member_timeout": -5}}))

        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            ConfigManager(config_path)

    def test_error_details_include_path(self, tmp_path: Path) -> None:
        """Test configuration errors name the offending file."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({"workloads": {"poll_interval": "soon"}}))

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigManager(config_path)

        assert exc_info.value.details["path"] == str(config_path)

    def test_reload(self, config_manager: ConfigManager, temp_config_file: Path) -> None:
        """Test reloading picks up changes on disk."""
        data = yaml.safe_load(temp_config_file.read_text())
        data["workloads"]["deferral_tag"] = "Last"
        temp_config_file.write_text(yaml.safe_dump(data))

        config_manager.reload()

        assert config_manager.config.workloads.deferral_tag == "Last"

    def test_to_dict(self, config_manager: ConfigManager) -> None:
        """Test converting config to dictionary."""
        data = config_manager.to_dict()

        assert data["workloads"]["graceful_timeout"] == 180
        assert data["storage"]["volume_types"] == ["nfs"]

    def test_create_example_config(self, tmp_path: Path) -> None:
        """Test the generated file holds the defaults and loads back."""
        config_path = tmp_path / "etc" / "poolhalt" / "config.yaml"

        result = ConfigManager.create_example_config(config_path)

        assert result == config_path
        assert config_path.exists()
        assert ConfigManager(config_path).config == Config()

    def test_default_path_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test POOLHALT_CONFIG overrides the default location."""
        monkeypatch.setenv("POOLHALT_CONFIG", str(tmp_path / "custom.yaml"))
        assert get_default_config_path() == tmp_path / "custom.yaml"

    def test_default_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the system-wide default location."""
        monkeypatch.delenv("POOLHALT_CONFIG", raising=False)
        assert get_default_config_path() == Path("/etc/poolhalt/config.yaml")

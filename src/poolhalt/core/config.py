"""Configuration management for poolhalt.

This module provides a Pydantic-based configuration system that supports:
- YAML configuration files
- Environment variable override of the file location
- Default values matching a stock XenServer/XCP-ng pool

The default config location is /etc/poolhalt/config.yaml, which can be
overridden with the POOLHALT_CONFIG environment variable. A missing file
is not an error: the procedure must still run on a freshly installed host.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from poolhalt.core.exceptions import ConfigNotFoundError, ConfigurationError

Seconds = Annotated[float, Field(ge=0)]
Timeout = Annotated[float, Field(gt=0)]


def get_default_config_path() -> Path:
    """Get the default configuration file path.

    The path can be overridden by setting the POOLHALT_CONFIG
    environment variable.

    Returns:
        Path to the configuration file.
    """
    env_path = os.environ.get("POOLHALT_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path("/etc/poolhalt/config.yaml")


def get_default_log_path() -> Path:
    """Get the default log file path."""
    return Path("/var/log/poolhalt.log")


class LoggingConfig(BaseModel):
    """Logging configuration.

    Args:
        level: Log level for the file handler.
        file: Path to log file (optional).
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=str(get_default_log_path()), description="Log file path")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper


class XeConfig(BaseModel):
    """How to reach the pool management interface.

    Args:
        binary: Path or name of the xe CLI.
        command_timeout: Per-command timeout in seconds.
    """

    binary: str = Field(default="xe", min_length=1, description="xe executable")
    command_timeout: Timeout = Field(default=120, description="xe command timeout")


class RoleConfig(BaseModel):
    """Local files that identify this node.

    Args:
        pool_conf: File holding ``master`` or ``slave:<address>``.
        inventory: Inventory file holding INSTALLATION_UUID.
    """

    pool_conf: str = Field(default="/etc/xensource/pool.conf", description="Pool role file")
    inventory: str = Field(default="/etc/xensource-inventory", description="Inventory file")


class WorkloadConfig(BaseModel):
    """Workload escalation settings.

    Args:
        deferral_tag: Tag that holds a VM back until the final pass.
        graceful_timeout: Phase 1 (clean shutdown) timeout.
        forceful_timeout: Phase 2 (forced shutdown) timeout.
        power_reset_timeout: Phase 3 (power-state reset) timeout.
        dispatch_stagger: Delay between dispatches within a phase.
        settle_delay: Delay before the first convergence check.
        poll_interval: Delay between convergence checks.
    """

    deferral_tag: str = Field(default="Late-Shutdown", min_length=1)
    graceful_timeout: Timeout = 180
    forceful_timeout: Timeout = 80
    power_reset_timeout: Timeout = 60
    dispatch_stagger: Seconds = 1
    settle_delay: Seconds = 10
    poll_interval: Seconds = 10


class StorageConfig(BaseModel):
    """Storage detach settings.

    Args:
        volume_types: Network-backed SR types whose PBDs are unplugged.
        detach_stagger: Delay between unplug calls.
    """

    volume_types: list[str] = Field(default_factory=lambda: ["nfs"])
    detach_stagger: Seconds = 1


class HostsConfig(BaseModel):
    """Host sequencing settings.

    Args:
        member_timeout: Shared budget for waiting on member hosts to go dark.
        host_settle_delay: Delay between disabling a host and shutting it down.
        host_stagger_delay: Delay between member hosts.
        probe_settle_delay: Delay before the first liveness probe.
        probe_interval: Delay between probes of a host that still answers.
        probe_lost_delay: Pause after a host stops answering.
        probe_timeout: Seconds to wait for a single echo reply.
    """

    member_timeout: Timeout = 240
    host_settle_delay: Seconds = 1
    host_stagger_delay: Seconds = 1
    probe_settle_delay: Seconds = 10
    probe_interval: Seconds = 10
    probe_lost_delay: Seconds = 2
    probe_timeout: Annotated[int, Field(ge=1)] = 1


class Config(BaseModel):
    """Main configuration model for poolhalt.

    Example config.yaml:
        ```yaml
        workloads:
          deferral_tag: Late-Shutdown
          graceful_timeout: 180

        storage:
          volume_types: [nfs]

        hosts:
          member_timeout: 240

        logging:
          level: INFO
          file: /var/log/poolhalt.log
        ```
    """

    xe: XeConfig = Field(default_factory=XeConfig)
    role: RoleConfig = Field(default_factory=RoleConfig)
    workloads: WorkloadConfig = Field(default_factory=WorkloadConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    hosts: HostsConfig = Field(default_factory=HostsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class ConfigManager:
    """Manages reading and writing poolhalt configuration.

    Args:
        path: Optional path to config file. Uses default if not specified.

    Attributes:
        path: Path to the configuration file.
        config: The loaded and validated Config object.

    Example:
        >>> cm = ConfigManager()
        >>> cm.config.workloads.graceful_timeout
        180.0
    """

    def __init__(self, path: Path | str | None = None) -> None:
        if path is None:
            self.path = get_default_config_path()
        else:
            self.path = Path(path).expanduser()

        self.config = self._load_or_create()

    def _load_or_create(self) -> Config:
        """Load config from file or fall back to defaults."""
        if self.path.exists():
            return self._load()
        return Config()

    def _load(self) -> Config:
        """Load and validate configuration from file.

        Returns:
            Validated Config object.

        Raises:
            ConfigurationError: If the config file is invalid.
            ConfigNotFoundError: If the config file doesn't exist.
        """
        if not self.path.exists():
            raise ConfigNotFoundError(str(self.path))

        try:
            with self.path.open("r") as f:
                data = yaml.safe_load(f) or {}
            return Config.model_validate(data)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in config file: {e}",
                details={"path": str(self.path)},
            ) from e
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e}",
                details={"path": str(self.path)},
            ) from e
        except OSError as e:
            raise ConfigurationError(
                f"Failed to load config: {e}",
                details={"path": str(self.path)},
            ) from e

    def reload(self) -> None:
        """Reload configuration from disk."""
        self.config = self._load_or_create()

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.config.model_dump(exclude_none=True)

    @classmethod
    def create_example_config(cls, path: Path | None = None) -> Path:
        """Write a configuration file populated with the default values.

        Args:
            path: Optional path for the config. Uses default if not specified.

        Returns:
            Path to the created config file.
        """
        path = get_default_config_path() if path is None else Path(path).expanduser()

        path.parent.mkdir(parents=True, exist_ok=True)

        example_config = Config().model_dump(exclude_none=True)

        with path.open("w") as f:
            yaml.safe_dump(example_config, f, default_flow_style=False, sort_keys=False)

        return path

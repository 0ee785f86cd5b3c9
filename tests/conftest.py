"""Pytest configuration and fixtures for poolhalt tests.

This module provides shared fixtures for testing poolhalt components:
a fake clock whose sleeps advance time instantly, an inline executor for
deterministic dispatch, an in-memory pool implementing the XeClient
surface, and sample configuration files.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import yaml

from poolhalt.core.config import ConfigManager
from poolhalt.core.dispatch import Dispatcher
from poolhalt.core.runner import CommandResult
from tests.fakes import COORDINATOR_UUID, FakeClock, FakeCluster, FakeProber, InlineExecutor


@pytest.fixture(autouse=True)
def reset_poolhalt_logging() -> Generator[None, None, None]:
    """Drop handlers installed by CLI invocations after each test."""
    yield
    logger = logging.getLogger("poolhalt")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock starting at zero."""
    return FakeClock()


@pytest.fixture
def cluster(clock: FakeClock) -> FakeCluster:
    """Create an empty fake pool."""
    return FakeCluster(clock)


@pytest.fixture
def prober(cluster: FakeCluster) -> FakeProber:
    """Create a prober bound to the fake pool."""
    return FakeProber(cluster)


@pytest.fixture
def dispatcher(clock: FakeClock) -> Dispatcher:
    """Create a dispatcher whose batches run tasks inline."""
    return Dispatcher(clock, executor_factory=lambda _workers: InlineExecutor())


@pytest.fixture
def pool_conf_master(tmp_path: Path) -> Path:
    """pool.conf of a coordinator."""
    path = tmp_path / "pool.conf"
    path.write_text("master")
    return path


@pytest.fixture
def pool_conf_member(tmp_path: Path) -> Path:
    """pool.conf of a member host."""
    path = tmp_path / "pool.conf"
    path.write_text("slave:192.168.10.11")
    return path


@pytest.fixture
def inventory_file(tmp_path: Path) -> Path:
    """xensource-inventory of the coordinator."""
    path = tmp_path / "xensource-inventory"
    path.write_text(
        "PRIMARY_DISK='/dev/sda'\n"
        f"INSTALLATION_UUID='{COORDINATOR_UUID}'\n"
        "CONTROL_DOMAIN_UUID='dom0-uuid'\n"
    )
    return path


@pytest.fixture
def sample_config_data(pool_conf_master: Path, inventory_file: Path, tmp_path: Path) -> dict:
    """Create sample configuration data pointing at temporary files."""
    return {
        "role": {
            "pool_conf": str(pool_conf_master),
            "inventory": str(inventory_file),
        },
        "workloads": {
            "deferral_tag": "Late-Shutdown",
            "graceful_timeout": 180,
            "forceful_timeout": 80,
            "power_reset_timeout": 60,
        },
        "storage": {"volume_types": ["nfs"]},
        "hosts": {"member_timeout": 240},
        "logging": {
            "level": "INFO",
            "file": str(tmp_path / "logs" / "poolhalt.log"),
        },
    }


@pytest.fixture
def temp_config_file(tmp_path: Path, sample_config_data: dict) -> Path:
    """Create a temporary config file with sample data."""
    config_path = tmp_path / "config.yaml"
    with config_path.open("w") as f:
        yaml.safe_dump(sample_config_data, f)
    return config_path


@pytest.fixture
def config_manager(temp_config_file: Path) -> ConfigManager:
    """Create a ConfigManager with a temporary config file."""
    return ConfigManager(temp_config_file)


@pytest.fixture
def command_result_success() -> CommandResult:
    """Create a successful command result."""
    return CommandResult(stdout="", stderr="", exit_code=0, command="xe")


@pytest.fixture
def command_result_failure() -> CommandResult:
    """Create a failed command result."""
    return CommandResult(
        stdout="",
        stderr="The uuid you supplied was invalid.",
        exit_code=1,
        command="xe",
    )

"""Tests for the plan CLI command."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import yaml
from click.testing import CliRunner

from poolhalt.cli.main import cli
from poolhalt.core.exceptions import ControlPlaneError
from tests.fakes import COORDINATOR_UUID, FakeClock, FakeCluster


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def pool() -> Generator[FakeCluster, None, None]:
    """Serve a small fake pool in place of the xe client."""
    cluster = FakeCluster(FakeClock())
    cluster.add_volume("sr-1", ["p1"], name="isos")
    cluster.add_vm("A", name="web")
    cluster.add_vm("B", name="db", tags=["Late-Shutdown"])
    cluster.add_host(COORDINATOR_UUID, name="xen1", address="10.0.0.1")
    cluster.add_host("M1", name="xen2", address="10.0.0.2")

    with patch("poolhalt.cli.context.Context.init_xe") as mock:
        mock.return_value = cluster
        yield cluster


class TestPlan:
    """Tests for 'poolhalt plan' command."""

    def test_table(self, runner: CliRunner, temp_config_file: Path, pool: FakeCluster) -> None:
        """Test the preview lists storage, VMs and hosts."""
        result = runner.invoke(cli, ["--config", str(temp_config_file), "plan"])

        assert result.exit_code == 0
        assert "coordinator" in result.output
        assert "isos" in result.output
        assert "web" in result.output
        assert "db" in result.output
        assert "xen1" in result.output
        assert "xen2" in result.output

    def test_changes_nothing(
        self, runner: CliRunner, temp_config_file: Path, pool: FakeCluster
    ) -> None:
        """Test the preview issues no actions."""
        runner.invoke(cli, ["--config", str(temp_config_file), "plan"])

        assert pool.calls == []

    def test_hosts_in_shutdown_order(
        self, runner: CliRunner, temp_config_file: Path, pool: FakeCluster
    ) -> None:
        """Test members are listed before the coordinator."""
        result = runner.invoke(cli, ["--config", str(temp_config_file), "plan"])

        assert result.output.index("xen2") < result.output.index("xen1")

    def test_yaml_marks_passes(
        self, runner: CliRunner, temp_config_file: Path, pool: FakeCluster
    ) -> None:
        """Test structured output shows which pass stops each VM."""
        result = runner.invoke(cli, ["--config", str(temp_config_file), "plan", "-f", "yaml"])

        assert result.exit_code == 0
        data = yaml.safe_load(result.output[result.output.index("role:") :])
        passes = {w["name"]: w["pass"] for w in data["workloads"]}
        assert passes == {"web": "initial", "db": "final"}
        assert [h["uuid"] for h in data["hosts"]] == ["M1", COORDINATOR_UUID]
        assert data["attachments"][0]["uuid"] == "p1"

    def test_member_warning(
        self,
        runner: CliRunner,
        temp_config_file: Path,
        tmp_path: Path,
        pool: FakeCluster,
    ) -> None:
        """Test a member host is told run would do nothing."""
        (tmp_path / "pool.conf").write_text("slave:10.0.0.1")

        result = runner.invoke(cli, ["--config", str(temp_config_file), "plan"])

        assert result.exit_code == 0
        assert "does nothing on this host" in result.output

    def test_missing_inventory(
        self,
        runner: CliRunner,
        temp_config_file: Path,
        inventory_file: Path,
        pool: FakeCluster,
    ) -> None:
        """Test an unidentifiable local host exits 1."""
        inventory_file.unlink()

        result = runner.invoke(cli, ["--config", str(temp_config_file), "plan"])

        assert result.exit_code == 1

    def test_control_plane_failure(self, runner: CliRunner, temp_config_file: Path) -> None:
        """Test an xe query failure exits 1."""
        xe = MagicMock()
        xe.list_volumes.side_effect = ControlPlaneError("xe sr-list", "refused")

        with patch("poolhalt.cli.context.Context.init_xe", return_value=xe):
            result = runner.invoke(cli, ["--config", str(temp_config_file), "plan"])

        assert result.exit_code == 1
        assert "refused" in result.output

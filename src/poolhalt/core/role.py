"""Local role detection.

The procedure is installed on every host so that it survives a change of
pool master, but it only acts on the host that currently holds the
coordinator role. The role and the local installation UUID are read from
local files once, at startup.
"""

from __future__ import annotations

import re
from pathlib import Path

from poolhalt.core.exceptions import RoleError
from poolhalt.models.host import HostRole
from poolhalt.utils.logging import get_logger

logger = get_logger("role")

_INSTALLATION_UUID = re.compile(
    r"""^\s*INSTALLATION_UUID\s*=\s*['"]?([^'"\s]+)['"]?""",
    re.IGNORECASE | re.MULTILINE,
)


class RoleGate:
    """Decides whether this node should run the shutdown procedure.

    Args:
        pool_conf: Path to the pool role file.
        inventory: Path to the inventory file holding INSTALLATION_UUID.

    Example:
        >>> gate = RoleGate("/etc/xensource/pool.conf", "/etc/xensource-inventory")
        >>> if gate.is_coordinator():
        ...     coordinator_uuid = gate.local_host_uuid()
    """

    def __init__(self, pool_conf: str | Path, inventory: str | Path) -> None:
        self.pool_conf = Path(pool_conf)
        self.inventory = Path(inventory)
        self._role: HostRole | None = None

    def read_role(self) -> HostRole:
        """Resolve this node's role, caching the answer.

        An unreadable role file means this node is not the coordinator.

        Returns:
            COORDINATOR or MEMBER.
        """
        if self._role is None:
            try:
                content = self.pool_conf.read_text()
            except OSError as e:
                logger.warning(f"Cannot read pool role from {self.pool_conf}: {e}")
                content = ""
            self._role = HostRole.from_pool_conf(content)
            logger.debug(f"Local pool role: {self._role.value}")
        return self._role

    def is_coordinator(self) -> bool:
        """True if this node currently holds the coordinator role."""
        return self.read_role() == HostRole.COORDINATOR

    def local_host_uuid(self) -> str:
        """Read the installation UUID of this host.

        Raises:
            RoleError: If the inventory is unreadable or has no UUID.
        """
        try:
            content = self.inventory.read_text()
        except OSError as e:
            raise RoleError(f"Cannot read inventory: {e}", path=str(self.inventory)) from e

        match = _INSTALLATION_UUID.search(content)
        if match is None:
            raise RoleError("INSTALLATION_UUID not found in inventory", path=str(self.inventory))
        return match.group(1)

"""Host models for poolhalt.

This module defines the data models for the physical hosts that
make up the pool, and the states a host passes through while the
pool is being shut down.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field


class HostRole(str, Enum):
    """Role a host holds in the pool."""

    COORDINATOR = "coordinator"
    MEMBER = "member"

    @classmethod
    def from_pool_conf(cls, content: str) -> HostRole:
        """Resolve a role from the contents of the local pool.conf.

        The pool master's file reads ``master``; members carry
        ``slave:<master address>``.

        Args:
            content: Raw file contents.

        Returns:
            COORDINATOR if the node is the pool master, MEMBER otherwise.
        """
        if content.strip().lower().startswith("master"):
            return cls.COORDINATOR
        return cls.MEMBER


class HostState(str, Enum):
    """Progress of a single host through the shutdown sequence."""

    ENABLED = "enabled"
    DISABLED = "disabled"
    SHUTDOWN_ISSUED = "shutdown-issued"
    UNREACHABLE = "unreachable"
    TIMED_OUT_PROCEEDED = "timed-out-proceeded"

    @property
    def color(self) -> str:
        """Rich color for this state."""
        colors = {
            HostState.ENABLED: "green",
            HostState.DISABLED: "yellow",
            HostState.SHUTDOWN_ISSUED: "yellow",
            HostState.UNREACHABLE: "red",
            HostState.TIMED_OUT_PROCEEDED: "magenta",
        }
        return colors.get(self, "white")


class ClusterHost(BaseModel):
    """A physical host in the pool.

    Args:
        uuid: Pool-wide host identifier.
        name: Display name (name-label).
        address: Management network address used for liveness probes.
        role: Whether this host is the coordinator or a member.
    """

    uuid: Annotated[str, Field(min_length=1, description="Host UUID")]
    name: str = Field(default="", description="Host name-label")
    address: str = Field(default="", description="Management address")
    role: HostRole = Field(default=HostRole.MEMBER, description="Pool role")

    @property
    def is_coordinator(self) -> bool:
        """True if this host is the pool coordinator."""
        return self.role == HostRole.COORDINATOR

    @property
    def display_name(self) -> str:
        """Human-readable display name for this host."""
        return f"{self.name} (UUID: {self.uuid})"

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data = self.model_dump()
        data["role"] = self.role.value
        return data

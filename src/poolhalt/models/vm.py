"""Workload models for poolhalt.

This module defines the data models for guest virtual machines
running in the pool.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field


class PowerState(str, Enum):
    """Power states reported by the pool for a virtual machine."""

    RUNNING = "running"
    HALTED = "halted"
    PAUSED = "paused"
    SUSPENDED = "suspended"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str) -> PowerState:
        """Map a raw xe power-state string to a PowerState.

        Args:
            value: Power state as printed by xe (e.g. "Running").

        Returns:
            The matching PowerState, UNKNOWN if unrecognised.
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN

    @property
    def color(self) -> str:
        """Rich color for this state."""
        colors = {
            PowerState.RUNNING: "green",
            PowerState.HALTED: "red",
            PowerState.PAUSED: "yellow",
            PowerState.SUSPENDED: "blue",
            PowerState.UNKNOWN: "dim",
        }
        return colors.get(self, "white")

    @property
    def symbol(self) -> str:
        """Status symbol for this state."""
        symbols = {
            PowerState.RUNNING: "●",
            PowerState.HALTED: "○",
            PowerState.PAUSED: "◐",
            PowerState.SUSPENDED: "◉",
            PowerState.UNKNOWN: "?",
        }
        return symbols.get(self, "?")


class Workload(BaseModel):
    """A guest virtual machine in the pool.

    Args:
        uuid: Pool-wide VM identifier.
        name: Display name (name-label).
        power_state: Current power state.
        is_control_domain: True for dom0 and other management domains.
        tags: Free-form tags attached to the VM.

    Example:
        >>> vm = Workload(
        ...     uuid="0b3c...",
        ...     name="db-01",
        ...     power_state=PowerState.RUNNING,
        ...     tags=["Late-Shutdown"],
        ... )
        >>> vm.is_deferred("Late-Shutdown")
        True
    """

    uuid: Annotated[str, Field(min_length=1, description="VM UUID")]
    name: str = Field(default="", description="VM name-label")
    power_state: PowerState = Field(default=PowerState.UNKNOWN, description="Power state")
    is_control_domain: bool = Field(default=False, description="Management domain flag")
    tags: list[str] = Field(default_factory=list, description="VM tags")

    def is_deferred(self, deferral_tag: str) -> bool:
        """Check whether this workload is held back until the final pass."""
        return deferral_tag in self.tags

    @property
    def status_display(self) -> str:
        """Formatted status string with symbol, like "● running"."""
        return f"{self.power_state.symbol} {self.power_state.value}"

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data = self.model_dump()
        data["power_state"] = self.power_state.value
        return data

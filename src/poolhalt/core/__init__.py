"""Core functionality for poolhalt.

This module contains the shutdown procedure and its building blocks:
configuration, the xe management client, convergence polling, VM
escalation, storage detach, host sequencing and the role gate.
"""

from poolhalt.core.clock import Deadline, SystemClock
from poolhalt.core.config import Config, ConfigManager
from poolhalt.core.exceptions import (
    CommandError,
    ConfigurationError,
    ControlPlaneError,
    PoolhaltError,
    RoleError,
)
from poolhalt.core.procedure import ProcedureResult, ShutdownProcedure
from poolhalt.core.xe import XeClient

__all__ = [
    "CommandError",
    "Config",
    "ConfigManager",
    "ConfigurationError",
    "ControlPlaneError",
    "Deadline",
    "PoolhaltError",
    "ProcedureResult",
    "RoleError",
    "ShutdownProcedure",
    "SystemClock",
    "XeClient",
]

"""poolhalt - orderly, unattended shutdown of a XenServer/XCP-ng pool.

This package stops every VM in a pool with escalating force, unplugs
network storage, shuts down the member hosts and finally the pool
coordinator. It is installed on every host and only acts on the one
currently holding the coordinator role.

Example:
    $ poolhalt plan
    $ poolhalt run
"""

__version__ = "0.1.0"

from poolhalt.core.exceptions import (
    CommandError,
    ConfigurationError,
    ControlPlaneError,
    PoolhaltError,
    RoleError,
)

__all__ = [
    "CommandError",
    "ConfigurationError",
    "ControlPlaneError",
    "PoolhaltError",
    "RoleError",
    "__version__",
]

"""Data models for poolhalt.

This module contains Pydantic models for hosts, workloads, storage
attachments, and the identifier sets returned by enumeration queries.
"""

from poolhalt.models.host import ClusterHost, HostRole, HostState
from poolhalt.models.resources import ResourceSet
from poolhalt.models.storage import StorageAttachment
from poolhalt.models.vm import PowerState, Workload

__all__ = [
    "ClusterHost",
    "HostRole",
    "HostState",
    "PowerState",
    "ResourceSet",
    "StorageAttachment",
    "Workload",
]

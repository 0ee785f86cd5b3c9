"""Storage attachment models for poolhalt."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field


class StorageAttachment(BaseModel):
    """A binding between a host and a network-backed storage volume (a PBD).

    Args:
        uuid: Attachment (PBD) UUID.
        volume_uuid: UUID of the storage volume (SR) it belongs to.
        volume_type: Transport type of the volume, e.g. ``nfs``.
        name: Display name of the owning volume, used for logging.
        attached: Whether the attachment is currently plugged.
    """

    uuid: Annotated[str, Field(min_length=1, description="PBD UUID")]
    volume_uuid: str = Field(description="SR UUID")
    volume_type: str = Field(default="nfs", description="SR transport type")
    name: str = Field(default="", description="SR name-label")
    attached: bool = Field(default=True, description="Currently plugged")

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return self.model_dump()

"""Storage detach.

Network-backed storage repositories are unplugged before their hosts go
away, so no PBD is left attached to a volume whose host is about to
disappear. Detaching is best-effort: each failure is logged and the
procedure continues.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from poolhalt.core.clock import SystemClock
from poolhalt.core.exceptions import CommandError
from poolhalt.models.storage import StorageAttachment
from poolhalt.utils.logging import get_logger

if TYPE_CHECKING:
    from poolhalt.core.xe import XeClient

logger = get_logger("storage")


class StorageDetacher:
    """Unplugs every PBD of the configured network-backed SR types.

    Args:
        xe: Pool management client.
        clock: Clock used for the stagger delay.
        volume_types: SR types to detach, e.g. ``["nfs"]``.
        stagger: Delay after each unplug call.
    """

    def __init__(
        self,
        xe: XeClient,
        clock: SystemClock,
        volume_types: list[str] | None = None,
        stagger: float = 1,
    ) -> None:
        self.xe = xe
        self.clock = clock
        self.volume_types = volume_types if volume_types is not None else ["nfs"]
        self.stagger = stagger

    def detach_all(self) -> int:
        """Unplug all attachments of every in-scope volume.

        Enumeration errors propagate; unplug errors do not.

        Returns:
            Number of attachments that unplugged without error.
        """
        detached = 0
        for volume_type in self.volume_types:
            for volume_uuid in self.xe.list_volumes(volume_type):
                for pbd_uuid in self.xe.list_attachments(volume_uuid):
                    name = self.xe.attachment_name(pbd_uuid)
                    logger.info(f"Unplugging PBD {name} (UUID: {pbd_uuid})")
                    try:
                        self.xe.unplug_attachment(pbd_uuid)
                        detached += 1
                    except CommandError as e:
                        logger.warning(f"Could not unplug PBD {name}: {e}")
                    self.clock.sleep(self.stagger)

        logger.info(f"Unplugged {detached} storage attachment(s)")
        return detached

    def describe(self) -> list[StorageAttachment]:
        """List the attachments a detach would touch, without changing anything."""
        attachments: list[StorageAttachment] = []
        for volume_type in self.volume_types:
            for volume_uuid in self.xe.list_volumes(volume_type):
                for pbd_uuid in self.xe.list_attachments(volume_uuid):
                    attachments.append(
                        StorageAttachment(
                            uuid=pbd_uuid,
                            volume_uuid=volume_uuid,
                            volume_type=volume_type,
                            name=self.xe.attachment_name(pbd_uuid),
                            attached=self.xe.attachment_attached(pbd_uuid),
                        )
                    )
        return attachments

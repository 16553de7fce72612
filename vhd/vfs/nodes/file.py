"""File nodes."""

from datetime import datetime
from typing import Dict, Optional, Any

from vhd.vfs.base import Node, NodeType
from vhd.vfs.paths import UNPERSISTED_ID


def now() -> datetime:
    """Current local time truncated to whole seconds (catalogs store epochs)."""
    return datetime.now().replace(microsecond=0)


class FileNode(Node):
    """A file in a drive, pointing at a blob in the drive's storage.

    The blob is addressed by ``content_id``, never by the file's name or
    path, so renames and moves only touch the catalog.

    Attributes:
        content_id: Opaque identifier of the blob in storage
        created: When the file was uploaded
        updated: When the file was last uploaded, renamed or moved
        metadata: Storage-specific data, e.g. the number of chunks
    """

    node_type = NodeType.FILE

    def __init__(
        self,
        name: str,
        content_id: str,
        parent: Optional[Node] = None,
        created: Optional[datetime] = None,
        updated: Optional[datetime] = None,
        metadata: str = "",
        catalog_id: int = UNPERSISTED_ID,
    ):
        super().__init__(name, parent, catalog_id)
        self.content_id = content_id
        self.created = created or now()
        self.updated = updated or self.created
        self.metadata = metadata

    def move(self, target: Node, name: str) -> None:
        from vhd.vfs.mutations import move

        move(self, target, name)

    def persist_move(self, name: str, parent_id: int) -> None:
        """Write a rename/reparent of this file to the catalog.

        The update timestamp is refreshed, both in the catalog and here.
        """
        updated = now()
        self.get_drive().catalog.update_file(
            self.catalog_id, name, parent_id, updated=updated
        )
        self.updated = updated

    def count_files(self) -> int:
        return 0

    def get_info(self) -> Dict[str, Any]:
        return {
            "type": "file",
            "name": self.name,
            "path": self.get_path(),
            "content_id": self.content_id,
            "created": self.created,
            "updated": self.updated,
            "metadata": self.metadata,
            "catalog_id": self.catalog_id,
        }

"""Directory nodes."""

from typing import Dict, Optional, Any

from vhd.vfs.base import ContainerNode, Node, NodeType
from vhd.vfs.paths import UNPERSISTED_ID


class DirectoryNode(ContainerNode):
    """A folder recorded in a drive's catalog.

    Children are DirectoryNode and FileNode instances keyed by name.
    """

    node_type = NodeType.DIRECTORY

    def __init__(
        self,
        name: str,
        parent: Optional[Node] = None,
        catalog_id: int = UNPERSISTED_ID,
    ):
        super().__init__(name, parent, catalog_id)

    def move(self, target: Node, name: str) -> None:
        """Move this folder (and everything below it) under ``target``.

        See :func:`vhd.vfs.mutations.move` for the checks performed.
        """
        from vhd.vfs.mutations import move

        move(self, target, name)

    def persist_move(self, name: str, parent_id: int) -> None:
        """Write a rename/reparent of this folder to the catalog."""
        self.get_drive().catalog.update_directory(self.catalog_id, name, parent_id)

    def count_files(self) -> int:
        return self.get_drive().catalog.count_files_under(self.catalog_id)

    def get_info(self) -> Dict[str, Any]:
        return {
            "type": "directory",
            "name": self.name,
            "path": self.get_path(),
            "catalog_id": self.catalog_id,
        }

"""Drive nodes: a storage backend plus its lazily loaded catalog subtree."""

import logging
from enum import Enum
from typing import Dict, List, Optional, Any

from vhd.catalog.base import Catalog
from vhd.errors import InvalidOperationError
from vhd.storage.base import Storage
from vhd.vfs.base import ContainerNode, Node, NodeType

logger = logging.getLogger(__name__)


class SubtreeState(Enum):
    """Load state of a drive's subtree."""
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"


class DriveNode(ContainerNode):
    """A drive directly under the root (e.g. /photos).

    The drive's folders and files are fetched from the catalog the first
    time any child is listed, looked up, added or removed. A load that
    fails leaves the drive UNLOADED so the next access retries it.

    Attributes:
        description: Human-readable description of the drive
        storage: Backend holding the drive's blobs
        catalog: Catalog holding the drive's folder tree
        state: Current SubtreeState
    """

    node_type = NodeType.DRIVE

    def __init__(
        self,
        name: str,
        drive_id: Any,
        catalog: Catalog,
        storage: Storage,
        description: str = "",
        parent: Optional[Node] = None,
    ):
        """Initialize a drive node.

        Args:
            name: Drive name, also its path component under /
            drive_id: Identifier of the drive record in the catalog
            catalog: Catalog holding this drive's records
            storage: Storage backend for this drive
            description: Human-readable description
            parent: Root node
        """
        super().__init__(name, parent, catalog_id=drive_id)
        self.description = description
        self.storage = storage
        self.catalog = catalog
        self.state = SubtreeState.UNLOADED

    @property
    def drive_id(self) -> Any:
        return self.catalog_id

    def ensure_loaded(self) -> None:
        """Load the subtree from the catalog if it has not been loaded yet.

        Raises:
            CatalogError: The catalog could not be read
            CatalogCorruptError: The records do not form a valid tree
        """
        if self.state is SubtreeState.LOADED:
            return
        if self.state is SubtreeState.LOADING:
            raise InvalidOperationError(f"drive {self.name} is already loading")

        from vhd.vfs.loader import load_drive_subtree

        self.state = SubtreeState.LOADING
        logger.debug(f"Loading catalog for drive '{self.name}'")
        try:
            children = load_drive_subtree(self)
        except BaseException:
            self.state = SubtreeState.UNLOADED
            raise
        self._children = children
        self.state = SubtreeState.LOADED
        logger.debug(f"Drive '{self.name}' loaded with {len(children)} top-level entries")

    def list_child_names(self) -> List[str]:
        self.ensure_loaded()
        return super().list_child_names()

    def get_child(self, name: str) -> Optional[Node]:
        self.ensure_loaded()
        return super().get_child(name)

    def set_child(self, name: str, node: Node) -> None:
        self.ensure_loaded()
        super().set_child(name, node)

    def remove_child(self, name: str) -> None:
        self.ensure_loaded()
        super().remove_child(name)

    def move(self, target: Node, name: str) -> None:
        raise InvalidOperationError("cannot move a drive")

    def count_files(self) -> int:
        return self.catalog.count_files_in_drive(self.drive_id)

    def get_info(self) -> Dict[str, Any]:
        return {
            "type": "drive",
            "name": self.name,
            "description": self.description,
            "storage": self.storage.name,
            "catalog_id": self.drive_id,
            "path": self.get_path(),
        }

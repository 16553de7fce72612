"""Root node of the virtual filesystem."""

import logging
from typing import Callable, Dict, List, Optional, Any

from vhd.catalog.base import Catalog, DriveRecord
from vhd.errors import InvalidOperationError
from vhd.storage.base import Storage
from vhd.vfs.base import Node, NodeType
from vhd.vfs.paths import DRIVE_PARENT_ID
from vhd.vfs.nodes.drive import DriveNode

logger = logging.getLogger(__name__)

StorageFactory = Callable[[DriveRecord], Optional[Storage]]


class RootNode(Node):
    """Root directory (/) of the virtual filesystem.

    Its children are the configured drives, one per catalog drive record.
    The drive set is fixed for the lifetime of the process: ``set_child``
    and ``remove_child`` do nothing, and the root itself cannot be moved.
    """

    node_type = NodeType.ROOT

    def __init__(self, drives: Optional[Dict[str, DriveNode]] = None):
        """Initialize root node.

        Args:
            drives: Drives keyed by name; their parent is set to this root
        """
        super().__init__(name="", parent=None, catalog_id=DRIVE_PARENT_ID)
        self._drives: Dict[str, DriveNode] = {}
        for name, drive in (drives or {}).items():
            drive.parent = self
            self._drives[name] = drive

    @classmethod
    def from_catalog(
        cls,
        catalog: Catalog,
        storage_factory: Optional[StorageFactory] = None,
    ) -> 'RootNode':
        """Build the root and its drives from catalog drive records.

        Drive subtrees are not loaded here; each drive fetches its own
        records on first access.

        Args:
            catalog: Catalog to read drives from
            storage_factory: Builds the storage backend for a drive record;
                drives for which it returns None are skipped

        Returns:
            New root node
        """
        if storage_factory is None:
            from vhd.storage import open_storage
            storage_factory = open_storage

        drives = {}
        for record in catalog.fetch_drives():
            storage = storage_factory(record)
            if storage is None:
                logger.warning(
                    f"Skipping drive '{record.name}': unknown storage type '{record.kind}'"
                )
                continue
            drives[record.name] = DriveNode(
                name=record.name,
                drive_id=record.id,
                catalog=catalog,
                storage=storage,
                description=record.description,
            )
        logger.debug(f"Configured drives: {', '.join(sorted(drives)) or '(none)'}")
        return cls(drives)

    @property
    def drives(self) -> Dict[str, DriveNode]:
        return dict(self._drives)

    def list_child_names(self) -> List[str]:
        return list(self._drives.keys())

    def get_child(self, name: str) -> Optional[Node]:
        return self._drives.get(name)

    def move(self, target: Node, name: str) -> None:
        raise InvalidOperationError("cannot move root")

    def count_files(self) -> int:
        return sum(drive.count_files() for drive in self._drives.values())

    def get_info(self) -> Dict[str, Any]:
        return {
            "type": "root",
            "name": "/",
            "drive_count": len(self._drives),
            "path": "/",
        }

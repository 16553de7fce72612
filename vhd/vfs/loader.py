"""Build a drive's subtree from its catalog records.

Loading is all-or-nothing: records are validated and linked into a fresh
set of nodes, and the drive only installs them once everything checked out.
"""

import logging
from typing import Dict, TYPE_CHECKING

from vhd.catalog.base import DirectoryRecord
from vhd.errors import CatalogCorruptError
from vhd.vfs.base import Node
from vhd.vfs.paths import DRIVE_PARENT_ID
from vhd.vfs.nodes.directory import DirectoryNode
from vhd.vfs.nodes.file import FileNode

if TYPE_CHECKING:
    from vhd.vfs.nodes.drive import DriveNode

logger = logging.getLogger(__name__)


def load_drive_subtree(drive: 'DriveNode') -> Dict[str, Node]:
    """Fetch and link all folders and files of a drive.

    The returned nodes already have their parent references set (top-level
    entries point at ``drive``), but nothing has been attached to the drive
    itself.

    Args:
        drive: Drive to load

    Returns:
        Top-level entries of the drive, keyed by name

    Raises:
        CatalogError: The catalog could not be read
        CatalogCorruptError: A record references a missing folder, folder
            parents form a cycle, or two entries share a name
    """
    directory_records = drive.catalog.fetch_directories(drive.drive_id)
    file_records = drive.catalog.fetch_files(drive.drive_id)

    _check_directory_parents(drive, directory_records)

    top: Dict[str, Node] = {}
    directories = {
        dir_id: DirectoryNode(record.name, catalog_id=dir_id)
        for dir_id, record in directory_records.items()
    }

    def attach(container_id: int, name: str, node: Node) -> None:
        if container_id == DRIVE_PARENT_ID:
            siblings = top
            node.parent = drive
        else:
            parent = directories[container_id]
            siblings = parent._children
            node.parent = parent
        if name in siblings:
            raise CatalogCorruptError(
                f"duplicate entry {name} in catalog of drive {drive.name}"
            )
        siblings[name] = node

    for dir_id, record in directory_records.items():
        attach(record.parent_id, record.name, directories[dir_id])

    for file_id, record in file_records.items():
        if record.directory_id != DRIVE_PARENT_ID and record.directory_id not in directories:
            raise CatalogCorruptError(
                f"file {record.name} (id {file_id}) in drive {drive.name} "
                f"references missing folder {record.directory_id}"
            )
        node = FileNode(
            record.name,
            record.content_id,
            created=record.created,
            updated=record.updated,
            metadata=record.metadata,
            catalog_id=file_id,
        )
        attach(record.directory_id, record.name, node)

    logger.debug(
        f"Drive '{drive.name}': {len(directory_records)} folders, {len(file_records)} files"
    )
    return top


def _check_directory_parents(
    drive: 'DriveNode',
    records: Dict[int, DirectoryRecord],
) -> None:
    """Make sure every folder's parent chain ends at the drive."""
    reaches_drive = set()
    for dir_id in records:
        chain = []
        current = dir_id
        while current != DRIVE_PARENT_ID and current not in reaches_drive:
            if current not in records:
                raise CatalogCorruptError(
                    f"folder {records[chain[-1]].name} (id {chain[-1]}) in drive "
                    f"{drive.name} references missing folder {current}"
                )
            if current in chain:
                raise CatalogCorruptError(
                    f"folder {records[current].name} (id {current}) in drive "
                    f"{drive.name} is its own ancestor"
                )
            chain.append(current)
            current = records[current].parent_id
        reaches_drive.update(chain)

"""Structural changes to the tree: create files and folders, move entries.

Every operation writes to the catalog first and only touches the in-memory
tree once the write succeeded. A failed write therefore leaves the tree
exactly as it was, and the tree never shows an entry the catalog lacks.
"""

import logging

from vhd.errors import (
    AlreadyExistsError,
    InvalidOperationError,
    TypeMismatchError,
)
from vhd.vfs.base import Node
from vhd.vfs.paths import DRIVE_PARENT_ID, validate_name
from vhd.vfs.nodes.directory import DirectoryNode
from vhd.vfs.nodes.file import FileNode, now

logger = logging.getLogger(__name__)


def catalog_parent_id(container: Node) -> int:
    """Catalog id to record as the parent of entries placed in ``container``."""
    if container.is_drive():
        return DRIVE_PARENT_ID
    return container.catalog_id


def _check_new_entry(container: Node, name: str, kind: str) -> None:
    if container.is_root():
        raise InvalidOperationError(f"cannot create {kind} in root")
    if not container.is_container():
        raise TypeMismatchError(f"not a folder: {container.get_path()}")
    validate_name(name)
    if container.get_child(name) is not None:
        raise AlreadyExistsError(f"entry {name} already exists at {container.get_path()}")


def create_file(
    container: Node,
    name: str,
    content_id: str,
    metadata: str = "",
) -> FileNode:
    """Record an uploaded blob as a new file.

    Args:
        container: Drive or folder to create the file in
        name: File name
        content_id: Identifier the blob was uploaded under
        metadata: Storage-specific metadata returned by the upload

    Returns:
        The new file node, attached to ``container``

    Raises:
        InvalidOperationError: ``container`` is the root
        PathSyntaxError: Invalid name
        AlreadyExistsError: ``name`` already exists in ``container``
        CatalogError: The catalog write failed; the tree is unchanged
    """
    _check_new_entry(container, name, "file")
    timestamp = now()
    drive = container.get_drive()
    file_id = drive.catalog.create_file(
        drive.drive_id,
        name,
        content_id,
        catalog_parent_id(container),
        timestamp,
        timestamp,
        metadata,
    )
    node = FileNode(
        name,
        content_id,
        parent=container,
        created=timestamp,
        updated=timestamp,
        metadata=metadata,
        catalog_id=file_id,
    )
    container.set_child(name, node)
    logger.info(f"Created file {node.get_path()} ({content_id})")
    return node


def create_directory(container: Node, name: str) -> DirectoryNode:
    """Create a new, empty folder.

    Args:
        container: Drive or folder to create the folder in
        name: Folder name

    Returns:
        The new folder node, attached to ``container``

    Raises:
        InvalidOperationError: ``container`` is the root
        PathSyntaxError: Invalid name
        AlreadyExistsError: ``name`` already exists in ``container``
        CatalogError: The catalog write failed; the tree is unchanged
    """
    _check_new_entry(container, name, "directory")
    drive = container.get_drive()
    dir_id = drive.catalog.create_directory(
        drive.drive_id, name, catalog_parent_id(container)
    )
    node = DirectoryNode(name, parent=container, catalog_id=dir_id)
    container.set_child(name, node)
    logger.info(f"Created folder {node.get_path()}")
    return node


def move(node: Node, target: Node, name: str) -> None:
    """Move (and/or rename) a file or folder.

    Checks, in order: the new name is valid, it is free in ``target``,
    ``target`` is not the root, both sides are on the same drive (content
    ids only make sense in their own storage), and ``target`` is not
    ``node`` or one of its descendants.

    Args:
        node: File or folder to move
        target: Container to move into
        name: New name within ``target``

    Raises:
        PathSyntaxError: Invalid name
        AlreadyExistsError: ``name`` already exists in ``target``
        InvalidOperationError: Root or drive moves, moves to the root,
            across drives, or into the node's own subtree
        TypeMismatchError: ``target`` is a file
        CatalogError: The catalog write failed; the tree is unchanged
    """
    if node.is_root() or node.is_drive():
        node.move(target, name)
        return

    validate_name(name)
    if not target.is_container():
        raise TypeMismatchError(f"not a folder: {target.get_path()}")
    if target.get_child(name) is not None:
        raise AlreadyExistsError(f"name {name} already exists in {target.get_path()}")
    if target.is_root():
        raise InvalidOperationError(f"cannot move {node.node_type.value} to root")
    if node.get_drive() is not target.get_drive():
        raise InvalidOperationError(f"cannot move {node.node_type.value} across drives")

    current = target
    while not current.is_drive():
        if current is node:
            raise InvalidOperationError("trying to move directory to a descendant")
        current = current.parent

    old_path = node.get_path()
    node.persist_move(name, catalog_parent_id(target))

    node.parent.remove_child(node.name)
    node.parent = target
    node.name = name
    target.set_child(name, node)
    logger.info(f"Moved {old_path} to {node.get_path()}")

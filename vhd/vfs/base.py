"""Base classes for the virtual filesystem tree.

The tree has four kinds of nodes:

    - RootNode: the top, holding one DriveNode per configured drive
    - DriveNode: a storage backend plus its catalog subtree (loaded lazily)
    - DirectoryNode: a folder recorded in the catalog
    - FileNode: a blob in storage, addressed by its content id

Every node answers the same capability set (type queries, path, parent,
children, move, file counts) so the resolver and the shell never need to
branch on concrete classes.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional, Any, TYPE_CHECKING

from vhd.errors import InvalidOperationError
from vhd.vfs.paths import UNPERSISTED_ID, SEPARATOR

if TYPE_CHECKING:
    from vhd.vfs.nodes.drive import DriveNode


class NodeType(Enum):
    """Kind of virtual filesystem node."""
    ROOT = "root"
    DRIVE = "drive"
    DIRECTORY = "directory"
    FILE = "file"


class Node(ABC):
    """Base class for all tree nodes.

    Attributes:
        name: Name of this node within its parent ("" for the root)
        parent: Containing node (None for the root)
        catalog_id: Identifier of the node's catalog record
        node_type: Kind of node
    """

    node_type: NodeType

    def __init__(
        self,
        name: str,
        parent: Optional['Node'] = None,
        catalog_id: int = UNPERSISTED_ID,
    ):
        """Initialize a node.

        Args:
            name: Name of this node
            parent: Containing node
            catalog_id: Catalog identifier (UNPERSISTED_ID if not stored yet)
        """
        self.name = name
        self.parent = parent
        self.catalog_id = catalog_id

    def is_root(self) -> bool:
        return self.node_type is NodeType.ROOT

    def is_drive(self) -> bool:
        return self.node_type is NodeType.DRIVE

    def is_directory(self) -> bool:
        return self.node_type is NodeType.DIRECTORY

    def is_file(self) -> bool:
        return self.node_type is NodeType.FILE

    def is_container(self) -> bool:
        """True for nodes that can hold children (root, drives, folders)."""
        return not self.is_file()

    def get_path(self) -> str:
        """Get the absolute path of this node.

        Returns:
            Path like /photos/2023/beach.jpg, or / for the root
        """
        parts = []
        node = self
        while node.parent is not None:
            parts.append(node.name)
            node = node.parent

        return SEPARATOR + SEPARATOR.join(reversed(parts))

    def get_root(self) -> 'Node':
        """Walk up to the top of the tree."""
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def get_drive(self) -> Optional['DriveNode']:
        """Get the drive this node belongs to (None at the root)."""
        node: Optional[Node] = self
        while node is not None:
            if node.is_drive():
                return node  # type: ignore[return-value]
            node = node.parent
        return None

    def is_ancestor_of(self, other: 'Node') -> bool:
        """True if this node is ``other`` or one of its ancestors."""
        node: Optional[Node] = other
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    def list_child_names(self) -> List[str]:
        return []

    def list_children(self) -> List['Node']:
        children = []
        for name in self.list_child_names():
            child = self.get_child(name)
            if child is not None:
                children.append(child)
        return children

    def get_child(self, name: str) -> Optional['Node']:
        return None

    def set_child(self, name: str, node: 'Node') -> None:
        pass

    def remove_child(self, name: str) -> None:
        pass

    def move(self, target: 'Node', name: str) -> None:
        """Move this node under ``target`` with the given name.

        Raises:
            InvalidOperationError: This kind of node cannot be moved
        """
        raise InvalidOperationError(f"cannot move {self.node_type.value}")

    @abstractmethod
    def count_files(self) -> int:
        """Count files stored below this node, at any depth."""
        pass

    @abstractmethod
    def get_info(self) -> Dict[str, Any]:
        """Get metadata about this node for display."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', path='{self.get_path()}')"


class ContainerNode(Node):
    """A node holding a name -> child mapping.

    Names are unique within a container. Attaching a node that is an
    ancestor of the container is refused, which keeps the structure a tree.
    """

    def __init__(
        self,
        name: str,
        parent: Optional[Node] = None,
        catalog_id: int = UNPERSISTED_ID,
    ):
        super().__init__(name, parent, catalog_id)
        self._children: Dict[str, Node] = {}

    def list_child_names(self) -> List[str]:
        return list(self._children.keys())

    def get_child(self, name: str) -> Optional[Node]:
        return self._children.get(name)

    def set_child(self, name: str, node: Node) -> None:
        if node.is_ancestor_of(self):
            raise InvalidOperationError(
                f"cannot attach {node.get_path()} below itself"
            )
        self._children[name] = node

    def remove_child(self, name: str) -> None:
        self._children.pop(name, None)

"""Main DriveVFS class - entry point for VFS access."""

from typing import List, Optional

from vhd.vfs.base import Node
from vhd.vfs.resolver import PathResolver
from vhd.vfs.nodes import DirectoryNode, FileNode, RootNode
from vhd.vfs.mutations import create_directory, create_file


class DriveVFS:
    """Virtual filesystem over all configured drives.

    Holds the root, a resolver, and the current working node. Every path
    argument is resolved relative to the current node.

    Usage:
        >>> catalog = SQLCatalog(Path("~/.vhd/catalog.db").expanduser())
        >>> vfs = DriveVFS(RootNode.from_catalog(catalog))
        >>>
        >>> vfs.cd("/photos/2023")
        >>> for node in vfs.ls():
        ...     print(node.name)
        >>>
        >>> vfs.mkdir("trips")
        >>> vfs.mv("beach.jpg", "trips")
    """

    def __init__(self, root: RootNode):
        """Initialize VFS.

        Args:
            root: Root node holding the drives
        """
        self.root = root
        self.resolver = PathResolver()
        self.current: Node = root

    def cd(self, path: str = "/") -> Node:
        """Change current directory.

        Args:
            path: Folder, drive or root to move to

        Returns:
            New current node

        Raises:
            NotFoundError, TypeMismatchError, PathSyntaxError
        """
        self.current = self.resolver.resolve_directory(path, self.current)
        return self.current

    def pwd(self) -> str:
        """Get current working directory path."""
        return self.current.get_path()

    def ls(self, path: Optional[str] = None) -> List[Node]:
        """List children of a container: folders first, then files, each sorted by name.

        Args:
            path: Path to list (default: current directory)
        """
        node = self.current if path is None else self.resolver.resolve_directory(path, self.current)
        children = [node.get_child(name) for name in sorted(node.list_child_names())]
        containers = [child for child in children if child.is_container()]
        files = [child for child in children if child.is_file()]
        return containers + files

    def get_node(self, path: str) -> Node:
        """Resolve a path to a node of any type."""
        return self.resolver.resolve(path, self.current)

    def get_file(self, path: str) -> FileNode:
        """Resolve a path that must name a file."""
        return self.resolver.resolve_file(path, self.current)

    def get_directory(self, path: str) -> Node:
        """Resolve a path that must name a folder, drive or root."""
        return self.resolver.resolve_directory(path, self.current)

    def mkdir(self, path: str) -> DirectoryNode:
        """Create a folder; its parent must already exist.

        Raises:
            InvalidOperationError: The parent is the root (drives are not created here)
            AlreadyExistsError: The name is taken
        """
        parent, name = self.resolver.resolve_parent(path, self.current)
        return create_directory(parent, name)

    def mv(self, source: str, destination: str) -> Node:
        """Move or rename a file or folder.

        If ``destination`` names an existing folder (or drive), the source
        moves into it under its current name. Otherwise ``destination`` is
        split into an existing parent and a new name.

        Returns:
            The moved node
        """
        node = self.resolver.resolve(source, self.current)
        existing = self.resolver.check_path(destination, self.current)
        if existing is not None and existing.is_container():
            node.move(existing, node.name)
            return node
        parent, name = self.resolver.resolve_parent(destination, self.current)
        node.move(parent, name)
        return node

    def add_file(
        self,
        folder: Node,
        name: str,
        content_id: str,
        metadata: str = "",
    ) -> FileNode:
        """Record an uploaded blob as a file in ``folder``."""
        return create_file(folder, name, content_id, metadata)

    def add_directory(self, folder: Node, name: str) -> DirectoryNode:
        """Create a folder directly in ``folder``."""
        return create_directory(folder, name)

    def complete(self, partial: str) -> List[str]:
        """Get tab completion candidates.

        Args:
            partial: Partial path

        Returns:
            List of completion candidates
        """
        return self.resolver.complete_path(partial, self.current)

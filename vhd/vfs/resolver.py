"""Path resolution for the virtual filesystem.

Handles path parsing and navigation (cd, ls, mv semantics).
"""

from typing import List, Optional, Tuple

from vhd.errors import (
    VHDError,
    NotFoundError,
    PathSyntaxError,
    TypeMismatchError,
)
from vhd.vfs.base import Node
from vhd.vfs.paths import decompose, decompose_parent, strip_trailing_slash


class PathResolver:
    """Resolves paths against the tree.

    Every lookup is one walk over the path segments starting at the
    current node:

    - ``""`` (leading or doubled slash): jump to the root
    - ``.``: stay
    - ``..``: go to the parent (fails at the root)
    - anything else: look up a child of the current container

    A trailing slash means the target must be a folder (or drive/root).
    Drive subtrees load themselves as the walk enters them.
    """

    def resolve(self, path: str, current: Node) -> Node:
        """Resolve a path to a node of any type.

        Args:
            path: Path to resolve (absolute or relative)
            current: Node to start from

        Returns:
            Resolved node

        Raises:
            PathSyntaxError: Empty path
            NotFoundError: A segment does not exist
            TypeMismatchError: A file appears in the middle of the path
        """
        return self._walk(path, current)

    def resolve_directory(self, path: str, current: Node) -> Node:
        """Resolve a path that must name a container (folder, drive or root).

        Raises:
            TypeMismatchError: The path names a file
        """
        return self._walk(path, current, must_be_dir=True)

    def resolve_file(self, path: str, current: Node) -> Node:
        """Resolve a path that must name a file.

        Raises:
            TypeMismatchError: The path names a folder or ends with '/'
        """
        return self._walk(path, current, must_be_file=True)

    def resolve_parent(self, path: str, current: Node) -> Tuple[Node, str]:
        """Resolve everything but the last segment of a path.

        The last segment is returned unresolved, for the caller to create
        or check.

        Args:
            path: Path whose leaf is about to be created
            current: Node to start from

        Returns:
            Tuple of (parent container, leaf name)
        """
        segments, leaf = decompose_parent(path)
        parent = self._fold(segments, current, path, must_be_dir=True)
        return parent, leaf

    def check_path(self, path: str, current: Node) -> Optional[Node]:
        """Resolve a path whose final segment may not exist.

        Returns:
            Resolved node, or None if only the final segment is missing
        """
        return self._walk(path, current, tolerate_missing=True)

    def complete_path(self, partial: str, current: Node) -> List[str]:
        """Get completion candidates for a partial path.

        Used for tab completion in the shell.

        Args:
            partial: Partial path to complete
            current: Current working node

        Returns:
            List of completion candidates; containers get a trailing slash
        """
        if "/" in partial:
            dir_part, name_part = partial.rsplit("/", 1)
            lookup = dir_part + "/"
        else:
            dir_part, name_part = None, partial
            lookup = None

        try:
            container = self.resolve_directory(lookup, current) if lookup else current
        except VHDError:
            return []

        candidates = []
        for name in sorted(container.list_child_names()):
            if not name.startswith(name_part):
                continue
            candidate = f"{dir_part}/{name}" if dir_part is not None else name
            child = container.get_child(name)
            if child is not None and child.is_container():
                candidate += "/"
            candidates.append(candidate)

        return candidates

    def _walk(
        self,
        path: str,
        current: Node,
        must_be_file: bool = False,
        must_be_dir: bool = False,
        tolerate_missing: bool = False,
    ) -> Optional[Node]:
        """Walk the segments of a path.

        Args:
            path: Path to resolve
            current: Node to start from
            must_be_file: Fail unless the result is a file
            must_be_dir: Fail if the result is a file
            tolerate_missing: Return None instead of failing when only the
                final segment is missing

        Returns:
            Resolved node (None only when tolerate_missing applies)
        """
        if not path:
            raise PathSyntaxError("empty path")

        clean, trailing_slash = strip_trailing_slash(path)
        if trailing_slash:
            if must_be_file:
                raise TypeMismatchError(f"file path ends with /: {path}")
            must_be_dir = True

        return self._fold(decompose(clean), current, path, must_be_file, must_be_dir, tolerate_missing)

    def _fold(
        self,
        segments: List[str],
        current: Node,
        path: str,
        must_be_file: bool = False,
        must_be_dir: bool = False,
        tolerate_missing: bool = False,
    ) -> Optional[Node]:
        """Apply path segments one by one, then check the result type."""
        node = current
        last = len(segments) - 1

        for i, segment in enumerate(segments):
            if segment == "":
                node = node.get_root()
            elif segment == ".":
                continue
            elif segment == "..":
                if node.parent is None:
                    raise NotFoundError("root has no parent")
                node = node.parent
            else:
                if not node.is_container():
                    raise TypeMismatchError(f"not a folder: {node.get_path()}")
                child = node.get_child(segment)
                if child is None:
                    if tolerate_missing and i == last:
                        return None
                    raise NotFoundError(f"cannot find {segment} in {node.get_path()}")
                if i != last and not child.is_container():
                    raise TypeMismatchError(f"not a folder: {child.get_path()}")
                node = child

        if must_be_file and not node.is_file():
            raise TypeMismatchError(f"not a file: {path}")
        if must_be_dir and node.is_file():
            raise TypeMismatchError(f"is a file: {path}")

        return node

"""Whole-subtree traversals: walk, flatten to catalog lines, name search."""

from typing import Iterator, List, Tuple

from vhd.catalog.flatfile import CatalogEntry
from vhd.vfs.base import Node
from vhd.vfs.paths import SEPARATOR, join


def walk(node: Node) -> Iterator[Tuple[List[str], Node]]:
    """Visit every node below ``node`` depth-first, siblings sorted by name.

    ``node`` itself is not yielded. Entering a drive loads it.

    Yields:
        Tuples of (path segments relative to ``node``, node)
    """
    def visit(current: Node, prefix: List[str]) -> Iterator[Tuple[List[str], Node]]:
        for name in sorted(current.list_child_names()):
            child = current.get_child(name)
            segments = prefix + [name]
            yield segments, child
            if child.is_container():
                yield from visit(child, segments)

    yield from visit(node, [])


def flatten(node: Node) -> List[str]:
    """Render the subtree below ``node`` as flat-file catalog lines.

    Paths are relative to ``node``, so flattening a drive gives the content
    of that drive's ``catalog`` file.

    Examples:
        >>> flatten(drive)
        ['/docs', '/docs/a.txt:7b5d41cc-...:1700000000:1690000000:1']
    """
    lines = []
    for segments, child in walk(node):
        path = SEPARATOR + join(segments)
        if child.is_file():
            entry = CatalogEntry(
                path, child.content_id, child.updated, child.created, child.metadata
            )
        else:
            entry = CatalogEntry(path)
        lines.append(entry.format())
    return lines


def find(node: Node, text: str) -> List[Node]:
    """Find nodes below ``node`` whose name contains ``text``, ignoring case."""
    needle = text.lower()
    return [child for _, child in walk(node) if needle in child.name.lower()]

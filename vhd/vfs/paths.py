"""Path grammar for the virtual filesystem.

Paths are slash-delimited. An empty segment anywhere in a path resets
navigation to the root, so ``/photos`` and ``docs//photos`` both land
on the ``photos`` drive. ``.`` stays put and ``..`` climbs one level.
These helpers only split strings; resolving segments against the tree is
the job of :class:`vhd.vfs.resolver.PathResolver`.
"""

from typing import List, Tuple

from vhd.catalog.base import DRIVE_PARENT_ID
from vhd.errors import PathSyntaxError

# Catalog id of a node that has not been written to the catalog yet.
UNPERSISTED_ID = -2

SEPARATOR = "/"


def decompose(path: str) -> List[str]:
    """Split a path into segments.

    Args:
        path: Path with any trailing slash already removed

    Returns:
        List of segments; empty strings mark root resets

    Examples:
        >>> decompose("/photos/2023")
        ['', 'photos', '2023']
        >>> decompose("../x")
        ['..', 'x']
    """
    return path.split(SEPARATOR)


def strip_trailing_slash(path: str) -> Tuple[str, bool]:
    """Remove a single trailing slash.

    Returns:
        Tuple of (clean path, whether a slash was removed)
    """
    if path.endswith(SEPARATOR):
        return path[:-1], True
    return path, False


def decompose_parent(path: str) -> Tuple[List[str], str]:
    """Split a path into its parent segments and final name.

    Used when the final name is about to be created, so it must not be
    resolved. The path is prefixed with ``./`` so the parent part is never
    empty: ``"x"`` becomes ``(['.'], 'x')``.

    Args:
        path: Path to split

    Returns:
        Tuple of (parent segments, leaf name)
    """
    clean, _ = strip_trailing_slash(path)
    segments = decompose("." + SEPARATOR + clean)
    return segments[:-1], segments[-1]


def join(segments: List[str]) -> str:
    """Join segments back into a path string."""
    return SEPARATOR.join(segments)


def validate_name(name: str) -> None:
    """Check that a name can be used for a new catalog entry.

    Raises:
        PathSyntaxError: If the name is empty, '.', '..', contains '/' or
            cannot be encoded as UTF-8
    """
    if name == "":
        raise PathSyntaxError("empty name not allowed")
    if name in (".", ".."):
        raise PathSyntaxError(f"name {name} not allowed")
    if SEPARATOR in name:
        raise PathSyntaxError(f"name {name} contains {SEPARATOR}")
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        raise PathSyntaxError(f"name {name!r} is not valid UTF-8") from None

"""Virtual File System spanning every configured drive.

The VFS presents the catalog as one hierarchy that can be navigated with
familiar shell commands. Drives appear directly under the root; their
folders and files come from the catalog, and file content lives in the
drive's storage backend under an opaque content id.

Architecture:

    ```
    /                           # Root (RootNode)
    ├── photos/                 # Drive (DriveNode), gcs::my-bucket
    │   ├── 2023/              # Folder (DirectoryNode)
    │   │   └── beach.jpg      # File (FileNode) -> content id 7b5d41cc-...
    │   └── notes.txt
    └── backup/                 # Drive (DriveNode), local::/mnt/disk
    ```

Node Types:

    - Node: Base class for all VFS entries
    - ContainerNode: Holds children by name (drives and folders)
    - RootNode, DriveNode, DirectoryNode, FileNode: the concrete kinds

Path Resolution:

    The PathResolver handles navigation:
    - Absolute paths: /photos/2023
    - Relative paths: ../other, ./2023
    - An empty segment restarts from the root: 2023//backup is /backup
    - A trailing slash requires a folder
    - Tab completion support

Drives load their catalog records the first time they are entered.
Mutations (mkdir, mv, file creation) write to the catalog before touching
the tree.

Usage Example:

    ```python
    from vhd.catalog import SQLCatalog
    from vhd.vfs import DriveVFS, RootNode

    catalog = SQLCatalog(Path("~/.vhd/catalog.db").expanduser())
    vfs = DriveVFS(RootNode.from_catalog(catalog))

    vfs.cd("/photos")
    vfs.mkdir("2024")
    for node in vfs.ls():
        print(node.name, node.get_info())
    ```
"""

from vhd.vfs.base import (
    Node,
    ContainerNode,
    NodeType,
)
from vhd.vfs.nodes import (
    RootNode,
    DriveNode,
    SubtreeState,
    DirectoryNode,
    FileNode,
)
from vhd.vfs.resolver import PathResolver
from vhd.vfs.mutations import create_directory, create_file, move
from vhd.vfs.tree import walk, flatten, find
from vhd.vfs.drive_vfs import DriveVFS

__all__ = [
    # Main entry point
    "DriveVFS",
    # Core classes
    "Node",
    "ContainerNode",
    "NodeType",
    "RootNode",
    "DriveNode",
    "SubtreeState",
    "DirectoryNode",
    "FileNode",
    # Path resolution
    "PathResolver",
    # Mutations
    "create_directory",
    "create_file",
    "move",
    # Traversal
    "walk",
    "flatten",
    "find",
]

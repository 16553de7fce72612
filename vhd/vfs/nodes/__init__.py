"""Virtual filesystem node implementations."""

from vhd.vfs.nodes.drive import DriveNode, SubtreeState
from vhd.vfs.nodes.directory import DirectoryNode
from vhd.vfs.nodes.file import FileNode
from vhd.vfs.nodes.root import RootNode

__all__ = [
    "RootNode",
    "DriveNode",
    "SubtreeState",
    "DirectoryNode",
    "FileNode",
]

"""
vhd - A virtual hard drive manager backed by object storage.

Files live in a storage backend (a local folder or a cloud bucket) under
opaque content identifiers. A separate catalog records the folder tree
the user actually sees, so renames and moves never touch the blobs.

Main API:
    from vhd.config import load_config
    from vhd.catalog import open_catalog
    from vhd.vfs import DriveVFS, RootNode

    config = load_config()
    catalog = open_catalog(config)
    vfs = DriveVFS(RootNode.from_catalog(catalog))

    vfs.cd("/photos/2023")
    for node in vfs.ls():
        print(node.name)

    vfs.mkdir("summer")
    vfs.mv("beach.jpg", "summer/")

    catalog.close()
"""

from .vfs import DriveVFS, RootNode

__version__ = "0.4.0"
__all__ = ["DriveVFS", "RootNode"]

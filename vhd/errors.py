"""Exception hierarchy for vhd.

Tree navigation and mutation failures are raised to the caller and reported
by the shell as ``<command>: <message>``; none of them is fatal.
"""


class VHDError(Exception):
    """Base class for all vhd errors."""
    pass


class PathSyntaxError(VHDError):
    """Malformed path or invalid entry name (empty, '.', '..')."""
    pass


class NotFoundError(VHDError):
    """A path segment does not exist."""
    pass


class TypeMismatchError(VHDError):
    """Expected a folder and got a file, or the other way around."""
    pass


class AlreadyExistsError(VHDError):
    """Name collision when creating or moving an entry."""
    pass


class InvalidOperationError(VHDError):
    """Operation not allowed on this node (moving a drive, creating in root...)."""
    pass


class CatalogCorruptError(VHDError):
    """Catalog records reference entries that do not exist."""
    pass


class BackingStoreError(VHDError):
    """Catalog persistence or storage I/O failed."""
    pass


class CatalogError(BackingStoreError):
    """The catalog could not be read or written."""
    pass


class StorageError(BackingStoreError):
    """A storage backend operation failed."""
    pass

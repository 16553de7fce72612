"""
Storage backends.

- local: files in a folder (``location`` is the folder)
- gcs: Google Cloud Storage bucket (``location`` is the bucket name)
"""

import logging
from typing import Optional

from vhd.catalog.base import DriveRecord
from vhd.config import VHDConfig
from vhd.storage.base import ObjectStat, Storage
from vhd.storage.local import LocalStorage

logger = logging.getLogger(__name__)

STORAGE_KINDS = ("local", "gcs")


def open_storage(record: DriveRecord, config: Optional[VHDConfig] = None) -> Optional[Storage]:
    """
    Build the storage backend for a drive.

    Args:
        record: Drive record (kind and location)
        config: Configuration for chunk size and credentials; defaults apply if None

    Returns:
        Storage instance, or None for an unknown kind
    """
    config = config or VHDConfig()
    chunk_size = config.storage.chunk_size

    if record.kind == "local":
        return LocalStorage(record.location, chunk_size)
    if record.kind == "gcs":
        from vhd.storage.gcs import GoogleCloudStorage

        credentials = config.credentials_path()
        return GoogleCloudStorage(
            record.location,
            credentials_file=credentials if credentials.exists() else None,
            chunk_size=chunk_size,
        )
    return None


__all__ = ['ObjectStat', 'Storage', 'LocalStorage', 'STORAGE_KINDS', 'open_storage']

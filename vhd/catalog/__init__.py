"""
Catalog backends.

- SQLCatalog: SQLite database via SQLAlchemy (default)
- FlatFileCatalog: per-drive text catalogs with YAML drive configs
"""

import logging

from vhd.catalog.base import (
    DRIVE_PARENT_ID,
    Catalog,
    DirectoryRecord,
    DriveRecord,
    FileRecord,
)
from vhd.catalog.flatfile import CatalogEntry, FlatFileCatalog, rotated_backup
from vhd.catalog.sqlite import SQLCatalog
from vhd.config import VHDConfig

logger = logging.getLogger(__name__)


def open_catalog(config: VHDConfig) -> Catalog:
    """
    Open the catalog selected by the configuration.

    Args:
        config: Loaded configuration

    Returns:
        Catalog instance

    Raises:
        CatalogError: The catalog could not be opened
        ValueError: Unknown backend
    """
    path = config.catalog_path()
    backend = config.catalog.backend
    logger.debug(f"Opening {backend} catalog at {path}")
    if backend == "sqlite":
        return SQLCatalog(path)
    if backend == "flatfile":
        return FlatFileCatalog(path)
    raise ValueError(f"unknown catalog backend '{backend}'")


__all__ = [
    'DRIVE_PARENT_ID',
    'Catalog',
    'CatalogEntry',
    'DirectoryRecord',
    'DriveRecord',
    'FileRecord',
    'FlatFileCatalog',
    'SQLCatalog',
    'open_catalog',
    'rotated_backup',
]

"""Catalog interface.

A catalog is the durable record of the folder hierarchy of every drive.
It is independent of where the blobs physically live: a file record only
carries the content id the storage backend was given at upload time.

Directory and file records reference their parent by id. The sentinel
``DRIVE_PARENT_ID`` (-1) means "attached directly to the drive".
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

# Parent id of entries attached directly to a drive.
DRIVE_PARENT_ID = -1


@dataclass
class DriveRecord:
    """A configured drive."""
    id: Any
    name: str
    kind: str
    location: str
    description: str = ""


@dataclass
class DirectoryRecord:
    """A folder inside a drive."""
    id: int
    name: str
    parent_id: int


@dataclass
class FileRecord:
    """A file inside a drive, pointing at a blob by content id."""
    id: int
    name: str
    directory_id: int
    content_id: str
    created: datetime
    updated: datetime
    metadata: str = ""


class Catalog(ABC):
    """Durable store of drives, directories and files.

    Implementations raise :class:`vhd.errors.CatalogError` when the
    underlying store cannot be read or written.
    """

    @abstractmethod
    def fetch_drives(self) -> List[DriveRecord]:
        """Get all configured drives."""
        pass

    @abstractmethod
    def add_drive(
        self,
        name: str,
        kind: str,
        location: str,
        description: str = "",
    ) -> DriveRecord:
        """Register a new drive."""
        pass

    @abstractmethod
    def fetch_directories(self, drive_id: Any) -> Dict[int, DirectoryRecord]:
        """Get all directory records of a drive, keyed by id."""
        pass

    @abstractmethod
    def fetch_files(self, drive_id: Any) -> Dict[int, FileRecord]:
        """Get all file records of a drive, keyed by id."""
        pass

    @abstractmethod
    def create_directory(self, drive_id: Any, name: str, parent_id: int) -> int:
        """Insert a directory record.

        Returns:
            Identifier of the new record
        """
        pass

    @abstractmethod
    def create_file(
        self,
        drive_id: Any,
        name: str,
        content_id: str,
        directory_id: int,
        created: datetime,
        updated: datetime,
        metadata: str,
    ) -> int:
        """Insert a file record.

        Returns:
            Identifier of the new record
        """
        pass

    @abstractmethod
    def update_directory(self, directory_id: int, name: str, parent_id: int) -> None:
        """Rename and/or reparent a directory record."""
        pass

    @abstractmethod
    def update_file(
        self,
        file_id: int,
        name: str,
        directory_id: int,
        updated: Optional[datetime] = None,
    ) -> None:
        """Rename and/or reparent a file record.

        Args:
            file_id: Record to update
            name: New name
            directory_id: New parent directory id
            updated: New last-update timestamp, left unchanged if None
        """
        pass

    @abstractmethod
    def count_files_under(self, directory_id: int) -> int:
        """Count files in a directory and all of its subdirectories."""
        pass

    @abstractmethod
    def count_files_in_drive(self, drive_id: Any) -> int:
        """Count all files of a drive."""
        pass

    def close(self) -> None:
        """Release any resources held by the catalog."""
        pass

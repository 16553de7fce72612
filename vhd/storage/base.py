"""Storage interface.

A storage backend keeps the blobs of one drive. Blobs are addressed only by
the content id the catalog recorded at upload time, plus the metadata string
the upload returned (the number of stored parts).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


@dataclass
class ObjectStat:
    """Size and checksum of one stored object (a whole blob or one part)."""
    name: str
    size: int
    crc32c: Optional[int] = None


class Storage(ABC):
    """Blob store behind a drive.

    Implementations raise :class:`vhd.errors.StorageError` on failure.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable description, e.g. ``local::/mnt/backup``."""
        pass

    @abstractmethod
    def list_all(self) -> List[str]:
        """Names of all stored objects."""
        pass

    @abstractmethod
    def upload(self, local_path: Path, content_id: str) -> str:
        """Store a local file under ``content_id``.

        Returns:
            Metadata to record in the catalog alongside the content id
        """
        pass

    @abstractmethod
    def download(self, content_id: str, metadata: str, destination: Path) -> None:
        """Write the blob stored under ``content_id`` to ``destination``."""
        pass

    @abstractmethod
    def remote_stat(self, content_id: str, metadata: str) -> List[ObjectStat]:
        """Describe the stored object(s) making up a blob."""
        pass

"""Storage in a local (or mounted) folder."""

import logging
import os
from pathlib import Path
from typing import List

from vhd.errors import StorageError
from vhd.storage.base import ObjectStat, Storage
from vhd.storage.checksum import ChecksumWriter, crc32c_file
from vhd.storage.paths import object_names, part_count

logger = logging.getLogger(__name__)


class LocalStorage(Storage):
    """Blobs as files under a root folder.

    New blobs are split into parts at ``ab/cd/ef/gh/<id>.<iii>``. Blobs
    written by older versions live at ``<root>/<id>`` with empty metadata
    and can still be downloaded and inspected.
    """

    def __init__(self, root: Path, chunk_size: int):
        self.root = Path(root).expanduser()
        self.chunk_size = chunk_size

    @property
    def name(self) -> str:
        return f"local::{self.root}"

    def _objects(self, content_id: str, metadata: str) -> List[Path]:
        if metadata == "":
            return [self.root / content_id]
        return [self.root / name for name in object_names(content_id, metadata)]

    def list_all(self) -> List[str]:
        if not self.root.is_dir():
            raise StorageError(f"storage folder {self.root} does not exist")
        return sorted(
            path.relative_to(self.root).as_posix()
            for path in self.root.rglob("*")
            if path.is_file()
        )

    def upload(self, local_path: Path, content_id: str) -> str:
        try:
            size = os.path.getsize(local_path)
        except OSError as e:
            raise StorageError(f"cannot read {local_path}: {e}") from e
        count = part_count(size, self.chunk_size)
        parts = self._objects(content_id, str(count))
        logger.debug(f"Uploading {local_path} as {count} object(s) to {self.name}")

        written: List[Path] = []
        try:
            parts[0].parent.mkdir(parents=True, exist_ok=True)
            with open(local_path, "rb") as src:
                for part in parts:
                    data = src.read(self.chunk_size)
                    written.append(part)
                    with open(part, "wb") as dest:
                        writer = ChecksumWriter(dest)
                        writer.write(data)
                    os.chmod(part, 0o600)
                    if crc32c_file(part) != writer.value:
                        raise StorageError(f"crc32c of stored object {part.name} differs")
        except OSError as e:
            self._remove(written)
            raise StorageError(f"cannot store {local_path}: {e}") from e
        except StorageError:
            self._remove(written)
            raise
        return str(count)

    def download(self, content_id: str, metadata: str, destination: Path) -> None:
        parts = self._objects(content_id, metadata)
        try:
            with open(destination, "wb") as dest:
                for part in parts:
                    logger.debug(f"Reading object {part}")
                    with open(part, "rb") as src:
                        for block in iter(lambda: src.read(1024 * 1024), b""):
                            dest.write(block)
        except OSError as e:
            Path(destination).unlink(missing_ok=True)
            raise StorageError(f"cannot fetch {content_id}: {e}") from e

    def remote_stat(self, content_id: str, metadata: str) -> List[ObjectStat]:
        stats = []
        for part in self._objects(content_id, metadata):
            try:
                size = part.stat().st_size
                checksum = crc32c_file(part)
            except OSError as e:
                raise StorageError(f"cannot stat {part}: {e}") from e
            stats.append(ObjectStat(part.relative_to(self.root).as_posix(), size, checksum))
        return stats

    @staticmethod
    def _remove(paths: List[Path]) -> None:
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove partial object {path}: {e}")

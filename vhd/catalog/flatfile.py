"""Flat-file catalog: one YAML config and one text catalog per drive.

Layout of the config folder::

    ~/.vhd/
    ├── photos/
    │   ├── config.yml      # type, location, description
    │   ├── catalog         # one entry per line
    │   └── catalog.bak     # previous version
    └── music/
        └── ...

Each catalog line is ``path[:contentId[:updatedEpoch[:createdEpoch[:metadata]]]]``.
A line holding only a path declares a folder; folders that only appear as
prefixes of other paths are created implicitly. Entry ids are assigned in
memory when a drive is first read, and every change rewrites the drive's
whole catalog file under a backup rotation.
"""

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import yaml

from vhd.catalog.base import (
    DRIVE_PARENT_ID,
    Catalog,
    DirectoryRecord,
    DriveRecord,
    FileRecord,
)
from vhd.errors import CatalogError

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.yml"
CATALOG_FILE = "catalog"
FIELD_SEPARATOR = ":"


def to_epoch(timestamp: datetime) -> int:
    return int(timestamp.timestamp())


def from_epoch(value: int) -> datetime:
    return datetime.fromtimestamp(value)


@dataclass
class CatalogEntry:
    """One line of a flat catalog file.

    Attributes:
        path: Slash-separated path relative to the drive, e.g. /a/b.txt
        content_id: Blob id for files, None for folders
        updated: Last update time (files only)
        created: Creation time (files only)
        metadata: Storage-specific metadata (files only)
    """
    path: str
    content_id: Optional[str] = None
    updated: Optional[datetime] = None
    created: Optional[datetime] = None
    metadata: str = ""

    def is_directory(self) -> bool:
        return self.content_id is None

    def format(self) -> str:
        """Render the entry as a catalog line (without newline)."""
        if self.is_directory():
            return self.path
        fields = [self.path, self.content_id]
        if self.updated is not None:
            fields.append(str(to_epoch(self.updated)))
            if self.created is not None:
                fields.append(str(to_epoch(self.created)))
                if self.metadata:
                    fields.append(self.metadata)
        return FIELD_SEPARATOR.join(fields)

    @classmethod
    def parse(cls, line: str) -> 'CatalogEntry':
        """Parse a catalog line.

        Raises:
            ValueError: Malformed line
        """
        fields = line.split(FIELD_SEPARATOR, 4)
        path = fields[0]
        if not path:
            raise ValueError(f"empty path in catalog line: {line!r}")
        if len(fields) == 1:
            return cls(path)
        updated = from_epoch(int(fields[2])) if len(fields) > 2 else None
        created = from_epoch(int(fields[3])) if len(fields) > 3 else None
        metadata = fields[4] if len(fields) > 4 else ""
        return cls(path, fields[1], updated, created, metadata)


@contextmanager
def rotated_backup(path: Path) -> Iterator[None]:
    """Protect a file while it is being rewritten.

    On entry, an existing ``<path>.bak`` is moved aside to ``<path>.tmp`` and
    the current file becomes ``<path>.bak``. The body then writes the new
    ``path``. On success ``<path>.tmp`` is removed, leaving the new file
    and the previous version in ``.bak``. On failure the previous file and
    backup are put back in place, so neither of the last two known-good
    versions is lost.

    Args:
        path: File about to be rewritten

    Raises:
        OSError: A rename failed; the original exception from the body is
            re-raised as is
    """
    backup = path.with_name(path.name + ".bak")
    preserved = path.with_name(path.name + ".tmp")

    made_tmp = False
    if backup.exists():
        os.replace(backup, preserved)
        made_tmp = True

    had_current = path.exists()
    if had_current:
        try:
            os.replace(path, backup)
        except OSError:
            if made_tmp:
                os.replace(preserved, backup)
            raise

    try:
        yield
    except BaseException:
        if had_current:
            os.replace(backup, path)
        elif path.exists():
            path.unlink()
        if made_tmp:
            os.replace(preserved, backup)
        raise

    if made_tmp:
        preserved.unlink()


class _DriveCatalog:
    """In-memory records of one drive, mirrored to its catalog file."""

    def __init__(self, record: DriveRecord, catalog_path: Path):
        self.record = record
        self.catalog_path = catalog_path
        self.directories: Dict[int, DirectoryRecord] = {}
        self.files: Dict[int, FileRecord] = {}


class FlatFileCatalog(Catalog):
    """Catalog stored as per-drive text files under a config folder.

    Drive ids are the drive folder names.
    """

    def __init__(self, config_folder: Path):
        """Initialize the catalog.

        Args:
            config_folder: Folder holding one subfolder per drive
        """
        self.config_folder = Path(config_folder)
        self._drives: Dict[str, _DriveCatalog] = {}
        self._owner: Dict[Tuple[str, int], str] = {}
        self._next_id = 1

    # Drives

    def fetch_drives(self) -> List[DriveRecord]:
        if not self.config_folder.is_dir():
            return []

        drives = []
        for folder in sorted(self.config_folder.iterdir()):
            config_path = folder / CONFIG_FILE
            if not folder.is_dir() or not config_path.exists():
                continue
            try:
                with open(config_path, "r") as f:
                    config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Skipping drive '{folder.name}': cannot read {config_path}: {e}")
                continue
            drives.append(DriveRecord(
                id=folder.name,
                name=folder.name,
                kind=str(config.get("type", "")),
                location=str(config.get("location", "")),
                description=str(config.get("description", "") or ""),
            ))
        return drives

    def add_drive(
        self,
        name: str,
        kind: str,
        location: str,
        description: str = "",
    ) -> DriveRecord:
        folder = self.config_folder / name
        if (folder / CONFIG_FILE).exists():
            raise CatalogError(f"drive {name} already exists")
        config = {"type": kind, "location": location, "description": description}
        try:
            folder.mkdir(parents=True, exist_ok=True)
            with open(folder / CONFIG_FILE, "w") as f:
                yaml.safe_dump(config, f, default_flow_style=False)
            (folder / CATALOG_FILE).touch()
        except OSError as e:
            raise CatalogError(f"cannot create drive {name}: {e}") from e
        return DriveRecord(name, name, kind, location, description)

    # Reading

    def fetch_directories(self, drive_id: Any) -> Dict[int, DirectoryRecord]:
        return dict(self._drive(drive_id).directories)

    def fetch_files(self, drive_id: Any) -> Dict[int, FileRecord]:
        return dict(self._drive(drive_id).files)

    def count_files_under(self, directory_id: int) -> int:
        drive = self._drives[self._owner_of("dir", directory_id)]
        below = {directory_id}
        changed = True
        while changed:
            changed = False
            for dir_id, record in drive.directories.items():
                if record.parent_id in below and dir_id not in below:
                    below.add(dir_id)
                    changed = True
        return sum(1 for f in drive.files.values() if f.directory_id in below)

    def count_files_in_drive(self, drive_id: Any) -> int:
        return len(self._drive(drive_id).files)

    # Writing

    def create_directory(self, drive_id: Any, name: str, parent_id: int) -> int:
        self._check_name(name)
        drive = self._drive(drive_id)
        dir_id = self._allocate_id()
        drive.directories[dir_id] = DirectoryRecord(dir_id, name, parent_id)
        self._commit(drive, lambda: drive.directories.pop(dir_id))
        self._owner[("dir", dir_id)] = drive.record.id
        return dir_id

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
        self._check_name(name)
        drive = self._drive(drive_id)
        file_id = self._allocate_id()
        drive.files[file_id] = FileRecord(
            file_id, name, directory_id, content_id, created, updated, metadata
        )
        self._commit(drive, lambda: drive.files.pop(file_id))
        self._owner[("file", file_id)] = drive.record.id
        return file_id

    def update_directory(self, directory_id: int, name: str, parent_id: int) -> None:
        self._check_name(name)
        drive = self._drives[self._owner_of("dir", directory_id)]
        record = drive.directories[directory_id]
        old = (record.name, record.parent_id)
        record.name, record.parent_id = name, parent_id

        def revert():
            record.name, record.parent_id = old

        self._commit(drive, revert)

    def update_file(
        self,
        file_id: int,
        name: str,
        directory_id: int,
        updated: Optional[datetime] = None,
    ) -> None:
        self._check_name(name)
        drive = self._drives[self._owner_of("file", file_id)]
        record = drive.files[file_id]
        old = (record.name, record.directory_id, record.updated)
        record.name, record.directory_id = name, directory_id
        if updated is not None:
            record.updated = updated

        def revert():
            record.name, record.directory_id, record.updated = old

        self._commit(drive, revert)

    # Internals

    def _allocate_id(self) -> int:
        new_id = self._next_id
        self._next_id += 1
        return new_id

    def _owner_of(self, kind: str, entry_id: int) -> str:
        try:
            return self._owner[(kind, entry_id)]
        except KeyError:
            raise CatalogError(f"unknown {kind} id {entry_id}") from None

    @staticmethod
    def _check_name(name: str) -> None:
        if FIELD_SEPARATOR in name:
            raise CatalogError(f"name {name} contains '{FIELD_SEPARATOR}'")
        if "\n" in name or "\r" in name:
            raise CatalogError(f"name {name!r} contains a line break")

    def _drive(self, drive_id: Any) -> _DriveCatalog:
        """Get a drive's records, reading its catalog file on first use."""
        if drive_id in self._drives:
            return self._drives[drive_id]

        folder = self.config_folder / str(drive_id)
        if not (folder / CONFIG_FILE).exists():
            raise CatalogError(f"unknown drive {drive_id}")
        record = DriveRecord(drive_id, str(drive_id), "", "")
        drive = _DriveCatalog(record, folder / CATALOG_FILE)
        self._read(drive)
        self._drives[drive_id] = drive
        for dir_id in drive.directories:
            self._owner[("dir", dir_id)] = drive_id
        for file_id in drive.files:
            self._owner[("file", file_id)] = drive_id
        return drive

    def _read(self, drive: _DriveCatalog) -> None:
        if not drive.catalog_path.exists():
            return
        try:
            with open(drive.catalog_path, "r", encoding="utf-8") as f:
                lines = f.read().splitlines()
            default_time = from_epoch(int(drive.catalog_path.stat().st_mtime))
        except OSError as e:
            raise CatalogError(f"cannot fetch catalog: {e}") from e

        folder_ids: Dict[str, int] = {}

        def folder_id(segments: List[str]) -> int:
            # Creates missing intermediate folders on the way down.
            parent_id = DRIVE_PARENT_ID
            key = ""
            for name in segments:
                key = f"{key}/{name}"
                if key not in folder_ids:
                    new_id = self._allocate_id()
                    drive.directories[new_id] = DirectoryRecord(new_id, name, parent_id)
                    folder_ids[key] = new_id
                parent_id = folder_ids[key]
            return parent_id

        for number, line in enumerate(lines, 1):
            if not line.strip():
                continue
            try:
                entry = CatalogEntry.parse(line)
            except ValueError as e:
                raise CatalogError(
                    f"{drive.catalog_path}:{number}: malformed catalog line: {e}"
                ) from e
            segments = [s for s in entry.path.split("/") if s]
            if not segments:
                logger.warning(f"{drive.catalog_path}:{number}: ignoring entry without a name")
                continue
            if entry.is_directory():
                folder_id(segments)
                continue
            file_id = self._allocate_id()
            drive.files[file_id] = FileRecord(
                id=file_id,
                name=segments[-1],
                directory_id=folder_id(segments[:-1]),
                content_id=entry.content_id,
                created=entry.created or entry.updated or default_time,
                updated=entry.updated or default_time,
                metadata=entry.metadata,
            )

    def _commit(self, drive: _DriveCatalog, revert: Callable[[], Any]) -> None:
        """Write the drive's catalog file; undo the record change on failure."""
        content = "".join(line + "\n" for line in self._flatten(drive))
        try:
            with rotated_backup(drive.catalog_path):
                with open(drive.catalog_path, "w", encoding="utf-8") as f:
                    f.write(content)
                os.chmod(drive.catalog_path, 0o600)
        except Exception as e:
            revert()
            raise CatalogError(f"cannot update catalog: {e}") from e

    @staticmethod
    def _flatten(drive: _DriveCatalog) -> List[str]:
        """Render a drive's records depth-first, siblings sorted by name."""
        folders: Dict[int, List[DirectoryRecord]] = {}
        for record in drive.directories.values():
            folders.setdefault(record.parent_id, []).append(record)
        files: Dict[int, List[FileRecord]] = {}
        for record in drive.files.values():
            files.setdefault(record.directory_id, []).append(record)

        lines: List[str] = []

        def visit(parent_id: int, prefix: str) -> None:
            entries = [(r.name, r) for r in folders.get(parent_id, [])]
            entries += [(r.name, r) for r in files.get(parent_id, [])]
            for name, record in sorted(entries, key=lambda e: e[0]):
                path = f"{prefix}/{name}"
                if isinstance(record, DirectoryRecord):
                    lines.append(CatalogEntry(path).format())
                    visit(record.id, path)
                else:
                    lines.append(CatalogEntry(
                        path, record.content_id, record.updated, record.created, record.metadata
                    ).format())

        visit(DRIVE_PARENT_ID, "")
        return lines

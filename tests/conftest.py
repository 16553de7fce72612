"""Shared fixtures: a SQLite catalog with two local drives."""

from datetime import datetime

import pytest

from vhd.catalog import DRIVE_PARENT_ID, SQLCatalog
from vhd.storage import LocalStorage
from vhd.vfs import DriveVFS, RootNode

BEACH_ID = "7b5d41cc-86d6-11ec-a8a3-0242ac120002"
ROME_ID = "1f3a9c2e-5b7d-4e8f-9a0b-1c2d3e4f5a6b"
NOTES_ID = "0a1b2c3d-4e5f-4a6b-8c7d-9e0f1a2b3c4d"
SONG_ID = "d4c3b2a1-f6e5-4b7a-9d8c-7b6a5f4e3d2c"

TIMESTAMP = datetime(2023, 6, 1, 12, 30, 0)

CHUNK_SIZE = 16


@pytest.fixture
def catalog(tmp_path):
    """Empty SQLite catalog."""
    cat = SQLCatalog(tmp_path / "catalog.db")
    yield cat
    cat.close()


@pytest.fixture
def populated_catalog(catalog, tmp_path):
    """Catalog with two drives.

    Structure:
        /
        ├── music/
        │   └── song.mp3
        └── photos/
            ├── 2023/
            │   ├── beach.jpg
            │   └── trips/
            │       └── rome.jpg
            └── notes.txt
    """
    photos_blobs = tmp_path / "photos-blobs"
    music_blobs = tmp_path / "music-blobs"
    photos_blobs.mkdir()
    music_blobs.mkdir()

    photos = catalog.add_drive("photos", "local", str(photos_blobs), "Family photos")
    music = catalog.add_drive("music", "local", str(music_blobs))

    y2023 = catalog.create_directory(photos.id, "2023", DRIVE_PARENT_ID)
    trips = catalog.create_directory(photos.id, "trips", y2023)
    catalog.create_file(photos.id, "beach.jpg", BEACH_ID, y2023, TIMESTAMP, TIMESTAMP, "1")
    catalog.create_file(photos.id, "rome.jpg", ROME_ID, trips, TIMESTAMP, TIMESTAMP, "1")
    catalog.create_file(photos.id, "notes.txt", NOTES_ID, DRIVE_PARENT_ID, TIMESTAMP, TIMESTAMP, "")
    catalog.create_file(music.id, "song.mp3", SONG_ID, DRIVE_PARENT_ID, TIMESTAMP, TIMESTAMP, "1")
    return catalog


def local_storage(record):
    return LocalStorage(record.location, CHUNK_SIZE)


@pytest.fixture
def root(populated_catalog):
    """Root over the populated catalog; drives are not loaded yet."""
    return RootNode.from_catalog(populated_catalog, local_storage)


@pytest.fixture
def vfs(root):
    return DriveVFS(root)

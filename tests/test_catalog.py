"""
Behavior shared by every catalog backend.

Each test runs against both the SQLite and the flat-file catalog.
"""

from datetime import datetime

import pytest

from vhd.catalog import DRIVE_PARENT_ID, FlatFileCatalog, SQLCatalog
from vhd.errors import CatalogError

from conftest import BEACH_ID, NOTES_ID, TIMESTAMP


@pytest.fixture(params=["sqlite", "flatfile"])
def any_catalog(request, tmp_path):
    if request.param == "sqlite":
        cat = SQLCatalog(tmp_path / "catalog.db")
    else:
        cat = FlatFileCatalog(tmp_path / "config")
    yield cat
    cat.close()


@pytest.fixture
def drive(any_catalog, tmp_path):
    return any_catalog.add_drive("photos", "local", str(tmp_path / "blobs"), "Family photos")


class TestDrives:

    def test_no_drives(self, any_catalog):
        assert any_catalog.fetch_drives() == []

    def test_add_and_fetch(self, any_catalog, drive, tmp_path):
        records = any_catalog.fetch_drives()
        assert len(records) == 1
        record = records[0]
        assert record.id == drive.id
        assert record.name == "photos"
        assert record.kind == "local"
        assert record.location == str(tmp_path / "blobs")
        assert record.description == "Family photos"

    def test_sorted_by_name(self, any_catalog, drive):
        any_catalog.add_drive("archive", "gcs", "bucket")
        assert [d.name for d in any_catalog.fetch_drives()] == ["archive", "photos"]

    def test_duplicate_drive(self, any_catalog, drive):
        with pytest.raises(CatalogError):
            any_catalog.add_drive("photos", "local", "/elsewhere")


class TestRecords:

    def test_new_drive_is_empty(self, any_catalog, drive):
        assert any_catalog.fetch_directories(drive.id) == {}
        assert any_catalog.fetch_files(drive.id) == {}
        assert any_catalog.count_files_in_drive(drive.id) == 0

    def test_create_directory(self, any_catalog, drive):
        dir_id = any_catalog.create_directory(drive.id, "2023", DRIVE_PARENT_ID)
        records = any_catalog.fetch_directories(drive.id)
        assert records[dir_id].name == "2023"
        assert records[dir_id].parent_id == DRIVE_PARENT_ID

    def test_create_file(self, any_catalog, drive):
        """
        Given: A drive
        When: Creating a file record
        Then: All fields come back, timestamps at second precision
        """
        file_id = any_catalog.create_file(
            drive.id, "notes.txt", NOTES_ID, DRIVE_PARENT_ID, TIMESTAMP, TIMESTAMP, "2"
        )
        record = any_catalog.fetch_files(drive.id)[file_id]
        assert record.name == "notes.txt"
        assert record.content_id == NOTES_ID
        assert record.directory_id == DRIVE_PARENT_ID
        assert record.created == TIMESTAMP
        assert record.updated == TIMESTAMP
        assert record.metadata == "2"

    def test_ids_are_distinct(self, any_catalog, drive):
        a = any_catalog.create_directory(drive.id, "a", DRIVE_PARENT_ID)
        b = any_catalog.create_directory(drive.id, "b", a)
        assert a != b

    def test_update_directory(self, any_catalog, drive):
        a = any_catalog.create_directory(drive.id, "a", DRIVE_PARENT_ID)
        b = any_catalog.create_directory(drive.id, "b", DRIVE_PARENT_ID)
        any_catalog.update_directory(b, "c", a)
        record = any_catalog.fetch_directories(drive.id)[b]
        assert record.name == "c"
        assert record.parent_id == a

    def test_update_file(self, any_catalog, drive):
        folder = any_catalog.create_directory(drive.id, "a", DRIVE_PARENT_ID)
        file_id = any_catalog.create_file(
            drive.id, "x.jpg", BEACH_ID, DRIVE_PARENT_ID, TIMESTAMP, TIMESTAMP, ""
        )
        later = datetime(2024, 1, 2, 3, 4, 5)
        any_catalog.update_file(file_id, "y.jpg", folder, updated=later)

        record = any_catalog.fetch_files(drive.id)[file_id]
        assert record.name == "y.jpg"
        assert record.directory_id == folder
        assert record.updated == later
        assert record.created == TIMESTAMP

    def test_update_file_keeps_timestamp(self, any_catalog, drive):
        file_id = any_catalog.create_file(
            drive.id, "x.jpg", BEACH_ID, DRIVE_PARENT_ID, TIMESTAMP, TIMESTAMP, ""
        )
        any_catalog.update_file(file_id, "y.jpg", DRIVE_PARENT_ID)
        assert any_catalog.fetch_files(drive.id)[file_id].updated == TIMESTAMP

    def test_update_unknown_ids(self, any_catalog, drive):
        with pytest.raises(CatalogError):
            any_catalog.update_directory(12345, "x", DRIVE_PARENT_ID)
        with pytest.raises(CatalogError):
            any_catalog.update_file(12345, "x", DRIVE_PARENT_ID)


class TestCounts:

    def test_count_files_under_is_recursive(self, any_catalog, drive):
        """
        Given: Files at three levels of nesting
        When: Counting files under each folder
        Then: Every file below the folder counts, at any depth
        """
        top = any_catalog.create_directory(drive.id, "top", DRIVE_PARENT_ID)
        mid = any_catalog.create_directory(drive.id, "mid", top)
        low = any_catalog.create_directory(drive.id, "low", mid)
        other = any_catalog.create_directory(drive.id, "other", DRIVE_PARENT_ID)
        for name, folder in [("a", top), ("b", mid), ("c", low), ("d", low), ("e", other)]:
            any_catalog.create_file(
                drive.id, name, BEACH_ID, folder, TIMESTAMP, TIMESTAMP, ""
            )
        any_catalog.create_file(
            drive.id, "f", BEACH_ID, DRIVE_PARENT_ID, TIMESTAMP, TIMESTAMP, ""
        )

        assert any_catalog.count_files_under(top) == 4
        assert any_catalog.count_files_under(mid) == 3
        assert any_catalog.count_files_under(low) == 2
        assert any_catalog.count_files_under(other) == 1
        assert any_catalog.count_files_in_drive(drive.id) == 6

    def test_drives_are_separate(self, any_catalog, drive, tmp_path):
        music = any_catalog.add_drive("music", "local", str(tmp_path / "music"))
        any_catalog.create_file(
            music.id, "song.mp3", BEACH_ID, DRIVE_PARENT_ID, TIMESTAMP, TIMESTAMP, ""
        )
        assert any_catalog.count_files_in_drive(drive.id) == 0
        assert any_catalog.count_files_in_drive(music.id) == 1
        assert any_catalog.fetch_files(drive.id) == {}

"""Tests specific to the SQLite catalog."""

import sqlite3

import pytest
from sqlalchemy import inspect

from vhd.catalog import DRIVE_PARENT_ID, SQLCatalog
from vhd.catalog.models import Drive
from vhd.errors import CatalogError

from conftest import BEACH_ID, TIMESTAMP


class TestSchema:

    def test_tables_and_columns(self, catalog):
        """
        Given: A freshly created catalog database
        When: Inspecting its schema
        Then: Tables and columns use the established catalog.db names
        """
        inspector = inspect(catalog._engine)
        assert set(inspector.get_table_names()) >= {"drives", "directories", "files"}

        def columns(table):
            return {column["name"] for column in inspector.get_columns(table)}

        assert columns("drives") == {"id", "name", "description", "host", "address"}
        assert columns("directories") == {"id", "driveId", "name", "parentId"}
        assert columns("files") == {
            "id", "driveId", "name", "directoryId", "uuid", "created", "updated", "metadata",
        }

    def test_timestamps_stored_as_epochs(self, catalog, tmp_path):
        drive = catalog.add_drive("photos", "local", str(tmp_path))
        catalog.create_file(
            drive.id, "a.jpg", BEACH_ID, DRIVE_PARENT_ID, TIMESTAMP, TIMESTAMP, "1"
        )
        catalog.close()

        connection = sqlite3.connect(str(tmp_path / "catalog.db"))
        try:
            row = connection.execute("SELECT uuid, created, updated FROM files").fetchone()
        finally:
            connection.close()
        assert row == (BEACH_ID, int(TIMESTAMP.timestamp()), int(TIMESTAMP.timestamp()))


class TestPersistence:

    def test_reopen(self, tmp_path):
        path = tmp_path / "nested" / "catalog.db"
        first = SQLCatalog(path)
        drive = first.add_drive("photos", "local", str(tmp_path))
        dir_id = first.create_directory(drive.id, "2023", DRIVE_PARENT_ID)
        first.close()

        second = SQLCatalog(path)
        try:
            assert [d.name for d in second.fetch_drives()] == ["photos"]
            assert second.fetch_directories(drive.id)[dir_id].name == "2023"
        finally:
            second.close()

    def test_unopenable_path(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        with pytest.raises(CatalogError):
            SQLCatalog(blocker / "catalog.db")

    def test_failed_transaction_rolls_back(self, catalog, tmp_path):
        """
        Given: A session that fails after adding a row
        When: The session scope exits
        Then: The row is not committed
        """
        catalog.add_drive("photos", "local", str(tmp_path))
        with pytest.raises(RuntimeError):
            with catalog.session_scope() as session:
                session.add(Drive(name="music", kind="local", location=str(tmp_path)))
                session.flush()
                raise RuntimeError("abort")
        assert [d.name for d in catalog.fetch_drives()] == ["photos"]

    def test_unencodable_name(self, catalog, tmp_path):
        """
        Given: A folder name that cannot be encoded as UTF-8
        When: Creating the folder
        Then: CatalogError is raised and nothing is stored
        """
        drive = catalog.add_drive("photos", "local", str(tmp_path))
        with pytest.raises(CatalogError):
            catalog.create_directory(drive.id, "caf\udce9", DRIVE_PARENT_ID)
        assert catalog.fetch_directories(drive.id) == {}
        catalog.create_directory(drive.id, "ok", DRIVE_PARENT_ID)
        assert [d.name for d in catalog.fetch_directories(drive.id).values()] == ["ok"]

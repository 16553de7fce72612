"""
Tests for VFS nodes: root, drives, folders and files.

Tests focus on behavior:
- Paths and type predicates
- Drive lookup from any node
- Structural restrictions (root and drives cannot move)
- File counts
- Info dictionaries have expected structure
"""

import pytest

from vhd.errors import InvalidOperationError
from vhd.vfs import DirectoryNode, FileNode, NodeType, RootNode, SubtreeState
from vhd.vfs.paths import DRIVE_PARENT_ID

from conftest import BEACH_ID


class TestPathsAndTypes:

    def test_root_path(self, root):
        assert root.get_path() == "/"
        assert root.is_root()
        assert root.is_container()
        assert root.catalog_id == DRIVE_PARENT_ID

    def test_drive_path(self, root):
        drive = root.get_child("photos")
        assert drive.get_path() == "/photos"
        assert drive.is_drive()
        assert drive.is_container()
        assert not drive.is_directory()

    def test_nested_paths(self, root):
        """
        Given: A drive with nested folders
        When: Asking a deep node for its path
        Then: The path lists every ancestor's name
        """
        y2023 = root.get_child("photos").get_child("2023")
        rome = y2023.get_child("trips").get_child("rome.jpg")
        assert y2023.get_path() == "/photos/2023"
        assert rome.get_path() == "/photos/2023/trips/rome.jpg"
        assert rome.is_file()
        assert not rome.is_container()
        assert rome.node_type is NodeType.FILE

    def test_get_drive(self, root):
        photos = root.get_child("photos")
        rome = photos.get_child("2023").get_child("trips").get_child("rome.jpg")
        assert rome.get_drive() is photos
        assert photos.get_drive() is photos
        assert root.get_drive() is None

    def test_get_root(self, root):
        notes = root.get_child("photos").get_child("notes.txt")
        assert notes.get_root() is root


class TestRoot:

    def test_children_are_drives(self, root):
        assert sorted(root.list_child_names()) == ["music", "photos"]
        assert all(child.is_drive() for child in root.list_children())

    def test_set_child_is_ignored(self, root):
        """
        Given: The root node
        When: Trying to attach a folder to it
        Then: Nothing changes (drives come from the catalog only)
        """
        root.set_child("extra", DirectoryNode("extra"))
        assert root.get_child("extra") is None

    def test_root_cannot_move(self, root):
        with pytest.raises(InvalidOperationError):
            root.move(root.get_child("photos"), "x")

    def test_count_files_sums_drives(self, root):
        assert root.count_files() == 4

    def test_skips_drives_without_storage(self, populated_catalog):
        root = RootNode.from_catalog(
            populated_catalog,
            lambda record: None if record.name == "music" else object(),
        )
        assert root.list_child_names() == ["photos"]


class TestDrive:

    def test_drive_starts_unloaded(self, root):
        drive = root.get_child("photos")
        assert drive.state is SubtreeState.UNLOADED

    def test_listing_loads_drive(self, root):
        drive = root.get_child("photos")
        assert sorted(drive.list_child_names()) == ["2023", "notes.txt"]
        assert drive.state is SubtreeState.LOADED

    def test_drive_cannot_move(self, root):
        photos = root.get_child("photos")
        with pytest.raises(InvalidOperationError):
            photos.move(root.get_child("music"), "photos")

    def test_count_files(self, root):
        assert root.get_child("photos").count_files() == 3
        assert root.get_child("music").count_files() == 1

    def test_info(self, root):
        info = root.get_child("photos").get_info()
        assert info["type"] == "drive"
        assert info["description"] == "Family photos"
        assert info["storage"].startswith("local::")


class TestDirectoryAndFile:

    def test_directory_count_is_recursive(self, root):
        y2023 = root.get_child("photos").get_child("2023")
        assert y2023.count_files() == 2
        assert y2023.get_child("trips").count_files() == 1

    def test_file_count_is_zero(self, root):
        notes = root.get_child("photos").get_child("notes.txt")
        assert notes.count_files() == 0

    def test_file_has_no_children(self, root):
        notes = root.get_child("photos").get_child("notes.txt")
        assert notes.list_child_names() == []
        assert notes.get_child("x") is None

    def test_file_info(self, root):
        beach = root.get_child("photos").get_child("2023").get_child("beach.jpg")
        info = beach.get_info()
        assert info["type"] == "file"
        assert info["content_id"] == BEACH_ID
        assert info["metadata"] == "1"
        assert info["path"] == "/photos/2023/beach.jpg"

    def test_container_refuses_own_ancestor(self):
        """
        Given: A folder nested in another folder
        When: Attaching the outer folder below the inner one
        Then: The attach is refused, keeping the structure a tree
        """
        outer = DirectoryNode("outer")
        inner = DirectoryNode("inner", parent=outer)
        outer.set_child("inner", inner)
        with pytest.raises(InvalidOperationError):
            inner.set_child("outer", outer)

    def test_new_file_defaults_timestamps(self):
        node = FileNode("a.txt", BEACH_ID)
        assert node.created == node.updated
        assert node.created.microsecond == 0

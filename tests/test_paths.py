"""Tests for the path grammar helpers."""

import pytest

from vhd.errors import PathSyntaxError
from vhd.vfs.paths import (
    decompose,
    decompose_parent,
    join,
    strip_trailing_slash,
    validate_name,
)


class TestDecompose:
    """Splitting paths into segments."""

    def test_absolute_path_starts_with_root_reset(self):
        assert decompose("/photos/2023") == ["", "photos", "2023"]

    def test_relative_path(self):
        assert decompose("../x") == ["..", "x"]

    def test_double_slash_gives_empty_segment(self):
        """
        Given: A path with a doubled slash
        When: Splitting it
        Then: The empty segment marks a jump back to the root
        """
        assert decompose("a//b") == ["a", "", "b"]

    def test_join_is_inverse(self):
        assert join(decompose("/a/b")) == "/a/b"


class TestTrailingSlash:

    def test_strips_one_slash(self):
        assert strip_trailing_slash("a/b/") == ("a/b", True)

    def test_no_slash(self):
        assert strip_trailing_slash("a/b") == ("a/b", False)

    def test_root(self):
        assert strip_trailing_slash("/") == ("", True)


class TestDecomposeParent:
    """Splitting a path into parent segments and a new leaf name."""

    def test_bare_name_is_relative_to_current(self):
        assert decompose_parent("x") == (["."], "x")

    def test_absolute_path(self):
        assert decompose_parent("/photos/new") == ([".", "", "photos"], "new")

    def test_trailing_slash_ignored(self):
        assert decompose_parent("a/b/") == ([".", "a"], "b")

    def test_root_gives_empty_leaf(self):
        segments, leaf = decompose_parent("/")
        assert leaf == ""


class TestValidateName:

    @pytest.mark.parametrize("name", ["", ".", "..", "a/b", "caf\udce9.txt"])
    def test_rejects_invalid_names(self, name):
        with pytest.raises(PathSyntaxError):
            validate_name(name)

    @pytest.mark.parametrize("name", ["a", "beach.jpg", "...", "with space", ".hidden"])
    def test_accepts_regular_names(self, name):
        validate_name(name)

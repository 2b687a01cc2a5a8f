"""Tests for dotted path resolution."""

from __future__ import annotations

import pytest

from docmirror.mirror.paths import containing_dir, resolve, split_fragment


class TestResolve:
    """Test resolve function."""

    def test_dotted_path(self) -> None:
        """Should turn dots into directories and add .html."""
        assert resolve("language.types.array") == ("language/types/array.html", "")

    def test_single_segment(self) -> None:
        """Should resolve an undotted path to a top-level file."""
        assert resolve("index") == ("index.html", "")

    def test_fragment_split_at_first_hash(self) -> None:
        """Should keep everything from the first # as the fragment."""
        assert resolve("a.b#frag#more") == ("a/b.html", "#frag#more")

    def test_fragment_only(self) -> None:
        """Should resolve a fragment-only path to the root index."""
        assert resolve("#intro") == ("index.html", "#intro")

    def test_empty_path(self) -> None:
        """Should resolve an empty path to the root index."""
        assert resolve("") == ("index.html", "")

    def test_empty_segments_pass_through(self) -> None:
        """Should not normalise consecutive separators."""
        assert resolve("a..b").file_path == "a//b.html"

    def test_slash_path_is_only_dot_converted(self) -> None:
        """Should tolerate slashes already present in the path."""
        assert resolve("dir/file.name").file_path == "dir/file/name.html"

    @pytest.mark.parametrize(
        "doc_path",
        ["", "#", "a", "a.b", "a.b#c", "#x.y", "a#b#c", "/abs.path#f", "x..y#", "..#.."],
    )
    def test_fragment_and_path_shape(self, doc_path: str) -> None:
        """Fragment is empty or starts with #, file path never contains #."""
        file_path, fragment = resolve(doc_path)
        assert fragment == "" or fragment.startswith("#")
        assert "#" not in file_path
        assert file_path.endswith(".html")


class TestHelpers:
    """Test split_fragment and containing_dir."""

    def test_split_fragment_without_hash(self) -> None:
        """Should return an empty fragment when there is no #."""
        assert split_fragment("a.b") == ("a.b", "")

    def test_split_fragment_with_hash(self) -> None:
        """Should keep the # in the fragment."""
        assert split_fragment("a.b#c") == ("a.b", "#c")

    def test_containing_dir_nested(self) -> None:
        """Should return the parent directories of a file."""
        assert containing_dir("language/types/array.html") == "language/types"

    def test_containing_dir_root(self) -> None:
        """Should return an empty string for top-level files."""
        assert containing_dir("index.html") == ""

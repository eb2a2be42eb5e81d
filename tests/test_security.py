"""Tests for treeplate.rendering.security."""

from __future__ import annotations

import os

import pytest

from treeplate.core.errors import NotAllowedError
from treeplate.rendering.security import (
    assert_contained,
    has_relative_parts,
    is_absolute_segment,
    is_contained,
    resolve_safe_child_path,
)


class TestIsContained:
    def test_root_itself(self, tmp_path):
        assert is_contained(tmp_path, tmp_path)

    def test_child(self, tmp_path):
        assert is_contained(tmp_path / "a" / "b.txt", tmp_path)

    def test_dot_dot_inside(self, tmp_path):
        assert is_contained(tmp_path / "a" / ".." / "b", tmp_path)

    def test_dot_dot_escape(self, tmp_path):
        assert not is_contained(tmp_path / ".." / "x", tmp_path)

    def test_sibling_with_common_prefix(self, tmp_path):
        root = tmp_path / "work"
        assert not is_contained(tmp_path / "workspace-other" / "f", root)

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_symlink_escape(self, tmp_path):
        root = tmp_path / "root"
        outside = tmp_path / "outside"
        root.mkdir()
        outside.mkdir()
        (root / "link").symlink_to(outside, target_is_directory=True)
        assert not is_contained(root / "link" / "file.txt", root)


class TestAssertContained:
    def test_passes_inside(self, tmp_path):
        assert_contained(tmp_path / "inside", tmp_path)

    def test_raises_outside(self, tmp_path):
        with pytest.raises(NotAllowedError, match="outside the working directory"):
            assert_contained(tmp_path / ".." / "..", tmp_path)

    def test_message_names_what(self, tmp_path):
        with pytest.raises(NotAllowedError, match="Target path"):
            assert_contained(tmp_path.parent, tmp_path, what="Target path")


class TestResolveSafeChildPath:
    def test_returns_resolved_child(self, tmp_path):
        assert resolve_safe_child_path(tmp_path, "a/./b/../c") == (tmp_path / "a" / "c").resolve()

    def test_rejects_escape(self, tmp_path):
        with pytest.raises(NotAllowedError):
            resolve_safe_child_path(tmp_path, "../../etc")

    def test_rejects_absolute(self, tmp_path):
        with pytest.raises(NotAllowedError):
            resolve_safe_child_path(tmp_path, "/etc")


@pytest.mark.parametrize(
    ("segment", "expected"),
    [
        ("name.txt", False),
        ("a/b", False),
        ("../x", False),
        ("/etc", True),
        ("C:\\temp", True),
        ("\\\\server\\share", True),
    ],
)
def test_is_absolute_segment(segment, expected):
    assert is_absolute_segment(segment) is expected


@pytest.mark.parametrize(
    ("segment", "expected"),
    [
        ("name.txt", False),
        (".env", False),
        ("..hidden", False),
        ("a/b", False),
        ("..", True),
        (".", True),
        ("a/../b", True),
        ("a\\..\\b", True),
    ],
)
def test_has_relative_parts(segment, expected):
    assert has_relative_parts(segment) is expected

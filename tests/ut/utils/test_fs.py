"""目录清理测试"""

from __future__ import annotations

import os
import stat

from addonprep.utils.fs import remove_tree


class TestRemoveTree:
    def test_missing_path(self, tmp_path) -> None:
        assert remove_tree(tmp_path / "nope") is False

    def test_removes_nested_directory(self, tmp_path) -> None:
        root = tmp_path / "vcpkg"
        (root / "a" / "b").mkdir(parents=True)
        (root / "a" / "b" / "f.txt").write_text("x")
        assert remove_tree(root) is True
        assert not root.exists()

    def test_removes_plain_file(self, tmp_path) -> None:
        f = tmp_path / "ffmpeg"
        f.write_text("stale")
        assert remove_tree(f) is True
        assert not f.exists()

    def test_readonly_files_removed(self, tmp_path) -> None:
        root = tmp_path / "clone"
        (root / ".git").mkdir(parents=True)
        obj = root / ".git" / "object"
        obj.write_text("pack")
        os.chmod(obj, stat.S_IREAD)
        assert remove_tree(root) is True
        assert not root.exists()

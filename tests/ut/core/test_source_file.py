"""源码文件补丁会话测试"""

from __future__ import annotations

import os

import pytest

from addonprep.core.exceptions import AnchorNotFoundError, PatchError
from addonprep.core.patch.operations import ReplaceText
from addonprep.core.patch.source import SourceFile, patch_file


def _op(required: bool = False) -> ReplaceText:
    return ReplaceText("rename", "old_name", "new_name", required=required)


class TestSourceFile:
    def test_missing_source(self, tmp_path) -> None:
        with pytest.raises(PatchError, match="源文件不存在"):
            SourceFile(tmp_path / "none.c")

    def test_in_place_edit(self, tmp_path) -> None:
        src = tmp_path / "a.c"
        src.write_text("int old_name;\n")
        sf = SourceFile(src)
        sf.apply([_op()])
        assert sf.save() is True
        assert src.read_text() == "int new_name;\n"

    def test_unchanged_not_rewritten(self, tmp_path) -> None:
        src = tmp_path / "a.c"
        src.write_text("int other;\n")
        os.utime(src, (1_000_000, 1_000_000))
        sf = SourceFile(src)
        sf.apply([_op()])
        assert sf.save() is False
        assert src.stat().st_mtime == 1_000_000

    def test_copy_to_target_leaves_source(self, tmp_path) -> None:
        src = tmp_path / "a.c"
        dst = tmp_path / "out" / "a.c"
        src.write_text("int old_name;\n")
        outcomes = patch_file(src, [_op()], target=dst)
        assert [o.name for o in outcomes] == ["rename"]
        assert src.read_text() == "int old_name;\n"
        assert dst.read_text() == "int new_name;\n"

    def test_target_identical_not_rewritten(self, tmp_path) -> None:
        src = tmp_path / "a.c"
        dst = tmp_path / "b.c"
        src.write_text("int old_name;\n")
        dst.write_text("int new_name;\n")
        os.utime(dst, (1_000_000, 1_000_000))
        sf = SourceFile(src, dst)
        sf.apply([_op()])
        assert sf.save() is False
        assert dst.stat().st_mtime == 1_000_000

    def test_crlf_preserved(self, tmp_path) -> None:
        src = tmp_path / "a.c"
        src.write_bytes(b"int old_name;\r\nint x;\r\n")
        patch_file(src, [_op()])
        assert src.read_bytes() == b"int new_name;\r\nint x;\r\n"

    def test_error_carries_path_and_operation(self, tmp_path) -> None:
        src = tmp_path / "a.c"
        src.write_text("int other;\n")
        sf = SourceFile(src)
        with pytest.raises(AnchorNotFoundError) as exc:
            sf.apply([_op(required=True)])
        assert exc.value.path == str(src)
        assert exc.value.operation == "rename"
        assert str(src) in str(exc.value)

    def test_failure_leaves_file_untouched(self, tmp_path) -> None:
        src = tmp_path / "a.c"
        src.write_text("int old_name;\n")
        with pytest.raises(AnchorNotFoundError):
            patch_file(src, [_op(), ReplaceText("must", "absent", "x", required=True)])
        assert src.read_text() == "int old_name;\n"

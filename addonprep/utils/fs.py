"""文件系统辅助 — 目录清理"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def _clear_readonly(func, path, _exc) -> None:  # type: ignore[no-untyped-def]
    # git 在 Windows 上把对象文件标记为只读，rmtree 需先去掉只读位
    os.chmod(path, stat.S_IWRITE)
    func(path)


def remove_tree(path: Path) -> bool:
    """删除目录（含只读文件），路径不存在时返回 False"""
    if not path.exists() and not path.is_symlink():
        return False
    if path.is_file() or path.is_symlink():
        path.unlink()
        return True
    if sys.version_info >= (3, 12):
        shutil.rmtree(path, onexc=_clear_readonly)
    else:
        shutil.rmtree(path, onerror=_clear_readonly)
    logger.debug("已删除目录: %s", path)
    return True

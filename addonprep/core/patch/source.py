"""源码文件 — 一次读入、内存中按序打补丁、一次原子写出

目标文件内容与最终文本相同时不写盘，重复运行时未改动的文件保持字节一致。
目标路径可与源路径不同（复制并修改）。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from addonprep.core.exceptions import PatchError
from addonprep.core.patch.operations import PatchOperation, PatchOutcome
from addonprep.utils.yaml_io import atomic_write, read_text

logger = logging.getLogger(__name__)


class SourceFile:
    """单个源码文件的补丁会话"""

    def __init__(self, source: Path, target: Path | None = None) -> None:
        self.source = Path(source)
        self.target = Path(target) if target is not None else self.source
        if not self.source.is_file():
            raise PatchError(f"源文件不存在: {self.source}", path=str(self.source))
        self.original = read_text(self.source)
        self.text = self.original
        self.outcomes: list[PatchOutcome] = []

    def apply(self, operations: Iterable[PatchOperation]) -> list[PatchOutcome]:
        """按给定顺序应用操作；任一操作失败立即抛出（携带文件与操作名）"""
        for op in operations:
            try:
                self.text, outcome = op.apply(self.text)
            except PatchError as e:
                raise type(e)(
                    f"{self.source}: {e}", path=str(self.source), operation=op.name,
                ) from e
            logger.debug("  %s [%s] %s", op.name, outcome.status, outcome.detail)
            self.outcomes.append(outcome)
        return self.outcomes

    @property
    def changed(self) -> bool:
        """最终文本与目标文件现有内容是否不同"""
        if not self.target.exists():
            return True
        if self.target == self.source:
            return self.text != self.original
        return self.text != read_text(self.target)

    def save(self) -> bool:
        """有变化时原子写出，返回是否写盘"""
        if not self.changed:
            logger.info("✓ %s 无变化，跳过写入", self.target.name)
            return False
        atomic_write(self.target, self.text)
        applied = [o.name for o in self.outcomes if o.changed]
        logger.info("✓ 已写入 %s (%s)", self.target, ", ".join(applied) or "复制")
        return True


def patch_file(
    source: Path,
    operations: Iterable[PatchOperation],
    target: Path | None = None,
) -> list[PatchOutcome]:
    """读入 source，应用操作，写到 target（默认原地）"""
    sf = SourceFile(source, target)
    outcomes = sf.apply(operations)
    sf.save()
    return outcomes

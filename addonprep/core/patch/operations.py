"""补丁操作

每个操作都自带幂等检查：先判断效果是否已存在，已存在则跳过，
因此同一操作重复应用得到的文本与应用一次完全相同。

操作类型:
- ReplaceText:       精确子串替换（可见性修改、条件编译包裹）
- RemoveFunction:    按签名删除整个函数，留下说明注释
- InsertAfterMarker: 在稳定标记之后插入新代码
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from addonprep.core.exceptions import (
    AnchorNotFoundError,
    MarkerNotFoundError,
    PatchError,
)
from addonprep.core.patch.scanner import find_function_span

logger = logging.getLogger(__name__)

APPLIED = "applied"
SKIPPED = "skipped"   # 效果已存在
NOOP = "noop"         # 锚点缺失但允许容忍


@dataclass
class PatchOutcome:
    """单个操作的执行结果"""

    name: str
    status: str
    detail: str = ""

    @property
    def changed(self) -> bool:
        return self.status == APPLIED


class PatchOperation(ABC):
    """补丁操作基类"""

    name: str = ""

    @abstractmethod
    def apply(self, text: str) -> tuple[str, PatchOutcome]:
        """对文本应用操作，返回 (新文本, 结果)"""

    def _outcome(self, status: str, detail: str = "") -> PatchOutcome:
        return PatchOutcome(name=self.name, status=status, detail=detail)


class ReplaceText(PatchOperation):
    """精确子串替换

    applied_marker 用于替换结果中仍包含原文的场景（如用 #if 包裹一行），
    标记存在即视为已应用。required=False 时原文缺失只记录警告。
    """

    def __init__(
        self, name: str, old: str, new: str,
        *, applied_marker: str = "", required: bool = False,
    ) -> None:
        self.name = name
        self.old = old
        self.new = new
        self.applied_marker = applied_marker
        self.required = required

    def apply(self, text: str) -> tuple[str, PatchOutcome]:
        if self.applied_marker and self.applied_marker in text:
            return text, self._outcome(SKIPPED, "已修改")
        count = text.count(self.old)
        if count == 0:
            if self.required:
                raise AnchorNotFoundError(
                    f"未找到待替换文本: {self.old!r}", operation=self.name,
                )
            logger.warning("⚠ %s: 未找到待替换文本，跳过: %r", self.name, self.old)
            return text, self._outcome(NOOP, "未找到待替换文本")
        return text.replace(self.old, self.new), self._outcome(APPLIED, f"替换 {count} 处")


def visibility_change(name: str, signature: str, qualifier: str = "static ") -> ReplaceText:
    """去掉函数签名中的存储限定符，如 `static int f(void)` -> `int f(void)`"""
    if not signature.startswith(qualifier):
        raise ValueError(f"签名不以 {qualifier!r} 开头: {signature}")
    return ReplaceText(name, signature, signature[len(qualifier):])


def removal_comment(function: str, replacement: str, reason: str) -> str:
    return (
        f"/*\n"
        f" * {function} function removed for {reason}\n"
        f" * Use {replacement}() instead\n"
        f" */\n"
    )


class RemoveFunction(PatchOperation):
    """按签名删除整个函数（含函数体），替换为说明注释

    注释存在即视为已删除；否则签名缺失或函数体未配平均为致命错误。
    """

    def __init__(self, name: str, signature: str, comment: str) -> None:
        self.name = name
        self.signature = signature
        self.comment = comment

    def apply(self, text: str) -> tuple[str, PatchOutcome]:
        if self.comment in text:
            return text, self._outcome(SKIPPED, "函数已删除")
        try:
            start, end = find_function_span(text, self.signature)
        except PatchError as e:
            e.operation = self.name
            raise
        before = text[:start].rstrip()
        after = text[end:].lstrip()
        prefix = f"{before}\n\n" if before else ""
        removed = end - start
        return prefix + self.comment + after, self._outcome(APPLIED, f"删除 {removed} 字符")


class InsertAfterMarker(PatchOperation):
    """在标记文本之后插入代码

    signature 是插入内容中可识别的稳定子串（如导出函数名），
    文件中任意位置已存在即跳过。
    """

    def __init__(
        self, name: str, marker: str, insertion: str, signature: str,
        *, required: bool = True,
    ) -> None:
        if signature not in insertion:
            raise ValueError(f"插入内容中不包含签名: {signature}")
        self.name = name
        self.marker = marker
        self.insertion = insertion
        self.signature = signature
        self.required = required

    def apply(self, text: str) -> tuple[str, PatchOutcome]:
        if self.signature in text:
            return text, self._outcome(SKIPPED, "已存在")
        pos = text.find(self.marker)
        if pos < 0:
            if self.required:
                raise MarkerNotFoundError(
                    f"未找到插入标记: {self.marker!r}", operation=self.name,
                )
            logger.warning("⚠ %s: 未找到插入标记，跳过: %r", self.name, self.marker)
            return text, self._outcome(NOOP, "未找到插入标记")
        cut = pos + len(self.marker)
        return text[:cut] + self.insertion + text[cut:], self._outcome(APPLIED)

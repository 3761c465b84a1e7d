"""源码补丁模块

- scanner.py: 字符串/转义感知的括号扫描
- operations.py: 幂等补丁操作
- source.py: 单文件补丁会话（一次读、一次原子写）
- recipes.py: FFmpeg 补丁清单
- templates.py / manifest.py: 生成文件
"""

from addonprep.core.patch.operations import (
    InsertAfterMarker,
    PatchOperation,
    PatchOutcome,
    RemoveFunction,
    ReplaceText,
    visibility_change,
)
from addonprep.core.patch.scanner import find_block_end, find_function_span
from addonprep.core.patch.source import SourceFile, patch_file

__all__ = [
    "find_block_end",
    "find_function_span",
    "PatchOperation",
    "PatchOutcome",
    "ReplaceText",
    "RemoveFunction",
    "InsertAfterMarker",
    "visibility_change",
    "SourceFile",
    "patch_file",
]

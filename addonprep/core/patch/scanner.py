"""结构扫描器 — 字符串/转义感知的括号匹配

按字符单遍前向扫描，维护三个状态:
  - depth: 当前嵌套深度
  - in_string: 是否位于双引号字符串内
  - escape_pending: 下一个字符是否被转义

只做词法级别的括号配平，不理解 C 语法。已知限制: 字符字面量
（如 '"'、'{'）、原始字符串、注释中的不成对引号都会干扰扫描。
"""

from __future__ import annotations

from addonprep.core.exceptions import AnchorNotFoundError, UnbalancedStructureError


def find_block_end(
    text: str,
    open_pos: int,
    *,
    open_char: str = "{",
    close_char: str = "}",
    quote: str = '"',
    escape: str = "\\",
) -> int | None:
    """返回与 open_pos 处开括号匹配的闭括号之后的偏移；扫描到末尾仍未配平返回 None

    Raises:
        ValueError: open_pos 处不是开括号
    """
    if not 0 <= open_pos < len(text) or text[open_pos] != open_char:
        raise ValueError(f"偏移 {open_pos} 处不是 {open_char!r}")

    depth = 0
    in_string = False
    escape_pending = False
    for i in range(open_pos, len(text)):
        ch = text[i]
        if escape_pending:
            escape_pending = False
            continue
        if ch == escape and in_string:
            escape_pending = True
        elif ch == quote:
            in_string = not in_string
        elif not in_string:
            if ch == open_char:
                depth += 1
            elif ch == close_char:
                depth -= 1
                if depth == 0:
                    return i + 1
    return None


def find_function_span(text: str, signature: str, start: int = 0) -> tuple[int, int]:
    """定位函数: 返回 (签名起点, 函数体闭括号之后的偏移)

    以签名之后出现的第一个 '{' 作为函数体起点。

    Raises:
        AnchorNotFoundError: 签名或其后的 '{' 不存在
        UnbalancedStructureError: 函数体括号未配平
    """
    sig_pos = text.find(signature, start)
    if sig_pos < 0:
        raise AnchorNotFoundError(f"未找到函数签名: {signature}")
    brace_pos = text.find("{", sig_pos + len(signature))
    if brace_pos < 0:
        raise AnchorNotFoundError(f"函数签名之后没有函数体: {signature}")
    end = find_block_end(text, brace_pos)
    if end is None:
        raise UnbalancedStructureError(
            f"函数体括号未配平（起点偏移 {brace_pos}）: {signature}"
        )
    return sig_pos, end

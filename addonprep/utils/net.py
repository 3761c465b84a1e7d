"""网络工具 — git 镜像地址校验

镜像地址支持两种写法:
  - URL 形式: https://host/repo.git、ssh://git@host/repo.git、git://host/repo.git
  - scp 形式: git@host:owner/repo.git（git 按 ssh 处理）

file:// 或本地路径会让 clone 读取任意本地目录，一律拒绝。
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

from addonprep.core.exceptions import ValidationError

_ALLOWED_SCHEMES = frozenset(("http", "https", "ssh", "git"))
_SCP_LIKE = re.compile(r"^[\w.-]+@[\w.-]+:(?!//)\S+$")


def mirror_scheme(url: str) -> str:
    """返回镜像地址使用的协议；scp 形式视为 ssh"""
    if _SCP_LIKE.match(url):
        return "ssh"
    return urlparse(url).scheme


def validate_url_scheme(url: str, *, context: str = "") -> str:
    """校验镜像地址协议在白名单内且带主机名，返回协议名

    Raises:
        ValidationError: 协议不允许或缺少主机名
    """
    label = f" ({context})" if context else ""
    scheme = mirror_scheme(url)
    if scheme not in _ALLOWED_SCHEMES:
        raise ValidationError(
            f"不允许的 URL 协议 '{scheme}'{label}，仅支持 http/https/ssh/git: {url}"
        )
    if not _SCP_LIKE.match(url) and not urlparse(url).netloc:
        raise ValidationError(f"镜像地址缺少主机名{label}: {url}")
    return scheme

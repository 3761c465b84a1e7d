"""依赖包特性检查与安装

职责:
- 通过 `vcpkg list <name>` 查询已安装状态（每次实时查询，不缓存）
- 判断已安装的包是否包含全部必需特性（必须同一 triplet）
- 特性不全时先移除再按完整特性列表重装

`vcpkg list` 的输出格式不是稳定契约，因此检查只做保守的文本匹配:
宁可误判为“未满足”多装一次，也不能把缺特性的安装判为“已满足”。
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from addonprep.core.dep.models import InstallTarget, PackageRequirement, RetryPolicy
from addonprep.core.dep.retry import retry_over_sources
from addonprep.core.exceptions import DependencyError, TransientError
from addonprep.utils.shell import CommandExecutor, get_executor

logger = logging.getLogger(__name__)


def _line_target(line: str) -> tuple[str, str] | None:
    """解析列表行首个字段 `name[feat]:triplet`，返回 (name, triplet)"""
    fields = line.split()
    if not fields:
        return None
    pkg_part, sep, triplet = fields[0].rpartition(":")
    if not sep:
        return None
    return pkg_part.split("[", 1)[0], triplet


def select_listing(listing: str, name: str, triplet: str) -> str:
    """从 list 输出中挑出属于 name:triplet 的行，拼成一个文本块"""
    lines = []
    for line in listing.splitlines():
        if _line_target(line) == (name, triplet):
            lines.append(line)
    return "\n".join(lines)


def has_features(listing: str, req: PackageRequirement) -> bool:
    """同一 triplet 的文本块中是否出现全部特性名（子串匹配）"""
    blob = select_listing(listing, req.name, req.triplet)
    if not blob:
        return False
    return all(feature in blob for feature in req.features)


class PackageInstaller:
    """单个依赖包的检查与安装"""

    def __init__(
        self,
        target: InstallTarget,
        requirement: PackageRequirement,
        policy: RetryPolicy,
        executor: CommandExecutor | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.target = target
        self.requirement = requirement
        self.policy = policy
        self.executor = executor or get_executor()
        self._sleep = sleep

    def listing(self) -> str:
        """查询已安装列表；查询失败按“未安装”处理，返回空串"""
        try:
            r = self.executor.execute(
                [str(self.target.executable), "list", self.requirement.name],
                cwd=str(self.target.root),
            )
        except OSError as e:
            logger.warning("vcpkg list 无法执行: %s", e)
            return ""
        if not r.success:
            logger.warning("vcpkg list 返回 rc=%d，按未安装处理", r.returncode)
            return ""
        return r.stdout

    def installed_for_triplet(self) -> bool:
        req = self.requirement
        return bool(select_listing(self.listing(), req.name, req.triplet))

    def is_satisfied(self) -> bool:
        """已为当前 triplet 安装且包含全部必需特性"""
        return has_features(self.listing(), self.requirement)

    def ensure(self) -> bool:
        """确保依赖包按完整特性安装；返回 True 表示本次执行了安装"""
        req = self.requirement
        if not self.target.is_installed():
            raise DependencyError("vcpkg 未安装，请先执行 bootstrap")

        listing = self.listing()
        if has_features(listing, req):
            logger.info(
                "✓ %s 已安装且包含所需特性: %s", req.remove_spec, ", ".join(req.features),
            )
            return False

        if select_listing(listing, req.name, req.triplet):
            logger.warning("⚠ %s 已安装但缺少所需特性，先移除再重装", req.remove_spec)
            self._remove()

        logger.info("安装 %s（大型依赖可能需要 20-40 分钟）...", req.install_spec)
        try:
            retry_over_sources(
                self._install, [req.install_spec], self.policy,
                sleep=self._sleep, label=f"vcpkg install {req.name}",
            )
        except TransientError as e:
            raise DependencyError(f"{req.install_spec} 安装失败: {e}") from e
        logger.info("✓ %s 安装完成", req.install_spec)
        return True

    def _remove(self) -> None:
        spec = self.requirement.remove_spec
        try:
            r = self.executor.execute(
                [str(self.target.executable), "remove", spec],
                cwd=str(self.target.root), capture=False,
            )
        except OSError as e:
            raise DependencyError(f"vcpkg remove 无法执行: {e}") from e
        if not r.success:
            raise DependencyError(f"移除已安装的 {spec} 失败 (rc={r.returncode})")
        logger.info("✓ 已移除旧的 %s", spec)

    def _install(self, spec: str) -> None:
        try:
            r = self.executor.execute(
                [str(self.target.executable), "install", spec],
                cwd=str(self.target.root), capture=False,
            )
        except OSError as e:
            raise DependencyError(f"vcpkg install 无法执行: {e}") from e
        if not r.success:
            raise TransientError(f"vcpkg install 失败 (rc={r.returncode})")

"""包管理器自举

职责:
- 检查 git 是否可用
- 按镜像顺序浅克隆 vcpkg 仓库（失败重试 + 线性退避 + 镜像回退）
- 运行平台自举脚本并校验可执行文件已生成

可执行文件已存在时整个阶段直接跳过，可安全重复执行。
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from addonprep.core.dep.models import InstallTarget, MirrorList, RetryPolicy
from addonprep.core.dep.retry import retry_over_sources
from addonprep.core.exceptions import (
    BootstrapError,
    BootstrapExhaustedError,
    ToolMissingError,
    TransientError,
    VerificationError,
)
from addonprep.utils.fs import remove_tree
from addonprep.utils.shell import CommandExecutor, get_executor

logger = logging.getLogger(__name__)


class ToolBootstrap:
    """vcpkg 自举器"""

    def __init__(
        self,
        target: InstallTarget,
        mirrors: MirrorList,
        policy: RetryPolicy,
        executor: CommandExecutor | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.target = target
        self.mirrors = mirrors
        self.policy = policy
        self.executor = executor or get_executor()
        self._sleep = sleep

    def ensure(self) -> bool:
        """确保包管理器可用；返回 True 表示本次执行了安装，False 表示已安装跳过"""
        if self.target.is_installed():
            logger.info("✓ vcpkg 已安装，跳过: %s", self.target.executable)
            return False

        logger.info("检查 git...")
        self.check_git()

        logger.info("开始安装 vcpkg 到: %s", self.target.root)
        self.target.root.parent.mkdir(parents=True, exist_ok=True)
        try:
            url = retry_over_sources(
                self._clone, self.mirrors, self.policy,
                cleanup=self._cleanup_partial_clone,
                sleep=self._sleep, label="git clone vcpkg",
            )
        except TransientError as e:
            raise BootstrapExhaustedError(
                f"vcpkg 克隆失败，{len(self.mirrors)} 个镜像各重试 "
                f"{self.policy.max_attempts} 次均未成功，最后错误: {e}",
                last_error=e,
            ) from e
        logger.info("克隆完成: %s", url)

        self._run_bootstrap_script()

        if not self.target.is_installed():
            raise VerificationError(
                f"自举脚本已退出但未生成可执行文件: {self.target.executable}"
            )
        logger.info("✓ vcpkg 安装完成: %s", self.target.executable)
        return True

    def check_git(self) -> None:
        """git 不可用时抛 ToolMissingError"""
        try:
            r = self.executor.execute(["git", "--version"])
        except OSError as e:
            raise ToolMissingError("未找到 git，请先安装 git 并加入 PATH") from e
        if not r.success:
            raise ToolMissingError(
                f"git 不可用 (rc={r.returncode})，请先安装 git 并加入 PATH"
            )
        logger.debug("git: %s", r.stdout.strip())

    def _cleanup_partial_clone(self) -> None:
        if remove_tree(self.target.root):
            logger.info("已清理残留目录: %s", self.target.root)

    def _clone(self, url: str) -> None:
        logger.info("克隆 vcpkg 仓库（可能需要几分钟）: %s", url)
        try:
            r = self.executor.execute(
                ["git", "clone", "--depth", "1", url, str(self.target.root)],
                cwd=str(self.target.root.parent), capture=False,
            )
        except OSError as e:
            raise TransientError(f"git clone 无法启动: {e}") from e
        if not r.success:
            raise TransientError(f"git clone 失败 (rc={r.returncode}): {url}")

    def _run_bootstrap_script(self) -> None:
        script = self.target.root / self.target.bootstrap_script
        if not script.exists():
            raise VerificationError(f"克隆结果中缺少自举脚本: {script}")
        cmd = [str(script)] if self.target.platform == "windows" else ["bash", str(script)]
        logger.info("运行自举脚本: %s", script.name)
        try:
            r = self.executor.execute(cmd, cwd=str(self.target.root), capture=False)
        except OSError as e:
            raise BootstrapError(f"自举脚本无法启动: {e}") from e
        if not r.success:
            raise BootstrapError(f"vcpkg 自举失败 (rc={r.returncode})")

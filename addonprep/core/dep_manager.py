"""依赖安装编排器

按顺序驱动三个阶段，每个阶段都可独立重复执行:

  1. bootstrap: vcpkg 可执行文件不存在时克隆并自举
  2. install:   依赖包缺失或特性不全时（移除后）重装
  3. extract:   源码目录不存在时从下载缓存解压源码包

任一阶段的前置条件已满足时直接跳过，因此中途失败后重新运行
只会补做缺失的部分。

用法:
    from addonprep.core.dep_manager import DepManager

    dm = DepManager()
    dm.install_all()
    print(dm.source_dir)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from addonprep.core.config import Config, get_config
from addonprep.core.dep import (
    ArchiveExtractor,
    PackageInstaller,
    ToolBootstrap,
)
from addonprep.utils.shell import CommandExecutor, get_executor

logger = logging.getLogger(__name__)


class DepManager:
    """依赖安装编排器（单线程、逐阶段执行）"""

    def __init__(
        self,
        config: Config | None = None,
        executor: CommandExecutor | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config or get_config()
        self.executor = executor or get_executor()
        self.target = self.config.install_target()
        self.requirement = self.config.requirement()
        policy = self.config.retry_policy()

        self.bootstrapper = ToolBootstrap(
            self.target, self.config.mirror_list(), policy,
            executor=self.executor, sleep=sleep,
        )
        self.installer = PackageInstaller(
            self.target, self.requirement, policy,
            executor=self.executor, sleep=sleep,
        )
        self.extractor = ArchiveExtractor(
            downloads_dir=self.target.downloads_dir,
            target_dir=self.config.source_path,
            staging_dir=self.config.staging_path,
            prefix=self.config.archive_prefix,
            suffix=self.config.archive_suffix,
        )

    @property
    def source_dir(self) -> Path:
        return self.config.source_path

    def bootstrap(self) -> bool:
        return self.bootstrapper.ensure()

    def install_packages(self) -> bool:
        return self.installer.ensure()

    def extract_source(self, force: bool = False) -> Path:
        return self.extractor.extract(force=force)

    def install_all(self) -> Path:
        """依次执行三个阶段，返回源码目录"""
        self.bootstrap()
        self.install_packages()
        return self.extract_source()

    def status(self) -> list[dict[str, Any]]:
        """各阶段当前状态（只读探测，不做任何修改）"""
        tool_ok = self.target.is_installed()
        steps: list[dict[str, Any]] = [{
            "step": "bootstrap", "satisfied": tool_ok,
            "detail": str(self.target.executable),
        }]
        if tool_ok:
            satisfied = self.installer.is_satisfied()
            detail = self.requirement.install_spec
            if not satisfied and self.installer.installed_for_triplet():
                detail = f"{self.requirement.remove_spec} 已安装但缺少特性，需重装为 {detail}"
            elif not satisfied:
                detail = f"{self.requirement.remove_spec} 未安装"
            steps.append({
                "step": "install", "satisfied": satisfied, "detail": detail,
            })
        else:
            steps.append({
                "step": "install", "satisfied": False,
                "detail": "vcpkg 未安装",
            })
        steps.append({
            "step": "extract", "satisfied": self.extractor.is_extracted(),
            "detail": str(self.source_dir),
        })
        return steps

"""准备流水线 — 4 步顺序执行

  1. bootstrap — 安装 vcpkg
  2. install   — 安装 ffmpeg 及所需特性
  3. extract   — 导出 ffmpeg 源码
  4. prepare   — 生成插件源码

任一步骤失败立即停止，不继续后续步骤；异常包装为 PipelineError 并携带步骤名。
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from addonprep.core.addon_preparer import AddonPreparer
from addonprep.core.config import Config, get_config
from addonprep.core.dep_manager import DepManager
from addonprep.core.exceptions import AddonPrepError, PipelineError

logger = logging.getLogger(__name__)

STAGE_LABELS = {
    "bootstrap": "vcpkg 安装",
    "install": "依赖包安装",
    "extract": "ffmpeg 源码导出",
    "prepare": "插件源码准备",
}


@dataclass
class PipelineReport:
    """流水线执行报告"""

    tool_root: Path
    tool_executable: Path
    source_dir: Path | None = None
    addon_dir: Path | None = None
    steps: list[dict[str, Any]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.addon_dir is not None


class PreparePipeline:
    """依赖安装 + 源码准备流水线"""

    def __init__(
        self,
        config: Config | None = None,
        dep_manager: DepManager | None = None,
        preparer: AddonPreparer | None = None,
    ) -> None:
        self.config = config or get_config()
        self.deps = dep_manager or DepManager(self.config)
        self.preparer = preparer or AddonPreparer(self.config)

    def run(self) -> PipelineReport:
        report = PipelineReport(
            tool_root=self.deps.target.root,
            tool_executable=self.deps.target.executable,
        )
        self._step(report, "bootstrap", self.deps.bootstrap)
        self._step(report, "install", self.deps.install_packages)
        report.source_dir = self._step(report, "extract", self.deps.extract_source)
        report.addon_dir = self._step(report, "prepare", self.preparer.prepare)
        return report

    @staticmethod
    def _step(report: PipelineReport, name: str, action: Callable[[], Any]) -> Any:
        label = STAGE_LABELS[name]
        logger.info("[%s] 开始", label, extra={"stage": name})
        start = time.monotonic()
        try:
            result = action()
        except (AddonPrepError, OSError) as e:
            report.steps.append({"step": name, "status": "failed", "error": str(e)})
            logger.error("[%s] 失败: %s", label, e, extra={"stage": name})
            raise PipelineError(label, e) from e
        duration = time.monotonic() - start
        report.steps.append({
            "step": name, "status": "done", "duration": round(duration, 1),
        })
        logger.info("[%s] 完成 (%.1fs)", label, duration, extra={"stage": name})
        return result

"""Node.js 插件源码准备

在已解压的 ffmpeg 源码树上执行:
  1. 生成 config.h（已存在则保留）
  2. opt_common.c 中 postproc 改为条件编译（原地修改，文件缺失时跳过）
  3. fftools/ffmpeg.c 复制到插件目录并打补丁（ffmpeg_run 取代 main）
  4. 生成 binding.c（每次覆盖）
  5. 生成 binding.gyp（每次覆盖）

所有步骤都可重复执行，重复运行时内容不变的文件不会被重写。
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from addonprep.core.config import Config, get_config
from addonprep.core.exceptions import PatchError
from addonprep.core.patch.manifest import build_manifest, render_manifest
from addonprep.core.patch.recipes import ffmpeg_c_operations, opt_common_operations
from addonprep.core.patch.source import SourceFile
from addonprep.core.patch.templates import BINDING_C, render_config_h
from addonprep.utils.yaml_io import atomic_write, read_text

logger = logging.getLogger(__name__)


def _write_if_different(path: Path, content: str) -> bool:
    if path.exists() and read_text(path) == content:
        return False
    atomic_write(path, content)
    return True


class AddonPreparer:
    """插件源码准备器"""

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or get_config()
        self.source_dir = self.config.source_path
        self.addon_dir = self.config.addon_path
        self.target = self.config.install_target()

    def prepare(self) -> Path:
        """执行全部准备步骤，返回插件源码目录"""
        logger.info("准备 Node.js 插件源码...")
        if not self.source_dir.is_dir():
            raise PatchError(f"ffmpeg 源码目录不存在: {self.source_dir}", path=str(self.source_dir))
        if not self.addon_dir.exists():
            self.addon_dir.mkdir(parents=True)
            logger.info("✓ 已创建插件目录: %s", self.addon_dir)

        self.create_config_h()
        self.patch_opt_common()
        self.patch_ffmpeg_c()
        self.create_binding_c()
        self.create_build_manifest()

        logger.info("✓ Node.js 插件源码准备完成")
        return self.addon_dir

    def create_config_h(self) -> bool:
        """config.h 已存在（可能被手工调整过）时不覆盖"""
        path = self.source_dir / "config.h"
        if path.exists():
            logger.info("✓ config.h 已存在，跳过生成")
            return False
        content = render_config_h(
            self.target.platform, self.target.triplet, date.today().year,
        )
        atomic_write(path, content)
        logger.info("✓ 已生成 config.h: %s", path)
        return True

    def patch_opt_common(self) -> bool:
        path = self.source_dir / "fftools" / "opt_common.c"
        if not path.exists():
            logger.warning("⚠ 未找到 opt_common.c，跳过修改")
            return False
        sf = SourceFile(path)
        sf.apply(opt_common_operations())
        return sf.save()

    def patch_ffmpeg_c(self) -> bool:
        """上游 ffmpeg.c 不动，修改结果写到插件目录"""
        sf = SourceFile(
            self.source_dir / "fftools" / "ffmpeg.c",
            self.addon_dir / "ffmpeg.c",
        )
        sf.apply(ffmpeg_c_operations())
        return sf.save()

    def create_binding_c(self) -> bool:
        path = self.addon_dir / "binding.c"
        written = _write_if_different(path, BINDING_C)
        if written:
            logger.info("✓ 已生成 binding.c: %s", path)
        return written

    def create_build_manifest(self) -> bool:
        path = self.addon_dir / "binding.gyp"
        manifest = build_manifest(
            addon_name=self.config.addon_name,
            addon_dir=self.addon_dir,
            source_dir=self.source_dir,
            installed_dir=self.target.installed_dir,
            platform=self.target.platform,
        )
        written = _write_if_different(path, render_manifest(manifest))
        if written:
            logger.info("✓ 已生成 binding.gyp: %s", path)
        return written

"""源码包解压

职责:
- 在 vcpkg 下载缓存中定位源码包（按名称前缀 + 扩展名，取最新）
- 解压到临时暂存目录，识别唯一的顶层目录
- 将顶层目录整体 rename 到固定输出路径

目标目录已存在时直接跳过；暂存目录无论成败都会被清理。
"""

from __future__ import annotations

import logging
import tarfile
from pathlib import Path

from addonprep.core.exceptions import ArchiveMissingError, ExtractionError
from addonprep.utils.fs import remove_tree

logger = logging.getLogger(__name__)


class ArchiveExtractor:
    """单顶层目录 tar 包解压器"""

    def __init__(
        self,
        downloads_dir: Path,
        target_dir: Path,
        staging_dir: Path,
        prefix: str = "ffmpeg",
        suffix: str = ".tar.gz",
    ) -> None:
        self.downloads_dir = Path(downloads_dir)
        self.target_dir = Path(target_dir)
        self.staging_dir = Path(staging_dir)
        self.prefix = prefix
        self.suffix = suffix

    def is_extracted(self) -> bool:
        return self.target_dir.is_dir()

    def find_archive(self) -> Path | None:
        """返回下载缓存中最新的匹配包，找不到返回 None"""
        if not self.downloads_dir.is_dir():
            return None
        candidates = [
            p for p in self.downloads_dir.iterdir()
            if p.is_file()
            and p.name.startswith(self.prefix)
            and p.name.endswith(self.suffix)
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda p: (p.stat().st_mtime, p.name))

    def extract(self, force: bool = False) -> Path:
        """解压源码包到目标目录，返回目标目录路径

        force=True 时即使目标目录已存在也重新解压（旧目录先删除）。
        """
        if self.is_extracted() and not force:
            logger.info("✓ 源码目录已存在，跳过解压: %s", self.target_dir)
            return self.target_dir

        archive = self.find_archive()
        if archive is None:
            raise ArchiveMissingError(
                f"在 {self.downloads_dir} 中未找到 {self.prefix}*{self.suffix}，"
                "安装步骤可能未执行或使用了其他获取方式"
            )
        logger.info("解压源码包: %s", archive)

        remove_tree(self.staging_dir)
        self.staging_dir.mkdir(parents=True)
        try:
            self._unpack(archive)
            top = self._top_level_dir()
            if remove_tree(self.target_dir):
                logger.info("已删除旧的目标目录: %s", self.target_dir)
            self.target_dir.parent.mkdir(parents=True, exist_ok=True)
            top.rename(self.target_dir)
        finally:
            remove_tree(self.staging_dir)

        logger.info("✓ 源码已导出到: %s", self.target_dir)
        return self.target_dir

    def _unpack(self, archive: Path) -> None:
        try:
            with tarfile.open(archive) as tf:
                tf.extractall(path=str(self.staging_dir), filter="data")  # noqa: S202
        except (tarfile.TarError, OSError) as e:
            raise ExtractionError(f"解压失败 {archive.name}: {e}") from e

    def _top_level_dir(self) -> Path:
        dirs = sorted(p for p in self.staging_dir.iterdir() if p.is_dir())
        if not dirs:
            raise ExtractionError(f"解压后未找到顶层目录: {self.staging_dir}")
        if len(dirs) > 1:
            logger.warning(
                "解压结果含 %d 个顶层目录，使用第一个: %s", len(dirs), dirs[0].name,
            )
        return dirs[0]

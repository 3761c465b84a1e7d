"""集中配置管理

提供统一的配置入口，支持从 YAML 文件加载 + 编程式覆盖。
所有目录均相对 base_dir 解析；base_dir 默认取 ADDONPREP_BASE_DIR，
未设置时为当前工作目录。
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from addonprep.core.dep.models import (
    InstallTarget,
    MirrorList,
    PackageRequirement,
    RetryPolicy,
)
from addonprep.core.exceptions import ConfigError
from addonprep.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "configs/default.yml"

DEFAULT_MIRRORS = [
    "https://github.com/microsoft/vcpkg.git",
    "https://gitee.com/mirrors/vcpkg.git",
]


def _default_base_dir() -> str:
    return os.getenv("ADDONPREP_BASE_DIR") or os.getcwd()


@dataclass
class Config:
    """全局配置"""

    # 目录（相对 base_dir）
    base_dir: str = field(default_factory=_default_base_dir)
    tool_dir: str = "vcpkg"
    source_dir: str = "ffmpeg"
    addon_dir: str = "addon_src"
    staging_dir: str = ".ffmpeg_temp"

    # 依赖包
    package: str = "ffmpeg"
    features: list[str] = field(default_factory=lambda: ["x264", "x265", "vpx"])
    triplet: str = ""          # 为空时按平台自动选择
    platform: str = ""         # 为空时自动检测: windows / darwin / linux

    # 网络
    mirrors: list[str] = field(default_factory=lambda: list(DEFAULT_MIRRORS))
    retry_attempts: int = 3
    retry_backoff: float = 5.0

    # 源码包
    archive_prefix: str = "ffmpeg"
    archive_suffix: str = ".tar.gz"

    # 插件
    addon_name: str = "ffmpeg_node"

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_PATH) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        try:
            data = load_yaml(path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigError(f"读取配置失败 {path}: {e}") from e
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known and k != "extra"}
        extra = {k: v for k, v in data.items() if k not in known}
        try:
            cfg = cls(**matched)
        except TypeError as e:
            raise ConfigError(f"配置格式错误 {path}: {e}") from e
        cfg.extra = extra
        cfg.validate()
        return cfg

    def validate(self) -> None:
        if not isinstance(self.features, list) or not all(
            isinstance(f, str) for f in self.features
        ):
            raise ConfigError("features 必须是字符串列表")
        if not isinstance(self.mirrors, list) or not self.mirrors:
            raise ConfigError("mirrors 必须是非空列表")
        if not all(isinstance(m, str) for m in self.mirrors):
            raise ConfigError("mirrors 中的每一项都必须是字符串")
        # bool 是 int 的子类，需单独排除
        if isinstance(self.retry_attempts, bool) or not isinstance(self.retry_attempts, int):
            raise ConfigError(f"retry_attempts 必须是整数: {self.retry_attempts!r}")
        if isinstance(self.retry_backoff, bool) or not isinstance(
            self.retry_backoff, (int, float)
        ):
            raise ConfigError(f"retry_backoff 必须是数字: {self.retry_backoff!r}")

    # ---- 路径 ----

    @property
    def base_path(self) -> Path:
        return Path(self.base_dir).expanduser().resolve()

    def path(self, name: str) -> Path:
        """解析相对 base_dir 的目录（绝对路径原样返回）"""
        p = Path(name).expanduser()
        return p if p.is_absolute() else self.base_path / p

    @property
    def source_path(self) -> Path:
        return self.path(self.source_dir)

    @property
    def addon_path(self) -> Path:
        return self.path(self.addon_dir)

    @property
    def staging_path(self) -> Path:
        return self.path(self.staging_dir)

    # ---- 领域对象 ----

    def install_target(self) -> InstallTarget:
        return InstallTarget.for_platform(
            self.path(self.tool_dir), platform=self.platform, triplet=self.triplet,
        )

    def requirement(self) -> PackageRequirement:
        return PackageRequirement(
            name=self.package,
            triplet=self.install_target().triplet,
            features=tuple(self.features),
        )

    def mirror_list(self) -> MirrorList:
        return MirrorList(tuple(self.mirrors))

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=int(self.retry_attempts),
            base_backoff=float(self.retry_backoff),
        )


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_PATH) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current


def reset_config() -> None:
    """清除全局配置（测试使用）"""
    global _current  # noqa: PLW0603
    _current = None

"""依赖安装数据模型

数据类:
- InstallTarget: 包管理器（vcpkg）安装目标，按平台决定可执行文件名与 triplet
- PackageRequirement: 依赖包 + 必需特性 + triplet
- MirrorList: 同一仓库的等价镜像地址，按顺序尝试
- RetryPolicy: 重试次数与线性退避
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

from addonprep.core.exceptions import ValidationError
from addonprep.utils.net import validate_url_scheme

# 平台 -> (可执行文件名, 默认 triplet, 自举脚本)
_PLATFORM_DEFAULTS: dict[str, tuple[str, str, str]] = {
    "windows": ("vcpkg.exe", "x64-windows-static", "bootstrap-vcpkg.bat"),
    "darwin": ("vcpkg", "x64-osx", "bootstrap-vcpkg.sh"),
    "linux": ("vcpkg", "x64-linux", "bootstrap-vcpkg.sh"),
}


def current_platform() -> str:
    """归一化当前平台名: windows / darwin / linux"""
    if sys.platform.startswith(("win32", "cygwin")):
        return "windows"
    if sys.platform == "darwin":
        return "darwin"
    return "linux"


@dataclass(frozen=True)
class InstallTarget:
    """包管理器安装目标（每次运行构造一次，之后不可变）"""

    root: Path
    exe_name: str
    triplet: str
    bootstrap_script: str
    platform: str = "linux"

    @classmethod
    def for_platform(
        cls, root: Path, platform: str = "", triplet: str = "",
    ) -> InstallTarget:
        """按平台构造；triplet 非空时覆盖平台默认值"""
        plat = platform or current_platform()
        exe_name, default_triplet, script = _PLATFORM_DEFAULTS.get(
            plat, _PLATFORM_DEFAULTS["linux"],
        )
        return cls(
            root=Path(root),
            exe_name=exe_name,
            triplet=triplet or default_triplet,
            bootstrap_script=script,
            platform=plat,
        )

    @property
    def executable(self) -> Path:
        return self.root / self.exe_name

    @property
    def downloads_dir(self) -> Path:
        return self.root / "downloads"

    @property
    def installed_dir(self) -> Path:
        """已安装包的 triplet 目录（include/ lib/ 位于其下）"""
        return self.root / "installed" / self.triplet

    def is_installed(self) -> bool:
        return self.executable.exists()


@dataclass(frozen=True)
class PackageRequirement:
    """依赖包需求

    特性检查总是与 triplet 一起进行：为其他 triplet 安装的包视为未安装。
    """

    name: str
    triplet: str
    features: tuple[str, ...] = ()

    @property
    def install_spec(self) -> str:
        """vcpkg install 参数，如 ffmpeg[x264,x265,vpx]:x64-linux"""
        if self.features:
            return f"{self.name}[{','.join(self.features)}]:{self.triplet}"
        return f"{self.name}:{self.triplet}"

    @property
    def remove_spec(self) -> str:
        return f"{self.name}:{self.triplet}"


@dataclass(frozen=True)
class MirrorList:
    """等价镜像地址列表，按顺序尝试直到成功"""

    urls: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.urls:
            raise ValidationError("镜像列表不能为空")
        for url in self.urls:
            validate_url_scheme(url, context="mirror")

    def __iter__(self):
        return iter(self.urls)

    def __len__(self) -> int:
        return len(self.urls)


@dataclass(frozen=True)
class RetryPolicy:
    """重试策略: 第 n 次重试前等待 n * base_backoff 秒"""

    max_attempts: int = 3
    base_backoff: float = 5.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValidationError(f"max_attempts 必须 >= 1: {self.max_attempts}")
        if self.base_backoff < 0:
            raise ValidationError(f"base_backoff 不能为负: {self.base_backoff}")

    def delay(self, attempt: int) -> float:
        return attempt * self.base_backoff


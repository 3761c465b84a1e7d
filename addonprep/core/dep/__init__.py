"""依赖安装模块

拆分说明:
- models.py: 安装目标、依赖需求、镜像、重试策略
- retry.py: 镜像回退 + 线性退避
- bootstrap.py: vcpkg 自举
- packages.py: 特性检查与安装
- extractor.py: 源码包解压
"""

from addonprep.core.dep.bootstrap import ToolBootstrap
from addonprep.core.dep.extractor import ArchiveExtractor
from addonprep.core.dep.models import (
    InstallTarget,
    MirrorList,
    PackageRequirement,
    RetryPolicy,
)
from addonprep.core.dep.packages import PackageInstaller

__all__ = [
    "InstallTarget",
    "PackageRequirement",
    "MirrorList",
    "RetryPolicy",
    "ToolBootstrap",
    "PackageInstaller",
    "ArchiveExtractor",
]

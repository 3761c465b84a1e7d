"""node-gyp 构建清单（binding.gyp）

源文件、头文件目录和链接库均从当前目录布局推导:
- 源文件: 插件目录下的 ffmpeg.c / binding.c + fftools 中其余的 ffmpeg 源文件
- 头文件: ffmpeg 源码根目录、fftools、vcpkg installed/<triplet>/include
- 链接库: vcpkg installed/<triplet>/lib 中的静态库
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

# fftools 中属于其他程序或已被插件替换的源文件
_EXCLUDED_PREFIXES = ("ffplay", "ffprobe")
_REPLACED_SOURCES = frozenset({"ffmpeg.c"})

# 静态链接时被依赖者排在后面
_FFMPEG_LINK_ORDER = (
    "avdevice", "avfilter", "avformat", "avcodec",
    "swresample", "swscale", "avutil",
)

_WINDOWS_SYSTEM_LIBS = (
    "ws2_32.lib", "secur32.lib", "bcrypt.lib", "ole32.lib", "user32.lib",
    "mfplat.lib", "mfuuid.lib", "strmiids.lib", "shlwapi.lib",
)


def _rel(path: Path, start: Path) -> str:
    return Path(os.path.relpath(path, start)).as_posix()


def fftools_sources(source_dir: Path) -> list[Path]:
    """fftools 中需要一起编译的 .c 文件（不含 ffmpeg.c / ffplay / ffprobe）"""
    fftools = source_dir / "fftools"
    if not fftools.is_dir():
        return []
    return sorted(
        p for p in fftools.glob("*.c")
        if p.name not in _REPLACED_SOURCES
        and not p.name.startswith(_EXCLUDED_PREFIXES)
    )


def _lib_stem(path: Path) -> str:
    stem = path.stem
    return stem[3:] if stem.startswith("lib") and path.suffix == ".a" else stem


def link_libraries(lib_dir: Path, platform: str) -> list[str]:
    """链接参数: ffmpeg 各库按依赖顺序在前，其余库按名称排序"""
    suffix = ".lib" if platform == "windows" else ".a"
    libs = sorted(lib_dir.glob(f"*{suffix}")) if lib_dir.is_dir() else []
    rank = {name: i for i, name in enumerate(_FFMPEG_LINK_ORDER)}
    libs.sort(key=lambda p: (rank.get(_lib_stem(p), len(rank)), p.name))

    if platform == "windows":
        return [p.as_posix() for p in libs] + list(_WINDOWS_SYSTEM_LIBS)
    args = [f"-L{lib_dir.as_posix()}"] if libs else []
    args += [f"-l{_lib_stem(p)}" for p in libs]
    if platform == "darwin":
        args += ["-framework CoreFoundation", "-framework CoreMedia", "-framework VideoToolbox"]
    else:
        args += ["-lpthread", "-lm", "-ldl"]
    return args


def build_manifest(
    *,
    addon_name: str,
    addon_dir: Path,
    source_dir: Path,
    installed_dir: Path,
    platform: str,
) -> dict[str, Any]:
    """生成 binding.gyp 的内容（dict）"""
    sources = ["ffmpeg.c", "binding.c"]
    sources += [_rel(p, addon_dir) for p in fftools_sources(source_dir)]
    target: dict[str, Any] = {
        "target_name": addon_name,
        "sources": sources,
        "include_dirs": [
            _rel(source_dir, addon_dir),
            _rel(source_dir / "fftools", addon_dir),
            (installed_dir / "include").as_posix(),
        ],
        "defines": ["HAVE_AV_CONFIG_H"],
        "libraries": link_libraries(installed_dir / "lib", platform),
    }
    if platform == "windows":
        target["msvs_settings"] = {"VCCLCompilerTool": {"RuntimeLibrary": 0}}
    return {"targets": [target]}


def render_manifest(manifest: dict[str, Any]) -> str:
    return json.dumps(manifest, indent=2, ensure_ascii=False) + "\n"

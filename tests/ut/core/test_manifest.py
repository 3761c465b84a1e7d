"""binding.gyp 构建清单测试"""

from __future__ import annotations

import json
from pathlib import Path

from addonprep.core.patch.manifest import (
    build_manifest,
    fftools_sources,
    link_libraries,
    render_manifest,
)


def _touch(*paths: Path) -> None:
    for p in paths:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text("")


class TestFftoolsSources:
    def test_excludes_replaced_and_other_programs(self, tmp_path) -> None:
        fftools = tmp_path / "fftools"
        _touch(*(fftools / n for n in (
            "ffmpeg.c", "ffmpeg_opt.c", "cmdutils.c", "ffplay.c",
            "ffplay_renderer.c", "ffprobe.c", "opt_common.c", "ffmpeg.h",
        )))
        names = [p.name for p in fftools_sources(tmp_path)]
        assert names == ["cmdutils.c", "ffmpeg_opt.c", "opt_common.c"]

    def test_no_fftools(self, tmp_path) -> None:
        assert fftools_sources(tmp_path) == []


class TestLinkLibraries:
    def test_posix_order(self, tmp_path) -> None:
        lib = tmp_path / "lib"
        _touch(*(lib / n for n in ("libx264.a", "libavutil.a", "libavcodec.a", "libvpx.a")))
        args = link_libraries(lib, "linux")
        assert args[0] == f"-L{lib.as_posix()}"
        assert args[1:5] == ["-lavcodec", "-lavutil", "-lvpx", "-lx264"]
        assert args[-3:] == ["-lpthread", "-lm", "-ldl"]

    def test_darwin_frameworks(self, tmp_path) -> None:
        lib = tmp_path / "lib"
        _touch(lib / "libavformat.a")
        args = link_libraries(lib, "darwin")
        assert "-lavformat" in args
        assert "-framework VideoToolbox" in args
        assert "-ldl" not in args

    def test_windows_full_paths(self, tmp_path) -> None:
        lib = tmp_path / "lib"
        _touch(lib / "avcodec.lib", lib / "avformat.lib", lib / "x264.lib")
        args = link_libraries(lib, "windows")
        assert args[:3] == [
            (lib / "avformat.lib").as_posix(),
            (lib / "avcodec.lib").as_posix(),
            (lib / "x264.lib").as_posix(),
        ]
        assert "ws2_32.lib" in args

    def test_missing_lib_dir(self, tmp_path) -> None:
        assert link_libraries(tmp_path / "none", "linux") == ["-lpthread", "-lm", "-ldl"]


class TestBuildManifest:
    def test_paths_relative_to_addon_dir(self, tmp_path) -> None:
        source = tmp_path / "ffmpeg"
        addon = tmp_path / "addon_src"
        installed = tmp_path / "vcpkg" / "installed" / "x64-linux"
        _touch(source / "fftools" / "cmdutils.c", source / "fftools" / "ffmpeg.c")
        manifest = build_manifest(
            addon_name="ffmpeg_node", addon_dir=addon, source_dir=source,
            installed_dir=installed, platform="linux",
        )
        target = manifest["targets"][0]
        assert target["target_name"] == "ffmpeg_node"
        assert target["sources"] == ["ffmpeg.c", "binding.c", "../ffmpeg/fftools/cmdutils.c"]
        assert target["include_dirs"][:2] == ["../ffmpeg", "../ffmpeg/fftools"]
        assert target["include_dirs"][2] == (installed / "include").as_posix()
        assert "msvs_settings" not in target

    def test_windows_runtime_setting(self, tmp_path) -> None:
        manifest = build_manifest(
            addon_name="a", addon_dir=tmp_path / "a", source_dir=tmp_path / "s",
            installed_dir=tmp_path / "i", platform="windows",
        )
        assert manifest["targets"][0]["msvs_settings"]["VCCLCompilerTool"]["RuntimeLibrary"] == 0

    def test_render_is_json(self) -> None:
        text = render_manifest({"targets": [{"target_name": "x"}]})
        assert text.endswith("\n")
        assert json.loads(text) == {"targets": [{"target_name": "x"}]}

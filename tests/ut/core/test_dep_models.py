"""依赖安装数据模型测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from addonprep.core.dep.models import (
    InstallTarget,
    MirrorList,
    PackageRequirement,
    RetryPolicy,
)
from addonprep.core.exceptions import ValidationError


class TestInstallTarget:
    @pytest.mark.parametrize("platform, exe, triplet, script", [
        ("windows", "vcpkg.exe", "x64-windows-static", "bootstrap-vcpkg.bat"),
        ("darwin", "vcpkg", "x64-osx", "bootstrap-vcpkg.sh"),
        ("linux", "vcpkg", "x64-linux", "bootstrap-vcpkg.sh"),
    ])
    def test_platform_defaults(self, platform, exe, triplet, script) -> None:
        t = InstallTarget.for_platform(Path("/opt/vcpkg"), platform=platform)
        assert t.exe_name == exe
        assert t.triplet == triplet
        assert t.bootstrap_script == script
        assert t.executable == Path("/opt/vcpkg") / exe

    def test_triplet_override(self) -> None:
        t = InstallTarget.for_platform(Path("v"), platform="linux", triplet="arm64-linux")
        assert t.triplet == "arm64-linux"
        assert t.installed_dir == Path("v/installed/arm64-linux")

    def test_downloads_dir(self) -> None:
        t = InstallTarget.for_platform(Path("v"), platform="linux")
        assert t.downloads_dir == Path("v/downloads")

    def test_is_installed(self, tmp_path) -> None:
        t = InstallTarget.for_platform(tmp_path, platform="linux")
        assert not t.is_installed()
        (tmp_path / "vcpkg").write_text("")
        assert t.is_installed()


class TestPackageRequirement:
    def test_specs(self) -> None:
        req = PackageRequirement("ffmpeg", "x64-linux", ("x264", "x265", "vpx"))
        assert req.install_spec == "ffmpeg[x264,x265,vpx]:x64-linux"
        assert req.remove_spec == "ffmpeg:x64-linux"

    def test_no_features(self) -> None:
        assert PackageRequirement("zlib", "x64-osx").install_spec == "zlib:x64-osx"


class TestMirrorList:
    def test_order_preserved(self) -> None:
        m = MirrorList(("https://a/x.git", "git://b/x.git"))
        assert list(m) == ["https://a/x.git", "git://b/x.git"]
        assert len(m) == 2

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValidationError, match="不能为空"):
            MirrorList(())

    def test_bad_scheme_rejected(self) -> None:
        with pytest.raises(ValidationError, match="不允许的 URL 协议"):
            MirrorList(("file:///tmp/vcpkg",))


class TestRetryPolicy:
    def test_linear_delay(self) -> None:
        p = RetryPolicy(max_attempts=3, base_backoff=5)
        assert [p.delay(n) for n in range(4)] == [0, 5, 10, 15]

    @pytest.mark.parametrize("kwargs", [
        {"max_attempts": 0},
        {"base_backoff": -1},
    ])
    def test_invalid(self, kwargs) -> None:
        with pytest.raises(ValidationError):
            RetryPolicy(**kwargs)

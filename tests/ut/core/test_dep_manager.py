"""依赖安装编排器测试"""

from __future__ import annotations

import io
import tarfile

from conftest import FakeExecutor, ok

from addonprep.core.dep_manager import DepManager


def _write_source_archive(downloads) -> None:
    downloads.mkdir(parents=True, exist_ok=True)
    data = b"int main(void) { return 0; }\n"
    with tarfile.open(downloads / "ffmpeg-n7.1.tar.gz", "w:gz") as tf:
        info = tarfile.TarInfo("FFmpeg-n7.1/fftools/ffmpeg.c")
        info.size = len(data)
        tf.addfile(info, io.BytesIO(data))


class FakeToolchain:
    """git clone 生成仓库，自举脚本生成 vcpkg，install 把源码包放进下载缓存"""

    def __init__(self, root) -> None:
        self.root = root
        self.listing = ""

    def __call__(self, args, cwd):
        if "clone" in args:
            self.root.mkdir(parents=True)
            (self.root / "bootstrap-vcpkg.sh").write_text("")
        elif args[0] == "bash":
            (self.root / "vcpkg").write_text("")
        elif args[1:2] == ["list"]:
            return ok(self.listing)
        elif args[1:2] == ["install"]:
            _write_source_archive(self.root / "downloads")
            self.listing = (
                "ffmpeg:x64-linux 7.1\n"
                "ffmpeg[x264]:x64-linux\nffmpeg[x265]:x64-linux\nffmpeg[vpx]:x64-linux\n"
            )
        return ok()


class TestDepManager:
    def test_wiring_from_config(self, make_config) -> None:
        cfg = make_config(staging_dir="tmp/stage", archive_prefix="ffmpeg-n")
        dm = DepManager(cfg, executor=FakeExecutor())
        assert dm.target.root == cfg.base_path / "vcpkg"
        assert dm.extractor.downloads_dir == dm.target.downloads_dir
        assert dm.extractor.staging_dir == cfg.base_path / "tmp" / "stage"
        assert dm.extractor.prefix == "ffmpeg-n"
        assert dm.source_dir == cfg.source_path

    def test_install_all_then_rerun_is_noop(self, make_config) -> None:
        cfg = make_config()
        toolchain = FakeToolchain(cfg.base_path / "vcpkg")
        executor = FakeExecutor(toolchain)
        dm = DepManager(cfg, executor=executor, sleep=lambda s: None)

        source = dm.install_all()
        assert (source / "fftools" / "ffmpeg.c").is_file()
        assert len(executor.calls_with("clone")) == 1
        assert len(executor.calls_with("install")) == 1

        executor.calls.clear()
        assert dm.install_all() == source
        assert executor.calls_with("clone") == []
        assert executor.calls_with("install") == []

    def test_status_before_anything(self, make_config) -> None:
        executor = FakeExecutor()
        dm = DepManager(make_config(), executor=executor)
        steps = dm.status()
        assert [s["step"] for s in steps] == ["bootstrap", "install", "extract"]
        assert not any(s["satisfied"] for s in steps)
        assert executor.calls == []

    def test_status_after_install(self, make_config) -> None:
        cfg = make_config()
        toolchain = FakeToolchain(cfg.base_path / "vcpkg")
        dm = DepManager(cfg, executor=FakeExecutor(toolchain), sleep=lambda s: None)
        dm.install_all()
        assert all(s["satisfied"] for s in dm.status())

    def _install_step(self, make_config, listing: str) -> dict:
        cfg = make_config()
        root = cfg.base_path / "vcpkg"
        root.mkdir(parents=True)
        (root / "vcpkg").write_text("")
        dm = DepManager(cfg, executor=FakeExecutor(lambda args, cwd: ok(listing)))
        return dm.status()[1]

    def test_status_installed_missing_features(self, make_config) -> None:
        step = self._install_step(make_config, "ffmpeg:x64-linux 7.1\nffmpeg[x264]:x64-linux\n")
        assert step["satisfied"] is False
        assert "缺少特性" in step["detail"]
        assert "ffmpeg[x264,x265,vpx]:x64-linux" in step["detail"]

    def test_status_not_installed(self, make_config) -> None:
        step = self._install_step(make_config, "ffmpeg:x64-osx 7.1\n")
        assert step["satisfied"] is False
        assert step["detail"] == "ffmpeg:x64-linux 未安装"

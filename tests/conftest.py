"""测试共享 fixture — 可编程的假命令执行器 + 临时目录配置"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from addonprep.core.config import Config, reset_config
from addonprep.utils.shell import CommandResult

Handler = Callable[[list[str], str], CommandResult]


def ok(stdout: str = "") -> CommandResult:
    return CommandResult(returncode=0, stdout=stdout, stderr="")


def fail(rc: int = 1, stderr: str = "boom") -> CommandResult:
    return CommandResult(returncode=rc, stdout="", stderr=stderr)


class FakeExecutor:
    """记录每次调用；handler 决定返回值（默认全部成功）"""

    def __init__(self, handler: Handler | None = None) -> None:
        self.handler = handler
        self.calls: list[list[str]] = []

    def execute(
        self,
        cmd: str | list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
        capture: bool = True,
    ) -> CommandResult:
        args = cmd.split() if isinstance(cmd, str) else list(cmd)
        self.calls.append(args)
        if self.handler is None:
            return ok()
        return self.handler(args, cwd)

    def calls_with(self, word: str) -> list[list[str]]:
        return [c for c in self.calls if word in c]


@pytest.fixture()
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture()
def make_config(tmp_path: Path) -> Callable[..., Config]:
    """以 tmp_path 为 base_dir 的配置，默认 linux + 无退避"""

    def _make(**overrides) -> Config:
        params = {
            "base_dir": str(tmp_path),
            "platform": "linux",
            "retry_attempts": 2,
            "retry_backoff": 0,
            "mirrors": ["https://example.com/a.git", "https://example.com/b.git"],
        }
        params.update(overrides)
        return Config(**params)

    return _make


@pytest.fixture(autouse=True)
def _reset_global_config():
    reset_config()
    yield
    reset_config()

"""镜像回退 + 线性退避重试测试"""

from __future__ import annotations

import logging

import pytest

from addonprep.core.dep.models import RetryPolicy
from addonprep.core.dep.retry import retry_over_sources
from addonprep.core.exceptions import DependencyError, TransientError


class Recorder:
    """记录 action / cleanup / sleep 的调用序列"""

    def __init__(self, fail_times: int = 10**6) -> None:
        self.fail_times = fail_times
        self.calls: list[str] = []
        self.sleeps: list[float] = []
        self.events: list[str] = []

    def action(self, source: str) -> None:
        self.calls.append(source)
        self.events.append(f"run:{source}")
        if len(self.calls) <= self.fail_times:
            raise TransientError(f"network down #{len(self.calls)}")

    def cleanup(self) -> None:
        self.events.append("cleanup")

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)


class TestRetryOverSources:
    def test_all_fail_exhausts_n_times_m(self) -> None:
        rec = Recorder()
        policy = RetryPolicy(max_attempts=3, base_backoff=2.0)
        with pytest.raises(TransientError, match="#6"):
            retry_over_sources(rec.action, ["a", "b"], policy, sleep=rec.sleep)
        assert rec.calls == ["a", "a", "a", "b", "b", "b"]

    def test_delays_non_decreasing_across_mirrors(self) -> None:
        rec = Recorder()
        policy = RetryPolicy(max_attempts=2, base_backoff=1.5)
        with pytest.raises(TransientError):
            retry_over_sources(rec.action, ["a", "b", "c"], policy, sleep=rec.sleep)
        assert rec.sleeps == [1.5, 3.0, 4.5, 6.0, 7.5]
        assert rec.sleeps == sorted(rec.sleeps)

    def test_first_success_stops(self) -> None:
        rec = Recorder(fail_times=1)
        policy = RetryPolicy(max_attempts=3, base_backoff=0)
        used = retry_over_sources(rec.action, ["a", "b"], policy, sleep=rec.sleep)
        assert used == "a"
        assert rec.calls == ["a", "a"]
        assert rec.sleeps == []

    def test_falls_back_to_next_mirror(self) -> None:
        rec = Recorder(fail_times=2)
        policy = RetryPolicy(max_attempts=2, base_backoff=1)
        used = retry_over_sources(rec.action, ["a", "b"], policy, sleep=rec.sleep)
        assert used == "b"
        assert rec.calls == ["a", "a", "b"]
        assert rec.sleeps == [1, 2]

    def test_cleanup_before_every_attempt(self) -> None:
        rec = Recorder(fail_times=1)
        policy = RetryPolicy(max_attempts=2, base_backoff=0)
        retry_over_sources(
            rec.action, ["a"], policy, cleanup=rec.cleanup, sleep=rec.sleep,
        )
        assert rec.events == ["cleanup", "run:a", "cleanup", "run:a"]

    def test_non_transient_error_propagates_immediately(self) -> None:
        calls = []

        def action(source: str) -> None:
            calls.append(source)
            raise DependencyError("fatal")

        with pytest.raises(DependencyError):
            retry_over_sources(action, ["a", "b"], RetryPolicy(3, 0), sleep=lambda s: None)
        assert calls == ["a"]

    def test_no_sources(self) -> None:
        with pytest.raises(TransientError, match="没有可用来源"):
            retry_over_sources(lambda s: None, [], RetryPolicy(), sleep=lambda s: None)

    def test_wait_log_names_mirror_and_attempt_within_it(self, caplog) -> None:
        rec = Recorder(fail_times=2)
        policy = RetryPolicy(max_attempts=2, base_backoff=1)
        with caplog.at_level(logging.INFO, logger="addonprep.core.dep.retry"):
            retry_over_sources(rec.action, ["a", "b"], policy, sleep=rec.sleep, label="clone")
        waits = [r.getMessage() for r in caplog.records if "等待" in r.getMessage()]
        assert waits == [
            "clone (a) 第 2/2 次尝试前等待 1.0s（全局第 2 次尝试）",
            "clone (b) 第 1/2 次尝试前等待 2.0s（全局第 3 次尝试）",
        ]

"""镜像回退 + 线性退避重试

按镜像顺序依次尝试，每个镜像最多 policy.max_attempts 次；
退避时间按全局已尝试次数线性增长，跨镜像不回落。
仅 TransientError 触发重试，其余异常立即向上抛出。
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from typing import TypeVar

from addonprep.core.dep.models import RetryPolicy
from addonprep.core.exceptions import TransientError

logger = logging.getLogger(__name__)

S = TypeVar("S")


def retry_over_sources(
    action: Callable[[S], None],
    sources: Iterable[S],
    policy: RetryPolicy,
    *,
    cleanup: Callable[[], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "操作",
) -> S:
    """依次对每个来源执行 action，返回首个成功的来源

    Raises:
        TransientError: 所有来源的所有尝试都失败（为最后一次的异常）
    """
    attempts = 0
    last_error: TransientError | None = None
    for source in sources:
        for n in range(1, policy.max_attempts + 1):
            if cleanup is not None:
                cleanup()
            wait = policy.delay(attempts)
            if wait > 0:
                logger.info(
                    "%s (%s) 第 %d/%d 次尝试前等待 %.1fs（全局第 %d 次尝试）",
                    label, source, n, policy.max_attempts, wait, attempts + 1,
                )
                sleep(wait)
            attempts += 1
            try:
                action(source)
            except TransientError as e:
                last_error = e
                logger.warning(
                    "%s 失败 (%s, 第 %d/%d 次): %s",
                    label, source, n, policy.max_attempts, e,
                )
                continue
            if attempts > 1:
                logger.info("%s 在全局第 %d 次尝试成功 (%s)", label, attempts, source)
            return source

    if last_error is None:
        raise TransientError(f"{label} 没有可用来源")
    logger.error("%s 已耗尽全部 %d 次尝试", label, attempts)
    raise last_error

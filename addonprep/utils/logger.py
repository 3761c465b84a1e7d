"""addonprep 日志配置

普通文本与结构化 JSON 两种输出格式。安装步骤可能持续数十分钟，
CI 中建议开启 JSON 输出并同时写入日志文件，便于事后检索失败阶段。
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

TEXT_FORMAT = "%(asctime)s [%(levelname)-7s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """结构化 JSON 日志格式器

    输出字段: timestamp / level / logger / message / line，
    记录带有 stage 属性时（logger.info(..., extra={"stage": ...})）一并输出，
    有异常时附带 exception。
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "line": record.lineno,
        }
        stage = getattr(record, "stage", None)
        if stage:
            entry["stage"] = stage
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _make_formatter(json_output: bool) -> logging.Formatter:
    return JSONFormatter() if json_output else logging.Formatter(TEXT_FORMAT)


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: str | None = None,
) -> None:
    """配置根日志器

    参数:
        level: 日志级别字符串（DEBUG, INFO, WARNING, ERROR）
        json_output: 为 True 时使用 JSON 格式
        log_file: 额外写入的日志文件路径，父目录自动创建

    说明:
        - 控制台输出到 stderr，stdout 留给命令结果
        - 重复调用会先清理已有 handlers，避免重复输出
    """
    reset_logging()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_make_formatter(json_output))
    root.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(_make_formatter(json_output))
        root.addHandler(file_handler)


def reset_logging() -> None:
    """清理根日志器的全部 handlers（测试中重新配置前调用）"""
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

"""addonprep 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

import os
import sys
from collections.abc import Callable
from typing import Any

import click

from addonprep import __version__
from addonprep.core.config import DEFAULT_CONFIG_PATH, init_config
from addonprep.core.exceptions import AddonPrepError, PipelineError
from addonprep.utils.logger import setup_logging


def run_stage(label: str, action: Callable[[], Any]) -> Any:
    """执行一个阶段；失败时在 stderr 输出阶段名并以退出码 1 结束"""
    try:
        return action()
    except PipelineError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)
    except (AddonPrepError, OSError) as e:
        click.echo(f"✗ {label} 失败: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "-c", "config_path", default=DEFAULT_CONFIG_PATH,
    show_default=True, help="配置文件路径（不存在时使用默认配置）",
)
@click.option("--log-file", default=None, help="额外写入的日志文件")
def main(config_path: str, log_file: str | None) -> None:
    """addonprep - FFmpeg Node.js 插件源码准备工具"""
    setup_logging(
        level=os.getenv("ADDONPREP_LOG_LEVEL", "INFO"),
        json_output=os.getenv("ADDONPREP_LOG_JSON", "") == "1",
        log_file=log_file,
    )
    run_stage("加载配置", lambda: init_config(config_path))


# 注册各领域子命令
from addonprep.cli.cmd_deps import register as _reg_deps  # noqa: E402
from addonprep.cli.cmd_prepare import register as _reg_prepare  # noqa: E402

_reg_deps(main)
_reg_prepare(main)

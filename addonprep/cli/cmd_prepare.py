"""CLI — 插件源码准备与完整流水线"""

from __future__ import annotations

import click

from addonprep.cli import run_stage
from addonprep.core.addon_preparer import AddonPreparer
from addonprep.core.pipeline import PreparePipeline


def register(group: click.Group) -> None:
    group.add_command(prepare)
    group.add_command(run)


@click.command()
def prepare() -> None:
    """在已导出的 ffmpeg 源码上生成插件源码"""
    preparer = AddonPreparer()
    path = run_stage("插件源码准备", preparer.prepare)
    click.echo(f"插件源码目录: {path}")


@click.command()
def run() -> None:
    """完整流程: 安装 vcpkg → 安装依赖 → 导出源码 → 准备插件源码"""
    pipeline = run_stage("初始化", PreparePipeline)
    report = run_stage("流水线", pipeline.run)
    click.echo("=== 全部步骤完成 ===")
    click.echo(f"vcpkg 根目录: {report.tool_root}")
    click.echo(f"vcpkg 可执行文件: {report.tool_executable}")
    click.echo(f"ffmpeg 源码目录: {report.source_dir}")
    click.echo(f"插件源码目录: {report.addon_dir}")

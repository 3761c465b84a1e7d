"""CLI — 依赖安装命令"""

from __future__ import annotations

import click

from addonprep.cli import run_stage
from addonprep.core.dep_manager import DepManager


def register(group: click.Group) -> None:
    group.add_command(bootstrap)
    group.add_command(install)
    group.add_command(extract)
    group.add_command(status)


def _manager() -> DepManager:
    return run_stage("初始化", DepManager)


@click.command()
def bootstrap() -> None:
    """安装 vcpkg（已安装则跳过）"""
    dm = _manager()
    run_stage("vcpkg 安装", dm.bootstrap)
    click.echo(f"vcpkg: {dm.target.executable}")


@click.command()
def install() -> None:
    """安装 ffmpeg 及所需特性（已满足则跳过）"""
    dm = _manager()
    run_stage("依赖包安装", dm.install_packages)
    click.echo(f"就绪: {dm.requirement.install_spec}")


@click.command()
@click.option("--force", is_flag=True, help="目标目录已存在时也重新解压")
def extract(force: bool) -> None:
    """从 vcpkg 下载缓存导出 ffmpeg 源码"""
    dm = _manager()
    path = run_stage("ffmpeg 源码导出", lambda: dm.extract_source(force=force))
    click.echo(f"ffmpeg 源码目录: {path}")


@click.command()
def status() -> None:
    """显示各阶段状态（只读）"""
    dm = _manager()
    for step in run_stage("状态查询", dm.status):
        mark = "✓" if step["satisfied"] else "✗"
        click.echo(f"  {mark} {step['step']:10s} {step['detail']}")

#!/usr/bin/env python3
"""
ConfigString - 连接字符串风格的配置解析工具

解析、规范化、比较 `key=value;...` 形式的配置字符串
"""

import json
import sys
from decimal import Decimal
from pathlib import Path
from uuid import UUID

# 添加项目根目录到 Python 路径
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

import click
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from src.config.manager import LoggingConfig, SettingsManager
from src.core.config_string import ConfigString
from src.core.errors import ConfigStringError
from src.parser.serializer import format_value

console = Console()

VALUE_TYPES = {
    'str': str,
    'int': int,
    'float': float,
    'bool': bool,
    'decimal': Decimal,
    'uuid': UUID,
}


@click.group()
@click.version_option(version="1.0.0", prog_name="ConfigString 配置字符串工具")
@click.option('--config-dir', '-c', default='config', help='配置文件目录')
@click.option('--set', 'overrides', default=None, help='以配置字符串形式覆盖配置，如 "log level=DEBUG"')
@click.pass_context
def cli(ctx, config_dir: str, overrides: str):
    """🔧 ConfigString - 连接字符串风格的配置解析工具"""
    try:
        settings = SettingsManager(config_dir=config_dir)
        settings.apply_overrides(overrides)
    except ConfigStringError as e:
        console.print(f"[bold red]❌ 配置覆盖项无效: {e}[/bold red]")
        sys.exit(1)

    setup_logging(settings.logging)
    ctx.obj = settings


@cli.command()
@click.argument('text')
def normalize(text: str):
    """📝 输出规范化的配置字符串"""
    parsed = _parse_or_exit(text)
    click.echo(parsed.config_string)


@cli.command()
@click.argument('text')
@click.option('--format', '-f', 'output_format', type=click.Choice(['table', 'json', 'text']),
              default=None, help='输出格式')
@click.pass_obj
def show(settings: SettingsManager, text: str, output_format: str):
    """📋 显示配置项"""
    parsed = _parse_or_exit(text)
    output_format = output_format or settings.output.format

    entries = [(key, format_value(value)) for key, value in parsed]
    if settings.output.sort_keys:
        entries.sort()

    if output_format == 'json':
        click.echo(json.dumps(dict(entries), ensure_ascii=False, indent=2))
    elif output_format == 'text':
        for key, value in entries:
            click.echo(f"{key}={value}")
    else:
        display_entries(entries, settings.output.title)


@cli.command()
@click.argument('text')
@click.argument('key')
@click.option('--type', '-t', 'value_type', type=click.Choice(list(VALUE_TYPES)), default='str',
              help='目标类型')
@click.option('--optional', is_flag=True, help='键未定义时输出零值而不是报错')
def get(text: str, key: str, value_type: str, optional: bool):
    """🔍 读取指定键的值"""
    parsed = _parse_or_exit(text)
    try:
        value = parsed.get_as(key, VALUE_TYPES[value_type], required=not optional)
    except ConfigStringError as e:
        logger.error(f"读取失败: {e}")
        console.print(f"[bold red]❌ 读取失败: {e}[/bold red]")
        sys.exit(1)
    click.echo(format_value(value))


@cli.command()
@click.argument('text')
@click.option('--key', '-k', 'keys', multiple=True, required=True, help='必需的键（可多次指定）')
def check(text: str, keys):
    """✅ 检查必需的键是否均已定义"""
    parsed = _parse_or_exit(text)
    try:
        parsed.assert_required_keys(keys)
    except ConfigStringError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        sys.exit(1)
    console.print("[bold green]✅ 所有必需的键均已定义[/bold green]")


@cli.command()
@click.argument('text')
@click.argument('other')
def equiv(text: str, other: str):
    """⚖️ 比较两个配置字符串是否等价"""
    parsed = _parse_or_exit(text)
    if parsed.equivalent_to(other):
        console.print("[bold green]✅ 配置字符串等价[/bold green]")
    else:
        console.print("[bold yellow]⚠️ 配置字符串不等价[/bold yellow]")
        sys.exit(1)


def _parse_or_exit(text: str) -> ConfigString:
    """解析配置字符串，格式错误时退出"""
    try:
        return ConfigString(text)
    except ConfigStringError as e:
        logger.error(f"配置字符串解析失败: {e}")
        console.print(f"[bold red]❌ 配置字符串解析失败: {e}[/bold red]")
        sys.exit(1)


def setup_logging(config: LoggingConfig):
    """设置日志系统"""
    # 移除默认处理器
    logger.remove()

    # 添加控制台输出（简化格式）
    if config.console_enabled:
        logger.add(
            sys.stderr,
            level=config.level,
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
            colorize=config.console_colored
        )

    # 添加文件输出（详细格式）
    if config.file_enabled:
        Path(config.file_path).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            config.file_path,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation=config.rotation,
            retention=config.retention,
            compression="zip"
        )


def display_entries(entries, title: str):
    """显示配置项表格"""
    table = Table(title=f"📋 {title}")

    table.add_column("键", style="cyan")
    table.add_column("值", style="magenta")

    for key, value in entries:
        table.add_row(escape(key), escape(value))

    console.print(table)


if __name__ == "__main__":
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️ 用户中断操作[/yellow]")
        sys.exit(0)
    except Exception as e:
        logger.error(f"程序异常退出: {e}")
        console.print(f"[bold red]💥 程序异常退出: {e}[/bold red]")
        sys.exit(1)

"""
CLI 工具函数 — Rich 美化输出、日志配置、视图渲染。

提供 CLI 各子命令共用的实用函数，包括：
- Rich Console 美化输出
- 错误/成功信息统一格式
- 日志配置（RichHandler，输出到 stderr）
- 视图表格渲染
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from typing import NoReturn

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from context_reducer.errors import ContextReducerError
from context_reducer.models.message import Message, ToolCallContent, ToolResultContent

# 全局 Console 实例
_console: Console | None = None

PREVIEW_LENGTH = 60


def create_console() -> Console:
    """
    创建或获取全局 Rich Console 实例。

    # [DX Decision] 全局单例 Console，确保所有 CLI 输出格式一致。
    """
    global _console
    if _console is None:
        _console = Console()
    return _console


def print_error(message: str, exit_code: int = 1) -> NoReturn:
    """
    打印错误信息并退出程序。

    参数:
        message: 错误信息
        exit_code: 退出码（默认 1）
    """
    console = create_console()
    # [DX Decision] 使用 X 而非 ✗，避免 Windows 终端编码问题
    console.print(f"[bold red]X 错误：[/bold red]{message}")
    sys.exit(exit_code)


def print_success(message: str) -> None:
    console = create_console()
    console.print(f"[bold green]OK[/bold green] {message}")


def print_warning(message: str) -> None:
    console = create_console()
    console.print(f"[bold yellow]![/bold yellow] {message}")


def handle_reducer_error(error: ContextReducerError) -> NoReturn:
    """
    统一处理 ContextReducerError 异常。

    # [DX Decision] 三段式错误信息：What / Why / How
    # 直接显示 full_message，无需重新格式化
    """
    console = create_console()
    console.print("\n[bold red]X 错误[/bold red]\n")
    console.print(error.full_message, markup=False)
    sys.exit(1)


def setup_logging(level: str = "INFO") -> None:
    """
    配置根 logger。

    日志写到 stderr，终端上的视图和表格只走 stdout。
    库代码本身从不配置 handler，只有 CLI 入口调用本函数。
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    logging.getLogger("context_reducer").setLevel(level)


def preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    """把多行文本压成一行并截断，用于表格展示。"""
    flat = " ".join(text.split())
    if len(flat) <= length:
        return flat
    return flat[: length - 3] + "..."


def describe_contents(message: Message) -> str:
    """概括一条消息的内容项：文本、工具调用名、工具结果预览。"""
    parts: list[str] = []
    for item in message.contents:
        if isinstance(item, ToolCallContent):
            parts.append(f"call {item.name} [{item.call_id}]")
        elif isinstance(item, ToolResultContent):
            parts.append(f"result [{item.call_id}] {preview(item.payload)}")
        else:
            parts.append(preview(item.text))
    return " | ".join(parts)


def create_view_table(view: Sequence[Message], title: str = "视图") -> Table:
    """
    创建视图消息表格。

    参数:
        view: 视图消息列表
        title: 表格标题

    返回:
        Rich Table 对象
    """
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("#", justify="right", style="dim")
    table.add_column("角色", style="green", width=10)
    table.add_column("内容", style="white", overflow="fold")

    for index, message in enumerate(view):
        # 内容里常见 "[...]"，用 Text 避免被当作 Rich 标记解析
        table.add_row(str(index), message.role.value, Text(describe_contents(message)))

    return table

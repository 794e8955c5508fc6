"""
validate 命令 — 校验策略文件或对话记录文件。

- 默认按 YAML 策略文件校验（Pydantic Schema，错误精确到字段）
- 使用 --transcript 时按对话记录文件校验（JSON 或 YAML）
"""

from __future__ import annotations

import sys
from pathlib import Path

from rich.panel import Panel
from rich.text import Text

from context_reducer.cli.utils import create_console, print_error, print_success, print_warning
from context_reducer.config.loader import check_policy, load_policy, validate_policy_file
from context_reducer.errors import TranscriptLoadError
from context_reducer.transcript import load_transcript

console = create_console()


def validate_command(path: str, transcript: bool = False) -> None:
    """
    校验文件，失败时以退出码 1 结束。

    使用 --transcript 校验对话记录文件，否则按策略文件校验。
    适合放在 CI 流程中。
    """
    if not Path(path).exists():
        print_error(f"文件不存在：{path}")

    if transcript:
        _validate_transcript(path)
    else:
        _validate_policy(path)


def _validate_policy(path: str) -> None:
    console.print(f"[bold]校验策略文件：[/bold] {path}\n")

    errors = validate_policy_file(path)
    if errors:
        _print_failures(errors)
        sys.exit(1)

    # 结构合法，再给出语义提示（不影响退出码）
    for hint in check_policy(load_policy(path)):
        print_warning(hint)

    print_success(f"{path} 校验通过")


def _validate_transcript(path: str) -> None:
    console.print(f"[bold]校验对话记录：[/bold] {path}\n")

    try:
        messages = load_transcript(path)
    except TranscriptLoadError as e:
        _print_failures([e.full_message])
        sys.exit(1)

    tool_messages = sum(1 for m in messages if m.has_tool_content)
    print_success(f"{path} 校验通过（{len(messages)} 条消息，其中 {tool_messages} 条含工具内容）")


def _print_failures(errors: list[str]) -> None:
    body = Text()
    for index, err in enumerate(errors):
        if index:
            body.append("\n")
        body.append("X ", style="red")
        body.append(err)
    console.print(Panel(
        body,
        title=f"[bold red]校验失败（{len(errors)} 个错误）[/bold red]",
        border_style="red",
    ))

"""
reduce 命令 — 对一份对话记录应用一个策略并输出视图。

配置优先级：内置默认 → 策略文件 → 命令行参数。
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from rich.panel import Panel

from context_reducer.cli.utils import (
    create_console,
    create_view_table,
    handle_reducer_error,
    print_error,
    print_success,
    print_warning,
    setup_logging,
)
from context_reducer.config.loader import check_policy, load_policy
from context_reducer.errors import ContextReducerError
from context_reducer.observability.events import DiagnosticSink, EventKind, FanoutSink, LoggingSink
from context_reducer.observability.metrics import MetricsCollector
from context_reducer.reducers.registry import create_reducer
from context_reducer.transcript import dump_messages, load_transcript

console = create_console()


def reduce_command(
    transcript: str,
    strategy: str | None = None,
    policy: str | None = None,
    target_count: int | None = None,
    max_messages: int | None = None,
    recent_count: int | None = None,
    preserve: list[str] | None = None,
    format: str = "rich",
    output: str | None = None,
    verbose: bool = False,
) -> None:
    """
    加载对话记录，按策略计算视图并输出。

    输出格式：
    - rich: 视图表格 + 摘要面板（默认）
    - json: 视图消息与事件计数（可用 --output 写入文件）
    """
    if format not in ("rich", "json"):
        print_error(f"未知输出格式 '{format}'，可选：rich / json")

    overrides = _build_overrides(strategy, target_count, max_messages, recent_count, preserve)

    try:
        policy_config = load_policy(path=policy, overrides=overrides)
        if format == "rich":
            setup_logging("DEBUG" if verbose else policy_config.observability.log_level)
            for hint in check_policy(policy_config):
                print_warning(hint)

        metrics = MetricsCollector(max_points=policy_config.observability.max_metric_points)
        sink: DiagnosticSink
        if format == "json":
            # JSON 输出时事件只进指标，不写日志
            sink = metrics
        elif policy_config.observability.metrics_enabled:
            sink = FanoutSink(LoggingSink(), metrics)
        else:
            sink = LoggingSink()

        reducer = create_reducer(policy_config.reducer, sink=sink)
        history = load_transcript(transcript)
        view = reducer.reduce(history)
    except ContextReducerError as e:
        handle_reducer_error(e)

    if format == "json":
        _output_json(
            {
                "strategy": reducer.name,
                "input_count": len(history),
                "view_count": len(view),
                "events": metrics.export()["events"],
                "view": dump_messages(view),
            },
            output,
        )
        return

    console.print(create_view_table(view, title=f"视图（{reducer.name}）"))
    summary_lines = [
        f"[bold]策略:[/bold] {reducer.name}",
        f"[bold]输入消息:[/bold] {len(history)}",
        f"[bold]视图消息:[/bold] {len(view)}",
    ]
    if policy_config.observability.metrics_enabled:
        summary_lines.append(f"[bold]压缩结果:[/bold] {metrics.event_count(EventKind.CONDENSED)}")
        summary_lines.append(f"[bold]保留结果:[/bold] {metrics.event_count(EventKind.PRESERVED)}")
    console.print(Panel("\n".join(summary_lines), title="摘要", border_style="blue", expand=False))

    if output:
        _output_json({"view": dump_messages(view)}, output)


def _build_overrides(
    strategy: str | None,
    target_count: int | None,
    max_messages: int | None,
    recent_count: int | None,
    preserve: list[str] | None,
) -> dict[str, Any]:
    """把命令行参数转换为策略配置覆盖项（未指定的参数不覆盖）。"""
    reducer: dict[str, Any] = {}
    if strategy is not None:
        reducer["strategy"] = strategy
    if target_count is not None:
        reducer["target_count"] = target_count
    if max_messages is not None:
        reducer["max_messages"] = max_messages
    if recent_count is not None:
        reducer["recent_message_count"] = recent_count
    if preserve:
        reducer["preserved_tool_names"] = list(preserve)
    return {"reducer": reducer} if reducer else {}


def _output_json(data: dict[str, Any], output_path: str | None) -> None:
    json_text = json.dumps(data, ensure_ascii=False, indent=2)
    if output_path:
        Path(output_path).write_text(json_text, encoding="utf-8")
        print_success(f"视图已写入 {output_path}")
    else:
        console.print(json_text, markup=False, highlight=False, soft_wrap=True)

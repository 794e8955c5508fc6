"""
compare 命令 — 在同一份对话记录上依次运行多个策略并对比结果。

不调用任何模型：Token 数在本地估算，只用于横向比较各策略视图的大小。
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from rich.table import Table

from context_reducer.cli.utils import create_console, handle_reducer_error
from context_reducer.config.defaults import COMPARISON_LINEUP
from context_reducer.config.schema import ReducerConfig
from context_reducer.errors import ContextReducerError
from context_reducer.models.message import Message
from context_reducer.observability.events import EventKind
from context_reducer.observability.metrics import MetricsCollector
from context_reducer.reducers.registry import create_reducer, resolve_strategy
from context_reducer.tokenizer import TokenCounter, get_tokenizer
from context_reducer.transcript import load_transcript

console = create_console()


@dataclass
class ComparisonRow:
    """单个策略的对比结果。"""

    strategy: str
    parameters: str
    input_count: int
    view_count: int
    condensed_count: int
    preserved_count: int
    view_tokens: int


def run_comparison(
    history: Sequence[Message],
    configs: Sequence[ReducerConfig],
    counter: TokenCounter,
) -> list[ComparisonRow]:
    """
    对每个配置创建独立的 Reducer 并计算视图。

    每个 Reducer 使用自己的 MetricsCollector，事件计数互不干扰。

    参数:
        history: 对话记录
        configs: 待对比的 Reducer 配置
        counter: Token 计数器

    返回:
        与 configs 一一对应的对比结果
    """
    rows: list[ComparisonRow] = []
    for config in configs:
        metrics = MetricsCollector()
        reducer = create_reducer(config, sink=metrics)
        view = reducer.reduce(history)
        rows.append(
            ComparisonRow(
                strategy=reducer.name,
                parameters=_describe_parameters(config),
                input_count=len(history),
                view_count=len(view),
                condensed_count=metrics.event_count(EventKind.CONDENSED),
                preserved_count=metrics.event_count(EventKind.PRESERVED),
                view_tokens=counter.count_messages(view),
            )
        )
    return rows


def compare_command(
    transcript: str,
    strategies: list[str] | None = None,
    tokenizer: str = "o200k_base",
) -> None:
    """加载对话记录，按策略组合逐个缩减，输出对比表格。"""
    try:
        configs = _resolve_configs(strategies)
        history = load_transcript(transcript)
        counter = get_tokenizer(tokenizer)
        rows = run_comparison(history, configs, counter)
        input_tokens = counter.count_messages(history)
    except ContextReducerError as e:
        handle_reducer_error(e)

    table = Table(
        title=f"策略对比（{len(history)} 条消息，约 {input_tokens:,} tokens，{counter.name}）",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("策略", style="green", no_wrap=True)
    table.add_column("参数", style="dim")
    table.add_column("视图消息", justify="right", style="bold")
    table.add_column("压缩结果", justify="right", style="yellow")
    table.add_column("保留结果", justify="right")
    table.add_column("视图 Token", justify="right", style="blue")

    for row in rows:
        table.add_row(
            row.strategy,
            row.parameters,
            str(row.view_count),
            str(row.condensed_count),
            str(row.preserved_count),
            f"{row.view_tokens:,}",
        )

    console.print(table)


def _resolve_configs(strategies: list[str] | None) -> list[ReducerConfig]:
    """未指定策略时使用内置对比组合；指定时每个策略使用默认参数。"""
    if not strategies:
        return [ReducerConfig(**entry) for entry in COMPARISON_LINEUP]
    return [ReducerConfig(strategy=resolve_strategy(name)) for name in strategies]


def _describe_parameters(config: ReducerConfig) -> str:
    params: dict[str, Any]
    if config.strategy in ("counting", "pair_preserving"):
        params = {"target": config.target_count}
    elif config.strategy == "content_aware":
        params = {"max": config.max_messages, "recent": config.recent_message_count}
    else:
        params = {}
    return ", ".join(f"{k}={v}" for k, v in params.items()) or "-"

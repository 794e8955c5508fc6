"""
Context Reducer CLI — 命令行工具入口。

提供 reduce / compare / strategies / validate / version 子命令。

用法::

    context-reducer --help
    context-reducer reduce transcript.yaml --strategy content --max-messages 20
    context-reducer compare transcript.yaml
    context-reducer strategies
    context-reducer validate context_reducer.yaml
"""

from __future__ import annotations

import typer

from context_reducer.cli.utils import create_console

# 创建主应用
app = typer.Typer(
    name="context-reducer",
    help="Context Reducer — 对话上下文缩减策略 CLI",
    add_completion=False,
    no_args_is_help=True,
)

console = create_console()


# ============================================================
# 子命令注册
# ============================================================

@app.command(name="reduce")
def reduce(
    transcript: str = typer.Argument(
        ...,
        help="对话记录文件路径（JSON 或 YAML）",
    ),
    strategy: str | None = typer.Option(
        None,
        "--strategy",
        "-s",
        help="策略名或别名（覆盖策略文件）",
    ),
    policy: str | None = typer.Option(
        None,
        "--policy",
        "-p",
        help="策略文件路径（默认自动搜索）",
    ),
    target_count: int | None = typer.Option(
        None,
        "--target-count",
        help="counting / pair_preserving 的目标保留条数",
    ),
    max_messages: int | None = typer.Option(
        None,
        "--max-messages",
        help="content_aware 的视图条数上限",
    ),
    recent_count: int | None = typer.Option(
        None,
        "--recent-count",
        help="content_aware 原样保留的最近消息数",
    ),
    preserve: list[str] | None = typer.Option(
        None,
        "--preserve",
        help="结果永不压缩的工具名（可重复）",
    ),
    format: str = typer.Option(
        "rich",
        "--format",
        "-f",
        help="输出格式：rich（表格）/ json（视图消息）",
    ),
    output: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="把视图以 JSON 写入文件",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="详细输出（显示调试日志）",
    ),
) -> None:
    """对一份对话记录应用一个策略并输出视图。"""
    from context_reducer.cli.cmd_reduce import reduce_command
    reduce_command(
        transcript=transcript,
        strategy=strategy,
        policy=policy,
        target_count=target_count,
        max_messages=max_messages,
        recent_count=recent_count,
        preserve=preserve,
        format=format,
        output=output,
        verbose=verbose,
    )


@app.command(name="compare")
def compare(
    transcript: str = typer.Argument(
        ...,
        help="对话记录文件路径（JSON 或 YAML）",
    ),
    strategies: list[str] | None = typer.Option(
        None,
        "--strategy",
        "-s",
        help="参与对比的策略（可重复，默认使用内置对比组合）",
    ),
    tokenizer: str = typer.Option(
        "o200k_base",
        "--tokenizer",
        "-t",
        help="Token 估算方式：char 或 tiktoken 编码名",
    ),
) -> None:
    """在同一份对话记录上运行多个策略并对比视图大小。"""
    from context_reducer.cli.cmd_compare import compare_command
    compare_command(transcript=transcript, strategies=strategies, tokenizer=tokenizer)


@app.command(name="strategies")
def strategies() -> None:
    """列出所有内置策略、别名和说明。"""
    from rich.table import Table

    from context_reducer.config.defaults import STRATEGY_ALIASES, STRATEGY_DESCRIPTIONS

    table = Table(title="内置策略", show_header=True, header_style="bold cyan")
    table.add_column("策略", style="green", no_wrap=True)
    table.add_column("别名", style="dim")
    table.add_column("说明")
    for name, aliases in STRATEGY_ALIASES.items():
        table.add_row(name, ", ".join(aliases), STRATEGY_DESCRIPTIONS.get(name, ""))
    console.print(table)


@app.command(name="validate")
def validate(
    path: str = typer.Argument(
        "context_reducer.yaml",
        help="策略文件或对话记录文件路径",
    ),
    transcript: bool = typer.Option(
        False,
        "--transcript",
        help="按对话记录文件校验",
    ),
) -> None:
    """校验策略文件或对话记录文件。"""
    from context_reducer.cli.cmd_validate import validate_command
    validate_command(path=path, transcript=transcript)


@app.command(name="version")
def version() -> None:
    """显示版本信息。"""
    from context_reducer import __version__
    console.print(f"Context Reducer v{__version__}")


# ============================================================
# CLI 入口点
# ============================================================

def main() -> None:
    """CLI 入口点。"""
    app()


if __name__ == "__main__":
    main()

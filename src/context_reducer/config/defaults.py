"""
默认配置与策略名称表。

# [DX Decision] 策略名称支持别名且不区分大小写，
# 命令行里敲 "content"、"ContentAware" 或 "content_aware" 都能解析到同一个策略。
"""

from __future__ import annotations

from typing import Any

DEFAULT_STRATEGY = "content_aware"
DEFAULT_TARGET_COUNT = 10
DEFAULT_MAX_MESSAGES = 40
DEFAULT_RECENT_MESSAGE_COUNT = 10

DEFAULT_PRESERVED_TOOL_NAMES: frozenset[str] = frozenset({"list_tables", "describe_table"})
"""schema 发现类工具：结果稳定、体积小、可反复复用"""

# 规范名称 → 别名
STRATEGY_ALIASES: dict[str, tuple[str, ...]] = {
    "passthrough": ("dummy", "none"),
    "counting": ("messagecounting", "message_counting"),
    "pair_preserving": ("toolpreserving", "tool_preserving", "tool"),
    "content_aware": ("contentaware", "content"),
}

STRATEGY_DESCRIPTIONS: dict[str, str] = {
    "passthrough": "不缩减，保留全部消息",
    "counting": "保留 system + 最近 N 条纯文本消息，丢弃全部工具消息",
    "pair_preserving": "保留最近 N 条消息，安全截断保证工具调用/结果成对",
    "content_aware": "压缩历史数据结果、保留 schema 结果，超过上限再安全截断",
}

# compare 命令默认对比的策略组合
COMPARISON_LINEUP: list[dict[str, Any]] = [
    {"strategy": "passthrough"},
    {"strategy": "counting", "target_count": 5},
    {"strategy": "pair_preserving", "target_count": 10},
    {"strategy": "content_aware", "max_messages": 20, "recent_message_count": 5},
]

# 默认策略文件搜索路径
POLICY_SEARCH_PATHS: tuple[str, ...] = (
    "context_reducer.yaml",
    "context_reducer.yml",
    ".context_reducer/policy.yaml",
)


def resolve_strategy_name(name: str) -> str | None:
    """
    把策略名或别名解析为规范名称（不区分大小写，忽略 '-' 与 '_' 的差异）。

    返回:
        规范名称；无法识别时返回 None
    """
    key = name.strip().lower().replace("-", "_")
    for canonical, aliases in STRATEGY_ALIASES.items():
        if key == canonical or key in aliases:
            return canonical
    # "ContentAware" / "PairPreserving" 之类去掉分隔符后再比一次
    compact = key.replace("_", "")
    for canonical, aliases in STRATEGY_ALIASES.items():
        if compact == canonical.replace("_", "") or compact in aliases:
            return canonical
    return None


def list_strategies() -> list[str]:
    """返回所有规范策略名称。"""
    return list(STRATEGY_ALIASES.keys())

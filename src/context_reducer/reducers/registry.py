"""
策略注册表 — 根据配置创建 Reducer。

# [DX Decision] 调用方只需要给出策略名（或别名）和参数，
# 不需要知道具体的 Reducer 类。名称解析规则见 config/defaults.py。
"""

from __future__ import annotations

import logging

from context_reducer.config.defaults import list_strategies, resolve_strategy_name
from context_reducer.config.schema import ReducerConfig
from context_reducer.errors import ConfigValidationError
from context_reducer.observability.events import DiagnosticSink
from context_reducer.reducers.base import ChatReducer
from context_reducer.reducers.content_aware import ContentAwareReducer
from context_reducer.reducers.counting import MessageCountingReducer
from context_reducer.reducers.pair_preserving import ToolPairPreservingReducer
from context_reducer.reducers.passthrough import PassthroughReducer

logger = logging.getLogger(__name__)


def resolve_strategy(name: str) -> str:
    """
    把策略名或别名解析为规范名称。

    异常:
        ConfigValidationError: 名称无法识别
    """
    canonical = resolve_strategy_name(name)
    if canonical is None:
        raise ConfigValidationError(
            what=f"未知策略 '{name}'。",
            why="该名称既不是内置策略名，也不是已知别名。",
            how=f"可用策略：{', '.join(list_strategies())}。"
                "使用 'context-reducer strategies' 查看全部别名。",
            field_path="reducer.strategy",
        )
    return canonical


def create_reducer(
    config: ReducerConfig | None = None,
    sink: DiagnosticSink | None = None,
) -> ChatReducer:
    """
    根据配置创建 Reducer。

    参数:
        config: Reducer 配置，None 时使用默认配置（content_aware）
        sink: 诊断接收器，None 时各 Reducer 使用 LoggingSink

    返回:
        实现 ChatReducer 协议的 Reducer 实例

    异常:
        ConfigValidationError: 策略名无法识别或参数非法

    示例::

        reducer = create_reducer(ReducerConfig(strategy="tool", target_count=6))
    """
    config = config or ReducerConfig()
    strategy = resolve_strategy(config.strategy)

    reducer: ChatReducer
    if strategy == "passthrough":
        reducer = PassthroughReducer()
    elif strategy == "counting":
        reducer = MessageCountingReducer(target_count=config.target_count, sink=sink)
    elif strategy == "pair_preserving":
        reducer = ToolPairPreservingReducer(target_count=config.target_count, sink=sink)
    else:
        reducer = ContentAwareReducer(
            max_messages=config.max_messages,
            recent_message_count=config.recent_message_count,
            preserved_tool_names=config.preserved_tool_names,
            sink=sink,
        )

    logger.debug("已创建 Reducer：%s（%s）", reducer.name, type(reducer).__name__)
    return reducer

"""
缩减模块 — 可插拔的上下文缩减策略。

把无界的对话记录投影为有界的视图，供上下文窗口有限的模型使用：
- 直通（Passthrough）：基线，不缩减
- 计数（Counting）：保留最近 N 条纯文本消息，丢弃工具消息
- 成对保留（Pair-Preserving）：按条数截断，但工具调用/结果不拆散
- 内容感知（Content-Aware）：压缩历史数据结果，保留 schema 结果，再安全截断

# [DX Decision] 暴露三个层次的 API：
# 1. 高级 API：create_reducer（按配置创建）
# 2. 中级 API：各种 Reducer（按需使用）
# 3. 低级 API：find_safe_cut_index / condense_tool_result（自定义实现）
"""

from context_reducer.reducers.base import ChatReducer
from context_reducer.reducers.condenser import condense_tool_result
from context_reducer.reducers.content_aware import ContentAwareReducer
from context_reducer.reducers.counting import MessageCountingReducer
from context_reducer.reducers.pair_preserving import ToolPairPreservingReducer
from context_reducer.reducers.passthrough import PassthroughReducer
from context_reducer.reducers.registry import create_reducer, resolve_strategy
from context_reducer.reducers.safe_cut import (
    find_safe_cut_index,
    find_tool_call_index,
    has_tool_result,
)

__all__ = [
    # 协议
    "ChatReducer",
    # Reducer 实现
    "PassthroughReducer",
    "MessageCountingReducer",
    "ToolPairPreservingReducer",
    "ContentAwareReducer",
    # 注册表
    "create_reducer",
    "resolve_strategy",
    # 基础算法
    "condense_tool_result",
    "find_safe_cut_index",
    "find_tool_call_index",
    "has_tool_result",
]

"""
工具调用成对保留 — 按条数截断，但不拆散调用和结果。

与 MessageCountingReducer 不同，工具调用/结果消息只要落在截断点之后
就会被保留。截断点通过 find_safe_cut_index() 调整，保证视图不以
孤立的工具结果开头；因此视图可能比 target_count 多出几条。

被截掉的工具消息意味着模型失去了这部分工具记忆，
此时会额外发出一条 WARNING 级别的诊断事件。
"""

from __future__ import annotations

from collections.abc import Sequence

from context_reducer.models.message import Message
from context_reducer.observability.events import (
    DiagnosticSink,
    EventKind,
    EventLevel,
    LoggingSink,
    ReductionEvent,
)
from context_reducer.reducers.base import ensure_history, require_positive, safe_emit
from context_reducer.reducers.safe_cut import find_safe_cut_index


class ToolPairPreservingReducer:
    """
    成对保留 Reducer。

    基本用法::

        reducer = ToolPairPreservingReducer(target_count=10)
        view = reducer.reduce(history)

    参数:
        target_count: 目标保留条数（必须 > 0）
        sink: 诊断接收器，默认写入 logging
    """

    def __init__(self, target_count: int, sink: DiagnosticSink | None = None) -> None:
        self._target_count = require_positive(target_count, "target_count", type(self).__name__)
        self._sink: DiagnosticSink = sink or LoggingSink()

    @property
    def name(self) -> str:
        return "pair_preserving"

    @property
    def target_count(self) -> int:
        return self._target_count

    def reduce(self, history: Sequence[Message]) -> list[Message]:
        messages = ensure_history(history, type(self).__name__)

        if len(messages) <= self._target_count:
            return messages

        proposed_cut_index = len(messages) - self._target_count
        cut_index = find_safe_cut_index(messages, proposed_cut_index)

        dropped = messages[:cut_index]
        dropped_calls = sum(1 for m in dropped if m.has_tool_call)
        dropped_results = sum(1 for m in dropped if m.has_tool_result)

        safe_emit(
            self._sink,
            ReductionEvent(
                reducer=self.name,
                kind=EventKind.REDUCED,
                message=(
                    f"对话记录已缩减：{len(messages)} 条 → 保留 {len(messages) - cut_index} 条"
                    f"（目标 {self._target_count}）。丢弃 {cut_index} 条"
                    f"（截断点 {cut_index}，建议截断点 {proposed_cut_index}）。"
                ),
                data={
                    "total_count": len(messages),
                    "retained_count": len(messages) - cut_index,
                    "dropped_count": cut_index,
                    "cut_index": cut_index,
                    "proposed_cut_index": proposed_cut_index,
                    "target_count": self._target_count,
                },
            ),
        )

        if dropped_calls > 0 or dropped_results > 0:
            safe_emit(
                self._sink,
                ReductionEvent(
                    reducer=self.name,
                    kind=EventKind.TOOL_CONTEXT_DROPPED,
                    level=EventLevel.WARNING,
                    message=(
                        f"工具消息被移出上下文：{dropped_calls} 条工具调用消息，"
                        f"{dropped_results} 条工具结果消息。这些交互的工具上下文已丢失。"
                    ),
                    data={
                        "dropped_tool_calls": dropped_calls,
                        "dropped_tool_results": dropped_results,
                    },
                ),
            )

        return messages[cut_index:]

"""
按条数缩减 — 保留系统提示和最近 N 条纯文本消息。

策略:
- 第一条 system 消息无条件保留（不计入 target_count）
- 在所有"非 system 且不含工具内容"的消息中保留最近 target_count 条
- 任何携带工具调用或工具结果的消息一律丢弃
- 后续出现的 system 消息也会被丢弃

这是最便宜的策略，但模型会完全失去工具上下文：
它记得自己说过"查到了 5 个宇航员"，却看不到查询本身。
"""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence

from context_reducer.models.message import Message, Role
from context_reducer.observability.events import (
    DiagnosticSink,
    EventKind,
    LoggingSink,
    ReductionEvent,
)
from context_reducer.reducers.base import ensure_history, require_positive, safe_emit


class MessageCountingReducer:
    """
    消息计数 Reducer。

    基本用法::

        reducer = MessageCountingReducer(target_count=5)
        view = reducer.reduce(history)

    参数:
        target_count: 保留的非系统纯文本消息上限（必须 > 0）
        sink: 诊断接收器，默认写入 logging
    """

    def __init__(self, target_count: int, sink: DiagnosticSink | None = None) -> None:
        self._target_count = require_positive(target_count, "target_count", type(self).__name__)
        self._sink: DiagnosticSink = sink or LoggingSink()

    @property
    def name(self) -> str:
        return "counting"

    @property
    def target_count(self) -> int:
        return self._target_count

    def reduce(self, history: Sequence[Message]) -> list[Message]:
        messages = ensure_history(history, type(self).__name__)

        system_message: Message | None = None
        retained: deque[Message] = deque(maxlen=self._target_count)
        eligible_count = 0
        dropped_tool_count = 0
        dropped_system_count = 0

        for message in messages:
            if message.role == Role.SYSTEM:
                if system_message is None:
                    system_message = message
                else:
                    dropped_system_count += 1
            elif message.has_tool_content:
                dropped_tool_count += 1
            else:
                eligible_count += 1
                retained.append(message)

        result = ([system_message] if system_message is not None else []) + list(retained)

        dropped_by_limit = eligible_count - len(retained)
        total_dropped = dropped_by_limit + dropped_tool_count + dropped_system_count
        if total_dropped > 0:
            safe_emit(
                self._sink,
                ReductionEvent(
                    reducer=self.name,
                    kind=EventKind.REDUCED,
                    message=(
                        f"对话记录已缩减：{len(messages)} 条 → 保留 {len(result)} 条。"
                        f"超出上限 {self._target_count} 丢弃 {dropped_by_limit} 条，"
                        f"丢弃工具调用/结果消息 {dropped_tool_count} 条，"
                        f"丢弃多余 system 消息 {dropped_system_count} 条。"
                    ),
                    data={
                        "total_count": len(messages),
                        "retained_count": len(result),
                        "dropped_by_limit": dropped_by_limit,
                        "dropped_tool_messages": dropped_tool_count,
                        "dropped_system_messages": dropped_system_count,
                        "target_count": self._target_count,
                    },
                ),
            )

        return result

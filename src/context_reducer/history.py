"""
内存对话记录 — 持有完整 Transcript，并在每轮按需计算视图。

会话每轮调用一次 get_view()，把返回的视图（而不是 Transcript）发给模型。
视图永远不会写回 Transcript：下一轮 Reducer 看到的仍是完整、未压缩的历史。

用法::

    history = InMemoryChatHistory(reducer=ContentAwareReducer(max_messages=20))
    history.add(Message.from_text(Role.USER, "列出所有宇航员"))
    ...
    view = history.get_view()   # 发给模型
    len(history)                # 仍是完整条数
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

from context_reducer.models.message import Message
from context_reducer.reducers.base import ChatReducer
from context_reducer.reducers.passthrough import PassthroughReducer


class InMemoryChatHistory:
    """
    只追加的内存对话记录。

    参数:
        reducer: 计算视图所用的 Reducer，None 时使用 PassthroughReducer
        messages: 初始消息
    """

    def __init__(
        self,
        reducer: ChatReducer | None = None,
        messages: Iterable[Message] = (),
    ) -> None:
        self._reducer: ChatReducer = reducer or PassthroughReducer()
        self._messages: list[Message] = list(messages)
        self._lock = threading.Lock()

    @property
    def reducer(self) -> ChatReducer:
        return self._reducer

    @property
    def messages(self) -> tuple[Message, ...]:
        """完整 Transcript 的快照。"""
        with self._lock:
            return tuple(self._messages)

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def add(self, message: Message) -> None:
        """追加一条消息。"""
        with self._lock:
            self._messages.append(message)

    def extend(self, messages: Iterable[Message]) -> None:
        """按顺序追加多条消息。"""
        with self._lock:
            self._messages.extend(messages)

    def get_view(self) -> list[Message]:
        """对当前 Transcript 快照运行 Reducer，返回本轮要发给模型的视图。"""
        return self._reducer.reduce(self.messages)

    def clear(self) -> None:
        """清空对话记录（开始新会话）。"""
        with self._lock:
            self._messages.clear()

"""
直通 Reducer — 不做任何缩减。

用作正确性基线，也用于在不拆除集成点的情况下关闭缩减。
"""

from __future__ import annotations

from collections.abc import Sequence

from context_reducer.models.message import Message
from context_reducer.reducers.base import ensure_history


class PassthroughReducer:
    """原样返回全部消息（同一批对象，同样顺序）。"""

    @property
    def name(self) -> str:
        return "passthrough"

    def reduce(self, history: Sequence[Message]) -> list[Message]:
        return ensure_history(history, type(self).__name__)

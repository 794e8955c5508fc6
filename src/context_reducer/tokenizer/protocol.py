"""
TokenCounter 协议定义。

Reducer 按消息条数工作，本身不关心 Token；Token 估算只用于比较
不同策略的视图大小（例如 ``context-reducer compare``），属于观测数据。

# [Design Decision] 使用 Protocol（结构化子类型）而非 ABC，
# 任何实现了 count() / count_messages() / name 的对象都可以作为 TokenCounter。
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from context_reducer.models.message import Message


@runtime_checkable
class TokenCounter(Protocol):
    """
    Token 计数器协议。

    内置实现：
    - TiktokenCounter：基于 tiktoken 编码
    - CharBasedCounter：按字符数粗估（零依赖）
    """

    def count(self, text: str) -> int:
        """计算文本的 Token 数量。"""
        ...

    def count_messages(self, messages: Sequence[Message]) -> int:
        """
        计算消息序列的 Token 总数（含每条消息的格式开销）。

        参数:
            messages: 消息序列

        返回:
            Token 总数
        """
        ...

    @property
    def name(self) -> str:
        """Tokenizer 名称标识。"""
        ...

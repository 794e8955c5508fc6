"""
基于 tiktoken 的 Token 计数器。

对 OpenAI 系列模型精确，对其他模型是合理的近似值。
消息格式开销参考 OpenAI cookbook：每条消息 4 个 Token，回复 3 个 Token。
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

import tiktoken

from context_reducer.tokenizer.fallback import MESSAGE_OVERHEAD, REPLY_OVERHEAD

if TYPE_CHECKING:
    from context_reducer.models.message import Message

logger = logging.getLogger(__name__)


class TiktokenCounter:
    """
    基于 tiktoken 的 Token 计数器。

    用法::

        counter = TiktokenCounter("o200k_base")
        counter.count_messages(view)

    参数:
        encoding_name: tiktoken 编码方案名称（cl100k_base / o200k_base 等）

    异常:
        ValueError: 编码方案名称未知
    """

    def __init__(self, encoding_name: str = "o200k_base") -> None:
        self._encoding_name = encoding_name
        self._encoding = tiktoken.get_encoding(encoding_name)
        logger.debug("已加载 tiktoken 编码方案：%s", encoding_name)

    def count(self, text: str) -> int:
        if not text:
            return 0
        # 工具结果可能原样回显 <|endoftext|> 之类的特殊 Token 字面量，按普通文本计数
        return len(self._encoding.encode(text, disallowed_special=()))

    def count_messages(self, messages: Sequence[Message]) -> int:
        total = 0
        for message in messages:
            rendered = message.to_prompt_dict()
            total += MESSAGE_OVERHEAD + self.count(rendered["role"]) + self.count(rendered["content"])
        return total + REPLY_OVERHEAD

    @property
    def name(self) -> str:
        return f"tiktoken:{self._encoding_name}"

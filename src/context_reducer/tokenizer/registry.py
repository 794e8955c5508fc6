"""
Tokenizer 选择。

``"char"`` 选择 CharBasedCounter；其他名称视为 tiktoken 编码方案。
tiktoken 编码首次使用时需要下载词表，离线或名称错误时回退到字符计数器。
"""

from __future__ import annotations

import logging

from context_reducer.tokenizer.fallback import CharBasedCounter
from context_reducer.tokenizer.protocol import TokenCounter
from context_reducer.tokenizer.tiktoken_counter import TiktokenCounter

logger = logging.getLogger(__name__)

CHAR_BASED = "char"

_counter_cache: dict[str, TokenCounter] = {}


def get_tokenizer(name: str = "o200k_base") -> TokenCounter:
    """
    获取 Token 计数器（按名称缓存）。

    参数:
        name: "char" 或 tiktoken 编码方案名称

    返回:
        TokenCounter 实例
    """
    if name in _counter_cache:
        return _counter_cache[name]

    counter: TokenCounter
    if name == CHAR_BASED:
        counter = CharBasedCounter()
    else:
        try:
            counter = TiktokenCounter(name)
        except Exception as e:
            logger.warning(
                "tiktoken 编码方案 '%s' 加载失败，回退到字符计数器（近似值）。错误：%s",
                name,
                e,
            )
            counter = CharBasedCounter()

    _counter_cache[name] = counter
    return counter


def clear_cache() -> None:
    """清除 Tokenizer 缓存。通常仅在测试中使用。"""
    _counter_cache.clear()

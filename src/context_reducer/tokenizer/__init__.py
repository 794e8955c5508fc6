"""
Token 估算模块 — 用于比较不同策略视图的大小。
"""

from context_reducer.tokenizer.fallback import CharBasedCounter
from context_reducer.tokenizer.protocol import TokenCounter
from context_reducer.tokenizer.registry import clear_cache, get_tokenizer
from context_reducer.tokenizer.tiktoken_counter import TiktokenCounter

__all__ = [
    "CharBasedCounter",
    "TiktokenCounter",
    "TokenCounter",
    "clear_cache",
    "get_tokenizer",
]

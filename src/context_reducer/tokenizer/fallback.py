"""
基于字符数的 Token 粗估计数器。

tiktoken 编码不可用（例如离线环境首次加载失败）或不需要精确计数时使用。
英文按约 4 字符 / Token 估算，中日韩文字密度越高比例越低。
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from context_reducer.models.message import Message

# 中日韩统一表意文字及全角标点
_CJK_PATTERN = re.compile(r"[一-鿿㐀-䶿豈-﫿　-〿＀-￯]")

MESSAGE_OVERHEAD = 4
REPLY_OVERHEAD = 3


class CharBasedCounter:
    """
    基于字符数的 Token 粗估计数器。

    用法::

        counter = CharBasedCounter()
        counter.count("Hello, world!")  # 约 3 tokens

        counter = CharBasedCounter(chars_per_token=2.0)  # 固定比例

    参数:
        chars_per_token: 每个 Token 对应的字符数，None 时按内容自动估算
    """

    def __init__(self, chars_per_token: float | None = None) -> None:
        self._fixed_ratio = chars_per_token

    def count(self, text: str) -> int:
        if not text:
            return 0
        return max(1, int(len(text) / self._ratio(text)))

    def count_messages(self, messages: Sequence[Message]) -> int:
        total = 0
        for message in messages:
            rendered = message.to_prompt_dict()
            total += MESSAGE_OVERHEAD + self.count(rendered["role"]) + self.count(rendered["content"])
        return total + REPLY_OVERHEAD

    @property
    def name(self) -> str:
        if self._fixed_ratio is not None:
            return f"char_based:{self._fixed_ratio}"
        return "char_based:auto"

    def _ratio(self, text: str) -> float:
        if self._fixed_ratio is not None:
            return self._fixed_ratio
        cjk_ratio = len(_CJK_PATTERN.findall(text)) / len(text)
        # 纯英文 ≈ 4.0，纯中文 ≈ 1.5，混合按比例插值
        return 4.0 - (cjk_ratio * 2.5)

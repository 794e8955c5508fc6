"""
Context Reducer 结构化异常体系。

每一条用户可见的错误都是产品界面的一部分。
所有异常遵循"三段式"规范：What / Why / How to fix。
"""

from context_reducer.errors.exceptions import (
    ConfigValidationError,
    ContextReducerError,
    FileLoadError,
    PolicyLoadError,
    TranscriptLoadError,
)

__all__ = [
    "ConfigValidationError",
    "ContextReducerError",
    "FileLoadError",
    "PolicyLoadError",
    "TranscriptLoadError",
]

"""
Context Reducer 数据模型。
"""

from context_reducer.models.message import (
    ContentItem,
    Message,
    Role,
    TextContent,
    ToolCallContent,
    ToolResultContent,
)

__all__ = [
    "ContentItem",
    "Message",
    "Role",
    "TextContent",
    "ToolCallContent",
    "ToolResultContent",
]

"""
Context Reducer — 可插拔的对话上下文缩减策略。

长时间运行的工具调用型 Agent 会不断积累对话记录，而模型的上下文窗口有限。
Context Reducer 在每一轮把完整的对话记录（Transcript）投影为一个有界的
视图（View）发给模型，原始记录保持不变。

快速上手::

    from context_reducer import ContentAwareReducer, InMemoryChatHistory, Message, Role

    history = InMemoryChatHistory(
        reducer=ContentAwareReducer(max_messages=20, recent_message_count=5),
    )
    history.add(Message.from_text(Role.SYSTEM, "你是一个数据助手。"))
    history.add(Message.from_text(Role.USER, "列出所有宇航员"))
    view = history.get_view()  # → 发给模型

按配置创建::

    from context_reducer import ReducerConfig, create_reducer

    reducer = create_reducer(ReducerConfig(strategy="tool", target_count=10))
"""

from context_reducer.config import (
    ObservabilityConfig,
    PolicyConfig,
    ReducerConfig,
    load_policy,
)
from context_reducer.errors import (
    ConfigValidationError,
    ContextReducerError,
    FileLoadError,
    PolicyLoadError,
    TranscriptLoadError,
)
from context_reducer.history import InMemoryChatHistory
from context_reducer.models import (
    ContentItem,
    Message,
    Role,
    TextContent,
    ToolCallContent,
    ToolResultContent,
)
from context_reducer.observability import (
    DiagnosticSink,
    EventKind,
    EventLevel,
    FanoutSink,
    LoggingSink,
    MetricsCollector,
    NullSink,
    ReductionEvent,
)
from context_reducer.reducers import (
    ChatReducer,
    ContentAwareReducer,
    MessageCountingReducer,
    PassthroughReducer,
    ToolPairPreservingReducer,
    condense_tool_result,
    create_reducer,
    find_safe_cut_index,
)
from context_reducer.transcript import dump_messages, load_transcript

__version__ = "0.1.0"

__all__ = [
    # 数据模型
    "ContentItem",
    "Message",
    "Role",
    "TextContent",
    "ToolCallContent",
    "ToolResultContent",
    # Reducer
    "ChatReducer",
    "ContentAwareReducer",
    "MessageCountingReducer",
    "PassthroughReducer",
    "ToolPairPreservingReducer",
    "condense_tool_result",
    "create_reducer",
    "find_safe_cut_index",
    # 对话记录
    "InMemoryChatHistory",
    "dump_messages",
    "load_transcript",
    # 配置
    "ObservabilityConfig",
    "PolicyConfig",
    "ReducerConfig",
    "load_policy",
    # 可观测性
    "DiagnosticSink",
    "EventKind",
    "EventLevel",
    "FanoutSink",
    "LoggingSink",
    "MetricsCollector",
    "NullSink",
    "ReductionEvent",
    # 异常
    "ConfigValidationError",
    "ContextReducerError",
    "FileLoadError",
    "PolicyLoadError",
    "TranscriptLoadError",
    # 版本
    "__version__",
]

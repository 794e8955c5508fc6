"""
可观测性模块 — 诊断事件、Sink 与内存指标。

Reducer 只依赖 DiagnosticSink 协议；具体写到日志、指标还是直接丢弃，
由调用方注入决定。
"""

from context_reducer.observability.events import (
    DiagnosticSink,
    EventKind,
    EventLevel,
    FanoutSink,
    LoggingSink,
    NullSink,
    ReductionEvent,
)
from context_reducer.observability.metrics import (
    MetricPoint,
    MetricsCollector,
    MetricsSummary,
)

__all__ = [
    "DiagnosticSink",
    "EventKind",
    "EventLevel",
    "FanoutSink",
    "LoggingSink",
    "MetricPoint",
    "MetricsCollector",
    "MetricsSummary",
    "NullSink",
    "ReductionEvent",
]

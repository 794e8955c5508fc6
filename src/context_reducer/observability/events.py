"""
诊断事件与诊断接收器（Sink）。

Reducer 不直接依赖任何日志或监控后端，而是向注入的 DiagnosticSink
发出 ReductionEvent。事件只用于观测，绝不影响 reduce() 的返回值。

内置实现：
- LoggingSink：写入标准库 logging（默认）
- NullSink：丢弃所有事件（基准测试、静默场景）
- FanoutSink：同时转发给多个 Sink
- MetricsCollector（见 metrics.py）：把事件中的计数写入内存指标

# [Design Decision] 使用 Protocol 而非抽象基类，
# 任何实现了 emit() 的对象都可以作为 Sink，测试中无需任何观测后端。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable


class EventLevel(str, Enum):
    """事件级别。"""

    INFO = "info"
    WARNING = "warning"


class EventKind(str, Enum):
    """事件类型。"""

    NO_OP = "no_op"
    """输入未超过阈值，原样返回"""

    REDUCED = "reduced"
    """发生了丢弃，携带保留/丢弃计数"""

    TOOL_CONTEXT_DROPPED = "tool_context_dropped"
    """工具调用/结果消息被丢弃（WARNING）"""

    SPLIT = "split"
    """内容感知策略：拆分为历史段 + 近期段"""

    PRESERVED = "preserved"
    """历史工具结果被完整保留"""

    CONDENSED = "condensed"
    """历史工具结果被压缩为一行摘要"""

    TRIMMED = "trimmed"
    """安全截断阶段丢弃了最旧的消息"""

    COMPLETED = "completed"
    """一次 reduce() 调用结束"""


@dataclass(frozen=True)
class ReductionEvent:
    """
    一条诊断事件。

    属性:
        reducer: 发出事件的 Reducer 名称
        kind: 事件类型
        message: 人类可读的描述
        level: 事件级别
        data: 结构化字段（计数为 int，标识为 str）
    """

    reducer: str
    kind: EventKind
    message: str
    level: EventLevel = EventLevel.INFO
    data: dict[str, int | str] = field(default_factory=dict)


@runtime_checkable
class DiagnosticSink(Protocol):
    """诊断接收器协议。"""

    def emit(self, event: ReductionEvent) -> None:
        """接收一条事件。"""
        ...


class LoggingSink:
    """
    将事件写入标准库 logging 的 Sink。

    用法::

        sink = LoggingSink()  # 使用 "context_reducer.reducers" logger
        reducer = ContentAwareReducer(sink=sink)

    参数:
        logger: 自定义 logger，None 时使用 ``context_reducer.reducers``
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("context_reducer.reducers")

    def emit(self, event: ReductionEvent) -> None:
        level = logging.WARNING if event.level == EventLevel.WARNING else logging.INFO
        self._logger.log(level, "[%s] %s", event.reducer, event.message)


class NullSink:
    """丢弃所有事件。"""

    def emit(self, event: ReductionEvent) -> None:
        return None


class FanoutSink:
    """
    把同一条事件依次转发给多个 Sink。

    用法::

        metrics = MetricsCollector()
        sink = FanoutSink(LoggingSink(), metrics)
    """

    def __init__(self, *sinks: DiagnosticSink) -> None:
        self._sinks = sinks

    def emit(self, event: ReductionEvent) -> None:
        for sink in self._sinks:
            sink.emit(event)

"""
Reducer 基础协议与共享校验。

Reducer 是可插拔的策略组件，把无界的对话记录（Transcript）投影为
有界的视图（View）。所有 Reducer 实现同一个契约::

    reduce(history) -> view

契约要求：
- 纯函数式：不修改输入，不做 I/O，不挂起
- 可重入：除注入的 DiagnosticSink 外不保存跨调用状态
- 保序：输出始终是输入的子序列（压缩只替换消息内容，不改变位置）
- 全函数：任何类型正确的输入都有定义的输出，仅配置错误会抛异常

# [Design Decision] 使用 Protocol 而非抽象基类，
# 用户可以编写自己的 Reducer 而无需继承任何类。
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from context_reducer.errors.exceptions import ConfigValidationError
from context_reducer.models.message import Message
from context_reducer.observability.events import DiagnosticSink, ReductionEvent

logger = logging.getLogger(__name__)


@runtime_checkable
class ChatReducer(Protocol):
    """
    Reducer 协议 — 所有上下文缩减策略必须实现的接口。

    内置实现：
    - PassthroughReducer：原样返回（基线 / 关闭缩减）
    - MessageCountingReducer：按条数保留，丢弃全部工具消息
    - ToolPairPreservingReducer：按条数保留，安全截断保证调用/结果成对
    - ContentAwareReducer：压缩历史数据结果、保留 schema 结果、再安全截断
    """

    @property
    def name(self) -> str:
        """Reducer 名称（用于诊断事件和配置引用）。"""
        ...

    def reduce(self, history: Sequence[Message]) -> list[Message]:
        """
        计算对话记录的视图。

        参数:
            history: 完整对话记录（按时间顺序）

        返回:
            视图消息列表（输入的保序子序列，可能含压缩后的新消息）

        异常:
            ConfigValidationError: history 为 None
        """
        ...


def require_positive(value: int, field_name: str, reducer_name: str) -> int:
    """
    校验构造参数为正整数。

    异常:
        ConfigValidationError: value 不是正整数
    """
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigValidationError(
            what=f"{reducer_name} 的参数 {field_name} 必须是正整数，实际为 {value!r}。",
            why=f"{field_name} 决定视图保留多少条消息，非正值没有意义。",
            how=f"将 {field_name} 设置为大于 0 的整数。",
            field_path=field_name,
        )
    return value


def ensure_history(history: Sequence[Message] | None, reducer_name: str) -> list[Message]:
    """
    在读取任何数据之前校验 history，并复制为列表快照。

    异常:
        ConfigValidationError: history 为 None
    """
    if history is None:
        raise ConfigValidationError(
            what=f"{reducer_name}.reduce() 收到了 None。",
            why="reduce() 需要一个消息序列（可以为空）。",
            how="传入对话记录列表；没有消息时传入空列表 []。",
            field_path="history",
        )
    return list(history)


def safe_emit(sink: DiagnosticSink, event: ReductionEvent) -> None:
    """
    向 Sink 发送事件。

    Sink 抛出的异常只记录到模块 logger，不会中断缩减。
    """
    try:
        sink.emit(event)
    except Exception as e:
        logger.warning(
            "DiagnosticSink %s 处理事件 %s 失败：%s",
            type(sink).__name__,
            event.kind.value,
            e,
        )

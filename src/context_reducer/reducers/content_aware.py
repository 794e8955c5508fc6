"""
内容感知 Reducer — 保留 schema 工具结果，压缩历史数据结果，再安全截断。

三阶段缩减:

1. 不超过 recent_message_count 条：原样返回
2. 拆分为历史段 + 近期段（最近 recent_message_count 条，永远原样保留）。
   顺序遍历历史段，边走边建立 call_id → 工具名 映射：
   - 不含工具结果的消息：原样保留
   - 所有工具结果都来自受保护工具（如 list_tables）：原样保留（同一对象）
   - 否则在原位置重建消息：受保护工具的结果原样复制，
     其余结果替换为 condense_tool_result() 生成的一行摘要
3. 历史段 + 近期段仍超过 max_messages 时，用安全截断丢弃最旧的消息

近期轮次需要完整保真；schema 发现类结果便宜且可复用，永久保留；
体积大的数据查询结果随时间老化为一行摘要；max_messages 是防止
病态增长的最后一道闸。

# [Design Decision] 一条消息里同时有受保护和需压缩的结果时，
# 在原位置重建这条消息，而不是拆成两条——视图中不会出现
# 原对话记录里不存在的消息边界。
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from context_reducer.config.defaults import (
    DEFAULT_MAX_MESSAGES,
    DEFAULT_PRESERVED_TOOL_NAMES,
    DEFAULT_RECENT_MESSAGE_COUNT,
)
from context_reducer.models.message import ContentItem, Message, ToolResultContent
from context_reducer.observability.events import (
    DiagnosticSink,
    EventKind,
    LoggingSink,
    ReductionEvent,
)
from context_reducer.reducers.base import ensure_history, require_positive, safe_emit
from context_reducer.reducers.condenser import condense_tool_result
from context_reducer.reducers.safe_cut import find_safe_cut_index


class ContentAwareReducer:
    """
    内容感知 Reducer。

    基本用法::

        reducer = ContentAwareReducer(max_messages=20, recent_message_count=5)
        view = reducer.reduce(history)

    自定义受保护工具::

        reducer = ContentAwareReducer(preserved_tool_names={"get_schema"})

    参数:
        max_messages: 视图总条数上限（必须 > 0）
        recent_message_count: 原样保留的最近消息数（必须 > 0，超过 max_messages 时取 max_messages）
        preserved_tool_names: 结果永不压缩的工具名集合（区分大小写）
        sink: 诊断接收器，默认写入 logging
    """

    def __init__(
        self,
        max_messages: int = DEFAULT_MAX_MESSAGES,
        recent_message_count: int = DEFAULT_RECENT_MESSAGE_COUNT,
        preserved_tool_names: Iterable[str] | None = None,
        sink: DiagnosticSink | None = None,
    ) -> None:
        reducer_name = type(self).__name__
        self._max_messages = require_positive(max_messages, "max_messages", reducer_name)
        recent = require_positive(recent_message_count, "recent_message_count", reducer_name)
        self._recent_message_count = min(recent, self._max_messages)
        self._preserved_tool_names: frozenset[str] = (
            frozenset(preserved_tool_names)
            if preserved_tool_names is not None
            else DEFAULT_PRESERVED_TOOL_NAMES
        )
        self._sink: DiagnosticSink = sink or LoggingSink()

    @property
    def name(self) -> str:
        return "content_aware"

    @property
    def max_messages(self) -> int:
        return self._max_messages

    @property
    def recent_message_count(self) -> int:
        return self._recent_message_count

    @property
    def preserved_tool_names(self) -> frozenset[str]:
        return self._preserved_tool_names

    def reduce(self, history: Sequence[Message]) -> list[Message]:
        messages = ensure_history(history, type(self).__name__)

        # 阶段 1：不超过近期窗口，无需缩减
        if len(messages) <= self._recent_message_count:
            self._emit(
                EventKind.NO_OP,
                f"阶段 1：{len(messages)} 条消息 <= recent_message_count"
                f"（{self._recent_message_count}），无需缩减。",
                message_count=len(messages),
            )
            return messages

        # 阶段 2：拆分历史段与近期段，压缩历史数据结果
        recent_start = len(messages) - self._recent_message_count
        historical = messages[:recent_start]
        recent = messages[recent_start:]

        self._emit(
            EventKind.SPLIT,
            f"阶段 2：{len(messages)} 条消息拆分为 {len(historical)} 条历史 + "
            f"{len(recent)} 条近期，开始压缩历史数据工具结果。",
            historical_count=len(historical),
            recent_count=len(recent),
        )

        condensed_historical, condensed_count = self._condense_historical(historical)
        result = condensed_historical + recent

        # 阶段 3：仍超过上限时安全截断
        if len(result) > self._max_messages:
            cut_index = find_safe_cut_index(result, len(result) - self._max_messages)
            self._emit(
                EventKind.TRIMMED,
                f"阶段 3：{len(result)} 条消息超过 max_messages（{self._max_messages}），"
                f"丢弃最旧的 {cut_index} 条（安全截断点 {cut_index}）。",
                combined_count=len(result),
                cut_index=cut_index,
            )
            result = result[cut_index:]
        else:
            self._emit(
                EventKind.NO_OP,
                f"阶段 3：{len(result)} 条消息未超过 max_messages"
                f"（{self._max_messages}），无需截断。",
                message_count=len(result),
            )

        self._emit(
            EventKind.COMPLETED,
            f"缩减完成：{len(messages)} → {len(result)} 条消息，压缩 {condensed_count} 条工具结果。",
            original_count=len(messages),
            final_count=len(result),
            condensed_count=condensed_count,
        )
        return result

    def _condense_historical(self, messages: list[Message]) -> tuple[list[Message], int]:
        """
        顺序遍历历史段，压缩非受保护工具的结果。

        call_id → 工具名 映射只在本次调用内有效，不跨调用缓存。

        返回:
            (处理后的消息列表, 被压缩的工具结果数)
        """
        call_id_to_name: dict[str, str] = {}
        result: list[Message] = []
        condensed_count = 0

        for message in messages:
            # 调用总是先于结果出现，先登记本条消息里的调用
            for call in message.tool_calls:
                if call.call_id and call.name:
                    call_id_to_name[call.call_id] = call.name

            tool_results = message.tool_results
            if not tool_results:
                result.append(message)
                continue

            if all(self._is_preserved(r.call_id, call_id_to_name) for r in tool_results):
                for r in tool_results:
                    self._emit(
                        EventKind.PRESERVED,
                        f"  保留工具结果：{call_id_to_name.get(r.call_id, 'unknown')}（{r.call_id}）",
                        tool_name=call_id_to_name.get(r.call_id, "unknown"),
                        call_id=r.call_id,
                    )
                result.append(message)
                continue

            contents: list[ContentItem] = []
            for item in message.contents:
                if isinstance(item, ToolResultContent) and not self._is_preserved(
                    item.call_id, call_id_to_name
                ):
                    summary = condense_tool_result(item.payload)
                    tool_name = call_id_to_name.get(item.call_id, "unknown")
                    self._emit(
                        EventKind.CONDENSED,
                        f"  压缩工具结果：{tool_name}（{item.call_id}）→ {summary}",
                        tool_name=tool_name,
                        call_id=item.call_id,
                        original_length=len(item.payload),
                        condensed_length=len(summary),
                    )
                    contents.append(ToolResultContent(call_id=item.call_id, payload=summary))
                    condensed_count += 1
                else:
                    contents.append(item)

            result.append(message.with_contents(contents))

        return result, condensed_count

    def _is_preserved(self, call_id: str, call_id_to_name: dict[str, str]) -> bool:
        """无法解析的 call_id 一律视为不受保护。"""
        if not call_id:
            return False
        name = call_id_to_name.get(call_id)
        return name is not None and name in self._preserved_tool_names

    def _emit(self, kind: EventKind, message: str, **data: int | str) -> None:
        safe_emit(
            self._sink,
            ReductionEvent(reducer=self.name, kind=kind, message=message, data=data),
        )

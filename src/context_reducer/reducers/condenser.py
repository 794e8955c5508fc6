"""
工具结果摘要器 — 把大块的数据查询结果压成一行描述。

数据查询工具以紧凑的行式格式（TOON）返回结果，头部几行包含元信息::

    entityName: account
    moreRecords: true
    entities[5]{name,city}:
      Contoso,Seattle
      ...

condense_tool_result() 只解析头部：识别出实体名和记录数时返回一句摘要，
识别不出时退化为截断。它从不抛异常——任何输入都有确定的输出。

# [Design Decision] 摘要只描述"返回了多少条、来自哪张表"，
# 具体数据已经体现在助手当轮的回复里，因此摘要会指引模型去看那条回复。
"""

from __future__ import annotations

import re

EMPTY_RESULT_MARKER = "[Condensed: Empty result]"
TRUNCATION_MARKER = "... [truncated]"

MAX_FALLBACK_LENGTH = 200
"""无法识别格式时，原样保留的最大字符数"""

HEADER_SCAN_LINES = 5
"""只在前几行中查找头部字段"""

_ENTITY_NAME_PREFIX = "entityName:"
_MORE_RECORDS_PREFIX = "moreRecords:"
_ENTITIES_PREFIX = "entities["
_ENTITY_COUNT_PATTERN = re.compile(r"entities\[(\d+)\]")


def condense_tool_result(payload: str | None) -> str:
    """
    压缩一条工具结果。

    规则:
    - 空白或 None → 固定的空结果标记
    - 前 5 行中同时识别出 ``entityName:`` 和 ``entities[<n>]`` →
      ``[Condensed: Returned <n> records from '<name>'. See the assistant response for details.]``，
      ``moreRecords: true`` 时附加 ``(more records available)``
    - 否则：长度不超过 200 的原样返回，超过的保留前 200 个字符并追加截断标记

    对已经截断过的结果再次调用，输出保持不变。

    参数:
        payload: 工具结果原文

    返回:
        压缩后的文本
    """
    if payload is None or not payload.strip():
        return EMPTY_RESULT_MARKER

    entity_name: str | None = None
    more_records: str | None = None
    entity_count: str | None = None

    for line in payload.split("\n")[:HEADER_SCAN_LINES]:
        trimmed = line.strip()

        if trimmed.startswith(_ENTITY_NAME_PREFIX):
            entity_name = trimmed[len(_ENTITY_NAME_PREFIX):].strip()
        elif trimmed.startswith(_MORE_RECORDS_PREFIX):
            more_records = trimmed[len(_MORE_RECORDS_PREFIX):].strip()
        elif trimmed.startswith(_ENTITIES_PREFIX):
            match = _ENTITY_COUNT_PATTERN.search(trimmed)
            if match:
                entity_count = match.group(1)

    if entity_name is not None and entity_count is not None:
        more_info = " (more records available)" if more_records == "true" else ""
        return (
            f"[Condensed: Returned {entity_count} records from '{entity_name}'{more_info}. "
            "See the assistant response for details.]"
        )

    return truncate_payload(payload)


def truncate_payload(payload: str, max_length: int = MAX_FALLBACK_LENGTH) -> str:
    """超过 max_length 时保留前缀并追加截断标记。"""
    if len(payload) <= max_length:
        return payload
    return payload[:max_length] + TRUNCATION_MARKER

"""
安全截断 — 保证视图不以孤立的工具结果开头。

朴素地按条数截断对话记录，很容易把一次工具调用丢掉而留下它的结果，
模型收到一个没有调用上下文的 tool result，多数提供方会直接拒绝请求。

find_safe_cut_index() 把建议的截断点向前（更早）调整到对应的调用消息，
让调用和结果一起保留；如果某个结果在它之前根本找不到对应调用
（真正的孤儿），就跳过它继续向后检查。

截断点语义：保留 ``messages[k:]``，丢弃 ``messages[:k]``。

示例::

    # [user, assistant(call c1), tool(result c1), user]
    find_safe_cut_index(messages, 2)  # → 1，调用和结果一起保留
"""

from __future__ import annotations

from collections.abc import Sequence

from context_reducer.models.message import Message


def has_tool_result(message: Message) -> bool:
    """消息是否携带工具结果。"""
    return message.has_tool_result


def find_tool_call_index(messages: Sequence[Message], result_index: int) -> int:
    """
    从 result_index 向前查找最近一条包含匹配工具调用的消息。

    只要 result_index 处消息的任一非空 call_id 与某条更早消息中的调用匹配，
    即视为找到。

    参数:
        messages: 消息序列
        result_index: 携带工具结果的消息下标

    返回:
        匹配调用所在的下标；结果没有任何非空 call_id 或找不到调用时返回 -1
    """
    call_ids = {
        r.call_id for r in messages[result_index].tool_results if r.call_id
    }
    if not call_ids:
        return -1

    for i in range(result_index - 1, -1, -1):
        if any(c.call_id in call_ids for c in messages[i].tool_calls):
            return i

    return -1


def find_safe_cut_index(messages: Sequence[Message], proposed_cut_index: int) -> int:
    """
    调整截断点，使 ``messages[k:]`` 不以被截掉调用的工具结果开头。

    流程:
    1. proposed <= 0 → 0；proposed >= len → len
    2. 当前位置的消息携带工具结果时，向前查找匹配的调用：
       - 找到（下标 i < 当前位置）→ 截断点移到 i，结束
       - 找不到（孤儿结果）→ 截断点后移一位，继续检查
    3. 当前位置不是工具结果消息时结束

    找到调用时截断点严格减小并立即结束，找不到时严格增大且以 len 为界，
    因此循环必然终止。

    注意:
        只从"结果"出发回溯。一条调用被截掉而其结果在视图中存活的情况，
        只有当该结果恰好位于截断点时才会被修正；截断点之后更深处的结果
        不会触发调整。

    参数:
        messages: 消息序列
        proposed_cut_index: 建议的截断点

    返回:
        调整后的截断点 k'（k' 可能小于 proposed，也可能大于）
    """
    if proposed_cut_index <= 0:
        return 0

    count = len(messages)
    if proposed_cut_index >= count:
        return count

    cut_index = proposed_cut_index
    while cut_index < count and has_tool_result(messages[cut_index]):
        call_index = find_tool_call_index(messages, cut_index)
        if 0 <= call_index < cut_index:
            cut_index = call_index
            break
        # 找不到调用：跳过这个孤儿结果
        cut_index += 1

    return cut_index

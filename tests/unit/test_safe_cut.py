"""
安全截断单元测试。

覆盖范围:
- reducers/safe_cut.py: has_tool_result / find_tool_call_index / find_safe_cut_index
"""

from __future__ import annotations

import pytest

from context_reducer.models.message import Message, Role, ToolResultContent
from context_reducer.reducers.safe_cut import (
    find_safe_cut_index,
    find_tool_call_index,
    has_tool_result,
)


class TestHasToolResult:
    def test_text_message(self, mb) -> None:
        assert has_tool_result(mb.user("hi")) is False

    def test_call_message(self, mb) -> None:
        assert has_tool_result(mb.call("c1", "list_tables")) is False

    def test_result_message(self, mb) -> None:
        assert has_tool_result(mb.result("c1")) is True


class TestFindToolCallIndex:
    def test_finds_matching_call(self, mb) -> None:
        messages = [mb.user("q"), mb.call("c1", "t"), mb.result("c1")]
        assert find_tool_call_index(messages, 2) == 1

    def test_nearest_match_wins(self, mb) -> None:
        """同一个 call_id 出现两次时返回离结果最近的那条。"""
        messages = [mb.call("c1", "t"), mb.result("c1"), mb.call("c1", "t"), mb.result("c1")]
        assert find_tool_call_index(messages, 3) == 2

    def test_missing_call_returns_minus_one(self, mb) -> None:
        messages = [mb.user("q"), mb.result("ghost")]
        assert find_tool_call_index(messages, 1) == -1

    def test_empty_call_id_is_not_found(self, mb) -> None:
        messages = [mb.call("", "t"), mb.result("")]
        assert find_tool_call_index(messages, 1) == -1

    def test_any_result_id_matches(self, mb) -> None:
        """多结果消息中任一 call_id 匹配即可。"""
        messages = [mb.call("c2", "t"), mb.results(("ghost", "x"), ("c2", "y"))]
        assert find_tool_call_index(messages, 1) == 0


class TestFindSafeCutIndex:
    def test_non_positive_proposal_returns_zero(self, mb) -> None:
        messages = [mb.user("a"), mb.user("b")]
        assert find_safe_cut_index(messages, 0) == 0
        assert find_safe_cut_index(messages, -3) == 0

    def test_proposal_at_or_past_end_returns_len(self, mb) -> None:
        messages = [mb.user("a"), mb.user("b")]
        assert find_safe_cut_index(messages, 2) == 2
        assert find_safe_cut_index(messages, 10) == 2

    def test_empty_sequence(self) -> None:
        assert find_safe_cut_index([], 1) == 0

    def test_cut_on_text_message_is_unchanged(self, mb) -> None:
        messages = [mb.user("a"), mb.call("c1", "t"), mb.result("c1"), mb.user("b")]
        assert find_safe_cut_index(messages, 3) == 3

    def test_cut_on_call_is_unchanged(self, mb) -> None:
        messages = [mb.user("a"), mb.call("c1", "t"), mb.result("c1"), mb.user("b")]
        assert find_safe_cut_index(messages, 1) == 1

    def test_cut_on_result_moves_back_to_call(self, mb) -> None:
        messages = [mb.user("a"), mb.call("c1", "t"), mb.result("c1"), mb.user("b")]
        assert find_safe_cut_index(messages, 2) == 1

    def test_cut_moves_back_past_intervening_messages(self, mb) -> None:
        messages = [
            mb.user("a"),
            mb.calls(("c1", "t"), ("c2", "t")),
            mb.result("c1"),
            mb.result("c2"),
            mb.user("b"),
        ]
        assert find_safe_cut_index(messages, 3) == 1

    def test_orphan_result_is_skipped(self, mb) -> None:
        messages = [mb.user("a"), mb.result("ghost"), mb.user("b")]
        assert find_safe_cut_index(messages, 1) == 2

    def test_consecutive_orphans_are_skipped(self, mb) -> None:
        messages = [mb.user("a"), mb.result("g1"), mb.result("g2"), mb.user("b")]
        assert find_safe_cut_index(messages, 1) == 3

    def test_trailing_orphans_return_len(self, mb) -> None:
        messages = [mb.user("a"), mb.result("g1"), mb.result("g2")]
        assert find_safe_cut_index(messages, 1) == 3

    def test_orphan_then_paired_result_keeps_walking(self, mb) -> None:
        """孤儿之后紧跟的结果的调用在孤儿之前，截断点回到调用处。"""
        messages = [mb.call("c1", "t"), mb.result("ghost"), mb.result("c1"), mb.user("b")]
        assert find_safe_cut_index(messages, 1) == 0

    def test_result_with_empty_id_is_orphan(self, mb) -> None:
        messages = [mb.call("", "t"), mb.result(""), mb.user("b")]
        assert find_safe_cut_index(messages, 1) == 2

    def test_orphaned_call_is_not_pulled_back(self, mb) -> None:
        """调用被截掉、结果在更深处存活时，截断点不会因该调用移动。"""
        messages = [
            mb.call("c1", "t"),
            mb.user("interleaved"),
            mb.result("c1"),
        ]
        assert find_safe_cut_index(messages, 1) == 1

    def test_in_flight_call_at_cut_is_kept(self, mb) -> None:
        """没有任何结果的调用（仍在进行中）落在截断点上时原样保留。"""
        messages = [mb.user("a"), mb.call("c9", "slow_tool"), mb.user("b")]
        assert find_safe_cut_index(messages, 1) == 1

    @pytest.mark.parametrize("proposed", range(0, 7))
    def test_view_never_starts_with_resolvable_dropped_call(self, mb, proposed) -> None:
        """视图首条若是工具结果，则其调用在整个输入中都不存在。"""
        messages = [
            mb.system(),
            mb.call("c1", "t"),
            mb.result("c1"),
            mb.result("ghost"),
            mb.call("c2", "t"),
            mb.result("c2"),
        ]
        cut = find_safe_cut_index(messages, proposed)
        assert 0 <= cut <= len(messages)
        if cut < len(messages) and messages[cut].has_tool_result:
            ids = {r.call_id for r in messages[cut].tool_results}
            calls_before = {c.call_id for m in messages[:cut] for c in m.tool_calls}
            assert not ids & calls_before

    def test_does_not_mutate_input(self, mb) -> None:
        messages = [mb.user("a"), mb.call("c1", "t"), mb.result("c1")]
        snapshot = list(messages)
        find_safe_cut_index(messages, 2)
        assert messages == snapshot

    def test_works_with_tuple_input(self) -> None:
        messages = (
            Message.from_text(Role.USER, "a"),
            Message(role=Role.TOOL, contents=(ToolResultContent(call_id="x", payload=""),)),
        )
        assert find_safe_cut_index(messages, 1) == 2

"""
工具结果摘要器单元测试。

覆盖范围:
- reducers/condenser.py: condense_tool_result / truncate_payload
"""

from __future__ import annotations

import pytest

from context_reducer.reducers.condenser import (
    EMPTY_RESULT_MARKER,
    MAX_FALLBACK_LENGTH,
    TRUNCATION_MARKER,
    condense_tool_result,
    truncate_payload,
)


class TestEmptyPayload:
    @pytest.mark.parametrize("payload", [None, "", "   ", "\n\t\n"])
    def test_blank_payload_returns_empty_marker(self, payload) -> None:
        assert condense_tool_result(payload) == "[Condensed: Empty result]"
        assert condense_tool_result(payload) == EMPTY_RESULT_MARKER


class TestHeaderRecognition:
    def test_full_header_with_more_records(self) -> None:
        payload = "entityName: account\nmoreRecords: true\nentities[5]:\n  a\n  b"
        result = condense_tool_result(payload)
        assert result == (
            "[Condensed: Returned 5 records from 'account' (more records available). "
            "See the assistant response for details.]"
        )
        assert (
            "Condensed: Returned 5 records from 'account' (more records available). "
            "See the assistant response for details."
        ) in result

    def test_more_records_false(self) -> None:
        payload = "entityName: contact\nmoreRecords: false\nentities[3]{fullname}:\n  x"
        assert condense_tool_result(payload) == (
            "[Condensed: Returned 3 records from 'contact'. See the assistant response for details.]"
        )

    def test_more_records_missing(self) -> None:
        payload = "entityName: contact\nentities[2]:\n  x\n  y"
        assert "(more records available)" not in condense_tool_result(payload)
        assert "Returned 2 records from 'contact'" in condense_tool_result(payload)

    def test_more_records_must_be_lowercase_true(self) -> None:
        payload = "entityName: contact\nmoreRecords: True\nentities[2]:"
        assert "(more records available)" not in condense_tool_result(payload)

    def test_header_lines_may_be_indented(self) -> None:
        payload = "   entityName: mission  \n  entities[12]{name}:\n  Apollo"
        assert "Returned 12 records from 'mission'" in condense_tool_result(payload)

    def test_header_order_does_not_matter(self) -> None:
        payload = "entities[4]:\nmoreRecords: true\nentityName: spacecraft"
        assert condense_tool_result(payload).startswith(
            "[Condensed: Returned 4 records from 'spacecraft' (more records available)."
        )

    def test_zero_records(self) -> None:
        payload = "entityName: account\nentities[0]:"
        assert "Returned 0 records from 'account'" in condense_tool_result(payload)

    def test_header_beyond_fifth_line_is_ignored(self) -> None:
        payload = "a\nb\nc\nd\ne\nentityName: account\nentities[5]:"
        assert condense_tool_result(payload) == payload

    def test_header_within_fifth_line_is_used(self) -> None:
        payload = "a\nb\nc\nentityName: account\nentities[5]:"
        assert "Returned 5 records from 'account'" in condense_tool_result(payload)

    def test_missing_entity_name_falls_back(self) -> None:
        payload = "moreRecords: true\nentities[5]:"
        assert condense_tool_result(payload) == payload

    def test_missing_count_falls_back(self) -> None:
        payload = "entityName: account\nmoreRecords: true"
        assert condense_tool_result(payload) == payload

    def test_non_numeric_count_falls_back(self) -> None:
        payload = "entityName: account\nentities[n]:"
        assert condense_tool_result(payload) == payload

    def test_later_entity_name_overrides_earlier(self) -> None:
        payload = "entityName: first\nentityName: second\nentities[1]:"
        assert "from 'second'" in condense_tool_result(payload)


class TestFallback:
    def test_short_payload_verbatim(self) -> None:
        assert condense_tool_result("42 rows updated") == "42 rows updated"

    def test_exactly_max_length_verbatim(self) -> None:
        payload = "x" * MAX_FALLBACK_LENGTH
        assert condense_tool_result(payload) == payload

    def test_long_blob_is_truncated(self) -> None:
        payload = "".join(chr(ord("a") + i % 26) for i in range(250))
        result = condense_tool_result(payload)
        assert result == payload[:200] + "... [truncated]"
        assert result.endswith(TRUNCATION_MARKER)
        assert len(result) == 200 + len(TRUNCATION_MARKER)

    def test_truncation_is_stable_on_reapplication(self) -> None:
        once = condense_tool_result("y" * 250)
        assert condense_tool_result(once) == once

    def test_condensed_summary_is_stable_on_reapplication(self) -> None:
        once = condense_tool_result("entityName: account\nentities[5]:")
        assert condense_tool_result(once) == once

    def test_never_raises_on_odd_input(self) -> None:
        for payload in ["entities[", "entityName:", "\x00\x01", "entities[99999999999999999999]"]:
            assert isinstance(condense_tool_result(payload), str)


class TestTruncatePayload:
    def test_custom_length(self) -> None:
        assert truncate_payload("abcdef", max_length=3) == "abc" + TRUNCATION_MARKER

    def test_within_length(self) -> None:
        assert truncate_payload("abc", max_length=3) == "abc"

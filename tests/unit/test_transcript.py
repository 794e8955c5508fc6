"""
对话记录文件读写单元测试。

覆盖范围:
- transcript.py: load_transcript / parse_messages / dump_messages
"""

from __future__ import annotations

import json

import pytest

from context_reducer.errors import TranscriptLoadError
from context_reducer.models import Role, ToolCallContent, ToolResultContent
from context_reducer.transcript import dump_messages, load_transcript, parse_messages

YAML_TRANSCRIPT = """\
messages:
  - role: system
    contents:
      - {type: text, text: "You are a helpful agent."}
  - role: assistant
    contents:
      - {type: tool_call, call_id: c1, name: list_tables, arguments: {}}
  - role: tool
    contents:
      - {type: tool_result, call_id: c1, payload: "account\\ncontact"}
"""


class TestLoadTranscript:
    def test_yaml_file(self, tmp_path) -> None:
        path = tmp_path / "t.yaml"
        path.write_text(YAML_TRANSCRIPT, encoding="utf-8")

        messages = load_transcript(path)

        assert [m.role for m in messages] == [Role.SYSTEM, Role.ASSISTANT, Role.TOOL]
        assert isinstance(messages[1].contents[0], ToolCallContent)
        assert isinstance(messages[2].contents[0], ToolResultContent)
        assert messages[2].tool_results[0].payload == "account\ncontact"

    def test_json_file_with_list_root(self, tmp_path, mb) -> None:
        path = tmp_path / "t.json"
        original = [mb.user("a"), mb.call("c1", "query_records", table="account"), mb.result("c1", "rows")]
        path.write_text(json.dumps(dump_messages(original)), encoding="utf-8")

        assert load_transcript(path) == original

    def test_fixture_file_roundtrip(self, transcript_file, dataverse_transcript) -> None:
        assert load_transcript(transcript_file) == dataverse_transcript

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(TranscriptLoadError, match="不存在"):
            load_transcript(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(TranscriptLoadError, match="JSON"):
            load_transcript(path)

    def test_invalid_yaml(self, tmp_path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("messages: [unclosed", encoding="utf-8")
        with pytest.raises(TranscriptLoadError, match="YAML"):
            load_transcript(path)


class TestParseMessages:
    @pytest.mark.parametrize("data", [None, "text", 42, {"other": []}, {"messages": "x"}])
    def test_bad_root(self, data) -> None:
        with pytest.raises(TranscriptLoadError):
            parse_messages(data)

    def test_validation_errors_have_locations(self) -> None:
        with pytest.raises(TranscriptLoadError) as exc_info:
            parse_messages([{"role": "user", "contents": [{"type": "text"}]}], source="inline")
        assert "0.contents.0" in exc_info.value.full_message
        assert exc_info.value.file_path == "inline"

    def test_empty_list(self) -> None:
        assert parse_messages([]) == []


class TestDumpMessages:
    def test_json_ready(self, mb) -> None:
        dumped = dump_messages([mb.call("c1", "t", top=3)])
        assert dumped == [
            {
                "role": "assistant",
                "contents": [
                    {"type": "tool_call", "call_id": "c1", "name": "t", "arguments": {"top": 3}},
                ],
            }
        ]
        json.dumps(dumped)

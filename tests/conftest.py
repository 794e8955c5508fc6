"""
测试套件共享 Fixtures 和配置。

本文件定义了所有测试中可复用的消息构造器、诊断接收器和示例对话记录。
"""

from __future__ import annotations

from typing import Any

import pytest

from context_reducer.models.message import (
    Message,
    Role,
    TextContent,
    ToolCallContent,
    ToolResultContent,
)
from context_reducer.observability.events import EventKind, ReductionEvent
from context_reducer.tokenizer import clear_cache

ACCOUNT_PAYLOAD = (
    "entityName: account\n"
    "moreRecords: true\n"
    "entities[5]{name,city}:\n"
    "  Contoso,Seattle\n"
    "  Fabrikam,Redmond\n"
    "  Northwind,Portland\n"
    "  Adventure Works,Bellevue\n"
    "  Tailspin,Tacoma\n"
)

CONTACT_PAYLOAD = (
    "entityName: contact\n"
    "moreRecords: false\n"
    "entities[3]{fullname,jobtitle}:\n"
    "  Ada Lovelace,Commander\n"
    "  Grace Hopper,Pilot\n"
    "  Katherine Johnson,Navigator\n"
)

TABLES_PAYLOAD = "account\ncontact\nmission\nspacecraft"


class MessageBuilder:
    """简洁地构造测试消息。"""

    def system(self, text: str = "You are a helpful agent.") -> Message:
        return Message.from_text(Role.SYSTEM, text)

    def user(self, text: str) -> Message:
        return Message.from_text(Role.USER, text)

    def assistant(self, text: str) -> Message:
        return Message.from_text(Role.ASSISTANT, text)

    def call(self, call_id: str, name: str, **arguments: Any) -> Message:
        return Message(
            role=Role.ASSISTANT,
            contents=(ToolCallContent(call_id=call_id, name=name, arguments=arguments),),
        )

    def result(self, call_id: str, payload: str = "ok") -> Message:
        return Message(
            role=Role.TOOL,
            contents=(ToolResultContent(call_id=call_id, payload=payload),),
        )

    def results(self, *pairs: tuple[str, str]) -> Message:
        """一条消息携带多个工具结果。"""
        return Message(
            role=Role.TOOL,
            contents=tuple(ToolResultContent(call_id=c, payload=p) for c, p in pairs),
        )

    def calls(self, *pairs: tuple[str, str]) -> Message:
        """一条助手消息携带多个工具调用。"""
        return Message(
            role=Role.ASSISTANT,
            contents=tuple(ToolCallContent(call_id=c, name=n) for c, n in pairs),
        )

    def mixed(self, text: str, call_id: str, name: str) -> Message:
        """同时带文本和工具调用的助手消息。"""
        return Message(
            role=Role.ASSISTANT,
            contents=(TextContent(text=text), ToolCallContent(call_id=call_id, name=name)),
        )


class RecordingSink:
    """把收到的事件记在列表里，供断言使用。"""

    def __init__(self) -> None:
        self.events: list[ReductionEvent] = []

    def emit(self, event: ReductionEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> list[ReductionEvent]:
        return [e for e in self.events if e.kind == kind]


class FailingSink:
    """每次 emit 都抛异常的 Sink。"""

    def emit(self, event: ReductionEvent) -> None:
        raise RuntimeError("sink is broken")


# === 构造器 Fixtures ===


@pytest.fixture
def mb() -> MessageBuilder:
    """消息构造器。"""
    return MessageBuilder()


@pytest.fixture
def sink() -> RecordingSink:
    """记录事件的 Sink。"""
    return RecordingSink()


@pytest.fixture
def failing_sink() -> FailingSink:
    return FailingSink()


# === 对话记录 Fixtures ===


@pytest.fixture
def dataverse_transcript(mb: MessageBuilder) -> list[Message]:
    """
    典型的数据查询 Agent 对话（14 条）。

    0  system
    1  user          列出表
    2  assistant     call list_tables (c1)
    3  tool          result c1（受保护）
    4  assistant     文本
    5  user          列出宇航员
    6  assistant     call describe_table (c2) + call query_records (c3)
    7  tool          result c2（受保护） + result c3（数据）
    8  assistant     文本
    9  user          列出客户
    10 assistant     call query_records (c4)
    11 tool          result c4（数据）
    12 assistant     文本
    13 user          最后一个问题
    """
    return [
        mb.system(),
        mb.user("What tables are there?"),
        mb.call("c1", "list_tables"),
        mb.result("c1", TABLES_PAYLOAD),
        mb.assistant("There are four tables."),
        mb.user("List all the astronauts in the system and their specialization!"),
        mb.calls(("c2", "describe_table"), ("c3", "query_records")),
        mb.results(("c2", "fullname: string\njobtitle: string"), ("c3", CONTACT_PAYLOAD)),
        mb.assistant("Ada is the commander, Grace the pilot and Katherine the navigator."),
        mb.user("And the accounts?"),
        mb.call("c4", "query_records", table="account"),
        mb.result("c4", ACCOUNT_PAYLOAD),
        mb.assistant("Five accounts, more available."),
        mb.user("Earlier you listed the astronauts. Can you recall who the first one was?"),
    ]


@pytest.fixture
def transcript_file(tmp_path, dataverse_transcript):
    """把示例对话记录写成 JSON 文件。"""
    import json

    from context_reducer.transcript import dump_messages

    path = tmp_path / "transcript.json"
    path.write_text(
        json.dumps({"messages": dump_messages(dataverse_transcript)}, ensure_ascii=False),
        encoding="utf-8",
    )
    return path


@pytest.fixture(autouse=True)
def _reset_tokenizer_cache():
    """每个测试前后清空 Tokenizer 缓存。"""
    clear_cache()
    yield
    clear_cache()

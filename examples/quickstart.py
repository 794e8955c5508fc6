"""
Context Reducer 快速上手示例。

模拟一个查询太空项目数据的 Agent，对同一份对话记录
分别应用四种策略，观察视图的变化。

运行方式：
    python examples/quickstart.py

无需 API Key，无需任何配置文件。
"""

from context_reducer import (
    ContentAwareReducer,
    InMemoryChatHistory,
    Message,
    MetricsCollector,
    MessageCountingReducer,
    PassthroughReducer,
    Role,
    ToolCallContent,
    ToolPairPreservingReducer,
    ToolResultContent,
)

ASTRONAUTS = (
    "entityName: contact\n"
    "moreRecords: false\n"
    "entities[4]{fullname,jobtitle}:\n"
    "  Ada Lovelace,Commander\n"
    "  Grace Hopper,Pilot\n"
    "  Katherine Johnson,Navigator\n"
    "  Mae Jemison,Science Officer"
)

MISSIONS = (
    "entityName: mission\n"
    "moreRecords: true\n"
    "entities[3]{name,commander}:\n"
    "  Artemis I,Ada Lovelace\n"
    "  Artemis II,Ada Lovelace\n"
    "  Gateway,Grace Hopper"
)


def call(call_id: str, name: str, **arguments) -> Message:
    return Message(
        role=Role.ASSISTANT,
        contents=(ToolCallContent(call_id=call_id, name=name, arguments=arguments),),
    )


def result(call_id: str, payload: str) -> Message:
    return Message(role=Role.TOOL, contents=(ToolResultContent(call_id=call_id, payload=payload),))


def build_history() -> list[Message]:
    """两轮问答，每轮都有 schema 发现和数据查询。"""
    return [
        Message.from_text(Role.SYSTEM, "You are an agent that retrieves information about my space program."),
        Message.from_text(Role.USER, "List all the astronauts in the system and their specialization!"),
        call("c1", "list_tables"),
        result("c1", "contact\nmission\nspacecraft"),
        call("c2", "query_records", table="contact"),
        result("c2", ASTRONAUTS),
        Message.from_text(Role.ASSISTANT, "There are four astronauts: Ada, Grace, Katherine and Mae."),
        Message.from_text(Role.USER, "Which astronaut is leading the most missions?"),
        call("c3", "describe_table", table="mission"),
        result("c3", "name: string\ncommander: lookup(contact)"),
        call("c4", "query_records", table="mission"),
        result("c4", MISSIONS),
        Message.from_text(Role.ASSISTANT, "Ada Lovelace commands two missions."),
        Message.from_text(Role.USER, "Show me the spacecraft assigned to her."),
    ]


def describe(message: Message) -> str:
    content = message.to_prompt_dict()["content"].replace("\n", " ")
    if len(content) > 70:
        content = content[:67] + "..."
    return f"  [{message.role.value:9}] {content}"


def main() -> None:
    history = build_history()
    reducers = [
        PassthroughReducer(),
        MessageCountingReducer(target_count=4),
        ToolPairPreservingReducer(target_count=4),
        ContentAwareReducer(max_messages=12, recent_message_count=3),
    ]

    for reducer in reducers:
        print("=" * 60)
        print(f"策略：{reducer.name}")
        print("=" * 60)
        view = reducer.reduce(history)
        print(f"  {len(history)} 条消息 → {len(view)} 条")
        for message in view:
            print(describe(message))
        print()

    # ===== 在会话中使用 =====
    print("=" * 60)
    print("InMemoryChatHistory + MetricsCollector")
    print("=" * 60)

    metrics = MetricsCollector()
    chat = InMemoryChatHistory(
        reducer=ContentAwareReducer(max_messages=12, recent_message_count=3, sink=metrics),
    )
    chat.extend(history)
    view = chat.get_view()

    print(f"  完整记录：{len(chat)} 条，视图：{len(view)} 条")
    print(f"  压缩的工具结果：{metrics.event_count('condensed')}")
    print(f"  保留的工具结果：{metrics.event_count('preserved')}")


if __name__ == "__main__":
    main()

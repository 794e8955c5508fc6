"""
对话消息数据模型。

对话记录（Transcript）由有序的 Message 组成，每条 Message 携带一个角色
和一组内容项（ContentItem）。内容项是一个封闭的三选一联合类型：

- TextContent：普通文本
- ToolCallContent：一次工具调用（call_id 在一次调用内唯一）
- ToolResultContent：工具调用结果，通过 call_id 关联到对应的调用

# [Design Decision] 内容项用 Pydantic 判别联合（discriminator="type"）建模，
# 而非开放的类继承体系。新增内容类型必须显式修改 ContentItem，
# 压缩和安全截断逻辑因此可以对三种类型做穷尽处理。

所有模型都是 frozen 的：Reducer 需要修改内容时必须构造新的 Message，
原始对话记录永远不会被改写。
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """消息角色。"""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class TextContent(BaseModel):
    """文本内容项。"""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ToolCallContent(BaseModel):
    """
    工具调用内容项。

    属性:
        call_id: 调用标识，工具结果通过它回指本次调用
        name: 工具名称（区分大小写）
        arguments: 调用参数
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_call"] = "tool_call"
    call_id: str
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolResultContent(BaseModel):
    """
    工具结果内容项。

    属性:
        call_id: 对应的工具调用标识（可能无法解析，Reducer 必须容忍）
        payload: 工具返回的原始文本
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_result"] = "tool_result"
    call_id: str
    payload: str = ""


ContentItem = Annotated[
    Union[TextContent, ToolCallContent, ToolResultContent],
    Field(discriminator="type"),
]


class Message(BaseModel):
    """
    一条对话消息。

    基本用法::

        msg = Message.from_text(Role.USER, "列出所有宇航员")

        call = Message(
            role=Role.ASSISTANT,
            contents=[ToolCallContent(call_id="c1", name="list_tables")],
        )

    属性:
        role: 消息角色
        contents: 有序的内容项元组
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    contents: tuple[ContentItem, ...] = ()

    @classmethod
    def from_text(cls, role: Role | str, text: str) -> Message:
        """创建只含一段文本的消息。"""
        return cls(role=Role(role), contents=(TextContent(text=text),))

    @property
    def tool_calls(self) -> list[ToolCallContent]:
        """本消息中的全部工具调用项。"""
        return [c for c in self.contents if isinstance(c, ToolCallContent)]

    @property
    def tool_results(self) -> list[ToolResultContent]:
        """本消息中的全部工具结果项。"""
        return [c for c in self.contents if isinstance(c, ToolResultContent)]

    @property
    def has_tool_call(self) -> bool:
        return any(isinstance(c, ToolCallContent) for c in self.contents)

    @property
    def has_tool_result(self) -> bool:
        return any(isinstance(c, ToolResultContent) for c in self.contents)

    @property
    def has_tool_content(self) -> bool:
        """是否携带任何工具调用或工具结果。"""
        return any(
            isinstance(c, (ToolCallContent, ToolResultContent)) for c in self.contents
        )

    @property
    def text(self) -> str:
        """拼接所有文本内容项。"""
        return "".join(c.text for c in self.contents if isinstance(c, TextContent))

    def with_contents(self, contents: list[ContentItem] | tuple[ContentItem, ...]) -> Message:
        """返回角色不变、内容替换后的新消息（原消息不受影响）。"""
        return Message(role=self.role, contents=tuple(contents))

    def to_prompt_dict(self) -> dict[str, str]:
        """
        渲染为 {"role": ..., "content": ...} 格式。

        工具调用渲染为 ``name({...})``，工具结果渲染为原始文本。
        仅用于 Token 估算和终端展示，不是发给模型的线格式。
        """
        parts: list[str] = []
        for item in self.contents:
            if isinstance(item, TextContent):
                parts.append(item.text)
            elif isinstance(item, ToolCallContent):
                args = json.dumps(item.arguments, ensure_ascii=False, sort_keys=True)
                parts.append(f"{item.name}({args})")
            else:
                parts.append(item.payload)
        return {"role": self.role.value, "content": "\n".join(parts)}

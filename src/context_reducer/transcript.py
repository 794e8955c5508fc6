"""
对话记录文件的读写。

支持 JSON 和 YAML，根元素可以是消息列表，也可以是带 ``messages`` 键的字典::

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

每条消息都经过 Pydantic 模型校验；文件层面的问题统一抛出 TranscriptLoadError。
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import yaml
from pydantic import TypeAdapter, ValidationError

from context_reducer.errors import TranscriptLoadError
from context_reducer.models.message import Message

_MESSAGES_ADAPTER = TypeAdapter(list[Message])


def load_transcript(path: str | Path) -> list[Message]:
    """
    从 JSON / YAML 文件加载对话记录。

    参数:
        path: 文件路径

    返回:
        按文件顺序排列的消息列表

    异常:
        TranscriptLoadError: 文件不存在、格式无效或消息校验失败
    """
    file_path = Path(path)
    if not file_path.exists():
        raise TranscriptLoadError(
            what=f"对话记录文件 '{file_path}' 不存在。",
            why=f"在路径 '{file_path.absolute()}' 下未找到该文件。",
            how="请检查文件路径是否正确。",
            file_path=str(file_path),
        )

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise TranscriptLoadError(
            what=f"无法读取对话记录文件 '{file_path}'。",
            why=str(e),
            how="请检查文件权限和编码（需要 UTF-8）。",
            file_path=str(file_path),
        ) from e

    data = _parse(content, file_path)
    return parse_messages(data, source=str(file_path))


def parse_messages(data: Any, source: str = "<memory>") -> list[Message]:
    """
    把已解析的 JSON/YAML 数据校验为消息列表。

    异常:
        TranscriptLoadError: 结构不符合要求
    """
    if isinstance(data, dict):
        data = data.get("messages")
    if not isinstance(data, list):
        raise TranscriptLoadError(
            what=f"对话记录 '{source}' 的结构无效。",
            why="根元素必须是消息列表，或包含 'messages' 列表的字典。",
            how="参考格式：{\"messages\": [{\"role\": \"user\", \"contents\": [...]}]}",
            file_path=source,
        )

    try:
        return _MESSAGES_ADAPTER.validate_python(data)
    except ValidationError as e:
        details = [
            f"  位置 '{'.'.join(str(loc) for loc in err['loc'])}': {err['msg']}"
            for err in e.errors()
        ]
        raise TranscriptLoadError(
            what=f"对话记录 '{source}' 校验失败（{len(e.errors())} 个错误）。",
            why="\n".join(details),
            how="每条消息需要 role（system/user/assistant/tool）和 contents 列表，"
                "每个内容项需要 type（text/tool_call/tool_result）。",
            file_path=source,
        ) from e


def dump_messages(messages: Sequence[Message]) -> list[dict[str, Any]]:
    """把消息序列转换为可 JSON 序列化的字典列表。"""
    return [m.model_dump(mode="json") for m in messages]


def _parse(content: str, path: Path) -> Any:
    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            return json.loads(content)
        return yaml.safe_load(content)
    except json.JSONDecodeError as e:
        raise TranscriptLoadError(
            what=f"对话记录文件 '{path}' 的 JSON 格式无效。",
            why=str(e),
            how="请使用 JSON 校验工具检查文件语法。",
            file_path=str(path),
        ) from e
    except yaml.YAMLError as e:
        raise TranscriptLoadError(
            what=f"对话记录文件 '{path}' 的 YAML 格式无效。",
            why=str(e),
            how="请使用 YAML 格式校验工具检查文件语法。",
            file_path=str(path),
        ) from e

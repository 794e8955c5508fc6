"""
结构化异常体系。

每条异常由三段组成，full_message 按顺序拼接：
1. what：发生了什么
2. why：原因（可为空）
3. how：修复建议（可为空）

错误分两类：
- 配置错误（非正数阈值、未知策略名、None 输入、策略字段不合法）：
  ConfigValidationError，构造时或 reduce() 入口立即抛出
- 文件错误（策略文件、对话记录文件不可用）：FileLoadError 的子类

消息内容本身（无法识别的工具结果、找不到调用的 call_id）从不产生异常，
Reducer 一律降级处理。

示例::

    ConfigValidationError(
        what="target_count 必须大于 0，实际为 0。",
        why="MessageCountingReducer 需要保留至少一条非系统消息。",
        how="在策略文件中将 reducer.target_count 设置为正整数，例如 10。",
    )
"""

from __future__ import annotations

from typing import Any


class ContextReducerError(Exception):
    """
    Context Reducer 异常基类。

    所有 Context Reducer 异常都继承自此类，支持三段式错误消息。

    属性:
        what: 发生了什么
        why: 为什么发生
        how: 怎么修复
        details: 额外的上下文信息（用于调试）
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.what = what
        self.why = why
        self.how = how
        self.details = details or {}

        parts = [what]
        if why:
            parts.append(f"→ 原因：{why}")
        if how:
            parts.append(f"→ 修复建议：{how}")

        self.full_message = "\n".join(parts)
        super().__init__(self.full_message)

    def __str__(self) -> str:
        return self.full_message

    def to_dict(self) -> dict[str, Any]:
        """转换为字典格式，用于 JSON 输出。"""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "what": self.what,
        }
        if self.why:
            result["why"] = self.why
        if self.how:
            result["how"] = self.how
        if self.details:
            result["details"] = self.details
        return result


# === 配置相关异常 ===


class ConfigValidationError(ContextReducerError):
    """
    配置校验异常。

    在以下情况抛出，且总是在读取任何消息之前：
    - 策略参数非法（target_count / max_messages / recent_message_count <= 0）
    - 策略名称无法解析
    - reduce() 收到 None
    - YAML 策略文件字段校验失败

    示例::

        raise ConfigValidationError(
            what="策略文件 'context_reducer.yaml' 校验失败。",
            why="字段 'reducer.max_messages' 必须大于 0。",
            how="将 max_messages 设置为正整数。",
            config_path="context_reducer.yaml",
            field_path="reducer.max_messages",
        )
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        config_path: str = "",
        field_path: str = "",
        **kwargs: Any,
    ) -> None:
        details = {
            "config_path": config_path,
            "field_path": field_path,
        }
        details.update(kwargs)
        super().__init__(what=what, why=why, how=how, details=details)
        self.config_path = config_path
        self.field_path = field_path


# === 文件加载异常 ===


class FileLoadError(ContextReducerError):
    """
    输入文件（策略文件、对话记录文件）无法使用时的公共基类。

    属性:
        file_path: 出问题的文件路径
    """

    def __init__(
        self,
        what: str,
        why: str = "",
        how: str = "",
        file_path: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(what=what, why=why, how=how, details={"file_path": file_path, **kwargs})
        self.file_path = file_path


class PolicyLoadError(FileLoadError):
    """策略文件不存在、无法读取、不是合法 YAML 或顶层不是字典。"""


class TranscriptLoadError(FileLoadError):
    """
    对话记录文件加载异常。

    仅由文件加载层（CLI / transcript 模块）抛出。
    Reducer 本身从不因为消息内容而失败。
    """

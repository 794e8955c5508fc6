"""
策略配置的 Schema 定义与校验。

Reducer 的参数和日志级别通过 YAML 文件定义，本模块定义了 YAML 文件的
Schema 并负责校验。

# [Design Decision] 使用 Pydantic 模型作为 Schema 定义，
# 既能做校验，又能自动生成 JSON Schema 用于编辑器提示。
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, field_validator

from context_reducer.config.defaults import (
    DEFAULT_MAX_MESSAGES,
    DEFAULT_PRESERVED_TOOL_NAMES,
    DEFAULT_RECENT_MESSAGE_COUNT,
    DEFAULT_STRATEGY,
    DEFAULT_TARGET_COUNT,
    list_strategies,
    resolve_strategy_name,
)


class ReducerConfig(BaseModel):
    """
    Reducer 配置。

    不同策略只读取自己需要的字段：
    - counting / pair_preserving：target_count
    - content_aware：max_messages / recent_message_count / preserved_tool_names
    - passthrough：无
    """

    strategy: str = Field(
        default=DEFAULT_STRATEGY,
        description="策略名或别名：passthrough / counting / pair_preserving / content_aware",
    )
    target_count: int = Field(
        default=DEFAULT_TARGET_COUNT,
        description="counting / pair_preserving 的目标保留条数",
        gt=0,
    )
    max_messages: int = Field(
        default=DEFAULT_MAX_MESSAGES,
        description="content_aware 的视图总条数上限",
        gt=0,
    )
    recent_message_count: int = Field(
        default=DEFAULT_RECENT_MESSAGE_COUNT,
        description="content_aware 原样保留的最近消息数",
        gt=0,
    )
    preserved_tool_names: list[str] = Field(
        default_factory=lambda: sorted(DEFAULT_PRESERVED_TOOL_NAMES),
        description="结果永不压缩的工具名（区分大小写）",
    )

    @field_validator("strategy")
    @classmethod
    def _normalize_strategy(cls, value: str) -> str:
        """把别名规范化为策略名。"""
        canonical = resolve_strategy_name(value)
        if canonical is None:
            raise ValueError(
                f"未知策略 '{value}'。可用策略：{', '.join(list_strategies())}"
            )
        return canonical


class ObservabilityConfig(BaseModel):
    """可观测性配置。"""

    log_level: str = Field(default="INFO", description="日志级别：DEBUG / INFO / WARNING / ERROR")
    metrics_enabled: bool = Field(default=True, description="是否收集缩减指标")
    max_metric_points: int = Field(
        default=10_000,
        description="每个指标保留的最大数据点数量",
        gt=0,
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"无效的日志级别 '{value}'。")
        return level


class PolicyConfig(BaseModel):
    """
    完整的策略配置 — 对应 YAML 策略文件的根结构。

    每个字段都有合理的默认值，空文件即可使用。

    YAML 文件示例::

        version: "1.0"
        name: dataverse-agent
        reducer:
          strategy: content_aware
          max_messages: 20
          recent_message_count: 5
          preserved_tool_names: [list_tables, describe_table]
        observability:
          log_level: INFO
    """

    version: str = Field(default="1.0", description="策略版本")
    name: str = Field(default="default", description="策略名称")
    description: str = Field(default="", description="策略描述")

    reducer: ReducerConfig = Field(default_factory=ReducerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

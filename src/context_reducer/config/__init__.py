"""
Context Reducer 配置模块。

提供 YAML 策略加载、策略名称表和默认配置。
"""

from context_reducer.config.defaults import (
    COMPARISON_LINEUP,
    DEFAULT_PRESERVED_TOOL_NAMES,
    STRATEGY_ALIASES,
    list_strategies,
    resolve_strategy_name,
)
from context_reducer.config.loader import check_policy, load_policy, validate_policy_file
from context_reducer.config.schema import ObservabilityConfig, PolicyConfig, ReducerConfig

__all__ = [
    "COMPARISON_LINEUP",
    "DEFAULT_PRESERVED_TOOL_NAMES",
    "STRATEGY_ALIASES",
    "ObservabilityConfig",
    "PolicyConfig",
    "ReducerConfig",
    "check_policy",
    "list_strategies",
    "load_policy",
    "resolve_strategy_name",
    "validate_policy_file",
]

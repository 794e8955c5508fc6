"""
策略文件加载。

加载顺序：内置默认 → YAML 策略文件 → 运行时覆盖（通常来自命令行参数）。
显式给出路径时只读该文件；否则按 POLICY_SEARCH_PATHS 在当前目录查找，
找不到就使用内置默认值。

除了结构校验（Pydantic Schema），check_policy() 还会给出语义层面的提示，
例如 recent_message_count 会被 max_messages 截断、设置了当前策略不会读取的字段。
这些提示不阻止加载。

# [DX Decision] 校验失败时报告完整的字段路径（如 reducer.max_messages），
# 用户不必对照 Schema 猜是哪一层出错。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from context_reducer.config.defaults import POLICY_SEARCH_PATHS
from context_reducer.config.schema import PolicyConfig
from context_reducer.errors import ConfigValidationError, PolicyLoadError

logger = logging.getLogger(__name__)

# 每个策略实际读取的 ReducerConfig 字段
_STRATEGY_FIELDS: dict[str, frozenset[str]] = {
    "passthrough": frozenset(),
    "counting": frozenset({"target_count"}),
    "pair_preserving": frozenset({"target_count"}),
    "content_aware": frozenset({"max_messages", "recent_message_count", "preserved_tool_names"}),
}


def load_policy(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> PolicyConfig:
    """
    加载并校验策略配置。

    参数:
        path: YAML 策略文件路径，None 时在当前目录自动查找
        overrides: 深度合并到文件内容之上的覆盖项

    返回:
        PolicyConfig 实例

    异常:
        PolicyLoadError: 文件不存在、无法读取或不是 YAML 字典
        ConfigValidationError: 字段校验失败
    """
    source = _find_policy_file(path)
    raw = _read_policy_mapping(source) if source is not None else {}

    if overrides:
        raw = _deep_merge(raw, overrides)

    return _build_policy(raw, str(source) if source is not None else "<default>")


def check_policy(policy: PolicyConfig) -> list[str]:
    """
    对已通过结构校验的策略给出语义提示。

    返回:
        提示列表（空列表表示没有可疑之处）
    """
    hints: list[str] = []
    reducer = policy.reducer

    ignored = sorted(reducer.model_fields_set - _STRATEGY_FIELDS[reducer.strategy] - {"strategy"})
    if ignored:
        hints.append(
            f"策略 {reducer.strategy} 不读取字段 {', '.join(ignored)}，这些设置不会生效。"
        )

    if reducer.strategy == "content_aware":
        if reducer.recent_message_count > reducer.max_messages:
            hints.append(
                f"recent_message_count（{reducer.recent_message_count}）大于 max_messages"
                f"（{reducer.max_messages}），实际按 {reducer.max_messages} 处理。"
            )
        if not reducer.preserved_tool_names:
            hints.append("preserved_tool_names 为空，所有历史工具结果都会被压缩。")

    return hints


def validate_policy_file(path: str | Path) -> list[str]:
    """
    校验策略文件，收集错误而不抛出。

    供 validate 命令和 CI 使用。

    返回:
        错误信息列表（空列表表示校验通过）
    """
    try:
        load_policy(path=path)
    except (PolicyLoadError, ConfigValidationError) as e:
        return [e.full_message]
    return []


def _find_policy_file(path: str | Path | None) -> Path | None:
    if path is not None:
        return Path(path)

    for candidate in map(Path, POLICY_SEARCH_PATHS):
        if candidate.is_file():
            logger.info("使用策略文件：%s", candidate)
            return candidate

    logger.info("当前目录没有策略文件（%s），使用内置默认值。", ", ".join(POLICY_SEARCH_PATHS))
    return None


def _read_policy_mapping(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise PolicyLoadError(
            what=f"找不到策略文件 '{path}'。",
            why=f"解析后的绝对路径为 '{path.absolute()}'。",
            how="确认路径拼写，或去掉 --policy 让 CLI 在当前目录自动查找。",
            file_path=str(path),
        )

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PolicyLoadError(
            what=f"读取策略文件 '{path}' 失败。",
            why=str(e),
            how="确认文件可读且为 UTF-8 编码。",
            file_path=str(path),
        ) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise PolicyLoadError(
            what=f"策略文件 '{path}' 不是合法的 YAML。",
            why=str(e),
            how="检查缩进和括号是否配对；列表可以写成 [list_tables, describe_table]。",
            file_path=str(path),
        ) from e

    # 空文件等价于全部使用默认值
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PolicyLoadError(
            what=f"策略文件 '{path}' 顶层应为键值对，实际是 {type(data).__name__}。",
            why="策略文件按 reducer / observability 等小节组织。",
            how="示例：\n"
                "  reducer:\n"
                "    strategy: content_aware\n"
                "    max_messages: 40",
            file_path=str(path),
        )
    return data


def _build_policy(raw: dict[str, Any], source: str) -> PolicyConfig:
    try:
        return PolicyConfig.model_validate(raw)
    except ValidationError as e:
        problems = e.errors()
        paths = [".".join(str(part) for part in err["loc"]) for err in problems]
        raise ConfigValidationError(
            what=f"策略 '{source}' 有 {len(problems)} 处字段不合法。",
            why="\n".join(f"  {p}: {err['msg']}" for p, err in zip(paths, problems)),
            how="按字段路径修改策略文件，再用 'context-reducer validate <path>' 复查。",
            config_path=source,
            field_path=paths[0] if paths else "",
        ) from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """递归合并字典，override 优先；不修改 base。"""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged

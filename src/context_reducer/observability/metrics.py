"""
MetricsCollector — 把诊断事件转成内存指标。

MetricsCollector 本身就是一个 DiagnosticSink：Reducer 每发出一条事件，
事件中的整数字段都会被记录为一个数据点，指标名为 ``<kind>.<field>``，
并以 Reducer 名称作为标签。例如 ContentAwareReducer 的完成事件会产生
``completed.original_count``、``completed.final_count``、
``completed.condensed_count`` 三个指标。

数据点保存在每个指标独立的循环缓冲区（deque with maxlen）中，
长时间运行也不会无限增长。

基本用法::

    metrics = MetricsCollector()
    reducer = ToolPairPreservingReducer(target_count=10, sink=metrics)
    reducer.reduce(history)

    summary = metrics.summary("reduced.dropped_count", tags={"reducer": reducer.name})
    print(summary.p95)
"""

from __future__ import annotations

import threading
import time
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Any

from context_reducer.observability.events import EventKind, ReductionEvent


@dataclass
class MetricPoint:
    """
    单个指标数据点。

    属性:
        name: 指标名称
        value: 指标值
        timestamp: 时间戳
        tags: 标签（用于分组和过滤）
    """

    name: str
    value: float
    timestamp: float = field(default_factory=time.time)
    tags: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MetricsSummary:
    """
    指标汇总统计。

    属性:
        metric_name: 指标名称
        count: 数据点数量
        min: 最小值
        max: 最大值
        mean: 平均值
        p50: P50 百分位数（中位数）
        p95: P95 百分位数
        p99: P99 百分位数
    """

    metric_name: str
    count: int
    min: float
    max: float
    mean: float
    p50: float
    p95: float
    p99: float


class MetricsCollector:
    """
    指标收集器 — 同时也是一个 DiagnosticSink。

    同一个 Reducer 实例可以被多个会话并发调用，共享的只有这个收集器，
    因此写入操作由一把锁保护。指标只用于观测，不会反过来影响 Reducer。

    属性:
        max_points: 每个指标保留的最大数据点数量
        metrics: 指标存储（指标名 -> deque）
    """

    def __init__(self, max_points: int = 10000) -> None:
        self.max_points = max_points
        self.metrics: dict[str, deque[MetricPoint]] = {}
        self._event_counts: Counter[str] = Counter()
        self._lock = threading.Lock()

    def emit(self, event: ReductionEvent) -> None:
        """记录事件计数，并把事件中的整数字段写成数据点。"""
        tags = {"reducer": event.reducer}
        with self._lock:
            self._event_counts[event.kind.value] += 1
            for key, value in event.data.items():
                # bool 是 int 的子类，但不是计数
                if isinstance(value, int) and not isinstance(value, bool):
                    self._record_locked(f"{event.kind.value}.{key}", float(value), tags)

    def record(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """
        手动记录一个指标数据点。

        参数:
            name: 指标名称
            value: 指标值
            tags: 标签
        """
        with self._lock:
            self._record_locked(name, value, tags or {})

    def event_count(self, kind: EventKind | str) -> int:
        """返回某类事件被接收的次数。"""
        key = kind.value if isinstance(kind, EventKind) else kind
        with self._lock:
            return self._event_counts.get(key, 0)

    def summary(
        self,
        name: str,
        tags: dict[str, str] | None = None,
    ) -> MetricsSummary | None:
        """
        获取指标的汇总统计。

        参数:
            name: 指标名称
            tags: 标签过滤条件（只统计匹配的数据点）

        返回:
            MetricsSummary 实例，指标不存在或过滤后为空时返回 None
        """
        with self._lock:
            if name not in self.metrics:
                return None
            points = list(self.metrics[name])

        if tags:
            points = [p for p in points if _match_tags(p.tags, tags)]

        if not points:
            return None

        values = sorted(p.value for p in points)
        count = len(values)

        return MetricsSummary(
            metric_name=name,
            count=count,
            min=values[0],
            max=values[-1],
            mean=sum(values) / count,
            p50=_percentile(values, 0.50),
            p95=_percentile(values, 0.95),
            p99=_percentile(values, 0.99),
        )

    def export(self) -> dict[str, Any]:
        """导出事件计数和所有数据点。"""
        with self._lock:
            events = dict(self._event_counts)
            snapshot = {name: list(points) for name, points in self.metrics.items()}
        return {
            "events": events,
            "metrics": {
                name: [
                    {"value": p.value, "timestamp": p.timestamp, "tags": p.tags}
                    for p in points
                ]
                for name, points in snapshot.items()
            },
        }

    def reset(self) -> None:
        """清空所有事件计数和指标数据。"""
        with self._lock:
            self.metrics.clear()
            self._event_counts.clear()

    def get_metric_names(self) -> list[str]:
        """获取所有已记录的指标名称。"""
        with self._lock:
            return list(self.metrics.keys())

    def _record_locked(self, name: str, value: float, tags: dict[str, str]) -> None:
        if name not in self.metrics:
            self.metrics[name] = deque(maxlen=self.max_points)
        self.metrics[name].append(MetricPoint(name=name, value=value, tags=dict(tags)))


def _percentile(values: list[float], p: float) -> float:
    """线性插值百分位数，values 必须已排序。"""
    if not values:
        return 0.0
    if p <= 0:
        return values[0]
    if p >= 1:
        return values[-1]

    index = p * (len(values) - 1)
    lower_index = int(index)
    upper_index = lower_index + 1

    if upper_index >= len(values):
        return values[lower_index]

    fraction = index - lower_index
    return values[lower_index] * (1 - fraction) + values[upper_index] * fraction


def _match_tags(point_tags: dict[str, str], filter_tags: dict[str, str]) -> bool:
    return all(point_tags.get(k) == v for k, v in filter_tags.items())

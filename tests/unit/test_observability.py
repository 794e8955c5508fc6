"""
Observability 模块单元测试。

测试覆盖:
- LoggingSink: 按事件级别写入 logging
- NullSink / FanoutSink
- MetricsCollector: 事件计数、指标汇总、导出、线程安全
"""

from __future__ import annotations

import logging
import threading

import pytest

from context_reducer.observability import (
    DiagnosticSink,
    EventKind,
    EventLevel,
    FanoutSink,
    LoggingSink,
    MetricsCollector,
    NullSink,
    ReductionEvent,
)
from context_reducer.reducers import ContentAwareReducer, ToolPairPreservingReducer


def _event(kind: EventKind = EventKind.REDUCED, level: EventLevel = EventLevel.INFO, **data) -> ReductionEvent:
    return ReductionEvent(reducer="test", kind=kind, message="msg", level=level, data=data)


class TestSinks:
    def test_builtin_sinks_satisfy_protocol(self) -> None:
        for sink in (LoggingSink(), NullSink(), FanoutSink(), MetricsCollector()):
            assert isinstance(sink, DiagnosticSink)

    def test_logging_sink_info(self, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="context_reducer.reducers"):
            LoggingSink().emit(_event())
        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert record.getMessage() == "[test] msg"

    def test_logging_sink_warning(self, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="context_reducer.reducers"):
            LoggingSink().emit(_event(level=EventLevel.WARNING))
        assert caplog.records[-1].levelno == logging.WARNING

    def test_logging_sink_custom_logger(self, caplog) -> None:
        logger = logging.getLogger("my.app")
        with caplog.at_level(logging.INFO, logger="my.app"):
            LoggingSink(logger).emit(_event())
        assert caplog.records[-1].name == "my.app"

    def test_null_sink(self) -> None:
        assert NullSink().emit(_event()) is None

    def test_fanout_forwards_to_all(self, sink) -> None:
        metrics = MetricsCollector()
        FanoutSink(sink, metrics).emit(_event(total_count=3))
        assert len(sink.events) == 1
        assert metrics.event_count(EventKind.REDUCED) == 1

    def test_event_is_frozen(self) -> None:
        event = _event()
        with pytest.raises(AttributeError):
            event.message = "changed"  # type: ignore[misc]


class TestMetricsCollector:
    def test_counts_events_by_kind(self) -> None:
        metrics = MetricsCollector()
        metrics.emit(_event(EventKind.CONDENSED))
        metrics.emit(_event(EventKind.CONDENSED))
        metrics.emit(_event(EventKind.PRESERVED))
        assert metrics.event_count(EventKind.CONDENSED) == 2
        assert metrics.event_count("preserved") == 1
        assert metrics.event_count(EventKind.TRIMMED) == 0

    def test_int_fields_become_metrics(self) -> None:
        metrics = MetricsCollector()
        metrics.emit(_event(total_count=10, retained_count=4, call_id="c1", flag=True))
        assert sorted(metrics.get_metric_names()) == ["reduced.retained_count", "reduced.total_count"]

    def test_summary(self) -> None:
        metrics = MetricsCollector()
        for value in (1, 2, 3, 4):
            metrics.emit(_event(total_count=value))
        summary = metrics.summary("reduced.total_count")
        assert summary is not None
        assert summary.count == 4
        assert summary.min == 1
        assert summary.max == 4
        assert summary.mean == 2.5

    def test_summary_tag_filter(self) -> None:
        metrics = MetricsCollector()
        metrics.record("latency", 1.0, {"reducer": "a"})
        metrics.record("latency", 9.0, {"reducer": "b"})
        summary = metrics.summary("latency", tags={"reducer": "b"})
        assert summary is not None
        assert summary.count == 1
        assert summary.max == 9.0
        assert metrics.summary("latency", tags={"reducer": "c"}) is None

    def test_summary_unknown_metric(self) -> None:
        assert MetricsCollector().summary("nope") is None

    def test_ring_buffer_bound(self) -> None:
        metrics = MetricsCollector(max_points=3)
        for value in range(10):
            metrics.record("m", float(value))
        summary = metrics.summary("m")
        assert summary is not None
        assert summary.count == 3
        assert summary.min == 7.0

    def test_export_and_reset(self) -> None:
        metrics = MetricsCollector()
        metrics.emit(_event(total_count=5))
        exported = metrics.export()
        assert exported["events"] == {"reduced": 1}
        assert exported["metrics"]["reduced.total_count"][0]["value"] == 5.0
        assert exported["metrics"]["reduced.total_count"][0]["tags"] == {"reducer": "test"}

        metrics.reset()
        assert metrics.export() == {"events": {}, "metrics": {}}

    def test_shared_collector_across_threads(self, dataverse_transcript) -> None:
        metrics = MetricsCollector()
        reducer = ContentAwareReducer(max_messages=8, recent_message_count=2, sink=metrics)
        views: list[int] = []

        def worker() -> None:
            for _ in range(20):
                views.append(len(reducer.reduce(dataverse_transcript)))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert set(views) == {8}
        assert metrics.event_count(EventKind.COMPLETED) == 80

    def test_collects_reducer_metrics(self, mb) -> None:
        metrics = MetricsCollector()
        history = [mb.call("c1", "t"), mb.result("c1"), mb.user("a"), mb.user("b")]
        ToolPairPreservingReducer(target_count=2, sink=metrics).reduce(history)

        summary = metrics.summary("reduced.dropped_count", tags={"reducer": "pair_preserving"})
        assert summary is not None
        assert summary.max == 2
        assert metrics.event_count(EventKind.TOOL_CONTEXT_DROPPED) == 1

    def test_readers_safe_while_new_metrics_appear(self) -> None:
        metrics = MetricsCollector()
        errors: list[BaseException] = []
        done = threading.Event()

        def writer() -> None:
            # 每条事件都带一个新字段，持续产生新的指标名
            for i in range(2000):
                metrics.emit(
                    ReductionEvent(reducer="r", kind=EventKind.REDUCED, message="m", data={f"f{i}": i})
                )
            done.set()

        def reader() -> None:
            try:
                while not done.is_set():
                    metrics.export()
                    metrics.get_metric_names()
                    metrics.summary("reduced.f0")
            except RuntimeError as e:
                errors.append(e)

        threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert len(metrics.get_metric_names()) == 2000
        assert metrics.event_count(EventKind.REDUCED) == 2000

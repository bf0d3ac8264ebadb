# cx_hub/metrics.py
"""
进程内的可观测性计数器。

每个提供方在成功翻译后按字符数递增 `translate.<provider>.charcount`。
计数只增不减；记录失败只会写一条警告日志，绝不影响翻译本身。
"""

import threading
from collections import Counter
from collections.abc import Callable

import structlog

logger = structlog.get_logger(__name__)

MetricSink = Callable[[str, int], None]


class MetricsRegistry:
    """单调递增计数器的集合，可附加外部 sink（例如转发到 Prometheus 客户端）。"""

    def __init__(self) -> None:
        self._counters: Counter[str] = Counter()
        self._sinks: list[MetricSink] = []
        self._lock = threading.Lock()

    def add_sink(self, sink: MetricSink) -> None:
        self._sinks.append(sink)

    def increment(self, name: str, value: int = 1) -> None:
        if value < 0:
            logger.warning("忽略负的计数增量。", metric=name, value=value)
            return
        with self._lock:
            self._counters[name] += value
        for sink in self._sinks:
            try:
                sink(name, value)
            except Exception:
                logger.warning("指标 sink 写入失败，已忽略。", metric=name, exc_info=True)

    def get(self, name: str) -> int:
        with self._lock:
            return self._counters[name]

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._counters)

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()


metrics = MetricsRegistry()


def charcount_metric(provider: str) -> str:
    return f"translate.{provider}.charcount"

"""In-process request metrics kept in a bounded ring buffer."""
from __future__ import annotations

import resource
import sys
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from eduverse.core.settings import settings

RECENT_SLOW_LIMIT = 10


@dataclass(frozen=True)
class RequestMetric:
    """Timing of a single handled request."""

    method: str
    path: str
    duration_ms: float
    status_code: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


def max_rss_mb() -> float:
    """Return the peak resident set size of this process in megabytes."""
    usage = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # Linux reports kilobytes, macOS bytes.
    divisor = 1024 * 1024 if sys.platform == "darwin" else 1024
    return round(usage / divisor, 2)


class MetricsSink:
    """Thread-safe store of the most recent request metrics.

    Once ``capacity`` entries are held the oldest ones are discarded.
    """

    def __init__(
        self,
        capacity: int | None = None,
        slow_threshold_ms: float | None = None,
    ) -> None:
        self._entries: deque[RequestMetric] = deque(
            maxlen=capacity or settings.metrics_buffer_size
        )
        self.slow_threshold_ms = (
            settings.slow_request_ms if slow_threshold_ms is None else slow_threshold_ms
        )
        self._lock = threading.Lock()
        self.started_at = time.monotonic()

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def uptime(self) -> float:
        """Seconds since the sink was created."""
        return round(time.monotonic() - self.started_at, 2)

    def is_slow(self, metric: RequestMetric) -> bool:
        return metric.duration_ms > self.slow_threshold_ms

    def record(self, metric: RequestMetric) -> None:
        with self._lock:
            self._entries.append(metric)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def summary(self) -> dict[str, Any]:
        """Aggregate the buffered metrics into the ``GET /metrics`` payload."""
        with self._lock:
            entries = list(self._entries)

        endpoints: dict[str, dict[str, Any]] = {}
        for metric in entries:
            key = f"{metric.method} {metric.path}"
            stats = endpoints.setdefault(
                key, {"count": 0, "totalDuration": 0.0, "avgDuration": 0.0, "maxDuration": 0.0}
            )
            stats["count"] += 1
            stats["totalDuration"] += metric.duration_ms
            stats["maxDuration"] = max(stats["maxDuration"], round(metric.duration_ms, 2))
        for stats in endpoints.values():
            stats["totalDuration"] = round(stats["totalDuration"], 2)
            stats["avgDuration"] = round(stats["totalDuration"] / stats["count"], 2)

        slow = [metric for metric in entries if self.is_slow(metric)]
        total_duration = sum(metric.duration_ms for metric in entries)
        return {
            "summary": {
                "totalRequests": len(entries),
                "avgDuration": round(total_duration / len(entries), 2) if entries else 0,
                "slowRequests": len(slow),
                "uptime": self.uptime,
            },
            "memory": {"maxRssMb": max_rss_mb()},
            "endpoints": endpoints,
            "recentSlowRequests": [
                {
                    "method": metric.method,
                    "path": metric.path,
                    "duration": round(metric.duration_ms, 2),
                    "statusCode": metric.status_code,
                    "timestamp": metric.timestamp.isoformat(),
                }
                for metric in slow[-RECENT_SLOW_LIMIT:]
            ],
        }

    def health(self) -> dict[str, Any]:
        """Return a coarse status flag based on process memory."""
        memory = max_rss_mb()
        return {
            "status": "warning" if memory > settings.high_memory_mb else "healthy",
            "uptime": self.uptime,
            "memory": {"maxRssMb": memory},
            "timestamp": datetime.now(UTC).isoformat(),
        }


_metrics_sink: MetricsSink | None = None


def get_metrics_sink() -> MetricsSink:
    """Return the process-wide metrics sink, creating it on first use."""
    global _metrics_sink
    if _metrics_sink is None:
        _metrics_sink = MetricsSink()
    return _metrics_sink

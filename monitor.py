"""
monitor.py
==========

Request metrics for the product mix API:
- Response time and error tracking
- Process memory usage
- Metrics snapshots and summaries
"""

import gc
import logging
import os
import threading
import time
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from typing import Any, Dict, List

import psutil

logger = logging.getLogger(__name__)

MAX_RESPONSE_TIMES = 1000
MAX_SNAPSHOTS = 100


@dataclass
class PerformanceMetrics:
    """Performance metrics data structure"""
    timestamp: str
    memory_usage: Dict[str, float]
    cpu_usage: float
    requests_per_second: float
    average_response_time: float
    error_rate: float


class PerformanceMonitor:
    """Collects per-request timings and process metrics"""

    def __init__(self, enable_monitoring: bool = True):
        self.enable_monitoring = enable_monitoring
        self.metrics_history: List[PerformanceMetrics] = []
        self.request_count = 0
        self.error_count = 0
        self.response_times: List[float] = []
        self.start_time = time.time()
        self._lock = threading.Lock()

    def record_request(self, response_time: float, is_error: bool = False):
        """Record a request and its metrics"""
        if not self.enable_monitoring:
            return
        with self._lock:
            self.request_count += 1
            self.response_times.append(response_time)
            if is_error:
                self.error_count += 1
            # Keep only the most recent response times
            if len(self.response_times) > MAX_RESPONSE_TIMES:
                self.response_times = self.response_times[-MAX_RESPONSE_TIMES:]

    def collect_metrics(self) -> PerformanceMetrics:
        """Take a metrics snapshot and add it to the history"""
        with self._lock:
            uptime = time.time() - self.start_time
            requests_per_second = self.request_count / uptime if uptime > 0 else 0
            avg_response_time = (
                sum(self.response_times) / len(self.response_times)
                if self.response_times else 0
            )
            error_rate = (
                self.error_count / self.request_count
                if self.request_count > 0 else 0
            )

        process = psutil.Process(os.getpid())
        metrics = PerformanceMetrics(
            timestamp=datetime.now().isoformat(),
            memory_usage=self.get_memory_usage(),
            cpu_usage=process.cpu_percent(),
            requests_per_second=requests_per_second,
            average_response_time=avg_response_time,
            error_rate=error_rate,
        )

        with self._lock:
            self.metrics_history.append(metrics)
            if len(self.metrics_history) > MAX_SNAPSHOTS:
                self.metrics_history = self.metrics_history[-MAX_SNAPSHOTS:]

        logger.debug(f"Performance metrics: {asdict(metrics)}")
        return metrics

    def get_current_metrics(self) -> Dict[str, Any]:
        """Get the latest snapshot, or {} if none was taken"""
        with self._lock:
            if not self.metrics_history:
                return {}
            latest = self.metrics_history[-1]
        return asdict(latest)

    def get_metrics_summary(self, hours: int = 1) -> Dict[str, Any]:
        """Get metrics summary for the last N hours"""
        cutoff_time = datetime.now() - timedelta(hours=hours)
        with self._lock:
            recent_metrics = [
                m for m in self.metrics_history
                if datetime.fromisoformat(m.timestamp) > cutoff_time
            ]
            request_count = self.request_count
            error_count = self.error_count

        summary: Dict[str, Any] = {
            'period_hours': hours,
            'sample_count': len(recent_metrics),
            'total_requests': request_count,
            'total_errors': error_count,
            'uptime_seconds': round(time.time() - self.start_time, 2),
        }
        if not recent_metrics:
            return summary

        count = len(recent_metrics)
        summary.update({
            'average_memory_rss_mb': round(sum(m.memory_usage.get('rss_mb', 0) for m in recent_metrics) / count, 2),
            'average_cpu_percent': round(sum(m.cpu_usage for m in recent_metrics) / count, 2),
            'average_requests_per_second': round(sum(m.requests_per_second for m in recent_metrics) / count, 2),
            'average_response_time_ms': round(sum(m.average_response_time for m in recent_metrics) / count * 1000, 2),
            'average_error_rate': round(sum(m.error_rate for m in recent_metrics) / count * 100, 2),
        })
        return summary

    def get_memory_usage(self) -> Dict[str, Any]:
        """Get process memory usage in MB"""
        process = psutil.Process(os.getpid())
        memory_info = process.memory_info()
        return {
            'rss_mb': round(memory_info.rss / 1024 / 1024, 2),
            'vms_mb': round(memory_info.vms / 1024 / 1024, 2),
            'percent': round(process.memory_percent(), 2),
            'gc_counts': gc.get_count(),
        }

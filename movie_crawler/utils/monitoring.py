"""
Monitoring and metrics collection for the movie crawler.
"""

import time
import logging
import threading
from typing import Dict, Optional, Any
from dataclasses import dataclass

from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest
from prometheus_client import start_http_server


@dataclass
class Metric:
    """Latest value of one metric."""
    name: str
    description: str
    metric_type: str  # counter, gauge, histogram
    current_value: float = 0.0


class MetricsCollector:
    """Collects crawler metrics and mirrors them into a Prometheus registry."""

    def __init__(self, prometheus_port: int = 8000):
        self.logger = logging.getLogger(__name__)
        self.metrics: Dict[str, Metric] = {}
        self.prometheus_port = prometheus_port
        self._lock = threading.Lock()

        # Each collector owns a registry so several crawls can coexist
        self.prometheus_registry = CollectorRegistry()
        self.prometheus_metrics = {
            'listing_pages_total': Counter(
                'crawler_listing_pages_total',
                'Total number of listing pages fetched',
                registry=self.prometheus_registry
            ),
            'detail_pages_total': Counter(
                'crawler_detail_pages_total',
                'Total number of detail pages fetched',
                registry=self.prometheus_registry
            ),
            'movies_indexed_total': Counter(
                'crawler_movies_indexed_total',
                'Total number of movies inserted into the index',
                registry=self.prometheus_registry
            ),
            'errors_total': Counter(
                'crawler_errors_total',
                'Total number of crawl errors',
                ['error_type'],
                registry=self.prometheus_registry
            ),
            'response_time_seconds': Histogram(
                'crawler_response_time_seconds',
                'Response time for HTTP requests',
                registry=self.prometheus_registry
            ),
            'queue_size': Gauge(
                'crawler_queue_size',
                'Number of detail pages waiting for a worker',
                registry=self.prometheus_registry
            ),
            'active_workers': Gauge(
                'crawler_active_workers',
                'Number of workers processing a detail page',
                registry=self.prometheus_registry
            ),
        }

    def start_prometheus_server(self):
        """Start Prometheus metrics HTTP server."""
        try:
            start_http_server(self.prometheus_port, registry=self.prometheus_registry)
            self.logger.info(f"Prometheus metrics server started on port {self.prometheus_port}")
        except OSError as e:
            self.logger.error(f"Failed to start Prometheus server: {e}")

    def record_metric(self, name: str, value: float, labels: Optional[Dict[str, str]] = None,
                      description: str = "", metric_type: str = "gauge"):
        """Record a metric value."""
        labels = labels or {}
        key = self._metric_key(name, labels)

        with self._lock:
            if key not in self.metrics:
                self.metrics[key] = Metric(
                    name=name,
                    description=description,
                    metric_type=metric_type
                )

            metric = self.metrics[key]
            previous = metric.current_value
            metric.current_value = value

        prom_metric = self.prometheus_metrics.get(name)
        if prom_metric is None:
            return
        if labels:
            prom_metric = prom_metric.labels(**labels)

        if metric_type == "counter":
            prom_metric.inc(value - previous)
        elif metric_type == "histogram":
            prom_metric.observe(value)
        else:
            prom_metric.set(value)

    @staticmethod
    def _metric_key(name: str, labels: Dict[str, str]) -> str:
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"

    def increment_counter(self, name: str, labels: Optional[Dict[str, str]] = None,
                          description: str = ""):
        """Increment a counter metric."""
        metric = self.metrics.get(self._metric_key(name, labels or {}))
        current_value = metric.current_value if metric else 0
        self.record_metric(name, current_value + 1, labels, description, "counter")

    def set_gauge(self, name: str, value: float, labels: Optional[Dict[str, str]] = None,
                  description: str = ""):
        """Set a gauge metric value."""
        self.record_metric(name, value, labels, description, "gauge")

    def observe_histogram(self, name: str, value: float, labels: Optional[Dict[str, str]] = None,
                          description: str = ""):
        """Record a histogram observation."""
        self.record_metric(name, value, labels, description, "histogram")

    def get_current_values(self) -> Dict[str, float]:
        """Get current values of all metrics."""
        with self._lock:
            return {key: metric.current_value for key, metric in self.metrics.items()}

    def export_prometheus(self) -> bytes:
        """Render the registry in the Prometheus text format."""
        return generate_latest(self.prometheus_registry)


class CrawlerMonitor:
    """High-level monitoring interface for the crawler."""

    def __init__(self, metrics_collector: Optional[MetricsCollector] = None):
        self.metrics = metrics_collector or MetricsCollector()
        self.logger = logging.getLogger(__name__)
        self.start_time = time.time()

    def record_listing_fetched(self, url: str, response_time: float):
        self.metrics.increment_counter('listing_pages_total', description='Listing pages fetched')
        self.metrics.observe_histogram('response_time_seconds', response_time,
                                       description='HTTP response time')

    def record_detail_fetched(self, url: str, response_time: float):
        self.metrics.increment_counter('detail_pages_total', description='Detail pages fetched')
        self.metrics.observe_histogram('response_time_seconds', response_time,
                                       description='HTTP response time')

    def record_movie_indexed(self, name: str, term_count: int):
        self.metrics.increment_counter('movies_indexed_total', description='Movies indexed')

    def record_error(self, error_type: str, error_message: str = ""):
        """Record an error event."""
        labels = {'error_type': error_type}
        self.metrics.increment_counter('errors_total', labels, 'Crawl errors')

    def update_queue_size(self, size: int):
        self.metrics.set_gauge('queue_size', size, description='Detail pages in queue')

    def update_active_workers(self, count: int):
        self.metrics.set_gauge('active_workers', count, description='Active workers')

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all metrics."""
        current_values = self.metrics.get_current_values()
        runtime = time.time() - self.start_time

        return {
            'runtime_seconds': runtime,
            'metrics': current_values,
            'rates': {
                'detail_pages_per_second': (
                    current_values.get('detail_pages_total', 0) / runtime if runtime > 0 else 0
                ),
            }
        }


def initialize_monitoring(enable_prometheus: bool = False, prometheus_port: int = 8000) -> CrawlerMonitor:
    """Create a monitor and start its Prometheus endpoint when enabled."""
    metrics_collector = MetricsCollector(prometheus_port)
    if enable_prometheus:
        metrics_collector.start_prometheus_server()
    return CrawlerMonitor(metrics_collector)

import logging
import threading
from prometheus_client import CollectorRegistry, Counter, Gauge, REGISTRY, start_http_server

from .metrics import Metrics, cache_hit_ratio


logger = logging.getLogger(__name__)


class PrometheusExporter:
    def __init__(self, metrics: Metrics, port: int = 8000, registry: CollectorRegistry = REGISTRY) -> None:
        self.metrics = metrics
        self.port = port
        self.registry = registry
        self._server_thread: threading.Thread | None = None
        self._stop_event = threading.Event()

        self.requests_total = Counter('poller_requests_total', 'Total number of poll requests', registry=registry)
        self.cache_hits_total = Counter(
            'poller_cache_hits_total', 'Requests answered with 304 Not Modified', registry=registry
        )
        self.errors_total = Counter('poller_errors_total', 'Total number of failed poll requests', registry=registry)
        self.bytes_total = Counter('poller_bytes_total', 'Total payload bytes downloaded', registry=registry)
        self.avg_fetch_duration_seconds = Gauge(
            'poller_avg_fetch_duration_seconds', 'Average fetch duration in seconds', registry=registry
        )
        self.cache_hit_ratio = Gauge(
            'poller_cache_hit_ratio', 'Share of answered requests served from cache', registry=registry
        )

        self._last_requests = 0
        self._last_cached = 0
        self._last_errors = 0
        self._last_bytes = 0

    def start(self) -> None:
        start_http_server(self.port, registry=self.registry)
        logger.info("Prometheus metrics server started on port %d", self.port)

        self._server_thread = threading.Thread(
            target=self._update_metrics_loop,
            name="prometheus-updater",
            daemon=True
        )
        self._server_thread.start()

    def _update_metrics_loop(self) -> None:
        while not self._stop_event.is_set():
            self.update_metrics()
            self._stop_event.wait(5.0)

    def update_metrics(self) -> None:
        totals, _ = self.metrics.snapshot()

        requests_delta = totals.requests - self._last_requests
        cached_delta = totals.cached - self._last_cached
        errors_delta = totals.errors - self._last_errors
        bytes_delta = totals.bytes - self._last_bytes

        if requests_delta > 0:
            self.requests_total.inc(requests_delta)
        if cached_delta > 0:
            self.cache_hits_total.inc(cached_delta)
        if errors_delta > 0:
            self.errors_total.inc(errors_delta)
        if bytes_delta > 0:
            self.bytes_total.inc(bytes_delta)

        if totals.requests > 0:
            self.avg_fetch_duration_seconds.set(totals.fetch_ms_sum / totals.requests / 1000.0)
        self.cache_hit_ratio.set(cache_hit_ratio(totals))

        self._last_requests = totals.requests
        self._last_cached = totals.cached
        self._last_errors = totals.errors
        self._last_bytes = totals.bytes

    def stop(self) -> None:
        self._stop_event.set()
        if self._server_thread:
            self._server_thread.join(timeout=2.0)

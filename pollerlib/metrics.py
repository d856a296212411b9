import threading
import time
from dataclasses import dataclass

from .outcome import Cached, Failed, Outcome


@dataclass
class Totals:
    requests: int = 0
    fresh: int = 0
    cached: int = 0
    errors: int = 0
    bytes: int = 0
    fetch_ms_sum: float = 0.0


class Metrics:
    def __init__(self):
        self._totals = Totals()
        self._lock = threading.Lock()
        self._start = time.time()

    def record_fetch(self, outcome: Outcome, bytes_read: int, fetch_ms: float) -> None:
        with self._lock:
            self._totals.requests += 1
            if isinstance(outcome, Failed):
                self._totals.errors += 1
            elif isinstance(outcome, Cached):
                self._totals.cached += 1
            else:
                self._totals.fresh += 1
            self._totals.bytes += max(0, bytes_read)
            self._totals.fetch_ms_sum += fetch_ms

    def snapshot(self) -> tuple[Totals, float]:
        with self._lock:
            t = Totals(
                requests=self._totals.requests,
                fresh=self._totals.fresh,
                cached=self._totals.cached,
                errors=self._totals.errors,
                bytes=self._totals.bytes,
                fetch_ms_sum=self._totals.fetch_ms_sum,
            )
        elapsed = max(1e-6, time.time() - self._start)
        return t, elapsed


def cache_hit_ratio(totals: Totals) -> float:
    answered = totals.fresh + totals.cached
    if answered == 0:
        return 0.0
    return totals.cached / answered


class StatsLogger(threading.Thread):
    daemon = True

    def __init__(self, metrics: Metrics, interval_s: float, log_fn):
        super().__init__(name="stats-logger")
        self._metrics = metrics
        self._interval = max(0.5, interval_s)
        self._log = log_fn
        self._stop_event = threading.Event()

    def run(self) -> None:
        while not self._stop_event.is_set():
            self._stop_event.wait(self._interval)
            if self._stop_event.is_set():
                break
            totals, _ = self._metrics.snapshot()
            avg_ms = totals.fetch_ms_sum / max(1, totals.requests)
            self._log(
                "Poll stats: requests=%d, fresh=%d, not_modified=%d, errors=%d, KB=%.1f, avg_fetch_ms=%.1f",
                totals.requests,
                totals.fresh,
                totals.cached,
                totals.errors,
                totals.bytes / 1024,
                avg_ms,
            )

    def stop(self) -> None:
        self._stop_event.set()

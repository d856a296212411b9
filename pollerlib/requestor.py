import logging
import time
from typing import Any, Callable, Mapping, Optional

from .cache import CacheEntry, LRUCache
from .config import FetcherConfig
from .kinds import ALL_DATA_PATH, VersionedDataKind
from .metrics import Metrics
from .net import Urllib3Transport
from .outcome import Cached, Failed, Fresh, Outcome, classify_response
from .request import RequestBuilder
from .types import TransportProtocol


logger = logging.getLogger(__name__)

SuccessCallback = Callable[[bytes], None]
ErrorCallback = Callable[[BaseException], None]
ResultCallback = Callable[[Optional[BaseException], Optional[bytes]], None]
OutcomeListener = Callable[[str, Optional[int], Outcome], None]


class Requestor:
    """Fetches flag, segment and bulk data with ETag-validated caching.

    Each call is a single attempt: the outcome is delivered once through the
    callbacks and nothing is retried here. Callers are expected to have at
    most one fetch outstanding at a time.
    """

    def __init__(
        self,
        config: FetcherConfig,
        transport: TransportProtocol | None = None,
        headers: Optional[Mapping[str, str]] = None,
        metrics: Optional[Metrics] = None,
        outcome_listener: Optional[OutcomeListener] = None,
    ):
        self.config = config
        self.builder = RequestBuilder(config, headers)
        self.cache = LRUCache(config.cache_size)
        self._owns_transport = transport is None
        self.transport = transport or Urllib3Transport(config.max_connections)
        self.metrics = metrics or Metrics()
        self.outcome_listener = outcome_listener

    def fetch(self, resource_path: str, on_success: SuccessCallback, on_error: ErrorCallback) -> Any:
        request = self.builder.build(resource_path)
        url = request.url
        cached = self.cache.get(url)
        if cached is not None:
            request = request.with_header("If-None-Match", cached.etag)
        t0 = time.perf_counter()

        def on_response(error, status, headers, body) -> None:
            fetch_ms = (time.perf_counter() - t0) * 1000.0
            if error is not None:
                outcome: Outcome = Failed(error)
            else:
                outcome = classify_response(status, headers, body, cached)
            self._record(resource_path, url, status, outcome, fetch_ms)
            if isinstance(outcome, Fresh):
                self._store(url, outcome)
                on_success(outcome.body)
            elif isinstance(outcome, Cached):
                on_success(outcome.body)
            else:
                on_error(outcome.error)

        return self.transport.send(request, on_response)

    def _store(self, url: str, outcome: Fresh) -> None:
        if outcome.etag is None:
            # nothing to revalidate with; drop any entry for an older body
            self.cache.delete(url)
            return
        evicted = self.cache.set(url, CacheEntry(etag=outcome.etag, body=outcome.body))
        if evicted is not None:
            logger.debug("Evicted cached response for %s", evicted)

    def _record(self, resource_path: str, url: str, status: Optional[int], outcome: Outcome, fetch_ms: float) -> None:
        if isinstance(outcome, Failed):
            logger.warning("Request for %s failed: %s", url, outcome.error)
            self.metrics.record_fetch(outcome, 0, fetch_ms)
        else:
            logger.debug(
                "%s response status:[%s] From cache? [%s] ETag:[%s]",
                url,
                status,
                isinstance(outcome, Cached),
                outcome.etag,
            )
            self.metrics.record_fetch(outcome, len(outcome.body) if isinstance(outcome, Fresh) else 0, fetch_ms)
        if self.outcome_listener is not None:
            self.outcome_listener(resource_path, status, outcome)

    def _request(self, resource_path: str, callback: ResultCallback) -> Any:
        return self.fetch(
            resource_path,
            lambda body: callback(None, body),
            lambda err: callback(err, None),
        )

    def request_object(self, kind: VersionedDataKind, key: str, callback: ResultCallback) -> Any:
        return self._request(kind.request_path + key, callback)

    def request_all_data(self, callback: ResultCallback) -> Any:
        return self._request(ALL_DATA_PATH, callback)

    def close(self) -> None:
        if self._owns_transport and hasattr(self.transport, "close"):
            self.transport.close()

    def __enter__(self) -> "Requestor":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

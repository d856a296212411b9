import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, Optional, Tuple

import urllib3

from .types import RequestDescriptor, TransportCallback


logger = logging.getLogger(__name__)

PoolKey = Tuple[Optional[str], Tuple[Tuple[str, str], ...]]


class Urllib3Transport:
    """Sends request descriptors on a worker pool and reports back by callback."""

    def __init__(self, max_connections: int = 4, workers: int = 1):
        self.max_connections = max_connections
        self._executor = ThreadPoolExecutor(max_workers=max(1, workers), thread_name_prefix="poller")
        self._pools: Dict[PoolKey, urllib3.PoolManager] = {}
        self._lock = threading.Lock()

    def _pool_for(self, request: RequestDescriptor) -> urllib3.PoolManager:
        key: PoolKey = (request.proxy_url, tuple(sorted((k, repr(v)) for k, v in request.tls_params.items())))
        with self._lock:
            pool = self._pools.get(key)
            if pool is None:
                tls = dict(request.tls_params)
                if request.proxy_url:
                    pool = urllib3.ProxyManager(
                        request.proxy_url, num_pools=1, maxsize=self.max_connections, retries=False, **tls
                    )
                else:
                    pool = urllib3.PoolManager(num_pools=1, maxsize=self.max_connections, retries=False, **tls)
                self._pools[key] = pool
            return pool

    def _request(self, request: RequestDescriptor, callback: TransportCallback) -> None:
        try:
            response = self._pool_for(request).request(
                request.method,
                request.url,
                headers=dict(request.headers),
                timeout=urllib3.Timeout(connect=request.connect_timeout, read=request.timeout),
                retries=False,
                preload_content=True,
            )
        except Exception as err:
            # urllib3 errors, but also bad header values and the like
            logger.debug("Transport error for %s: %s", request.url, err)
            callback(err, None, None, None)
            return
        callback(None, response.status, response.headers, response.data or b"")

    def send(self, request: RequestDescriptor, callback: TransportCallback) -> "Future[None]":
        return self._executor.submit(self._request, request, callback)

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        with self._lock:
            for pool in self._pools.values():
                pool.clear()
            self._pools.clear()

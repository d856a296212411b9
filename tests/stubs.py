from concurrent.futures import Future
from typing import Dict, List, Optional, Tuple

from pollerlib.types import RequestDescriptor, TransportCallback, TransportProtocol


class ScriptedTransport(TransportProtocol):
    """Answers each send() with the next scripted response, synchronously."""

    def __init__(self):
        self.requests: List[RequestDescriptor] = []
        self._script: List[Tuple[Optional[BaseException], Optional[int], Optional[Dict[str, str]], Optional[bytes]]] = []

    def respond(self, status: int, body: bytes = b"", etag: Optional[str] = None) -> "ScriptedTransport":
        headers = {"ETag": etag} if etag is not None else {}
        self._script.append((None, status, headers, body))
        return self

    def fail(self, error: BaseException) -> "ScriptedTransport":
        self._script.append((error, None, None, None))
        return self

    def send(self, request: RequestDescriptor, callback: TransportCallback) -> "Future[None]":
        self.requests.append(request)
        error, status, headers, body = self._script.pop(0)
        future: "Future[None]" = Future()
        callback(error, status, headers, body)
        future.set_result(None)
        return future

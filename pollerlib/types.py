from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Protocol


# (error, status, headers, body); error is None when a response arrived
TransportCallback = Callable[[Optional[BaseException], Optional[int], Optional[Mapping[str, str]], Optional[bytes]], None]


@dataclass(frozen=True)
class RequestDescriptor:
    url: str
    headers: Mapping[str, str]
    timeout: float
    connect_timeout: float
    tls_params: Mapping[str, Any] = field(default_factory=dict)
    proxy_url: Optional[str] = None
    method: str = "GET"

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        object.__setattr__(self, "tls_params", MappingProxyType(dict(self.tls_params)))

    def with_header(self, name: str, value: str) -> "RequestDescriptor":
        headers = dict(self.headers)
        headers[name] = value
        return replace(self, headers=headers)


class TransportProtocol(Protocol):
    def send(self, request: RequestDescriptor, callback: TransportCallback) -> Any: ...

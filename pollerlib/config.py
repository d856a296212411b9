from dataclasses import dataclass, field
from typing import Any, Dict, Optional


DEFAULT_BASE_URI = "https://sdk.launchdarkly.com"
DEFAULT_USER_AGENT = "PythonPoller/1.0"
DEFAULT_CACHE_SIZE = 100


@dataclass(frozen=True)
class FetcherConfig:
    sdk_key: str
    base_uri: str = DEFAULT_BASE_URI
    timeout: float = 5.0
    connect_timeout: Optional[float] = None
    tls_params: Dict[str, Any] = field(default_factory=dict)
    proxy_url: Optional[str] = None
    cache_size: int = DEFAULT_CACHE_SIZE
    user_agent: str = DEFAULT_USER_AGENT
    wrapper_name: Optional[str] = None
    wrapper_version: Optional[str] = None
    max_connections: int = 4

    def __post_init__(self) -> None:
        # frozen, so go through object.__setattr__
        object.__setattr__(self, "base_uri", self.base_uri.rstrip("/"))

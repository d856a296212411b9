from typing import Mapping, Optional

from .config import FetcherConfig
from .headers import default_headers
from .types import RequestDescriptor


class RequestBuilder:
    def __init__(self, config: FetcherConfig, headers: Optional[Mapping[str, str]] = None):
        self.config = config
        self.headers = dict(headers) if headers is not None else default_headers(config)

    def url_for(self, resource_path: str) -> str:
        return self.config.base_uri + resource_path

    def build(self, resource_path: str) -> RequestDescriptor:
        connect_timeout = self.config.connect_timeout
        if connect_timeout is None:
            connect_timeout = self.config.timeout
        return RequestDescriptor(
            url=self.url_for(resource_path),
            headers=self.headers,
            timeout=self.config.timeout,
            connect_timeout=connect_timeout,
            tls_params=self.config.tls_params,
            proxy_url=self.config.proxy_url,
        )

import urllib3
from urllib3 import exceptions as urllib3_exc

from pollerlib.config import FetcherConfig
from pollerlib.net import Urllib3Transport
from pollerlib.request import RequestBuilder


class FakeResponse:
    def __init__(self, status, headers, data):
        self.status = status
        self.headers = headers
        self.data = data


class FakePool:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def collect():
    results = []

    def callback(err, status, headers, body):
        results.append((err, status, headers, body))

    return results, callback


def test_send_delivers_response(monkeypatch):
    transport = Urllib3Transport()
    pool = FakePool(response=FakeResponse(200, {"ETag": "v1"}, b"payload"))
    monkeypatch.setattr(transport, "_pool_for", lambda request: pool)
    request = RequestBuilder(FetcherConfig(sdk_key="k", timeout=7.0, connect_timeout=1.0)).build("/sdk/latest-all")
    results, callback = collect()
    transport.send(request.with_header("If-None-Match", "v0"), callback).result()
    transport.close()

    assert results == [(None, 200, {"ETag": "v1"}, b"payload")]
    method, url, kwargs = pool.calls[0]
    assert (method, url) == ("GET", "https://sdk.launchdarkly.com/sdk/latest-all")
    assert kwargs["headers"]["If-None-Match"] == "v0"
    assert kwargs["retries"] is False
    assert kwargs["timeout"].connect_timeout == 1.0
    assert kwargs["timeout"].read_timeout == 7.0


def test_send_reports_transport_errors(monkeypatch):
    transport = Urllib3Transport()
    boom = urllib3_exc.NewConnectionError(None, "refused")
    monkeypatch.setattr(transport, "_pool_for", lambda request: FakePool(error=boom))
    results, callback = collect()
    transport.send(RequestBuilder(FetcherConfig(sdk_key="k")).build("/x"), callback).result()
    transport.close()
    assert results == [(boom, None, None, None)]


def test_send_reports_non_transport_errors(monkeypatch):
    transport = Urllib3Transport()
    bad_header = ValueError("Invalid header value b'bad\\nkey'")
    monkeypatch.setattr(transport, "_pool_for", lambda request: FakePool(error=bad_header))
    results, callback = collect()
    future = transport.send(RequestBuilder(FetcherConfig(sdk_key="bad\nkey")).build("/x"), callback)
    future.result()
    transport.close()
    assert results == [(bad_header, None, None, None)]


def test_pools_are_keyed_by_proxy_and_tls():
    transport = Urllib3Transport()
    direct = RequestBuilder(FetcherConfig(sdk_key="k")).build("/x")
    proxied = RequestBuilder(FetcherConfig(sdk_key="k", proxy_url="http://proxy.local:3128")).build("/x")
    pinned = RequestBuilder(FetcherConfig(sdk_key="k", tls_params={"cert_reqs": "CERT_NONE"})).build("/x")

    assert transport._pool_for(direct) is transport._pool_for(direct)
    assert isinstance(transport._pool_for(proxied), urllib3.ProxyManager)
    assert not isinstance(transport._pool_for(direct), urllib3.ProxyManager)
    assert transport._pool_for(pinned) is not transport._pool_for(direct)
    transport.close()
    assert transport._pools == {}

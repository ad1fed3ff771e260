import pytest
import httpx
from fastapi.testclient import TestClient

from hubproxy.config import ProxyConfig, get_proxy_config
from hubproxy.proxy.dispatcher import UpstreamDispatcher, get_upstream_dispatcher
from hubproxy.proxy.models import RequestInfo

CONFIG_VARS = (
    "PROXY_HOSTNAME",
    "PROXY_PROTOCOL",
    "PATHNAME_REGEX",
    "UA_WHITELIST_REGEX",
    "UA_BLACKLIST_REGEX",
    "URL302",
    "IP_WHITELIST_REGEX",
    "IP_BLACKLIST_REGEX",
    "DEBUG",
)

ORIGIN_HOSTNAME = "mirror.example.com"


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every proxy policy variable so tests start from the defaults."""
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def make_info():
    """Build a RequestInfo without going through starlette."""

    def _make(
        path="/v2/",
        query="",
        method="GET",
        headers=None,
        client_ip="203.0.113.7",
        origin_hostname=ORIGIN_HOSTNAME,
    ):
        url = f"https://{origin_hostname}{path}" + (f"?{query}" if query else "")
        return RequestInfo(
            method=method,
            url=url,
            path=path,
            query=query,
            headers=httpx.Headers(headers or {}),
            client_ip=client_ip,
            origin_hostname=origin_hostname,
        )

    return _make


@pytest.fixture
def proxy_client(clean_env):
    """
    TestClient factory for the full app, with the upstream replaced by an
    httpx.MockTransport handler and, optionally, a fixed ProxyConfig.
    """
    from hubproxy.server import app

    def _make(handler, config: ProxyConfig = None, raise_server_exceptions=True):
        transport = httpx.MockTransport(handler)
        app.dependency_overrides[get_upstream_dispatcher] = lambda: UpstreamDispatcher(
            transport=transport
        )
        if config is not None:
            app.dependency_overrides[get_proxy_config] = lambda: config
        return TestClient(
            app,
            base_url=f"http://{ORIGIN_HOSTNAME}",
            raise_server_exceptions=raise_server_exceptions,
        )

    yield _make
    app.dependency_overrides.clear()

"""Maps an inbound path to the upstream registry host."""

from hubproxy.config import ProxyConfig
from hubproxy.proxy.models import RequestInfo, UpstreamTarget

AUTH_HOSTNAME = "auth.docker.io"
INDEX_HOSTNAME = "index.docker.io"

# Checked in order; the first segment found in the path wins
PATH_OVERRIDES = (
    ("/token", AUTH_HOSTNAME),
    ("/search", INDEX_HOSTNAME),
)


def resolve_hostname(path: str, default_hostname: str) -> str:
    for segment, hostname in PATH_OVERRIDES:
        if segment in path:
            return hostname
    return default_hostname


def resolve(info: RequestInfo, config: ProxyConfig) -> UpstreamTarget:
    """Resolve the upstream for a request. Path and query are copied verbatim."""
    hostname = resolve_hostname(info.path, config.proxy_hostname)
    url = f"{config.proxy_protocol}://{hostname}{info.path}"
    if info.query:
        url = f"{url}?{info.query}"
    return UpstreamTarget(hostname=hostname, protocol=config.proxy_protocol, url=url)

from dataclasses import dataclass

import httpx
from starlette.requests import Request

# Hop-by-hop headers that should NOT be forwarded (RFC 2616)
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
}


@dataclass(frozen=True)
class RequestInfo:
    """Immutable view of an inbound request, without its body."""

    method: str
    url: str
    path: str
    query: str
    headers: httpx.Headers
    client_ip: str
    origin_hostname: str

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent", "")

    @classmethod
    def from_request(cls, request: Request) -> "RequestInfo":
        return cls(
            method=request.method,
            url=str(request.url),
            path=request.url.path,
            query=request.url.query,
            headers=httpx.Headers(request.headers.raw),
            client_ip=request.client.host if request.client else "unknown",
            origin_hostname=request.url.hostname or "",
        )


@dataclass(frozen=True)
class UpstreamTarget:
    hostname: str
    protocol: str
    url: str

from typing import AsyncIterator, Optional

import httpx

from hubproxy.proxy.models import HOP_BY_HOP_HEADERS
from hubproxy.proxy.rewriter import rewrite

BODYLESS_METHODS = {"GET", "HEAD"}


def build_outbound_headers(
    inbound: httpx.Headers,
    origin_hostname: str,
    upstream_hostname: str,
    has_body: bool = True,
) -> httpx.Headers:
    """
    Prepare headers for forwarding to the upstream.

    Values mentioning the origin hostname are rewritten to the upstream one.
    ``host`` and hop-by-hop headers are left out; httpx sets them for the new
    destination. Without a body to forward, ``content-length`` goes too.
    """
    outbound = []
    for name, value in inbound.multi_items():
        name_lower = name.lower()
        if name_lower == "host" or name_lower in HOP_BY_HOP_HEADERS:
            continue
        if not has_body and name_lower == "content-length":
            continue
        if origin_hostname and origin_hostname in value:
            value = rewrite(value, origin_hostname, upstream_hostname)
        outbound.append((name, value))
    return httpx.Headers(outbound)


def outbound_body(
    method: str, stream: AsyncIterator[bytes]
) -> Optional[AsyncIterator[bytes]]:
    """The inbound body stream, untouched, for methods that carry one."""
    if method.upper() in BODYLESS_METHODS:
        return None
    return stream

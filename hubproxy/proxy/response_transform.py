"""
Rewrites upstream responses back to the origin hostname.

Textual bodies are read completely and rewritten; everything else (layer
blobs, manifests, ...) is streamed to the client as raw upstream bytes.
Which of the two happens is decided once, from the upstream headers.
"""

from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable, Optional, Union

import httpx
from starlette.responses import Response, StreamingResponse
from starlette.types import Receive, Scope, Send

from hubproxy.proxy.dispatcher import UpstreamResponse, UpstreamUnreachable
from hubproxy.proxy.models import HOP_BY_HOP_HEADERS
from hubproxy.proxy.rewriter import rewrite, rewrite_with_path_suffix
from hubproxy.proxy.routing import AUTH_HOSTNAME

AUTH_TOKEN_PATH = f"{AUTH_HOSTNAME}/token"

# Only valid for the raw upstream bytes, so dropped once a body is re-encoded
BODY_FRAMING_HEADERS = {"content-length", "content-encoding"}


@dataclass(frozen=True)
class BufferedBody:
    content: bytes


@dataclass(frozen=True)
class StreamedBody:
    chunks: AsyncIterator[bytes]


Body = Union[BufferedBody, StreamedBody]


def rewrite_headers(
    headers: httpx.Headers,
    upstream_hostname: str,
    origin_hostname: str,
    debug: bool = False,
) -> httpx.Headers:
    rewritten = []
    for name, value in headers.multi_items():
        name_lower = name.lower()
        if name_lower in HOP_BY_HOP_HEADERS:
            continue
        if debug and name_lower == "content-security-policy":
            continue
        if upstream_hostname and upstream_hostname in value:
            value = rewrite(value, upstream_hostname, origin_hostname)
        # The registry points clients at its token service with a host+path
        # realm, which the bare-hostname rule above never touches.
        if name_lower == "www-authenticate":
            value = value.replace(AUTH_TOKEN_PATH, f"{origin_hostname}/token", 1)
        rewritten.append((name, value))
    return httpx.Headers(rewritten)


def is_textual(content_type: str) -> bool:
    return "text/" in (content_type or "")


def rewrite_body(
    text: str,
    upstream_hostname: str,
    pathname_regex: str,
    origin_hostname: str,
) -> str:
    if pathname_regex:
        suffix = pathname_regex[1:] if pathname_regex.startswith("^") else pathname_regex
        return rewrite_with_path_suffix(text, upstream_hostname, suffix, origin_hostname)
    return rewrite(text, upstream_hostname, origin_hostname)


async def read_body(
    upstream: UpstreamResponse,
    buffered: bool,
    upstream_hostname: str,
    pathname_regex: str,
    origin_hostname: str,
) -> Body:
    """
    Pick the body variant for an upstream response.

    A buffered body is fully read and rewritten here; read failures surface
    as UpstreamUnreachable since nothing has been sent to the client yet.
    """
    if not buffered:
        return StreamedBody(upstream.response.aiter_raw())

    try:
        await upstream.response.aread()
    except httpx.HTTPError as e:
        raise UpstreamUnreachable(str(e) or type(e).__name__) from e
    encoding = upstream.response.encoding or "utf-8"
    text = rewrite_body(
        upstream.response.text, upstream_hostname, pathname_regex, origin_hostname
    )
    return BufferedBody(text.encode(encoding, errors="replace"))


def _stream_and_release(
    chunks: AsyncIterator[bytes],
    close: Callable[[], Awaitable[None]],
    on_error: Optional[Callable[[Exception], None]],
) -> AsyncIterator[bytes]:
    async def iter_upstream():
        try:
            async for chunk in chunks:
                yield chunk
        except httpx.HTTPError as e:
            if on_error is not None:
                on_error(e)
            # headers are already out, so the connection is aborted instead
            raise
        finally:
            await close()

    return iter_upstream()


class _ReleasesUpstream:
    """Releases the upstream connection once the response is done with the client."""

    release: Callable[[], Awaitable[None]]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            # also reached when the client disconnects mid-body
            await self.release()


class ReleasingResponse(_ReleasesUpstream, Response):
    pass


class ReleasingStreamingResponse(_ReleasesUpstream, StreamingResponse):
    pass


def build_client_response(
    status_code: int,
    headers: httpx.Headers,
    body: Body,
    close: Callable[[], Awaitable[None]],
    on_stream_error: Optional[Callable[[Exception], None]] = None,
) -> Response:
    """
    Assemble the response sent to the client.

    Status and headers are fixed here, before any body byte is produced. The
    upstream connection is released when the response has been sent, fails,
    or the client goes away; a streamed body also releases it as soon as the
    upstream is exhausted.
    """
    if isinstance(body, BufferedBody):
        response = ReleasingResponse(content=body.content, status_code=status_code)
        skip = BODY_FRAMING_HEADERS
    else:
        response = ReleasingStreamingResponse(
            _stream_and_release(body.chunks, close, on_stream_error),
            status_code=status_code,
        )
        skip = set()
    response.release = close

    for name, value in headers.multi_items():
        if name.lower() not in skip:
            response.headers.append(name, value)
    return response

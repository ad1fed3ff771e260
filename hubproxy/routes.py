import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response
from opentelemetry import trace

from hubproxy.config import ProxyConfig, get_proxy_config
from hubproxy.proxy.access_gate import evaluate
from hubproxy.proxy.denial import render_denial
from hubproxy.proxy.dispatcher import (
    UpstreamDispatcher,
    UpstreamUnreachable,
    get_upstream_dispatcher,
)
from hubproxy.proxy.models import RequestInfo
from hubproxy.proxy.request_transform import build_outbound_headers, outbound_body
from hubproxy.proxy.response_transform import (
    build_client_response,
    is_textual,
    read_body,
    rewrite_headers,
)
from hubproxy.proxy.routing import resolve
from hubproxy.utils import log_request_error
from hubproxy.utils.traced_requests import traced_request

router = APIRouter()
tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")

# Standard and WebDAV methods; FastAPI routes need an explicit list
PROXY_METHODS = [
    "GET",
    "HEAD",
    "POST",
    "PUT",
    "PATCH",
    "DELETE",
    "OPTIONS",
    "TRACE",
    "CONNECT",
    "PROPFIND",
    "PROPPATCH",
    "MKCOL",
    "COPY",
    "MOVE",
    "LOCK",
    "UNLOCK",
    "REPORT",
    "SEARCH",
]


def _upstream_failure(span, info: RequestInfo, error: UpstreamUnreachable) -> Response:
    span.set_attribute("proxy.error", error.reason)
    log_request_error(logger, info, f"Fetch error: {error.reason}")
    return PlainTextResponse("Internal Server Error", status_code=500)


async def forward_to_upstream(
    request: Request, config: ProxyConfig, dispatcher: UpstreamDispatcher
) -> Response:
    """
    Run one request through the proxy: resolve the upstream, apply the access
    policies, forward with the origin hostname swapped for the upstream one,
    and rewrite the answer back.

    A single upstream attempt is made. Failures before the response headers
    go out become a plain 500; later ones abort the client connection.
    """
    info = RequestInfo.from_request(request)
    target = resolve(info, config)

    with traced_request(
        tracer,
        "proxy_request",
        info,
        f"Proxying {info.method} {info.path} -> {target.url}",
        extra_attrs={"proxy.target_url": target.url},
    ) as span:
        decision = evaluate(info, target, config)
        if not decision.allowed:
            span.set_attribute("proxy.denied", decision.reason)
            log_request_error(logger, info, f"Invalid ({decision.reason})")
            return render_denial(config)

        request_body = outbound_body(info.method, request.stream())
        headers = build_outbound_headers(
            info.headers,
            info.origin_hostname,
            target.hostname,
            has_body=request_body is not None,
        )
        try:
            upstream = await dispatcher.dispatch(target.url, info.method, headers, request_body)
        except UpstreamUnreachable as e:
            return _upstream_failure(span, info, e)

        span.set_attribute("proxy.status_code", upstream.status_code)
        response_headers = rewrite_headers(
            upstream.headers, target.hostname, info.origin_hostname, config.debug
        )
        # HEAD answers carry no body, keep their upstream content-length
        buffered = info.method != "HEAD" and is_textual(
            response_headers.get("content-type", "")
        )
        span.set_attribute("proxy.body_mode", "buffered" if buffered else "streamed")

        try:
            body = await read_body(
                upstream,
                buffered,
                target.hostname,
                config.pathname_regex,
                info.origin_hostname,
            )
        except UpstreamUnreachable as e:
            await upstream.close()
            return _upstream_failure(span, info, e)
        except Exception:
            await upstream.close()
            raise

        def on_stream_error(error: Exception) -> None:
            log_request_error(logger, info, f"Stream error: {error}")

        return build_client_response(
            upstream.status_code,
            response_headers,
            body,
            upstream.close,
            on_stream_error=on_stream_error,
        )


# Register catch-all route for proxying
@router.api_route("/{path:path}", methods=PROXY_METHODS)
async def proxy_all(
    request: Request,
    path: str,
    config: ProxyConfig = Depends(get_proxy_config),
    dispatcher: UpstreamDispatcher = Depends(get_upstream_dispatcher),
):
    """Catch-all route that proxies all requests to the upstream registry."""
    return await forward_to_upstream(request, config, dispatcher)

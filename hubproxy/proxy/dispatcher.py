"""Single-attempt upstream dispatch over httpx."""

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import httpx

logger = logging.getLogger("uvicorn.error")


class UpstreamUnreachable(Exception):
    """The upstream could not be reached or broke off before the body was read."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


@dataclass
class UpstreamResponse:
    """A streamed upstream response plus the client owning its connection."""

    response: httpx.Response
    client: httpx.AsyncClient

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.response.headers

    async def close(self) -> None:
        # both are idempotent, so every exit path may call this
        await self.response.aclose()
        await self.client.aclose()


class UpstreamDispatcher:
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._transport = transport

    async def dispatch(
        self,
        url: str,
        method: str,
        headers: httpx.Headers,
        body: Optional[AsyncIterator[bytes]] = None,
    ) -> UpstreamResponse:
        """
        Send exactly one request upstream and return it with the body unread.

        Raises UpstreamUnreachable on any transport failure; the caller
        decides what the client sees. No retries are made.
        """
        logger.debug(f"Dispatching {method} {url}")
        client = httpx.AsyncClient(transport=self._transport, follow_redirects=False)
        try:
            request = client.build_request(method, url, headers=headers, content=body)
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            raise UpstreamUnreachable(str(e) or type(e).__name__) from e
        except Exception:
            await client.aclose()
            raise
        return UpstreamResponse(response=response, client=client)


def get_upstream_dispatcher() -> UpstreamDispatcher:
    """FastAPI dependency; tests override it with a mock transport."""
    return UpstreamDispatcher()

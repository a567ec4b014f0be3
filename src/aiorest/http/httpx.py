import logging
from typing import Any

from httpx import AsyncClient, HTTPError

from aiorest.http.types import HttpImplementation, Request, RequestFailed, Response
from aiorest.types import Timeout

logger = logging.getLogger(__name__)


def httpx(timeout: Timeout = 60, **client_options: Any) -> HttpImplementation:
    """
    Transport backed by httpx. Every request gets its own AsyncClient, which is
    closed as soon as that request completes. ``client_options`` are passed to
    AsyncClient as-is.
    """

    async def impl(request: Request) -> Response:
        try:
            async with AsyncClient(timeout=timeout, **client_options) as client:
                response = await client.request(
                    request.method,
                    request.url,
                    headers=request.headers,
                    content=request.body,
                )
                return Response(
                    status=response.status_code,
                    headers=dict(response.headers.items()),
                    body=response.content,
                    url=str(response.url),
                )
        except HTTPError as exc:
            logger.debug("%s %s failed: %r", request.method, request.url, exc)
            raise RequestFailed(exc) from exc

    return impl

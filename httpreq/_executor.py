from __future__ import annotations

import contextlib
import logging
import typing

import httpx

from ._buffer import BODY_CAPACITY_HINT, REDIRECT_BUFFER_SIZE, OwnedBuffer, RedirectBuffer
from ._exceptions import (
    InvalidUri,
    OutOfMemory,
    RedirectBufferExceeded,
    RequestFailed,
    TooManyRedirects,
    UnsupportedScheme,
)
from ._methods import HttpMethod
from ._models import HeaderTypes, Request, Response

__all__ = ["DEFAULT_MAX_REDIRECTS", "Executor", "execute"]

logger = logging.getLogger("httpreq")

DEFAULT_MAX_REDIRECTS = 3


@contextlib.contextmanager
def map_transport_errors(request: Request) -> typing.Iterator[None]:
    """
    Re-raise `httpx` failures as the matching `RequestError` subclass.
    """
    try:
        yield
    except OutOfMemory as exc:
        exc.request = request
        raise
    except (httpx.InvalidURL, httpx.HTTPError) as exc:
        logger.debug("%s %s failed: %s: %s", request.method, request.url, type(exc).__name__, exc)
        if isinstance(exc, httpx.InvalidURL):
            raise InvalidUri(str(exc), request=request) from exc
        if isinstance(exc, httpx.UnsupportedProtocol):
            raise UnsupportedScheme(str(exc), request=request) from exc
        raise RequestFailed(f"{type(exc).__name__}: {exc}", request=request) from exc


class Executor:
    """
    Issues one request per `execute()` call and buffers the whole response body.

    Every call opens and closes its own `httpx.Client`; nothing is shared
    between calls apart from the configuration held here. No timeout is
    applied and nothing is retried.
    """

    def __init__(
        self,
        transport: httpx.BaseTransport | None = None,
        *,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        redirect_buffer_size: int = REDIRECT_BUFFER_SIZE,
        body_capacity: int = BODY_CAPACITY_HINT,
    ) -> None:
        self._transport = transport
        self.max_redirects = max_redirects
        self.redirect_buffer_size = redirect_buffer_size
        self.body_capacity = body_capacity

    def execute(
        self,
        uri: str,
        method: HttpMethod | str = HttpMethod.GET,
        headers: HeaderTypes | None = None,
        payload: bytes | str | None = None,
    ) -> Response:
        """
        Send a request and return its response. The caller owns the returned
        response and must release it.
        """
        request = Request(method, uri, headers, payload)
        logger.debug("%s %s", request.method, request.url)

        with OwnedBuffer(self.body_capacity) as body:
            with httpx.Client(transport=self._transport, timeout=None) as client:
                with map_transport_errors(request):
                    response = self._send(client, request)
                    try:
                        for chunk in response.iter_bytes():
                            body.write(chunk)
                    finally:
                        response.close()

            logger.debug(
                "%s %s -> %d (%d bytes)",
                request.method,
                request.url,
                response.status_code,
                len(body),
            )
            with map_transport_errors(request):
                return Response(
                    response.status_code,
                    body,
                    headers=response.headers,
                    url=str(response.url),
                    request=request,
                )

    def _send(self, client: httpx.Client, request: Request) -> httpx.Response:
        outbound = client.build_request(
            request.method.to_transport(),
            request.url,
            headers=request.headers,
            content=request.payload,
        )
        redirects = RedirectBuffer(self.redirect_buffer_size)
        hops = 0

        while True:
            response = client.send(outbound, stream=True, follow_redirects=False)
            next_request = response.next_request
            # A request body is never resent, so redirects are left to the caller.
            if next_request is None or request.payload is not None:
                return response
            response.close()

            if hops >= self.max_redirects:
                raise TooManyRedirects(
                    f"Exceeded maximum allowed redirects ({self.max_redirects})",
                    request=request,
                )
            try:
                redirects.store(response.headers["location"])
            except RedirectBufferExceeded as exc:
                exc.request = request
                raise

            hops += 1
            logger.debug("Redirect %d: %s -> %s", hops, outbound.url, next_request.url)
            outbound = next_request


def execute(
    uri: str,
    method: HttpMethod | str = HttpMethod.GET,
    headers: HeaderTypes | None = None,
    payload: bytes | str | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> Response:
    """
    Send a single request with a one-off `Executor`.
    """
    return Executor(transport=transport).execute(uri, method, headers, payload)

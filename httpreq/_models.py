from __future__ import annotations

import json as jsonlib
import types
import typing

import httpx

from ._buffer import OwnedBuffer
from ._exceptions import BufferReleased, InvalidUri, UnsupportedScheme
from ._methods import HttpMethod
from ._urlparse import ParsedUri, parse_uri

__all__ = ["Header", "HeaderTypes", "Request", "Response"]

SUPPORTED_SCHEMES = ("http", "https")


class Header(typing.NamedTuple):
    name: str
    value: str


HeaderTypes = typing.Sequence[typing.Union[Header, typing.Tuple[str, str]]]


class Request:
    """
    A single outbound request: method, parsed target, ordered headers and an
    optional raw body. Built fresh for every call.
    """

    def __init__(
        self,
        method: HttpMethod | str,
        uri: ParsedUri | str,
        headers: HeaderTypes | None = None,
        payload: bytes | str | None = None,
    ) -> None:
        self.method = HttpMethod.coerce(method)
        self.uri = uri if isinstance(uri, ParsedUri) else parse_uri(uri)
        self.headers = [Header(*header) for header in headers or ()]
        self.payload = payload.encode("utf-8") if isinstance(payload, str) else payload

        if self.uri.scheme not in SUPPORTED_SCHEMES:
            raise UnsupportedScheme(
                f"Request URI has an unsupported scheme {self.uri.scheme!r}",
                request=self,
            )
        if not self.uri.host:
            raise InvalidUri(f"Request URI is missing a host: {self.url!r}", request=self)

    @property
    def url(self) -> str:
        return str(self.uri)

    def __repr__(self) -> str:
        return f"<Request({self.method.value!r}, {self.url!r})>"


class Response:
    """
    Status plus an owned response body.

    The body belongs to whoever holds the response and must be released once,
    either with `release()` or by using the response as a context manager.
    """

    def __init__(
        self,
        status_code: int,
        body: bytes | OwnedBuffer = b"",
        *,
        headers: httpx.Headers | typing.Mapping[str, str] | None = None,
        url: str | None = None,
        request: Request | None = None,
    ) -> None:
        self.status_code = status_code
        self.headers = httpx.Headers(headers)
        self.request = request
        if url is None and request is not None:
            url = request.url
        self.url = url
        self._body: bytes | None = (
            body.to_owned() if isinstance(body, OwnedBuffer) else bytes(body)
        )

    def __enter__(self) -> Response:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: types.TracebackType | None = None,
    ) -> None:
        if not self.released:
            self.release()

    def __repr__(self) -> str:
        return f"<Response [{self.status_code} {self.reason_phrase}]>"

    @property
    def reason_phrase(self) -> str:
        return httpx.codes.get_reason_phrase(self.status_code)

    @property
    def is_success(self) -> bool:
        return httpx.codes.is_success(self.status_code)

    @property
    def is_redirect(self) -> bool:
        return httpx.codes.is_redirect(self.status_code)

    @property
    def released(self) -> bool:
        return self._body is None

    @property
    def body(self) -> bytes:
        if self._body is None:
            raise BufferReleased("Response body has already been released.")
        return self._body

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self, **kwargs: typing.Any) -> typing.Any:
        return jsonlib.loads(self.body, **kwargs)

    def release(self) -> None:
        """Free the response body. Must be called exactly once."""
        if self._body is None:
            raise BufferReleased("Response body has already been released.")
        self._body = None

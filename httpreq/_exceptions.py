"""
Exception hierarchy:

    RequestError
    ├── InvalidUri
    ├── RequestFailed
    │   ├── UnsupportedScheme
    │   ├── TooManyRedirects
    │   └── RedirectBufferExceeded
    └── OutOfMemory

    BufferReleased
"""

from __future__ import annotations

import typing

if typing.TYPE_CHECKING:
    from ._models import Request

__all__ = [
    "BufferReleased",
    "InvalidUri",
    "OutOfMemory",
    "RedirectBufferExceeded",
    "RequestError",
    "RequestFailed",
    "TooManyRedirects",
    "UnsupportedScheme",
]


class RequestError(Exception):
    """
    Base class for every error raised while building or executing a request.
    """

    def __init__(self, message: str, *, request: Request | None = None) -> None:
        super().__init__(message)
        self._request = request

    @property
    def request(self) -> Request:
        if self._request is None:
            raise RuntimeError("The .request property has not been set.")
        return self._request

    @request.setter
    def request(self, request: Request) -> None:
        self._request = request


class InvalidUri(RequestError):
    """
    The URI could not be parsed. Always raised before any network I/O.
    """


class RequestFailed(RequestError):
    """
    The transport could not complete the exchange.
    """


class UnsupportedScheme(RequestFailed):
    pass


class TooManyRedirects(RequestFailed):
    pass


class RedirectBufferExceeded(RequestFailed):
    """
    The redirect chain carried more location data than the redirect buffer holds.
    """


class OutOfMemory(RequestError):
    pass


class BufferReleased(RuntimeError):
    """
    Attempted to use a buffer after it was released or moved out.
    """

from .__version__ import __description__, __title__, __version__
from ._buffer import BODY_CAPACITY_HINT, REDIRECT_BUFFER_SIZE, OwnedBuffer, RedirectBuffer
from ._exceptions import (
    BufferReleased,
    InvalidUri,
    OutOfMemory,
    RedirectBufferExceeded,
    RequestError,
    RequestFailed,
    TooManyRedirects,
    UnsupportedScheme,
)
from ._executor import DEFAULT_MAX_REDIRECTS, Executor, execute
from ._methods import HttpMethod
from ._models import Header, Request, Response
from ._urlparse import ParsedUri, parse_uri

_EXCLUDED_FROM_ALL = {"cli", "main"}

__all__ = sorted(
    (
        member
        for member in list(vars().keys())
        if (
            not member.startswith("_")
            or member in ["__description__", "__title__", "__version__"]
        )
        and member not in _EXCLUDED_FROM_ALL
    ),
    key=str.casefold,
)

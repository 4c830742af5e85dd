from __future__ import annotations

import enum


class HttpMethod(str, enum.Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    def __str__(self) -> str:
        return self.value

    def to_transport(self) -> str:
        """Return the verb handed to the transport layer."""
        return _TRANSPORT_METHODS[self]

    @classmethod
    def coerce(cls, value: HttpMethod | str) -> HttpMethod:
        if isinstance(value, cls):
            return value
        try:
            return cls(value.upper())
        except (AttributeError, ValueError):
            raise ValueError(f"Unsupported HTTP method: {value!r}") from None


_TRANSPORT_METHODS: dict[HttpMethod, str] = {
    HttpMethod.GET: "GET",
    HttpMethod.POST: "POST",
    HttpMethod.PUT: "PUT",
    HttpMethod.DELETE: "DELETE",
    HttpMethod.PATCH: "PATCH",
    HttpMethod.HEAD: "HEAD",
    HttpMethod.OPTIONS: "OPTIONS",
}

"""
Byte buffers with a single owner.

`OwnedBuffer` accumulates a response body and hands it over exactly once via
`to_owned()`. `RedirectBuffer` is the fixed-size scratch space that bounds how
much redirect location data one request may collect.
"""

from __future__ import annotations

import types

from ._exceptions import BufferReleased, OutOfMemory, RedirectBufferExceeded

BODY_CAPACITY_HINT = 64
REDIRECT_BUFFER_SIZE = 8 * 1024


class OwnedBuffer:
    def __init__(self, capacity: int = BODY_CAPACITY_HINT) -> None:
        self._data: bytearray | None = bytearray()
        self._size = 0
        self.ensure_unused_capacity(capacity)

    def __len__(self) -> int:
        return self._size

    def __enter__(self) -> OwnedBuffer:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None = None,
        exc_value: BaseException | None = None,
        traceback: types.TracebackType | None = None,
    ) -> None:
        self._data = None
        self._size = 0

    @property
    def capacity(self) -> int:
        return len(self._live())

    @property
    def released(self) -> bool:
        return self._data is None

    def _live(self) -> bytearray:
        if self._data is None:
            raise BufferReleased("Buffer has been released or moved out.")
        return self._data

    def ensure_unused_capacity(self, additional: int) -> None:
        data = self._live()
        needed = self._size + additional
        if needed <= len(data):
            return
        new_capacity = max(needed, len(data) * 2)
        try:
            data.extend(bytes(new_capacity - len(data)))
        except MemoryError as exc:
            raise OutOfMemory(
                f"Could not grow buffer to {new_capacity} bytes"
            ) from exc

    def write(self, chunk: bytes) -> int:
        if not chunk:
            return 0
        self.ensure_unused_capacity(len(chunk))
        data = self._live()
        data[self._size : self._size + len(chunk)] = chunk
        self._size += len(chunk)
        return len(chunk)

    def to_owned(self) -> bytes:
        """
        Move the written bytes out. The buffer is unusable afterwards.
        """
        data = self._live()
        try:
            owned = bytes(memoryview(data)[: self._size])
        except MemoryError as exc:
            raise OutOfMemory("Could not transfer buffer contents") from exc
        self._data = None
        self._size = 0
        return owned


class RedirectBuffer:
    def __init__(self, capacity: int = REDIRECT_BUFFER_SIZE) -> None:
        self.capacity = capacity
        self._data = bytearray()

    def __len__(self) -> int:
        return len(self._data)

    @property
    def remaining(self) -> int:
        return self.capacity - len(self._data)

    def store(self, location: str) -> None:
        encoded = location.encode("utf-8")
        if len(encoded) > self.remaining:
            raise RedirectBufferExceeded(
                f"Redirect location of {len(encoded)} bytes does not fit in the "
                f"redirect buffer ({self.remaining} of {self.capacity} bytes left)"
            )
        self._data += encoded

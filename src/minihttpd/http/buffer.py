"""
=============================================================================
RESPONSE BUFFER
=============================================================================

A growable byte buffer used to assemble a complete HTTP response before a
single write to the socket.

=============================================================================
GROWTH POLICY
=============================================================================

The buffer tracks two numbers:

    size      How many bytes of real content it holds
    capacity  How many bytes the backing storage can hold

    ┌─────────────────────────────────────────────────────────────────────┐
    │  capacity = 8                                                        │
    │  ┌───┬───┬───┬───┬───┬───┬───┬───┐                                  │
    │  │ H │ T │ T │ P │ / │   │   │   │   size = 5                       │
    │  └───┴───┴───┴───┴───┴───┴───┴───┘                                  │
    │                                                                      │
    │  append(b"1.1 200") needs 12 bytes → 8 → 16, then copy               │
    └─────────────────────────────────────────────────────────────────────┘

Capacity only ever grows, and every growth step at least doubles it, so the
number of reallocations is logarithmic in the response size.

Formatted appends go through a fixed scratch limit. A single header line
rendered past that limit is an error rather than a silent truncation.

=============================================================================
"""

from typing import Any


DEFAULT_CAPACITY = 4096
SCRATCH_SIZE = 1024


class ResponseBufferError(Exception):
    """Raised when a formatted append does not fit in the scratch area."""


class ResponseBuffer:
    """
    Growable byte buffer with doubling capacity.

    Usage:
        buf = ResponseBuffer()
        buf.append_format("HTTP/1.1 {} {}\\r\\n", 200, "OK")
        buf.append(body)
        conn.send_response(buf.getvalue())
        buf.free()
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")

        # MemoryError here propagates to the caller.
        self._data = bytearray(capacity)
        self._size = 0

    @property
    def size(self) -> int:
        """Logical number of content bytes."""
        return self._size

    @property
    def capacity(self) -> int:
        """Number of bytes the backing storage can hold."""
        return len(self._data)

    def __len__(self) -> int:
        return self._size

    def append(self, data: bytes) -> None:
        """
        Append raw bytes, doubling capacity until they fit.

        Raises:
            MemoryError: If the backing storage cannot grow. The buffer is
                         left unchanged.
        """
        needed = self._size + len(data)
        capacity = self.capacity

        if needed > capacity:
            # Grow by repeated doubling; a freed buffer restarts from 1.
            capacity = capacity or 1
            while capacity < needed:
                capacity *= 2
            self._data.extend(bytes(capacity - len(self._data)))

        self._data[self._size:needed] = data
        self._size = needed

    def append_format(self, template: str, *args: Any, **kwargs: Any) -> None:
        """
        Render a str.format() template and append the UTF-8 result.

        Raises:
            ResponseBufferError: If the rendered text is larger than the
                                 scratch area.
        """
        rendered = template.format(*args, **kwargs).encode("utf-8")
        if len(rendered) >= SCRATCH_SIZE:
            raise ResponseBufferError(
                f"Formatted text too long: {len(rendered)} bytes "
                f"(scratch is {SCRATCH_SIZE})"
            )
        self.append(rendered)

    def getvalue(self) -> bytes:
        """Return the content bytes (size, not capacity, is authoritative)."""
        return bytes(self._data[:self._size])

    def free(self) -> None:
        """Release backing storage."""
        self._data = bytearray()
        self._size = 0

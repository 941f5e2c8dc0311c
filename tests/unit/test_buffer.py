"""
Unit tests for the growable response buffer.
"""

import pytest

from minihttpd.http.buffer import (
    ResponseBuffer,
    ResponseBufferError,
    SCRATCH_SIZE,
)


class TestResponseBuffer:
    """Tests for ResponseBuffer."""

    def test_starts_empty(self):
        buf = ResponseBuffer(16)

        assert buf.size == 0
        assert buf.capacity == 16
        assert buf.getvalue() == b""

    def test_append_within_capacity(self):
        buf = ResponseBuffer(16)
        buf.append(b"hello")
        buf.append(b" world")

        assert buf.getvalue() == b"hello world"
        assert buf.size == 11
        assert len(buf) == 11
        assert buf.capacity == 16

    def test_growth_doubles(self):
        buf = ResponseBuffer(8)
        buf.append(b"12345678")
        assert buf.capacity == 8

        buf.append(b"9")
        assert buf.capacity == 16

    def test_growth_repeats_until_fit(self):
        buf = ResponseBuffer(4)
        buf.append(b"x" * 100)

        assert buf.capacity == 128
        assert buf.size == 100

    def test_size_never_exceeds_capacity(self):
        buf = ResponseBuffer(1)
        capacities = []
        for i in range(50):
            buf.append(b"ab" * i)
            assert buf.size <= buf.capacity
            capacities.append(buf.capacity)

        assert capacities == sorted(capacities)

    def test_append_format(self):
        buf = ResponseBuffer()
        buf.append_format("HTTP/1.1 {} {}\r\n", 200, "OK")
        buf.append_format("Content-Length: {length}\r\n", length=5)

        assert buf.getvalue() == b"HTTP/1.1 200 OK\r\nContent-Length: 5\r\n"

    def test_append_format_overflow(self):
        buf = ResponseBuffer()
        buf.append(b"kept")

        with pytest.raises(ResponseBufferError):
            buf.append_format("X-Long: {}\r\n", "a" * SCRATCH_SIZE)

        assert buf.getvalue() == b"kept"

    def test_append_format_does_not_limit_append(self):
        buf = ResponseBuffer()
        buf.append(b"b" * (SCRATCH_SIZE * 10))

        assert buf.size == SCRATCH_SIZE * 10

    def test_free(self):
        buf = ResponseBuffer(64)
        buf.append(b"data")
        buf.free()

        assert buf.size == 0
        assert buf.capacity == 0
        assert buf.getvalue() == b""

    def test_append_after_free(self):
        buf = ResponseBuffer(64)
        buf.free()
        buf.append(b"abc")

        assert buf.getvalue() == b"abc"
        assert buf.capacity >= 3

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            ResponseBuffer(0)

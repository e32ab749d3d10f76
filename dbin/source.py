"""Byte sources and sinks, and the "read exactly N bytes" primitive."""

from __future__ import annotations

import io
import socket
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from .errors import ShortWrite, UnderlyingSinkError, UnderlyingSourceError

# ----------------------------------------------------------------------------
# Protocols
# ----------------------------------------------------------------------------


@runtime_checkable
class ByteSource(Protocol):
    """Anything that returns up to ``size`` bytes per call, ``b""`` once exhausted."""

    def read(self, size: int, /) -> bytes: ...


@runtime_checkable
class ByteSink(Protocol):
    """Anything that writes a buffer and returns the count written (or None for all of it)."""

    def write(self, data: bytes, /) -> int | None: ...


# ----------------------------------------------------------------------------
# Adapters
# ----------------------------------------------------------------------------


class SocketSource:
    """Read side of a connected socket."""

    def __init__(self, sock: socket.socket):
        self.sock = sock

    def read(self, size: int) -> bytes:
        return self.sock.recv(size)

    def close(self) -> None:
        self.sock.close()


class SocketSink:
    """Write side of a connected socket; ``sendall`` either sends everything or raises."""

    def __init__(self, sock: socket.socket):
        self.sock = sock

    def write(self, data: bytes) -> None:
        self.sock.sendall(data)

    def close(self) -> None:
        self.sock.close()


class ChunkedSource:
    """Replay a fixed sequence of chunks, at most one chunk per ``read`` call.

    A chunk larger than the requested size is split; the remainder is
    delivered by the following calls. Useful for simulating sockets and
    pipes that deliver data in arbitrary fragments.
    """

    def __init__(self, chunks: Iterable[bytes]):
        self._chunks = [bytes(chunk) for chunk in chunks]
        self._index = 0
        self._offset = 0
        self.reads = 0
        self.closed = False

    @classmethod
    def bytewise(cls, data: bytes) -> ChunkedSource:
        """Deliver ``data`` one byte per call."""
        return cls(data[i : i + 1] for i in range(len(data)))

    def read(self, size: int) -> bytes:
        self.reads += 1
        # Skip spent and empty chunks; an empty read means exhaustion.
        while self._index < len(self._chunks) and self._offset >= len(self._chunks[self._index]):
            self._index += 1
            self._offset = 0
        if self._index >= len(self._chunks):
            return b""

        chunk = self._chunks[self._index]
        data = chunk[self._offset : self._offset + size]
        self._offset += len(data)
        return data

    def close(self) -> None:
        self.closed = True


def as_source(obj: Any) -> ByteSource:
    """Adapt ``obj`` to a :class:`ByteSource`.

    Accepts sockets, bytes-like buffers and anything with a ``read`` method.
    """
    if isinstance(obj, socket.socket):
        return SocketSource(obj)
    if isinstance(obj, bytes | bytearray | memoryview):
        return io.BytesIO(bytes(obj))
    if callable(getattr(obj, "read", None)):
        return obj
    raise TypeError(f"cannot read bytes from {type(obj).__name__}")


def as_sink(obj: Any) -> ByteSink:
    """Adapt ``obj`` to a :class:`ByteSink`: sockets or anything with a ``write`` method."""
    if isinstance(obj, socket.socket):
        return SocketSink(obj)
    if callable(getattr(obj, "write", None)):
        return obj
    raise TypeError(f"cannot write bytes to {type(obj).__name__}")


def close_if_closeable(obj: Any) -> None:
    """Close ``obj`` if it has a ``close`` method."""
    close = getattr(obj, "close", None)
    if callable(close):
        close()


# ----------------------------------------------------------------------------
# Exact reads and writes
# ----------------------------------------------------------------------------


class ReadStatus(Enum):
    """Outcome of :func:`read_exact`."""

    FULL = "full"  # all requested bytes
    EMPTY = "empty"  # source exhausted before the first byte
    PARTIAL = "partial"  # source exhausted after some bytes


@dataclass(frozen=True)
class ReadResult:
    """Bytes collected by :func:`read_exact` and how the read ended."""

    status: ReadStatus
    data: bytes

    @property
    def complete(self) -> bool:
        return self.status is ReadStatus.FULL


def read_exact(source: ByteSource, n: int) -> ReadResult:
    """Read exactly n bytes from source, retrying across short deliveries.

    The source is never asked for more than the bytes still missing, so on
    exhaustion the stream position is exactly after the last byte received.

    Args:
        source: Source to read from
        n: Number of bytes to read

    Returns:
        The bytes read, tagged FULL, EMPTY or PARTIAL

    Raises:
        UnderlyingSourceError: If the source itself raises or returns more
            bytes than requested
    """
    if n == 0:
        return ReadResult(ReadStatus.FULL, b"")

    buf = bytearray()
    while len(buf) < n:
        try:
            chunk = source.read(n - len(buf))
        except Exception as exc:
            raise UnderlyingSourceError(f"byte source failed after {len(buf)} of {n} bytes: {exc}") from exc
        if len(chunk) > n - len(buf):
            raise UnderlyingSourceError(
                f"byte source returned {len(chunk)} bytes when at most {n - len(buf)} were requested"
            )
        if not chunk:
            status = ReadStatus.PARTIAL if buf else ReadStatus.EMPTY
            return ReadResult(status, bytes(buf))
        buf.extend(chunk)
    return ReadResult(ReadStatus.FULL, bytes(buf))


def write_all(sink: ByteSink, data: bytes, what: str) -> None:
    """Write data to sink in one call; a short write is fatal.

    Raises:
        ShortWrite: If the sink reports fewer bytes than given
        UnderlyingSinkError: If the sink itself raises
    """
    try:
        written = sink.write(data)
    except Exception as exc:
        raise UnderlyingSinkError(f"byte sink failed writing {what}: {exc}") from exc
    if written is not None and written != len(data):
        raise ShortWrite(what, len(data), written)

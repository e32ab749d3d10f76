"""dbin stream reader and writer."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from enum import Enum
from types import TracebackType
from typing import Any

from .codecs import Codec
from .config import ReaderConfig, WriterConfig
from .constants import FormatVersion
from .errors import (
    EndOfStream,
    HeaderAlreadyConsumed,
    HeaderNotConsumed,
    StreamClosed,
    UnderlyingSinkError,
)
from .framing import read_message, write_message
from .header import Header, build_header, parse_header
from .source import as_sink, as_source, close_if_closeable, write_all

logger = logging.getLogger(__name__)


class StreamState(Enum):
    """Single-use header latch of a reader or writer."""

    FRESH = "fresh"
    HEADER_CONSUMED = "header_consumed"


# ----------------------------------------------------------------------------
# Reader
# ----------------------------------------------------------------------------


class StreamReader:
    """Reads a dbin header, then messages, from a byte source.

    Usage::

        with StreamReader(open("blocks.dbin", "rb")) as reader:
            header = reader.read_header()
            for message in reader:
                ...
    """

    def __init__(self, source: Any, config: ReaderConfig | None = None, *, close_source: bool = True):
        """Initialize reader.

        Args:
            source: Byte source, file object, socket or bytes-like buffer
            config: Reader options
            close_source: Close the source when the reader is closed
        """
        self._source = as_source(source)
        self.config = config or ReaderConfig()
        self.close_source = close_source
        self.state = StreamState.FRESH
        self.header: Header | None = None
        self.messages_read = 0
        self.closed = False

    def read_header(self) -> Header:
        """Read and decode the stream header.

        Raises:
            HeaderAlreadyConsumed: If the header was already read
            HeaderError: If the header is invalid or truncated
        """
        self._check_open()
        if self.state is not StreamState.FRESH:
            raise HeaderAlreadyConsumed("header was read already")

        header = parse_header(self._source)
        self.header = header
        self.state = StreamState.HEADER_CONSUMED
        return header

    def read_message(self) -> bytes:
        """Read the next message.

        Raises:
            EndOfStream: When the stream ended cleanly on a message boundary
            HeaderNotConsumed: If the header was not read yet
            FramingError: If the stream ends inside a record
        """
        self._check_open()
        if self.state is StreamState.FRESH:
            raise HeaderNotConsumed("read_header() must be called before read_message()")

        try:
            message = read_message(self._source, self.config.max_message_bytes)
        except EndOfStream:
            logger.debug("End of dbin stream after %d messages", self.messages_read)
            raise
        self.messages_read += 1
        return message

    def read_object(self, codec: Codec) -> Any:
        """Read the next message and decode it with codec."""
        return codec.decode(self.read_message())

    def __iter__(self) -> Iterator[bytes]:
        """Yield messages until the end of the stream, reading the header first if needed."""
        if self.state is StreamState.FRESH:
            self.read_header()
        while True:
            try:
                message = self.read_message()
            except EndOfStream:
                return
            yield message

    def iter_objects(self, codec: Codec) -> Iterator[Any]:
        """Like iterating the reader, decoding each message with codec."""
        for message in self:
            yield codec.decode(message)

    def close(self) -> None:
        """Close the reader, and the source if the reader owns it. Safe to call twice."""
        if self.closed:
            return
        self.closed = True
        if self.close_source:
            close_if_closeable(self._source)
        logger.debug("Closed dbin reader after %d messages", self.messages_read)

    def _check_open(self) -> None:
        if self.closed:
            raise StreamClosed("I/O operation on closed dbin reader")

    def __enter__(self) -> StreamReader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


# ----------------------------------------------------------------------------
# Writer
# ----------------------------------------------------------------------------


class StreamWriter:
    """Writes a dbin header, then messages, to a byte sink."""

    def __init__(self, sink: Any, config: WriterConfig | None = None, *, close_sink: bool = True):
        """Initialize writer.

        Args:
            sink: Byte sink, file object or socket
            config: Writer options
            close_sink: Close the sink when the writer is closed
        """
        self._sink = as_sink(sink)
        self.config = config or WriterConfig()
        self.close_sink = close_sink
        self.state = StreamState.FRESH
        self.header: Header | None = None
        self.messages_written = 0
        self.closed = False

    def write_header(
        self,
        content_type: str,
        content_version: int | None = None,
        format_version: int | None = None,
    ) -> Header:
        """Validate and write the stream header in a single sink call.

        Args:
            content_type: Content type of the messages that follow
            content_version: Content version in [0, 99], format 0 only
            format_version: Header encoding, defaults to the configured one

        Returns:
            The header written, with its wire bytes

        Raises:
            HeaderAlreadyConsumed: If the header was already written
            InvalidContentType: If the content type does not fit the format
            InvalidContentVersion: If the content version is invalid
            ShortWrite: If the sink accepted only part of the header
        """
        self._check_open()
        if self.state is not StreamState.FRESH:
            raise HeaderAlreadyConsumed("header already written")

        if format_version is None:
            format_version = self.config.format_version
        header = build_header(
            content_type,
            format_version=format_version,
            content_version=content_version,
            allow_empty_content_type=self.config.allow_empty_content_type,
        )
        write_all(self._sink, header.raw_bytes, "header")

        self.header = header
        self.state = StreamState.HEADER_CONSUMED
        logger.debug(
            "Wrote dbin header: format=%d content_type=%r size=%d",
            header.format_version,
            header.content_type,
            len(header.raw_bytes),
        )
        return header

    def write_header_for(self, codec: Codec) -> Header:
        """Write an extended header announcing codec's content type."""
        return self.write_header(codec.content_type, format_version=FormatVersion.EXTENDED)

    def write_message(self, message: bytes) -> None:
        """Write one message.

        Raises:
            HeaderNotConsumed: If the header was not written yet
            MessageTooLarge: If the message does not fit a uint32 length
            ShortWrite: If the sink accepted only part of the record
        """
        self._check_open()
        if self.state is StreamState.FRESH:
            raise HeaderNotConsumed("write_header() must be called before write_message()")
        if isinstance(message, str):
            raise TypeError("messages are bytes, encode text before writing it")

        write_message(self._sink, message)
        self.messages_written += 1

    def write_object(self, data: Any, codec: Codec) -> None:
        """Encode data with codec and write it as one message."""
        self.write_message(codec.encode(data))

    def flush(self) -> None:
        """Flush the sink if it buffers."""
        self._check_open()
        self._flush_sink()

    def close(self) -> None:
        """Flush, then close the sink if the writer owns it. Safe to call twice."""
        if self.closed:
            return
        self.closed = True
        try:
            self._flush_sink()
        finally:
            if self.close_sink:
                close_if_closeable(self._sink)
        logger.debug("Closed dbin writer after %d messages", self.messages_written)

    def _flush_sink(self) -> None:
        flush = getattr(self._sink, "flush", None)
        if not callable(flush):
            return
        try:
            flush()
        except Exception as exc:
            raise UnderlyingSinkError(f"byte sink failed to flush: {exc}") from exc

    def _check_open(self) -> None:
        if self.closed:
            raise StreamClosed("I/O operation on closed dbin writer")

    def __enter__(self) -> StreamWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


# ----------------------------------------------------------------------------
# File helpers
# ----------------------------------------------------------------------------


def open_reader(path: str | os.PathLike[str], config: ReaderConfig | None = None) -> StreamReader:
    """Open a dbin file for reading; the reader owns and closes the file."""
    return StreamReader(open(path, "rb"), config)


def open_writer(path: str | os.PathLike[str], config: WriterConfig | None = None) -> StreamWriter:
    """Create (or truncate) a dbin file for writing; the writer owns and closes the file."""
    return StreamWriter(open(path, "wb"), config)

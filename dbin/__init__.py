# Copyright 2025 Maida.AI
# SPDX-License-Identifier: Apache-2.0
r"""dbin - A self-describing container format for streams of binary messages.

A dbin stream starts with a header naming the kind of content it carries and
continues with length-prefixed opaque messages, so producers can stream
records (typically serialized protobuf messages) to a file or socket and
consumers can identify and iterate them without buffering the whole stream.

The implementation provides:
- Two header encodings (legacy fixed-width and extended length-prefixed)
  behind one read path
- Length-prefixed message framing that tolerates arbitrarily fragmented reads
- StreamReader/StreamWriter classes enforcing the header-first protocol
- A precise error taxonomy separating clean end of stream from corruption
- Optional JSON and Protobuf payload codecs
"""

# Import public API from modules
from .codecs import Codec, JSONCodec, ProtobufCodec
from .config import ReaderConfig, WriterConfig
from .constants import (
    MAGIC,
    MAX_CONTENT_TYPE_LEN,
    MAX_MESSAGE_LEN,
    FormatVersion,
)
from .errors import (
    DbinError,
    EndOfStream,
    FramingError,
    HeaderAlreadyConsumed,
    HeaderError,
    HeaderNotConsumed,
    InvalidContentType,
    InvalidContentVersion,
    MagicMismatch,
    MessageTooLarge,
    ShortWrite,
    StreamClosed,
    TruncatedHeaderField,
    TruncatedLength,
    TruncatedMessage,
    UnderlyingSinkError,
    UnderlyingSourceError,
    UnsupportedFormatVersion,
)
from .framing import read_message, write_message
from .header import ExtendedHeader, Header, LegacyHeader, build_header, parse_header
from .source import (
    ByteSink,
    ByteSource,
    ChunkedSource,
    ReadResult,
    ReadStatus,
    SocketSink,
    SocketSource,
    read_exact,
)
from .stream import StreamReader, StreamState, StreamWriter, open_reader, open_writer

# Public API exports
__all__ = [
    # Core classes
    "StreamReader",
    "StreamWriter",
    "StreamState",
    "Header",
    "LegacyHeader",
    "ExtendedHeader",
    "ReaderConfig",
    "WriterConfig",
    # Constants and enums
    "MAGIC",
    "MAX_CONTENT_TYPE_LEN",
    "MAX_MESSAGE_LEN",
    "FormatVersion",
    # Header and framing utilities
    "build_header",
    "parse_header",
    "read_message",
    "write_message",
    "open_reader",
    "open_writer",
    # Byte channels
    "ByteSource",
    "ByteSink",
    "ChunkedSource",
    "SocketSource",
    "SocketSink",
    "ReadResult",
    "ReadStatus",
    "read_exact",
    # Codecs
    "Codec",
    "JSONCodec",
    "ProtobufCodec",
    # Errors
    "DbinError",
    "HeaderError",
    "MagicMismatch",
    "UnsupportedFormatVersion",
    "TruncatedHeaderField",
    "InvalidContentType",
    "InvalidContentVersion",
    "HeaderAlreadyConsumed",
    "HeaderNotConsumed",
    "StreamClosed",
    "EndOfStream",
    "FramingError",
    "TruncatedLength",
    "TruncatedMessage",
    "MessageTooLarge",
    "ShortWrite",
    "UnderlyingSourceError",
    "UnderlyingSinkError",
]

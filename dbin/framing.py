"""Length-prefixed message framing for the dbin stream body."""

import struct

from .constants import MAX_MESSAGE_LEN, MESSAGE_LENGTH_FMT, MESSAGE_LENGTH_LEN
from .errors import EndOfStream, MessageTooLarge, TruncatedLength, TruncatedMessage
from .source import ByteSink, ByteSource, ReadStatus, read_exact, write_all


def pack_length(length: int) -> bytes:
    """Encode a message length as a 4-byte big-endian prefix."""
    if not 0 <= length <= MAX_MESSAGE_LEN:
        raise MessageTooLarge(length, MAX_MESSAGE_LEN)
    return struct.pack(MESSAGE_LENGTH_FMT, length)


def read_message(source: ByteSource, max_message_bytes: int | None = None) -> bytes:
    """Read the next length-prefixed message from source.

    Args:
        source: Source positioned on a message boundary
        max_message_bytes: Optional upper bound on the announced length

    Returns:
        The message bytes, possibly empty

    Raises:
        EndOfStream: If the stream ends on the message boundary, or right
            after a length prefix with no body behind it
        TruncatedLength: If the stream ends inside the length prefix
        TruncatedMessage: If the stream ends inside the message body
        MessageTooLarge: If the length exceeds max_message_bytes
        UnderlyingSourceError: If the source itself raises
    """
    prefix = read_exact(source, MESSAGE_LENGTH_LEN)
    if prefix.status is ReadStatus.EMPTY:
        raise EndOfStream("end of stream")
    if prefix.status is ReadStatus.PARTIAL:
        raise TruncatedLength(len(prefix.data))

    (length,) = struct.unpack(MESSAGE_LENGTH_FMT, prefix.data)
    if length == 0:
        return b""
    if max_message_bytes is not None and length > max_message_bytes:
        raise MessageTooLarge(length, max_message_bytes)

    body = read_exact(source, length)
    if body.status is ReadStatus.EMPTY:
        raise EndOfStream(f"end of stream after length prefix of {length} bytes")
    if body.status is ReadStatus.PARTIAL:
        raise TruncatedMessage(length, len(body.data))
    return body.data


def write_message(sink: ByteSink, message: bytes) -> None:
    """Write message to sink as a 4-byte big-endian length followed by its bytes.

    Raises:
        MessageTooLarge: If the message does not fit a uint32 length
        ShortWrite: If the sink accepts fewer bytes than given
        UnderlyingSinkError: If the sink itself raises
        TypeError: If message is not a bytes-like object
    """
    # Frame the byte count, not the item count of wider buffers.
    message = memoryview(message).tobytes()
    write_all(sink, pack_length(len(message)), "length")
    if message:
        write_all(sink, message, "message")

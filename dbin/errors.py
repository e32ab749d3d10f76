"""Exception hierarchy for dbin streams.

Every exception derives from :class:`DbinError`. Where a builtin category
fits, the exception derives from it as well so that generic handlers
(``except ValueError``, ``except OSError``, ``except EOFError``) keep working.
"""


class DbinError(Exception):
    """Base class for all dbin errors."""


# ----------------------------------------------------------------------------
# Header errors
# ----------------------------------------------------------------------------


class HeaderError(DbinError, ValueError):
    """The header could not be decoded or encoded."""


class MagicMismatch(HeaderError):
    """The stream does not start with the ``dbin`` magic."""

    def __init__(self, found: bytes):
        self.found = found
        super().__init__(f"magic string 'dbin' not found in header, got {found!r}")


class UnsupportedFormatVersion(HeaderError):
    """The format version byte names an encoding this codec does not know."""

    def __init__(self, version: int):
        self.version = version
        super().__init__(f"unsupported dbin format version {version}")


class TruncatedHeaderField(HeaderError):
    """The stream ended in the middle of a header field."""

    def __init__(self, field: str, expected: int, actual: int):
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(f"incomplete {field}: required {expected} bytes, got {actual} bytes")


class InvalidContentType(HeaderError):
    """The content type does not fit the chosen format version."""


class InvalidContentVersion(HeaderError):
    """The legacy content version is missing, malformed or out of range."""


# ----------------------------------------------------------------------------
# Stream state errors
# ----------------------------------------------------------------------------


class HeaderAlreadyConsumed(DbinError, RuntimeError):
    """The header of this stream was already read or written."""


class HeaderNotConsumed(DbinError, RuntimeError):
    """A message operation was attempted before the header."""


class StreamClosed(DbinError, ValueError):
    """The stream was used after being closed."""


class EndOfStream(DbinError, EOFError):
    """No more messages: the stream ended on a message boundary.

    This is the normal way for a stream to end, not a failure.
    """


# ----------------------------------------------------------------------------
# Framing errors
# ----------------------------------------------------------------------------


class FramingError(DbinError):
    """A message record is corrupt or incomplete."""


class TruncatedLength(FramingError):
    """The stream ended inside a 4-byte message length."""

    def __init__(self, actual: int):
        self.actual = actual
        super().__init__(f"incomplete message length: required 4 bytes, got {actual} bytes")


class TruncatedMessage(FramingError):
    """The stream ended inside a message body."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"incomplete message: required {expected} bytes, got {actual} bytes")


class MessageTooLarge(FramingError):
    """A message length exceeds the configured or wire limit."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"message of {size} bytes exceeds limit of {limit} bytes")


# ----------------------------------------------------------------------------
# Byte channel errors
# ----------------------------------------------------------------------------


class ShortWrite(DbinError, OSError):
    """The sink accepted fewer bytes than it was given."""

    def __init__(self, what: str, expected: int, written: int):
        self.what = what
        self.expected = expected
        self.written = written
        super().__init__(f"incomplete {what} write ({expected} bytes): wrote only {written} bytes")


class UnderlyingSourceError(DbinError, OSError):
    """The byte source raised; the original exception is the ``__cause__``."""


class UnderlyingSinkError(DbinError, OSError):
    """The byte sink raised; the original exception is the ``__cause__``."""

"""dbin wire constants and enums."""

from enum import IntEnum

# ----------------------------------------------------------------------------
# Header constants
# ----------------------------------------------------------------------------

MAGIC = b"dbin"


class FormatVersion(IntEnum):
    """Header encodings, selected by the byte following the magic."""

    LEGACY = 0x00  # fixed 3-byte content type + 2-digit content version
    EXTENDED = 0x01  # uint16 length-prefixed content type


PREFIX_LEN = len(MAGIC) + 1  # magic + format version

LEGACY_CONTENT_TYPE_LEN = 3
LEGACY_CONTENT_VERSION_LEN = 2
LEGACY_HEADER_LEN = PREFIX_LEN + LEGACY_CONTENT_TYPE_LEN + LEGACY_CONTENT_VERSION_LEN  # 10
MAX_LEGACY_CONTENT_VERSION = 99

CONTENT_TYPE_LENGTH_FMT = ">H"
CONTENT_TYPE_LENGTH_LEN = 2
EXTENDED_HEADER_BASE_LEN = PREFIX_LEN + CONTENT_TYPE_LENGTH_LEN  # 7 + content type
MAX_CONTENT_TYPE_LEN = 0xFFFF

# ----------------------------------------------------------------------------
# Message framing
# ----------------------------------------------------------------------------

MESSAGE_LENGTH_FMT = ">I"
MESSAGE_LENGTH_LEN = 4
MAX_MESSAGE_LEN = 0xFFFF_FFFF

# Header field names, as reported by TruncatedHeaderField
FIELD_MAGIC = "magic"
FIELD_FORMAT_VERSION = "format version"
FIELD_CONTENT_TYPE_LENGTH = "content type length"
FIELD_CONTENT_TYPE = "content type"
FIELD_CONTENT_VERSION = "content version"

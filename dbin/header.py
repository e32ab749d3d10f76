"""dbin stream header structures and serialization."""

from __future__ import annotations

import logging
import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import ClassVar

from .constants import (
    CONTENT_TYPE_LENGTH_FMT,
    CONTENT_TYPE_LENGTH_LEN,
    FIELD_CONTENT_TYPE,
    FIELD_CONTENT_TYPE_LENGTH,
    FIELD_CONTENT_VERSION,
    FIELD_FORMAT_VERSION,
    FIELD_MAGIC,
    LEGACY_CONTENT_TYPE_LEN,
    LEGACY_CONTENT_VERSION_LEN,
    MAGIC,
    MAX_CONTENT_TYPE_LEN,
    MAX_LEGACY_CONTENT_VERSION,
    FormatVersion,
)
from .errors import (
    InvalidContentType,
    InvalidContentVersion,
    MagicMismatch,
    TruncatedHeaderField,
    UnsupportedFormatVersion,
)
from .source import ByteSource, read_exact

logger = logging.getLogger(__name__)

# Content types are text on the API side but arbitrary bytes on the wire;
# surrogateescape keeps undecodable bytes intact across a round trip.
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


def encode_content_type(content_type: str) -> bytes:
    try:
        return content_type.encode(_ENCODING, _ERRORS)
    except UnicodeEncodeError as exc:
        raise InvalidContentType(f"content type {content_type!r} cannot be encoded as UTF-8: {exc}") from exc


def decode_content_type(raw: bytes) -> str:
    return raw.decode(_ENCODING, _ERRORS)


# ----------------------------------------------------------------------------
# Header structures
# ----------------------------------------------------------------------------


@dataclass(frozen=True)
class Header(ABC):
    """Stream header shared by both encodings.

    ``raw_bytes`` holds exactly the bytes read or written for this header and
    is left out of comparisons.
    """

    format_version: ClassVar[FormatVersion]

    content_type: str
    raw_bytes: bytes = field(default=b"", repr=False, compare=False, kw_only=True)

    @property
    def content_type_bytes(self) -> bytes:
        return encode_content_type(self.content_type)

    @abstractmethod
    def to_bytes(self) -> bytes:
        """Serialize the header, magic included."""
        pass


@dataclass(frozen=True)
class LegacyHeader(Header):
    """Format 0: 3-byte content type and 2-digit content version."""

    format_version: ClassVar[FormatVersion] = FormatVersion.LEGACY

    content_version: str = "00"

    @property
    def content_version_number(self) -> int:
        return int(self.content_version)

    @classmethod
    def create(cls, content_type: str, content_version: int) -> LegacyHeader:
        """Validate the fields and build a header with its wire bytes.

        Raises:
            InvalidContentType: If the content type is not exactly 3 bytes
            InvalidContentVersion: If the version is not an int in [0, 99]
        """
        raw_type = encode_content_type(content_type)
        if len(raw_type) != LEGACY_CONTENT_TYPE_LEN:
            raise InvalidContentType(
                f"content type should be {LEGACY_CONTENT_TYPE_LEN} bytes, was {len(raw_type)} {raw_type!r}"
            )
        if not isinstance(content_version, int) or isinstance(content_version, bool):
            raise InvalidContentVersion(f"content version should be an integer, was {content_version!r}")
        if not 0 <= content_version <= MAX_LEGACY_CONTENT_VERSION:
            raise InvalidContentVersion(
                f"content version should be between 0 and {MAX_LEGACY_CONTENT_VERSION}, was {content_version}"
            )

        header = cls(content_type=content_type, content_version=f"{content_version:02d}")
        return replace(header, raw_bytes=header.to_bytes())

    def to_bytes(self) -> bytes:
        return MAGIC + bytes([self.format_version]) + self.content_type_bytes + self.content_version.encode("ascii")


@dataclass(frozen=True)
class ExtendedHeader(Header):
    """Format 1: uint16 length-prefixed content type, no content version."""

    format_version: ClassVar[FormatVersion] = FormatVersion.EXTENDED

    @property
    def content_version(self) -> None:
        return None

    @classmethod
    def create(cls, content_type: str, allow_empty: bool = False) -> ExtendedHeader:
        """Validate the content type and build a header with its wire bytes.

        Args:
            content_type: Content type, typically a fully-qualified type name
            allow_empty: Accept an empty content type (compatibility mode)

        Raises:
            InvalidContentType: If the content type is empty or too long
        """
        raw_type = encode_content_type(content_type)
        if len(raw_type) > MAX_CONTENT_TYPE_LEN:
            raise InvalidContentType(
                f"content type too long, expected maximum {MAX_CONTENT_TYPE_LEN} in length, "
                f"found {len(raw_type)} bytes"
            )
        if not raw_type and not allow_empty:
            raise InvalidContentType("content type must not be empty")

        header = cls(content_type=content_type)
        return replace(header, raw_bytes=header.to_bytes())

    def to_bytes(self) -> bytes:
        raw_type = self.content_type_bytes
        return (
            MAGIC
            + bytes([self.format_version])
            + struct.pack(CONTENT_TYPE_LENGTH_FMT, len(raw_type))
            + raw_type
        )


def build_header(
    content_type: str,
    format_version: int = FormatVersion.EXTENDED,
    content_version: int | None = None,
    allow_empty_content_type: bool = False,
) -> Header:
    """Validate and build a header for the given format version.

    Raises:
        UnsupportedFormatVersion: If the format version is unknown
        InvalidContentType: If the content type does not fit the format
        InvalidContentVersion: If the content version is missing (format 0),
            out of range, or given for format 1
    """
    if format_version == FormatVersion.LEGACY:
        if content_version is None:
            raise InvalidContentVersion("content version is required for format version 0")
        return LegacyHeader.create(content_type, content_version)
    if format_version == FormatVersion.EXTENDED:
        if content_version is not None:
            raise InvalidContentVersion(
                "format version 1 has no content version field, encode it in the content type"
            )
        return ExtendedHeader.create(content_type, allow_empty=allow_empty_content_type)
    raise UnsupportedFormatVersion(format_version)


# ----------------------------------------------------------------------------
# Header parsing
# ----------------------------------------------------------------------------


def _read_field(source: ByteSource, n: int, name: str, raw: bytearray) -> bytes:
    result = read_exact(source, n)
    raw.extend(result.data)
    if not result.complete:
        raise TruncatedHeaderField(name, n, len(result.data))
    return result.data


def _parse_legacy(source: ByteSource, raw: bytearray) -> LegacyHeader:
    content_type = _read_field(source, LEGACY_CONTENT_TYPE_LEN, FIELD_CONTENT_TYPE, raw)
    version = _read_field(source, LEGACY_CONTENT_VERSION_LEN, FIELD_CONTENT_VERSION, raw)
    if not (version.isascii() and version.isdigit()):
        raise InvalidContentVersion(f"content version should be two ASCII digits, got {version!r}")
    return LegacyHeader(
        content_type=decode_content_type(content_type),
        content_version=version.decode("ascii"),
        raw_bytes=bytes(raw),
    )


def _parse_extended(source: ByteSource, raw: bytearray) -> ExtendedHeader:
    length_bytes = _read_field(source, CONTENT_TYPE_LENGTH_LEN, FIELD_CONTENT_TYPE_LENGTH, raw)
    (length,) = struct.unpack(CONTENT_TYPE_LENGTH_FMT, length_bytes)
    content_type = _read_field(source, length, FIELD_CONTENT_TYPE, raw)
    return ExtendedHeader(content_type=decode_content_type(content_type), raw_bytes=bytes(raw))


def parse_header(source: ByteSource) -> Header:
    """Parse a dbin header from source.

    Reads the magic and the format version, then exactly the bytes the
    selected encoding calls for. Nothing past the header is consumed.

    Args:
        source: Source positioned at the start of the stream

    Returns:
        A LegacyHeader or an ExtendedHeader

    Raises:
        MagicMismatch: If the stream does not start with ``dbin``
        UnsupportedFormatVersion: If the format version is unknown
        TruncatedHeaderField: If the stream ends inside a header field
        InvalidContentVersion: If a legacy content version is not two digits
        UnderlyingSourceError: If the source itself raises
    """
    raw = bytearray()
    magic = _read_field(source, len(MAGIC), FIELD_MAGIC, raw)
    if magic != MAGIC:
        raise MagicMismatch(magic)

    (version,) = _read_field(source, 1, FIELD_FORMAT_VERSION, raw)
    if version == FormatVersion.LEGACY:
        header: Header = _parse_legacy(source, raw)
    elif version == FormatVersion.EXTENDED:
        header = _parse_extended(source, raw)
    else:
        raise UnsupportedFormatVersion(version)

    logger.debug(
        "Parsed dbin header: format=%d content_type=%r size=%d",
        header.format_version,
        header.content_type,
        len(header.raw_bytes),
    )
    return header

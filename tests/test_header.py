"""Tests for dbin header parsing and building."""

import io

import pytest

from dbin import (
    ExtendedHeader,
    FormatVersion,
    Header,
    InvalidContentType,
    InvalidContentVersion,
    LegacyHeader,
    MagicMismatch,
    TruncatedHeaderField,
    UnderlyingSourceError,
    UnsupportedFormatVersion,
    build_header,
    parse_header,
)
from dbin.source import ChunkedSource


def test_parse_legacy_header() -> None:
    """Format 0 headers carry a 3-byte content type and a 2-digit version."""
    header = parse_header(io.BytesIO(b"dbin\x00ETH98"))

    assert isinstance(header, LegacyHeader)
    assert header.format_version == FormatVersion.LEGACY
    assert header.content_type == "ETH"
    assert header.content_version == "98"
    assert header.content_version_number == 98
    assert header.raw_bytes == b"dbin\x00ETH98"


def test_parse_extended_header() -> None:
    """Format 1 headers carry a uint16 length-prefixed content type."""
    raw = b"dbin\x01\x00\x11sf.bstream.v1.Blk"
    header = parse_header(io.BytesIO(raw))

    assert isinstance(header, ExtendedHeader)
    assert header.format_version == FormatVersion.EXTENDED
    assert header.content_type == "sf.bstream.v1.Blk"
    assert header.content_version is None
    assert header.raw_bytes == raw


def test_parse_extended_empty_content_type() -> None:
    """Decoding accepts a zero-length content type."""
    header = parse_header(io.BytesIO(b"dbin\x01\x00\x00"))

    assert header.content_type == ""
    assert len(header.raw_bytes) == 7


def test_parse_stops_at_header_end() -> None:
    """Nothing past the header is consumed."""
    source = io.BytesIO(b"dbin\x00ETH98\x00\x00\x00\x01a")
    parse_header(source)

    assert source.read() == b"\x00\x00\x00\x01a"


def test_parse_bad_magic() -> None:
    """A stream not starting with 'dbin' is rejected before anything else."""
    with pytest.raises(MagicMismatch) as excinfo:
        parse_header(io.BytesIO(b"dbob\x00ETH98"))

    assert excinfo.value.found == b"dbob"
    assert "magic string 'dbin' not found in header" in str(excinfo.value)


@pytest.mark.parametrize("version", [2, 0x10, 0xFF])
def test_parse_unsupported_format_version(version: int) -> None:
    """Unknown format versions are reported with their value."""
    with pytest.raises(UnsupportedFormatVersion) as excinfo:
        parse_header(io.BytesIO(b"dbin" + bytes([version]) + b"ETH98"))

    assert excinfo.value.version == version


@pytest.mark.parametrize(
    "raw,field,expected,actual",
    [
        (b"", "magic", 4, 0),
        (b"db", "magic", 4, 2),
        (b"dbin", "format version", 1, 0),
        (b"dbin\x00E", "content type", 3, 1),
        (b"dbin\x00ETH", "content version", 2, 0),
        (b"dbin\x00ETH9", "content version", 2, 1),
        (b"dbin\x01", "content type length", 2, 0),
        (b"dbin\x01\x00", "content type length", 2, 1),
        (b"dbin\x01\x00\x05ab", "content type", 5, 2),
    ],
)
def test_parse_truncated_field(raw: bytes, field: str, expected: int, actual: int) -> None:
    """Truncation names the field that was cut short."""
    with pytest.raises(TruncatedHeaderField) as excinfo:
        parse_header(io.BytesIO(raw))

    assert excinfo.value.field == field
    assert excinfo.value.expected == expected
    assert excinfo.value.actual == actual
    assert field in str(excinfo.value)


def test_parse_missing_content_version_message() -> None:
    """A legacy header missing its version mentions it instead of a generic EOF."""
    with pytest.raises(TruncatedHeaderField, match="content version"):
        parse_header(io.BytesIO(b"dbin\x00ETH"))


def test_parse_non_digit_content_version() -> None:
    """Legacy content versions must be ASCII digits."""
    with pytest.raises(InvalidContentVersion):
        parse_header(io.BytesIO(b"dbin\x00ETHx9"))


def test_parse_bytewise_delivery() -> None:
    """Parsing one byte at a time gives the same header as a contiguous read."""
    for raw in (b"dbin\x00ETH98", b"dbin\x01\x00\x03eth"):
        assert parse_header(ChunkedSource.bytewise(raw)) == parse_header(io.BytesIO(raw))


def test_parse_non_utf8_content_type() -> None:
    """Arbitrary content type bytes survive a round trip."""
    raw = b"dbin\x01\x00\x02\xff\xfe"
    header = parse_header(io.BytesIO(raw))

    assert header.content_type_bytes == b"\xff\xfe"
    assert header.to_bytes() == raw


# ----------------------------------------------------------------------------
# Building
# ----------------------------------------------------------------------------


@pytest.mark.parametrize("version,digits", [(0, b"00"), (7, b"07"), (99, b"99")])
def test_build_legacy_pads_version(version: int, digits: bytes) -> None:
    """Legacy content versions are written as two zero-padded digits."""
    header = build_header("ETH", format_version=FormatVersion.LEGACY, content_version=version)

    assert header.raw_bytes == b"dbin\x00ETH" + digits
    assert header.content_version == digits.decode()


@pytest.mark.parametrize("version", [-1, 100, 1000])
def test_build_legacy_rejects_version_out_of_range(version: int) -> None:
    """Legacy content versions must be in [0, 99]."""
    with pytest.raises(InvalidContentVersion):
        build_header("ETH", format_version=FormatVersion.LEGACY, content_version=version)


def test_build_legacy_rejects_non_int_version() -> None:
    """Booleans and strings are not content versions."""
    with pytest.raises(InvalidContentVersion):
        LegacyHeader.create("ETH", True)
    with pytest.raises(InvalidContentVersion):
        LegacyHeader.create("ETH", "12")  # type: ignore[arg-type]


def test_build_legacy_requires_version() -> None:
    """Format 0 needs a content version."""
    with pytest.raises(InvalidContentVersion):
        build_header("ETH", format_version=FormatVersion.LEGACY)


@pytest.mark.parametrize("content_type", ["ETHEREUMBLOCK", "ET", "", "ÉÉ"])
def test_build_legacy_rejects_content_type_length(content_type: str) -> None:
    """Legacy content types must be exactly 3 bytes, measured after UTF-8 encoding."""
    with pytest.raises(InvalidContentType):
        build_header(content_type, format_version=FormatVersion.LEGACY, content_version=1)


@pytest.mark.parametrize("format_version", [FormatVersion.LEGACY, FormatVersion.EXTENDED])
def test_build_rejects_unencodable_content_type(format_version: FormatVersion) -> None:
    """Content types that cannot be UTF-8 encoded are invalid content types."""
    kwargs = {"content_version": 1} if format_version == FormatVersion.LEGACY else {}

    with pytest.raises(InvalidContentType) as excinfo:
        build_header("\ud800", format_version=format_version, **kwargs)
    assert isinstance(excinfo.value.__cause__, UnicodeEncodeError)


def test_build_legacy_multibyte_content_type() -> None:
    """Two characters taking three bytes fit a legacy header."""
    header = build_header("ÉT", format_version=FormatVersion.LEGACY, content_version=5)

    assert header.raw_bytes == b"dbin\x00\xc3\x89T05"


def test_build_extended() -> None:
    """Extended headers prefix the content type with its byte length."""
    header = build_header("eth")

    assert header.raw_bytes == b"dbin\x01\x00\x03eth"
    assert header.to_bytes() == header.raw_bytes


def test_build_extended_multibyte_content_type() -> None:
    """The length prefix counts bytes, not characters."""
    header = build_header("ÉT")

    assert header.raw_bytes == b"dbin\x01\x00\x03\xc3\x89T"


def test_build_extended_rejects_empty_content_type() -> None:
    """Empty content types are rejected unless the compatibility mode is on."""
    with pytest.raises(InvalidContentType):
        build_header("")

    header = build_header("", allow_empty_content_type=True)
    assert header.raw_bytes == b"dbin\x01\x00\x00"


def test_build_extended_content_type_limits() -> None:
    """Content types up to 65535 bytes are accepted, longer ones rejected."""
    header = build_header("e" * 0xFFFF)
    assert header.raw_bytes[5:7] == b"\xff\xff"

    with pytest.raises(InvalidContentType, match="found 300000 bytes"):
        build_header("eth" * 100000)


def test_build_extended_rejects_content_version() -> None:
    """Format 1 has no content version field."""
    with pytest.raises(InvalidContentVersion):
        build_header("eth", content_version=1)


def test_build_unsupported_format_version() -> None:
    """Only formats 0 and 1 can be built."""
    with pytest.raises(UnsupportedFormatVersion):
        build_header("eth", format_version=2)


@pytest.mark.parametrize(
    "header",
    [
        LegacyHeader.create("ETH", 0),
        LegacyHeader.create("EOS", 99),
        LegacyHeader.create("ÉT", 42),
        ExtendedHeader.create("x"),
        ExtendedHeader.create("sf.ethereum.type.v2.Block"),
        ExtendedHeader.create("ÉÉÉ"),
        ExtendedHeader.create("t" * 0xFFFF),
    ],
)
def test_header_round_trip(header) -> None:
    """Decoding an encoded header gives back an equal header and the same bytes."""
    decoded = parse_header(io.BytesIO(header.raw_bytes))

    assert decoded == header
    assert type(decoded) is type(header)
    assert decoded.raw_bytes == header.raw_bytes


def test_headers_of_different_formats_differ() -> None:
    """A legacy and an extended header with the same content type are not equal."""
    assert LegacyHeader.create("ETH", 0) != ExtendedHeader.create("ETH")


def test_header_base_is_abstract() -> None:
    """Only the legacy and extended variants can be instantiated."""
    with pytest.raises(TypeError):
        Header("eth")  # type: ignore[abstract]


class WholeBufferSource:
    """Source that hands over its whole remaining buffer on every read."""

    def __init__(self, data: bytes):
        self._data = data

    def read(self, size: int) -> bytes:
        data, self._data = self._data, b""
        return data


def test_parse_rejects_source_ignoring_size() -> None:
    """An oversized delivery is a source failure, not a bad magic."""
    with pytest.raises(UnderlyingSourceError):
        parse_header(WholeBufferSource(b"dbin\x00ETH01\x00\x00\x00\x01a"))

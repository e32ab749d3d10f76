"""Reader and writer options."""

from pydantic import BaseModel, ConfigDict, Field

from .constants import MAX_MESSAGE_LEN, FormatVersion


class ReaderConfig(BaseModel):
    """Options for :class:`~dbin.stream.StreamReader`."""

    model_config = ConfigDict(frozen=True)

    max_message_bytes: int | None = Field(
        None, ge=0, le=MAX_MESSAGE_LEN, description="Reject messages longer than this (None: no limit)"
    )


class WriterConfig(BaseModel):
    """Options for :class:`~dbin.stream.StreamWriter`."""

    model_config = ConfigDict(frozen=True)

    format_version: FormatVersion = Field(FormatVersion.EXTENDED, description="Header encoding to write")
    allow_empty_content_type: bool = Field(
        False, description="Compatibility mode: accept an empty extended content type"
    )

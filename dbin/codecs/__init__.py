"""Payload codecs for dbin messages."""

from .base import Codec
from .json_codec import JSONCodec
from .protobuf_codec import ProtobufCodec

__all__ = [
    "Codec",
    "JSONCodec",
    "ProtobufCodec",
]

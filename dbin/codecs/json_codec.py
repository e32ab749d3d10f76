"""JSON codec for dbin message payloads."""

import json
from typing import Any

from pydantic import BaseModel

from .base import Codec


class JSONCodec(Codec):
    """Compact JSON, one document per message."""

    def __init__(self, content_type: str = "json"):
        self.content_type = content_type

    def encode(self, data: Any) -> bytes:
        """Encode data to JSON bytes.

        Args:
            data: Data to encode (pydantic model or JSON-compatible value)

        Returns:
            UTF-8 encoded JSON bytes
        """
        if isinstance(data, BaseModel):
            json_data = data.model_dump(mode="json")
        else:
            json_data = data

        return json.dumps(json_data, separators=(",", ":")).encode("utf-8")

    def decode(self, data: bytes) -> Any:
        """Decode JSON bytes to plain Python data."""
        return json.loads(data.decode("utf-8"))

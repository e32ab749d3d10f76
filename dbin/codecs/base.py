"""Base codec interface for dbin message payloads."""

from abc import ABC, abstractmethod
from typing import Any


class Codec(ABC):
    """Turns objects into message bytes and back.

    ``content_type`` is what a stream carrying this codec's messages
    announces in its header.
    """

    content_type: str

    @abstractmethod
    def encode(self, data: Any) -> bytes:
        """Encode data to bytes."""
        pass

    @abstractmethod
    def decode(self, data: bytes) -> Any:
        """Decode bytes to data."""
        pass

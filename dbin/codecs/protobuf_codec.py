"""Protobuf codec for dbin message payloads."""

from google.protobuf.message import Message

from .base import Codec


class ProtobufCodec(Codec):
    """Serializes one protobuf message type.

    The content type is the message's fully-qualified name, e.g.
    ``google.protobuf.StringValue``, which an extended header carries as is.
    """

    def __init__(self, message_class: type[Message]):
        self.message_class = message_class
        self.content_type = message_class.DESCRIPTOR.full_name

    def encode(self, data: Message) -> bytes:
        """Encode a protobuf message of this codec's type.

        Raises:
            TypeError: If data is not an instance of the codec's message class
        """
        if not isinstance(data, self.message_class):
            raise TypeError(f"expected {self.content_type}, got {type(data).__name__}")
        return data.SerializeToString()

    def decode(self, data: bytes) -> Message:
        """Decode bytes to a message of this codec's type.

        Raises:
            google.protobuf.message.DecodeError: If the bytes are not a valid message
        """
        return self.message_class.FromString(data)

"""chatwire: typed protocol objects for the chat platform's v10 wire format."""

from chatwire.codec import (
    DecodeResult,
    decode_bitfield,
    decode_channel,
    decode_component,
    decode_enum,
    decode_message,
    decode_stream,
    encode_bitfield,
    encode_channel,
    encode_component,
    encode_enum,
    encode_message,
)
from chatwire.errors import (
    DecodeError,
    InvalidVariantCombination,
    MalformedField,
    RecursionLimitExceeded,
    UnrecognizedDiscriminant,
)
from chatwire.schemas.component import ComponentContext

__version__ = "0.1.0"

__all__ = [
    "ComponentContext",
    "DecodeError",
    "DecodeResult",
    "InvalidVariantCombination",
    "MalformedField",
    "RecursionLimitExceeded",
    "UnrecognizedDiscriminant",
    "decode_bitfield",
    "decode_channel",
    "decode_component",
    "decode_enum",
    "decode_message",
    "decode_stream",
    "encode_bitfield",
    "encode_channel",
    "encode_component",
    "encode_enum",
    "encode_message",
]

"""Public decode/encode entry points.

Decoders never raise for bad input: they return a ``DecodeResult`` carrying
either the value or the ``DecodeError`` that explains the failure, so a caller
working through a batch can skip one bad record and keep going.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from chatwire.errors import DecodeError, RecursionLimitExceeded
from chatwire.schemas.base import WireModel, validate_as
from chatwire.schemas.channel import Channel, parse_channel
from chatwire.schemas.component import Component, ComponentContext, parse_component
from chatwire.schemas.enums import decode_enum, encode_enum
from chatwire.schemas.flags import decode_bitfield, encode_bitfield
from chatwire.schemas.message import Message
from chatwire.utils.logger_util import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

__all__ = [
    "DecodeResult",
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


@dataclass(frozen=True)
class DecodeResult(Generic[T]):
    value: T | None = None
    error: DecodeError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the decoded value or raise the decode error."""
        if self.error is not None:
            raise self.error
        return self.value


def _decode(what: str, parse: Callable[[Any], T], value: Any) -> DecodeResult[T]:
    try:
        return DecodeResult(value=parse(value))
    except DecodeError as exc:
        logger.debug("failed to decode %s: %s", what, exc)
        return DecodeResult(error=exc)
    except RecursionError:
        logger.warning("failed to decode %s: input nested too deeply", what)
        return DecodeResult(error=RecursionLimitExceeded(sys.getrecursionlimit(), what="input nesting"))


def decode_channel(value: Any) -> DecodeResult[Channel]:
    return _decode("channel", parse_channel, value)


def encode_channel(channel: Channel) -> dict[str, Any]:
    return channel.to_wire()


def decode_message(value: Any) -> DecodeResult[Message]:
    return _decode("message", lambda payload: validate_as(Message, payload), value)


def encode_message(message: Message) -> dict[str, Any]:
    return message.to_wire()


def decode_component(value: Any, context: ComponentContext | str = ComponentContext.MESSAGE) -> DecodeResult[Component]:
    """Decode a row or a single leaf; ``context`` decides which leaves a row may hold."""
    context = ComponentContext(context)
    return _decode(f"{context.value} component", lambda payload: parse_component(payload, context), value)


def encode_component(component: WireModel) -> dict[str, Any]:
    return component.to_wire()


def decode_stream(values: Iterable[Any], decoder: Callable[[Any], DecodeResult[T]]) -> Iterator[T]:
    """Decode every value with ``decoder``, logging and skipping the ones that fail."""
    for index, value in enumerate(values):
        result = decoder(value)
        if result.ok:
            yield result.value
            continue
        record_id = value.get("id") if isinstance(value, Mapping) else None
        logger.warning("skipping record %d (id=%s): %s", index, record_id, result.error)

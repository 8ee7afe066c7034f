"""Shared building blocks for every wire model: snowflakes, timestamps and ``WireModel``."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Annotated, Any, ClassVar, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    PlainSerializer,
    PlainValidator,
    ValidationError,
    model_serializer,
    model_validator,
)
from pydantic_core import PydanticCustomError

from chatwire.errors import (
    DecodeError,
    MalformedField,
    RecursionLimitExceeded,
    UnrecognizedDiscriminant,
    translate_validation_error,
)

M = TypeVar("M", bound=BaseModel)
T = TypeVar("T")

SNOWFLAKE_MAX = 2**64 - 1
# nesting allowed inside opaque objects and unknown keys
JSON_DEPTH_MAX = 64


def _parse_snowflake(raw: Any) -> int:
    if isinstance(raw, bool):
        raise ValueError("snowflake cannot be a boolean")
    if isinstance(raw, str):
        if not (raw.isascii() and raw.isdigit()):
            raise ValueError("snowflake must be a decimal string")
        # "0123" would re-encode as "123"
        if len(raw) > 1 and raw.startswith("0"):
            raise ValueError("snowflake has leading zeros")
        value = int(raw)
    elif isinstance(raw, int):
        value = raw
    else:
        raise ValueError("snowflake must be a decimal string")
    if value < 0:
        raise ValueError("snowflake cannot be negative")
    if value > SNOWFLAKE_MAX:
        raise ValueError("snowflake does not fit in 64 bits")
    return value


def _check_timestamp(raw: Any) -> str:
    if not isinstance(raw, str):
        raise ValueError("timestamp must be an ISO-8601 string")
    try:
        datetime.fromisoformat(raw)
    except ValueError:
        raise ValueError(f"invalid ISO-8601 timestamp {raw!r}") from None
    return raw


class FrozenDict(dict):
    """Read-only JSON object. Pydantic still serializes it as a plain dict."""

    def _readonly(self, *args: Any, **kwargs: Any) -> Any:
        raise TypeError(f"{type(self).__name__} is read-only")

    __setitem__ = __delitem__ = __ior__ = _readonly
    clear = pop = popitem = setdefault = update = _readonly

    def __hash__(self) -> int:
        return hash(frozenset(self.items()))

    def __reduce__(self):
        return type(self), (dict(self),)


def freeze_json(value: Any, depth: int = 0) -> Any:
    """Copy a JSON value into ``FrozenDict`` objects and tuples.

    Raises ``RecursionLimitExceeded`` once nesting passes ``JSON_DEPTH_MAX``;
    the error path points at the container that was too deep.
    """
    if not isinstance(value, (Mapping, list, tuple)):
        return value
    if depth >= JSON_DEPTH_MAX:
        raise RecursionLimitExceeded(JSON_DEPTH_MAX, what="JSON nesting")
    items = value.items() if isinstance(value, Mapping) else enumerate(value)
    copied = {}
    for key, item in items:
        try:
            copied[key] = freeze_json(item, depth + 1)
        except DecodeError as exc:
            raise exc.at(key)
    if isinstance(value, Mapping):
        return FrozenDict(copied)
    return tuple(copied.values())


def thaw_json(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: thaw_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw_json(item) for item in value]
    return value


def _freeze_object(raw: Any) -> FrozenDict:
    if not isinstance(raw, Mapping):
        raise ValueError("expected an object")
    with nested_decode():
        return freeze_json(raw)


# 64-bit id: int in Python, decimal string on the wire
Snowflake = Annotated[int, PlainValidator(_parse_snowflake), PlainSerializer(str, return_type=str)]
# kept verbatim so it re-encodes byte for byte
Timestamp = Annotated[str, PlainValidator(_check_timestamp)]
# objects owned by other parts of the API, carried as a read-only copy
Opaque = Annotated[dict[str, Any], PlainValidator(_freeze_object), PlainSerializer(thaw_json)]


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value)


class WireModel(BaseModel):
    """Immutable wire object.

    Unknown keys are kept as read-only copies and re-emitted. Fields that
    were absent on the wire stay out of ``model_fields_set`` and out of the
    encoded form, so "absent" and "present but null" remain distinguishable.
    ``wire_required`` names sequence fields that decode to empty when absent
    but are always emitted.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    wire_required: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="before")
    @classmethod
    def _freeze_unknown_keys(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        fields = cls.model_fields
        copied = {}
        with nested_decode():
            for key, value in data.items():
                if key in fields:
                    copied[key] = value
                    continue
                try:
                    copied[key] = freeze_json(value)
                except DecodeError as exc:
                    raise exc.at(key)
        return copied

    @model_serializer(mode="wrap")
    def _emit_required_sequences(self, handler):
        data = handler(self)
        if isinstance(data, dict):
            for name in self.wire_required:
                data.setdefault(name, [])
        return data

    def has(self, name: str) -> bool:
        """True when ``name`` was present on the wire or passed explicitly."""
        return name in self.model_fields_set

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


def validate_as(model_cls: type[M], payload: Any) -> M:
    """Validate ``payload`` as ``model_cls``, raising ``DecodeError`` subclasses only."""
    if isinstance(payload, model_cls):
        return payload
    if not isinstance(payload, Mapping):
        raise MalformedField("", f"{model_cls.__name__} object", payload)
    try:
        return model_cls.model_validate(payload)
    except ValidationError as exc:
        raise translate_validation_error(exc) from exc


def read_discriminant(payload: Any, field: str = "type") -> int:
    if not isinstance(payload, Mapping):
        raise MalformedField("", "object", payload)
    raw = payload.get(field)
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise UnrecognizedDiscriminant(field, raw, path=field)
    return raw


def parse_each(items: Any, parse: Callable[[Any], T]) -> tuple[T, ...]:
    """Parse every element of a JSON array, tagging failures with their index."""
    if not isinstance(items, (list, tuple)):
        raise MalformedField("", "array", items)
    parsed = []
    for index, item in enumerate(items):
        try:
            parsed.append(parse(item))
        except DecodeError as exc:
            raise exc.at(index)
    return tuple(parsed)


@contextmanager
def nested_decode() -> Iterator[None]:
    """Hand a ``DecodeError`` raised inside a validator to Pydantic.

    Pydantic then records the field location; ``translate_validation_error``
    restores the original error with the full path.
    """
    try:
        yield
    except DecodeError as exc:
        raise PydanticCustomError(exc.kind, "{detail}", {"detail": exc.message, "error": exc}) from exc

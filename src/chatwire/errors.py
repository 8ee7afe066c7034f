"""Decode error taxonomy.

``DecodeError`` does not derive from ``ValueError``, so Pydantic never wraps it
as a ``value_error``. Validators that dispatch nested payloads hand these
errors to Pydantic as ``PydanticCustomError`` (see
``chatwire.schemas.base.nested_decode``) so the location is tracked through
every level. ``translate_validation_error`` turns the result back into the
original error kind at the public boundary.
"""

from __future__ import annotations

import reprlib
from typing import Any

from pydantic import ValidationError

_short_repr = reprlib.Repr()
_short_repr.maxstring = 80
_short_repr.maxother = 80


def join_path(*segments: object) -> str:
    return ".".join(str(s) for s in segments if s != "")


def _describe(value: Any) -> str:
    text = _short_repr.repr(value)
    if len(text) > 80:
        text = text[:77] + "..."
    return f"{type(value).__name__} {text}"


class DecodeError(Exception):
    """Base class for every failure to decode a wire value."""

    kind = "decode_error"

    def __init__(self, message: str, path: str = ""):
        self.message = message
        self.path = path
        super().__init__(self._render())

    def _render(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message

    def at(self, *segments: object) -> "DecodeError":
        """Prepend ``segments`` to the error path and return the error."""
        self.path = join_path(*segments, self.path)
        self.args = (self._render(),)
        return self


class UnrecognizedDiscriminant(DecodeError):
    """The ``type`` (or ``style``) field is missing or not readable as an integer."""

    kind = "unrecognized_discriminant"

    def __init__(self, field: str, actual: Any, path: str = ""):
        self.field = field
        self.actual = actual
        super().__init__(f"cannot read discriminant {field!r} from {_describe(actual)}", path)


class MalformedField(DecodeError):
    """A known field has the wrong type or shape, or a required field is missing."""

    kind = "malformed_field"

    def __init__(self, path: str, expected: str, actual: Any):
        self.expected = expected
        self.actual = actual
        super().__init__(f"expected {expected}, got {_describe(actual)}", path)


class InvalidVariantCombination(DecodeError):
    """Discriminant and payload disagree, e.g. a link button carrying ``custom_id``."""

    kind = "invalid_variant_combination"


class RecursionLimitExceeded(DecodeError):
    """A nested structure is deeper than its fixed bound."""

    kind = "recursion_limit_exceeded"

    def __init__(self, limit: int, path: str = "", what: str = "nesting"):
        self.limit = limit
        super().__init__(f"{what} exceeds the maximum depth of {limit}", path)


def translate_validation_error(exc: ValidationError) -> DecodeError:
    """Map a Pydantic ``ValidationError`` onto the decode error taxonomy.

    Errors that started life as a ``DecodeError`` in a nested validator win
    over plain shape errors, since they name the more specific problem.
    """
    errors = exc.errors(include_url=False)
    for err in errors:
        inner = (err.get("ctx") or {}).get("error")
        if isinstance(inner, DecodeError):
            return inner.at(*err.get("loc", ()))
    err = errors[0]
    expected = f"{err.get('type')} ({err.get('msg')})"
    return MalformedField(join_path(*err.get("loc", ())), expected, err.get("input"))

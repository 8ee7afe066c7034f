import pytest

import chatwire
from chatwire import codec
from chatwire.codec import DecodeResult, decode_channel, decode_message, decode_stream
from chatwire.errors import DecodeError, MalformedField, RecursionLimitExceeded, UnrecognizedDiscriminant


def test_decode_result_success():
    result = decode_channel({"type": 4, "id": "1", "name": "cat", "position": 0})
    assert result.ok
    assert result.error is None
    assert result.unwrap() is result.value


def test_decode_result_failure_is_a_value():
    result = decode_channel({"id": "1"})
    assert not result.ok
    assert result.value is None
    assert isinstance(result.error, UnrecognizedDiscriminant)
    with pytest.raises(UnrecognizedDiscriminant):
        result.unwrap()


def test_decode_errors_are_not_value_errors():
    assert not issubclass(DecodeError, ValueError)
    error = MalformedField("a.b", "integer", "x")
    assert error.path == "a.b"
    assert error.expected == "integer"
    assert error.actual == "x"
    assert str(error).startswith("a.b: expected integer")
    assert error.at("items", 3).path == "items.3.a.b"


@pytest.mark.parametrize("value", [None, "channel", 42, [], 1.5])
def test_decoders_never_raise_on_garbage(value):
    assert isinstance(decode_channel(value).error, DecodeError)
    assert isinstance(decode_message(value).error, DecodeError)
    assert isinstance(chatwire.decode_component(value, "modal").error, DecodeError)


def test_decode_stream_skips_bad_records():
    values = [
        {"type": 0, "id": "1", "name": "general", "position": 0},
        {"id": "2"},
        {"type": 0, "id": "3", "name": "general", "position": "top"},
        {"type": 999, "id": "4"},
    ]
    decoded = list(decode_stream(values, decode_channel))
    assert [channel.id for channel in decoded] == [1, 4]


def test_decode_stream_is_lazy():
    seen = []

    def decoder(value):
        seen.append(value)
        return DecodeResult(value=value)

    stream = decode_stream(iter([1, 2, 3]), decoder)
    assert next(stream) == 1
    assert seen == [1]


def test_package_exports_public_api():
    for name in ("decode_channel", "encode_channel", "decode_message", "encode_message", "decode_component",
                 "encode_component", "decode_bitfield", "encode_bitfield", "decode_enum", "encode_enum"):
        assert callable(getattr(chatwire, name))
    assert chatwire.__version__


def test_recursion_error_is_returned_as_a_value(monkeypatch):
    def overflow(payload):
        raise RecursionError("maximum recursion depth exceeded")

    monkeypatch.setattr(codec, "parse_channel", overflow)
    result = decode_channel({"type": 0, "id": "1"})
    assert not result.ok
    assert isinstance(result.error, RecursionLimitExceeded)


def test_error_description_survives_deep_input(deep_json):
    error = MalformedField("content", "string", deep_json(5000))
    assert str(error).startswith("content: expected string, got list [[[")

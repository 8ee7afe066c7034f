import pytest
from pydantic import ValidationError

from chatwire import config
from chatwire.codec import decode_message, encode_message
from chatwire.config import Settings
from chatwire.errors import InvalidVariantCombination, MalformedField, RecursionLimitExceeded
from chatwire.schemas.channel import ThreadChannel
from chatwire.schemas.component import MessageActionRow, UnknownComponent
from chatwire.schemas.enums import MessageType
from chatwire.schemas.flags import MessageFlags
from chatwire.schemas.message import Message, MessageSnapshot


def test_minimal_message_round_trip(make_message):
    payload = make_message()
    message = decode_message(payload).unwrap()
    assert isinstance(message, Message)
    assert message.author.username == "nelly"
    assert message.type is MessageType.DEFAULT
    assert encode_message(message) == payload
    assert decode_message(encode_message(message)).unwrap() == message


def test_absent_sequences_decode_empty_and_encode_present(make_message):
    payload = make_message()
    for name in ("mentions", "mention_roles", "attachments", "embeds"):
        del payload[name]
    message = decode_message(payload).unwrap()
    assert message.mentions == ()
    assert message.attachments == ()
    assert message.reactions == ()
    encoded = encode_message(message)
    for name in ("mentions", "mention_roles", "attachments", "embeds"):
        assert encoded[name] == []
    # reactions is only emitted when it was on the wire
    assert "reactions" not in encoded


def test_reply_with_deleted_reference(make_message):
    message = decode_message(make_message(type=19, referenced_message=None)).unwrap()
    assert message.type is MessageType.REPLY
    assert message.referenced_message is None
    assert message.has("referenced_message")
    assert message.is_reply_deleted
    assert encode_message(message)["referenced_message"] is None


def test_reply_never_fetched_is_distinct_from_deleted(make_message):
    message = decode_message(make_message(type=19)).unwrap()
    assert message.referenced_message is None
    assert not message.has("referenced_message")
    assert not message.is_reply_deleted
    assert "referenced_message" not in encode_message(message)


def test_reply_with_referenced_message(make_message):
    original = make_message(id="1000", content="first")
    message = decode_message(make_message(type=19, referenced_message=original,
                                          message_reference={"type": 0, "message_id": "1000", "channel_id": "41771983423143937"})).unwrap()
    assert message.referenced_message.id == 1000
    assert message.message_reference.message_id == 1000
    assert encode_message(message)["referenced_message"] == original


def _chain(make_message, depth):
    payload = make_message(id="1")
    for index in range(depth):
        payload = make_message(id=str(index + 2), type=19, referenced_message=payload)
    return payload


def test_reference_chain_within_limit(make_message):
    assert decode_message(_chain(make_message, 2)).ok


def test_reference_chain_too_deep(make_message):
    result = decode_message(_chain(make_message, 3))
    assert isinstance(result.error, RecursionLimitExceeded)
    assert result.error.path == "referenced_message.referenced_message.referenced_message"


def test_reference_depth_comes_from_settings(monkeypatch, make_message):
    monkeypatch.setattr(config, "settings", Settings(max_reference_depth=0))
    result = decode_message(make_message(type=19, referenced_message=make_message(id="1")))
    assert isinstance(result.error, RecursionLimitExceeded)
    assert decode_message(make_message(type=19, referenced_message=None)).ok


def test_thread_is_dispatched_as_a_channel(make_message):
    thread = {"type": 11, "id": "5", "name": "talk", "applied_tags": []}
    message = decode_message(make_message(thread=thread, flags=int(MessageFlags.HAS_THREAD))).unwrap()
    assert isinstance(message.thread, ThreadChannel)
    assert MessageFlags.HAS_THREAD in message.flags
    assert encode_message(message)["thread"] == thread


def test_thread_error_path(make_message):
    result = decode_message(make_message(thread={"type": 11, "id": "5", "name": "talk"}))
    assert isinstance(result.error, MalformedField)
    assert result.error.path == "thread.applied_tags"


def test_components_are_message_rows(make_message, make_row, make_button):
    rows = [make_row(make_button(1), make_button(5)), {"type": 40, "content": "future layout"}]
    message = decode_message(make_message(components=rows)).unwrap()
    assert isinstance(message.components[0], MessageActionRow)
    assert isinstance(message.components[1], UnknownComponent)
    assert encode_message(message)["components"] == rows


def test_bare_leaf_in_components_is_rejected(make_message, make_button):
    result = decode_message(make_message(components=[make_button(1)]))
    assert isinstance(result.error, InvalidVariantCombination)
    assert result.error.path == "components.0.type"


def test_nested_component_error_path(make_message, make_row, make_button):
    rows = [make_row(make_button(1)), make_row(make_button(1), {"type": 2, "style": 5, "custom_id": "oops"})]
    result = decode_message(make_message(components=rows))
    assert isinstance(result.error, InvalidVariantCombination)
    assert result.error.path == "components.1.components.1"


def test_message_flags_keep_unknown_bits(make_message):
    raw = int(MessageFlags.SUPPRESS_EMBEDS) | (1 << 40)
    message = decode_message(make_message(flags=raw)).unwrap()
    assert message.flags.unknown_bits == 1 << 40
    assert encode_message(message)["flags"] == raw


def test_unknown_message_type_round_trips(make_message):
    payload = make_message(type=250)
    message = decode_message(payload).unwrap()
    assert message.type.is_unknown
    assert encode_message(message) == payload


def test_embeds_and_attachments(make_message):
    embed = {
        "title": "Release",
        "type": "rich",
        "description": "notes",
        "timestamp": "2024-05-01T12:30:00+00:00",
        "color": 5814783,
        "footer": {"text": "bot"},
        "fields": [{"name": "a", "value": "b", "inline": True}],
    }
    attachment = {"id": "7", "filename": "a.png", "size": 10, "url": "https://cdn/a.png", "proxy_url": "https://media/a.png",
                  "height": 10, "width": 10, "content_type": "image/png"}
    payload = make_message(embeds=[embed], attachments=[attachment])
    message = decode_message(payload).unwrap()
    assert message.embeds[0].fields[0].inline is True
    assert message.attachments[0].filename == "a.png"
    assert encode_message(message) == payload


def test_reactions_nonce_and_mentions(make_message):
    payload = make_message(
        mentions=[{"id": "9", "username": "other"}],
        mention_roles=["41771983423143936"],
        reactions=[{"count": 2, "count_details": {"burst": 0, "normal": 2}, "me": True, "me_burst": False,
                    "emoji": {"id": None, "name": "👍"}, "burst_colors": []}],
        nonce="abc",
    )
    message = decode_message(payload).unwrap()
    assert message.mention_roles == (41771983423143936,)
    assert message.reactions[0].emoji.name == "👍"
    assert encode_message(message) == payload
    assert decode_message(make_message(nonce=17)).unwrap().nonce == 17


def test_opaque_objects_are_copied(make_message):
    poll = {"question": {"text": "Lunch?"}, "answers": [{"answer_id": 1, "poll_media": {"text": "pizza"}}]}
    payload = make_message(poll=poll, application={"id": "3", "name": "app"})
    message = decode_message(payload).unwrap()
    poll["answers"].clear()
    assert message.poll["answers"][0]["answer_id"] == 1
    assert encode_message(message)["application"] == {"id": "3", "name": "app"}


def test_effective_interaction_prefers_metadata(make_message):
    metadata = {"id": "1", "type": 2, "user": {"id": "9", "username": "x"}}
    legacy = {"id": "1", "type": 2, "name": "ping", "user": {"id": "9", "username": "x"}}
    both = decode_message(make_message(type=20, interaction_metadata=metadata, interaction=legacy)).unwrap()
    assert both.effective_interaction == metadata
    legacy_only = decode_message(make_message(type=20, interaction=legacy)).unwrap()
    assert legacy_only.effective_interaction == legacy
    assert decode_message(make_message()).unwrap().effective_interaction is None


def test_forwarded_snapshot_keeps_deprecated_guild_id(make_message):
    snapshot = {
        "message": {"type": 0, "content": "fwd", "timestamp": "2024-05-01T12:30:00+00:00", "edited_timestamp": None,
                    "mentions": [], "mention_roles": [], "attachments": [], "embeds": [], "flags": 0},
        "guild_id": "290926798626357999",
    }
    payload = make_message(message_snapshots=[snapshot], flags=int(MessageFlags.HAS_SNAPSHOT),
                           message_reference={"type": 1, "channel_id": "1", "message_id": "2"})
    message = decode_message(payload).unwrap()
    assert isinstance(message.message_snapshots[0], MessageSnapshot)
    assert message.message_snapshots[0].guild_id == 290926798626357999
    assert encode_message(message) == payload


def test_call_and_role_subscription(make_message):
    payload = make_message(
        type=3,
        call={"participants": ["1", "2"], "ended_timestamp": None},
        role_subscription_data={"role_subscription_listing_id": "3", "tier_name": "gold",
                                "total_months_subscribed": 4, "is_renewal": True},
    )
    message = decode_message(payload).unwrap()
    assert message.call.participants == (1, 2)
    assert message.role_subscription_data.tier_name == "gold"
    assert encode_message(message) == payload


@pytest.mark.parametrize("field, value", [("author", None), ("content", 5), ("timestamp", "yesterday"), ("tts", "no")])
def test_malformed_fields(make_message, field, value):
    result = decode_message(make_message(**{field: value}))
    assert isinstance(result.error, MalformedField)
    assert result.error.path == field


def test_missing_author_is_malformed(make_message):
    payload = make_message()
    del payload["author"]
    result = decode_message(payload)
    assert isinstance(result.error, MalformedField)
    assert result.error.path == "author"


def test_message_is_immutable(make_message):
    message = decode_message(make_message()).unwrap()
    with pytest.raises(ValidationError):
        message.content = "edited"


def test_opaque_and_unknown_fields_are_read_only(make_message):
    poll = {"question": {"text": "Lunch?"}, "answers": [{"answer_id": 1}]}
    message = decode_message(make_message(poll=poll, future={"a": 1})).unwrap()
    with pytest.raises(TypeError):
        message.poll["question"] = {"text": "Dinner?"}
    with pytest.raises(TypeError):
        message.poll["question"].update(text="Dinner?")
    with pytest.raises(TypeError):
        message.future["a"] = 2
    assert isinstance(message.poll["answers"], tuple)
    assert message.poll["question"]["text"] == "Lunch?"
    assert encode_message(message)["poll"] == poll
    assert encode_message(message)["future"] == {"a": 1}


@pytest.mark.parametrize("field", ["poll", "application"])
def test_deeply_nested_opaque_object_is_rejected(make_message, deep_json, field):
    result = decode_message(make_message(**{field: {"q": deep_json()}}))
    assert isinstance(result.error, RecursionLimitExceeded)
    assert result.error.path.startswith(f"{field}.q.0.0")


def test_deeply_nested_unknown_key_on_nested_object(make_message, deep_json):
    author = {"id": "9", "username": "x", "bio": deep_json()}
    result = decode_message(make_message(author=author))
    assert isinstance(result.error, RecursionLimitExceeded)
    assert result.error.path.startswith("author.bio.0.0")


def test_attachment_duration_must_be_a_number(make_message):
    attachment = {"id": "7", "filename": "voice.ogg", "size": 10, "url": "https://cdn/v.ogg",
                  "proxy_url": "https://media/v.ogg", "duration_secs": 1.5, "waveform": "AAAA"}
    message = decode_message(make_message(attachments=[attachment])).unwrap()
    assert message.attachments[0].duration_secs == 1.5
    result = decode_message(make_message(attachments=[dict(attachment, duration_secs="1.5")]))
    assert isinstance(result.error, MalformedField)
    assert result.error.path.startswith("attachments.0.duration_secs")

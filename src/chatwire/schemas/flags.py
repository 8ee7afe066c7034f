"""Bitfields carried on channels, messages, attachments, thread members and overwrites.

Flags use ``KEEP`` boundaries: bits without a name survive decode and are
re-emitted on encode, and ``unknown_bits`` exposes them.
"""

from __future__ import annotations

import functools
from enum import KEEP, IntFlag
from typing import Annotated, Any, TypeVar

from pydantic import PlainSerializer, PlainValidator

from chatwire.errors import MalformedField

F = TypeVar("F", bound="WireFlag")

# integer bitfields stay inside the range a JSON double represents exactly
SAFE_INTEGER_BITS = 53
PERMISSION_BITS = 64


class WireFlag(IntFlag, boundary=KEEP):
    @property
    def known_bits(self) -> int:
        mask = 0
        for member in type(self):
            mask |= member.value
        return self.value & mask

    @property
    def unknown_bits(self) -> int:
        return self.value & ~self.known_bits

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(member.name for member in type(self) if member in self)


class MessageFlags(WireFlag):
    CROSSPOSTED = 1 << 0
    IS_CROSSPOST = 1 << 1
    SUPPRESS_EMBEDS = 1 << 2
    SOURCE_MESSAGE_DELETED = 1 << 3
    URGENT = 1 << 4
    HAS_THREAD = 1 << 5
    EPHEMERAL = 1 << 6
    LOADING = 1 << 7
    FAILED_TO_MENTION_SOME_ROLES_IN_THREAD = 1 << 8
    # undocumented
    SHOULD_SHOW_LINK_NOT_DISCORD_WARNING = 1 << 10
    SUPPRESS_NOTIFICATIONS = 1 << 12
    IS_VOICE_MESSAGE = 1 << 13
    HAS_SNAPSHOT = 1 << 14


class ChannelFlags(WireFlag):
    # undocumented except PINNED, REQUIRE_TAG and HIDE_MEDIA_DOWNLOAD_OPTIONS
    GUILD_FEED_REMOVED = 1 << 0
    PINNED = 1 << 1
    ACTIVE_CHANNELS_REMOVED = 1 << 2
    REQUIRE_TAG = 1 << 4
    IS_SPAM = 1 << 5
    IS_GUILD_RESOURCE_CHANNEL = 1 << 7
    CLYDE_AI = 1 << 8
    IS_SCHEDULED_FOR_DELETION = 1 << 9
    HIDE_MEDIA_DOWNLOAD_OPTIONS = 1 << 15


class AttachmentFlags(WireFlag):
    IS_REMIX = 1 << 2


class ThreadMemberFlags(WireFlag):
    # undocumented
    HAS_INTERACTED = 1 << 0
    ALL_MESSAGES = 1 << 1
    ONLY_MENTIONS = 1 << 2
    NO_MESSAGES = 1 << 3


class Permissions(WireFlag):
    CREATE_INSTANT_INVITE = 1 << 0
    KICK_MEMBERS = 1 << 1
    BAN_MEMBERS = 1 << 2
    ADMINISTRATOR = 1 << 3
    MANAGE_CHANNELS = 1 << 4
    MANAGE_GUILD = 1 << 5
    ADD_REACTIONS = 1 << 6
    VIEW_AUDIT_LOG = 1 << 7
    PRIORITY_SPEAKER = 1 << 8
    STREAM = 1 << 9
    VIEW_CHANNEL = 1 << 10
    SEND_MESSAGES = 1 << 11
    SEND_TTS_MESSAGES = 1 << 12
    MANAGE_MESSAGES = 1 << 13
    EMBED_LINKS = 1 << 14
    ATTACH_FILES = 1 << 15
    READ_MESSAGE_HISTORY = 1 << 16
    MENTION_EVERYONE = 1 << 17
    USE_EXTERNAL_EMOJIS = 1 << 18
    VIEW_GUILD_INSIGHTS = 1 << 19
    CONNECT = 1 << 20
    SPEAK = 1 << 21
    MUTE_MEMBERS = 1 << 22
    DEAFEN_MEMBERS = 1 << 23
    MOVE_MEMBERS = 1 << 24
    USE_VAD = 1 << 25
    CHANGE_NICKNAME = 1 << 26
    MANAGE_NICKNAMES = 1 << 27
    MANAGE_ROLES = 1 << 28
    MANAGE_WEBHOOKS = 1 << 29
    MANAGE_GUILD_EXPRESSIONS = 1 << 30
    USE_APPLICATION_COMMANDS = 1 << 31
    REQUEST_TO_SPEAK = 1 << 32
    MANAGE_EVENTS = 1 << 33
    MANAGE_THREADS = 1 << 34
    CREATE_PUBLIC_THREADS = 1 << 35
    CREATE_PRIVATE_THREADS = 1 << 36
    USE_EXTERNAL_STICKERS = 1 << 37
    SEND_MESSAGES_IN_THREADS = 1 << 38
    USE_EMBEDDED_ACTIVITIES = 1 << 39
    MODERATE_MEMBERS = 1 << 40
    VIEW_CREATOR_MONETIZATION_ANALYTICS = 1 << 41
    USE_SOUNDBOARD = 1 << 42
    CREATE_GUILD_EXPRESSIONS = 1 << 43
    CREATE_EVENTS = 1 << 44
    USE_EXTERNAL_SOUNDS = 1 << 45
    SEND_VOICE_MESSAGES = 1 << 46
    SEND_POLLS = 1 << 49
    USE_EXTERNAL_APPS = 1 << 50


def _bit_width(flag_cls: type[WireFlag]) -> int:
    return PERMISSION_BITS if issubclass(flag_cls, Permissions) else SAFE_INTEGER_BITS


def _coerce(flag_cls: type[F], raw: Any) -> F:
    if isinstance(raw, flag_cls):
        return raw
    if isinstance(raw, str):
        if not (raw.isascii() and raw.isdigit()):
            raise ValueError(f"{flag_cls.__name__} expects a decimal string")
        raw = int(raw)
    elif isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{flag_cls.__name__} expects an integer")
    if raw < 0 or raw.bit_length() > _bit_width(flag_cls):
        raise ValueError(f"{flag_cls.__name__} must fit in {_bit_width(flag_cls)} unsigned bits")
    return flag_cls(raw)


def decode_bitfield(flag_cls: type[F], raw: Any) -> F:
    """Decode an integer (or decimal string) into ``flag_cls``, keeping unknown bits."""
    try:
        return _coerce(flag_cls, raw)
    except ValueError:
        raise MalformedField("", f"{_bit_width(flag_cls)}-bit {flag_cls.__name__}", raw) from None


def encode_bitfield(flags: WireFlag) -> int:
    # named and unknown bits both live in the value
    return int(flags)


def _encode_as_string(flags: WireFlag) -> str:
    return str(encode_bitfield(flags))


def wire_flags(flag_cls: type[F], as_string: bool = False) -> Any:
    return Annotated[
        flag_cls,
        PlainValidator(functools.partial(_coerce, flag_cls)),
        PlainSerializer(_encode_as_string if as_string else encode_bitfield),
    ]


MessageFlagsField = wire_flags(MessageFlags)
ChannelFlagsField = wire_flags(ChannelFlags)
AttachmentFlagsField = wire_flags(AttachmentFlags)
ThreadMemberFlagsField = wire_flags(ThreadMemberFlags)
# permissions travel as decimal strings
PermissionsField = wire_flags(Permissions, as_string=True)

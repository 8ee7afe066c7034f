"""Integer and string enums used across the wire model.

Every enum here is *open*: a value the catalogue does not name yet decodes to an
"unknown" pseudo-member that carries the raw value and encodes back to it, so a
client never fails on values the platform adds later. Old names kept for
compatibility are plain enum aliases; they decode to the current name and
encode to the same value.
"""

from __future__ import annotations

import functools
from enum import Enum, IntEnum, StrEnum
from typing import Annotated, Any, TypeVar

from pydantic import PlainSerializer, PlainValidator

from chatwire.errors import MalformedField

E = TypeVar("E", bound=Enum)


class OpenIntEnum(IntEnum):
    @classmethod
    def _missing_(cls, value: Any):
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        member = int.__new__(cls, value)
        member._name_ = f"UNKNOWN_{value}"
        member._value_ = value
        return member

    @property
    def is_unknown(self) -> bool:
        return self._name_ not in type(self).__members__


class OpenStrEnum(StrEnum):
    @classmethod
    def _missing_(cls, value: Any):
        if not isinstance(value, str):
            return None
        member = str.__new__(cls, value)
        member._name_ = f"UNKNOWN_{value}"
        member._value_ = value
        return member

    @property
    def is_unknown(self) -> bool:
        return self._name_ not in type(self).__members__


def _coerce(enum_cls: type[E], raw: Any) -> E:
    if issubclass(enum_cls, OpenIntEnum):
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise ValueError(f"{enum_cls.__name__} expects an integer")
    elif not isinstance(raw, str):
        raise ValueError(f"{enum_cls.__name__} expects a string")
    return enum_cls(raw)


def decode_enum(enum_cls: type[E], raw: Any) -> E:
    """Decode ``raw`` into ``enum_cls``; unknown values become pseudo-members."""
    try:
        return _coerce(enum_cls, raw)
    except ValueError:
        kind = "integer" if issubclass(enum_cls, OpenIntEnum) else "string"
        raise MalformedField("", f"{kind} {enum_cls.__name__}", raw) from None


def encode_enum(member: OpenIntEnum | OpenStrEnum) -> int | str:
    return member.value


def wire_enum(enum_cls: type[E]) -> Any:
    """Annotated field type that validates and dumps ``enum_cls`` openly."""
    return Annotated[
        enum_cls,
        PlainValidator(functools.partial(_coerce, enum_cls)),
        PlainSerializer(encode_enum),
    ]


class ChannelType(OpenIntEnum):
    GUILD_TEXT = 0
    DM = 1
    GUILD_VOICE = 2
    GROUP_DM = 3
    GUILD_CATEGORY = 4
    GUILD_ANNOUNCEMENT = 5
    ANNOUNCEMENT_THREAD = 10
    PUBLIC_THREAD = 11
    PRIVATE_THREAD = 12
    GUILD_STAGE_VOICE = 13
    GUILD_DIRECTORY = 14
    GUILD_FORUM = 15
    GUILD_MEDIA = 16

    # old names for renamed members
    GUILD_NEWS = 5
    GUILD_NEWS_THREAD = 10
    GUILD_PUBLIC_THREAD = 11
    GUILD_PRIVATE_THREAD = 12


class MessageType(OpenIntEnum):
    DEFAULT = 0
    RECIPIENT_ADD = 1
    RECIPIENT_REMOVE = 2
    CALL = 3
    CHANNEL_NAME_CHANGE = 4
    CHANNEL_ICON_CHANGE = 5
    CHANNEL_PINNED_MESSAGE = 6
    USER_JOIN = 7
    GUILD_BOOST = 8
    GUILD_BOOST_TIER_1 = 9
    GUILD_BOOST_TIER_2 = 10
    GUILD_BOOST_TIER_3 = 11
    CHANNEL_FOLLOW_ADD = 12

    GUILD_DISCOVERY_DISQUALIFIED = 14
    GUILD_DISCOVERY_REQUALIFIED = 15
    GUILD_DISCOVERY_GRACE_PERIOD_INITIAL_WARNING = 16
    GUILD_DISCOVERY_GRACE_PERIOD_FINAL_WARNING = 17
    THREAD_CREATED = 18
    REPLY = 19
    CHAT_INPUT_COMMAND = 20
    THREAD_STARTER_MESSAGE = 21
    GUILD_INVITE_REMINDER = 22
    CONTEXT_MENU_COMMAND = 23
    AUTO_MODERATION_ACTION = 24
    ROLE_SUBSCRIPTION_PURCHASE = 25
    INTERACTION_PREMIUM_UPSELL = 26
    STAGE_START = 27
    STAGE_END = 28
    STAGE_SPEAKER = 29
    STAGE_RAISE_HAND = 30
    STAGE_TOPIC = 31
    GUILD_APPLICATION_PREMIUM_SUBSCRIPTION = 32

    GUILD_INCIDENT_ALERT_MODE_ENABLED = 36
    GUILD_INCIDENT_ALERT_MODE_DISABLED = 37
    GUILD_INCIDENT_REPORT_RAID = 38
    GUILD_INCIDENT_REPORT_FALSE_ALARM = 39

    PURCHASE_NOTIFICATION = 44

    POLL_RESULT = 46


class ComponentType(OpenIntEnum):
    ACTION_ROW = 1
    BUTTON = 2
    STRING_SELECT = 3
    TEXT_INPUT = 4
    USER_SELECT = 5
    ROLE_SELECT = 6
    MENTIONABLE_SELECT = 7
    CHANNEL_SELECT = 8

    # old names for renamed members
    SELECT_MENU = 3


class ButtonStyle(OpenIntEnum):
    PRIMARY = 1
    SECONDARY = 2
    SUCCESS = 3
    DANGER = 4
    LINK = 5
    PREMIUM = 6


class TextInputStyle(OpenIntEnum):
    SHORT = 1
    PARAGRAPH = 2


class OverwriteType(OpenIntEnum):
    ROLE = 0
    MEMBER = 1


class VideoQualityMode(OpenIntEnum):
    AUTO = 1
    FULL = 2


class SortOrderType(OpenIntEnum):
    LATEST_ACTIVITY = 0
    CREATION_DATE = 1


class ForumLayoutType(OpenIntEnum):
    NOT_SET = 0
    LIST_VIEW = 1
    GALLERY_VIEW = 2


class ThreadAutoArchiveDuration(OpenIntEnum):
    """Minutes of inactivity before a thread is archived."""

    ONE_HOUR = 60
    ONE_DAY = 1_440
    THREE_DAYS = 4_320
    ONE_WEEK = 10_080


class MessageActivityType(OpenIntEnum):
    JOIN = 1
    SPECTATE = 2
    LISTEN = 3
    JOIN_REQUEST = 5


class MessageReferenceType(OpenIntEnum):
    DEFAULT = 0
    FORWARD = 1


class EmbedType(OpenStrEnum):
    RICH = "rich"
    IMAGE = "image"
    VIDEO = "video"
    GIFV = "gifv"
    ARTICLE = "article"
    LINK = "link"
    # undocumented, returned in auto moderation system messages
    AUTO_MODERATION_MESSAGE = "auto_moderation_message"
    POLL_RESULT = "poll_result"


class SelectMenuDefaultValueType(OpenStrEnum):
    CHANNEL = "channel"
    ROLE = "role"
    USER = "user"


class AllowedMentionsTypes(OpenStrEnum):
    EVERYONE = "everyone"
    ROLE = "roles"
    USER = "users"


ChannelTypeField = wire_enum(ChannelType)
MessageTypeField = wire_enum(MessageType)
ComponentTypeField = wire_enum(ComponentType)
ButtonStyleField = wire_enum(ButtonStyle)
TextInputStyleField = wire_enum(TextInputStyle)
OverwriteTypeField = wire_enum(OverwriteType)
VideoQualityModeField = wire_enum(VideoQualityMode)
SortOrderTypeField = wire_enum(SortOrderType)
ForumLayoutTypeField = wire_enum(ForumLayoutType)
ThreadAutoArchiveDurationField = wire_enum(ThreadAutoArchiveDuration)
MessageActivityTypeField = wire_enum(MessageActivityType)
MessageReferenceTypeField = wire_enum(MessageReferenceType)
EmbedTypeField = wire_enum(EmbedType)
SelectMenuDefaultValueTypeField = wire_enum(SelectMenuDefaultValueType)
AllowedMentionsTypesField = wire_enum(AllowedMentionsTypes)

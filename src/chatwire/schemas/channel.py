"""Channel objects.

A channel is a tagged union keyed by the integer ``type``. ``parse_channel``
selects the variant from ``type`` alone; a value this catalogue does not name
decodes to ``UnknownChannel`` with every key preserved.
"""

from __future__ import annotations

from typing import Any, ClassVar, Union

from pydantic import StrictBool, StrictInt, StrictStr, field_validator

from chatwire.utils.logger_util import get_logger

from .base import Opaque, Snowflake, Timestamp, WireModel, nested_decode, parse_each, read_discriminant, validate_as
from .common import User
from .enums import (
    ChannelType,
    ChannelTypeField,
    ForumLayoutTypeField,
    OverwriteTypeField,
    SortOrderTypeField,
    ThreadAutoArchiveDurationField,
    VideoQualityModeField,
)
from .flags import ChannelFlagsField, PermissionsField, ThreadMemberFlagsField

logger = get_logger(__name__)


class Overwrite(WireModel):
    """Permission grant/deny pair for a role or member.

    ``allow`` and ``deny`` are expected to be disjoint, but overlap is still a
    valid shape; ``chatwire.validation.validate_overwrite`` reports it.
    """

    id: Snowflake
    type: OverwriteTypeField
    allow: PermissionsField
    deny: PermissionsField


class ThreadMetadata(WireModel):
    archived: StrictBool
    auto_archive_duration: ThreadAutoArchiveDurationField
    archive_timestamp: Timestamp
    locked: StrictBool
    invitable: StrictBool | None = None
    create_timestamp: Timestamp | None = None


class ThreadMember(WireModel):
    # id and user_id are omitted on the member sent inside a guild create
    id: Snowflake | None = None
    user_id: Snowflake | None = None
    join_timestamp: Timestamp
    flags: ThreadMemberFlagsField
    member: Opaque | None = None


class ForumTag(WireModel):
    id: Snowflake
    name: StrictStr
    moderated: StrictBool
    emoji_id: Snowflake | None
    emoji_name: StrictStr | None


class DefaultReactionEmoji(WireModel):
    emoji_id: Snowflake | None
    emoji_name: StrictStr | None


class _ChannelBase(WireModel):
    channel_types: ClassVar[frozenset[int]] = frozenset()

    id: Snowflake
    type: ChannelTypeField
    name: StrictStr | None = None
    flags: ChannelFlagsField | None = None

    @field_validator("type")
    @classmethod
    def _type_matches_variant(cls, value: ChannelType) -> ChannelType:
        if cls.channel_types and int(value) not in cls.channel_types:
            raise ValueError(f"{cls.__name__} does not accept channel type {int(value)}")
        return value


class _GuildChannelBase(_ChannelBase):
    name: StrictStr
    guild_id: Snowflake | None = None
    position: StrictInt
    permission_overwrites: tuple[Overwrite, ...] | None = None
    parent_id: Snowflake | None = None
    nsfw: StrictBool | None = None


class GuildTextChannel(_GuildChannelBase):
    channel_types = frozenset({ChannelType.GUILD_TEXT, ChannelType.GUILD_ANNOUNCEMENT})

    topic: StrictStr | None = None
    last_message_id: Snowflake | None = None
    last_pin_timestamp: Timestamp | None = None
    rate_limit_per_user: StrictInt | None = None
    default_auto_archive_duration: ThreadAutoArchiveDurationField | None = None
    default_thread_rate_limit_per_user: StrictInt | None = None


class DMChannel(_ChannelBase):
    channel_types = frozenset({ChannelType.DM})

    name: None = None
    recipients: tuple[User, ...] | None = None
    last_message_id: Snowflake | None = None
    last_pin_timestamp: Timestamp | None = None


class VoiceChannel(_GuildChannelBase):
    """Voice or stage channel. Voice channels host a text chat but never pin."""

    channel_types = frozenset({ChannelType.GUILD_VOICE, ChannelType.GUILD_STAGE_VOICE})

    bitrate: StrictInt | None = None
    user_limit: StrictInt | None = None
    rtc_region: StrictStr | None = None
    video_quality_mode: VideoQualityModeField | None = None
    last_message_id: Snowflake | None = None
    rate_limit_per_user: StrictInt | None = None


class GroupDMChannel(_ChannelBase):
    channel_types = frozenset({ChannelType.GROUP_DM})

    recipients: tuple[User, ...] | None = None
    owner_id: Snowflake | None = None
    icon: StrictStr | None = None
    application_id: Snowflake | None = None
    managed: StrictBool | None = None
    last_message_id: Snowflake | None = None
    last_pin_timestamp: Timestamp | None = None


class CategoryChannel(_GuildChannelBase):
    channel_types = frozenset({ChannelType.GUILD_CATEGORY})


class ThreadChannel(_GuildChannelBase):
    channel_types = frozenset(
        {ChannelType.ANNOUNCEMENT_THREAD, ChannelType.PUBLIC_THREAD, ChannelType.PRIVATE_THREAD}
    )

    # threads are not ordered within their parent
    position: StrictInt | None = None
    thread_metadata: ThreadMetadata | None = None
    applied_tags: tuple[Snowflake, ...]
    message_count: StrictInt | None = None
    member_count: StrictInt | None = None
    member: ThreadMember | None = None
    owner_id: Snowflake | None = None
    total_message_sent: StrictInt | None = None
    rate_limit_per_user: StrictInt | None = None
    last_message_id: Snowflake | None = None
    last_pin_timestamp: Timestamp | None = None


class DirectoryChannel(_ChannelBase):
    channel_types = frozenset({ChannelType.GUILD_DIRECTORY})


class _ThreadOnlyChannelBase(_GuildChannelBase):
    topic: StrictStr | None = None
    last_message_id: Snowflake | None = None
    last_pin_timestamp: Timestamp | None = None
    rate_limit_per_user: StrictInt | None = None
    default_auto_archive_duration: ThreadAutoArchiveDurationField | None = None
    available_tags: tuple[ForumTag, ...]
    default_thread_rate_limit_per_user: StrictInt | None = None
    default_reaction_emoji: DefaultReactionEmoji | None
    default_sort_order: SortOrderTypeField | None


class ForumChannel(_ThreadOnlyChannelBase):
    channel_types = frozenset({ChannelType.GUILD_FORUM})

    default_forum_layout: ForumLayoutTypeField


class MediaChannel(_ThreadOnlyChannelBase):
    channel_types = frozenset({ChannelType.GUILD_MEDIA})


class UnknownChannel(_ChannelBase):
    """A channel type this catalogue does not know; only the base fields are typed."""


Channel = Union[
    GuildTextChannel,
    DMChannel,
    VoiceChannel,
    GroupDMChannel,
    CategoryChannel,
    ThreadChannel,
    DirectoryChannel,
    ForumChannel,
    MediaChannel,
    UnknownChannel,
]

CHANNEL_VARIANTS: dict[int, type[_ChannelBase]] = {
    int(channel_type): variant
    for variant in (
        GuildTextChannel,
        DMChannel,
        VoiceChannel,
        GroupDMChannel,
        CategoryChannel,
        ThreadChannel,
        DirectoryChannel,
        ForumChannel,
        MediaChannel,
    )
    for channel_type in variant.channel_types
}


def channel_variant(channel_type: int) -> type[_ChannelBase]:
    return CHANNEL_VARIANTS.get(channel_type, UnknownChannel)


def parse_channel(payload: Any) -> Channel:
    """Decode a channel object, raising a ``DecodeError`` on bad input."""
    if isinstance(payload, _ChannelBase):
        return payload
    channel_type = read_discriminant(payload)
    variant = channel_variant(channel_type)
    if variant is UnknownChannel:
        logger.debug("channel %s has unknown type %s", payload.get("id"), channel_type)
    return validate_as(variant, payload)


class FollowedChannel(WireModel):
    channel_id: Snowflake
    webhook_id: Snowflake


class ThreadList(WireModel):
    threads: tuple[Channel, ...]
    members: tuple[ThreadMember, ...]

    @field_validator("threads", mode="before")
    @classmethod
    def _dispatch_threads(cls, value: Any) -> Any:
        with nested_decode():
            return parse_each(value, parse_channel)

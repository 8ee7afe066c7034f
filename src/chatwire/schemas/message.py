"""Message objects.

A message has one flat shape. Which optional companions are meaningful
(``referenced_message``, ``call``, ``poll``, ...) depends on ``type`` and
``flags``, but decoding stays permissive; ``chatwire.validation`` reports
combinations that make no sense.
"""

from __future__ import annotations

import functools
from collections.abc import Mapping
from typing import Any, Union

from pydantic import StrictBool, StrictFloat, StrictInt, StrictStr, field_validator, model_validator

from chatwire import config
from chatwire.errors import RecursionLimitExceeded, join_path

from .base import Opaque, Snowflake, Timestamp, WireModel, nested_decode, parse_each
from .channel import Channel, parse_channel
from .common import PartialEmoji, User
from .component import ComponentContext, MessageActionRow, UnknownComponent, parse_action_row
from .embed import Embed
from .enums import (
    AllowedMentionsTypesField,
    ChannelTypeField,
    MessageActivityTypeField,
    MessageReferenceTypeField,
    MessageTypeField,
)
from .flags import AttachmentFlagsField, MessageFlagsField


class Attachment(WireModel):
    id: Snowflake
    filename: StrictStr
    title: StrictStr | None = None
    description: StrictStr | None = None
    content_type: StrictStr | None = None
    size: StrictInt
    url: StrictStr
    proxy_url: StrictStr
    height: StrictInt | None = None
    width: StrictInt | None = None
    ephemeral: StrictBool | None = None
    # voice messages only
    duration_secs: StrictInt | StrictFloat | None = None
    waveform: StrictStr | None = None
    flags: AttachmentFlagsField | None = None


class ReactionCountDetails(WireModel):
    burst: StrictInt
    normal: StrictInt


class Reaction(WireModel):
    count: StrictInt
    count_details: ReactionCountDetails
    me: StrictBool
    me_burst: StrictBool
    emoji: PartialEmoji
    burst_colors: tuple[StrictStr, ...]


class ChannelMention(WireModel):
    id: Snowflake
    guild_id: Snowflake
    type: ChannelTypeField
    name: StrictStr


class MessageActivity(WireModel):
    type: MessageActivityTypeField
    party_id: StrictStr | None = None


class MessageReference(WireModel):
    # DEFAULT when absent
    type: MessageReferenceTypeField | None = None
    message_id: Snowflake | None = None
    channel_id: Snowflake
    guild_id: Snowflake | None = None
    fail_if_not_exists: StrictBool | None = None


class MessageCall(WireModel):
    participants: tuple[Snowflake, ...]
    ended_timestamp: Timestamp | None = None


class RoleSubscriptionData(WireModel):
    role_subscription_listing_id: Snowflake
    tier_name: StrictStr
    total_months_subscribed: StrictInt
    is_renewal: StrictBool


class StickerItem(WireModel):
    id: Snowflake
    name: StrictStr
    format_type: StrictInt


class AllowedMentions(WireModel):
    """Mention controls sent with outgoing messages."""

    parse: tuple[AllowedMentionsTypesField, ...] | None = None
    roles: tuple[Snowflake, ...] | None = None
    users: tuple[Snowflake, ...] | None = None
    replied_user: StrictBool | None = None


class _MessageContent(WireModel):
    """Fields shared by a message and the copy of it carried in a forward."""

    # always emitted, even when empty
    wire_required = ("mentions", "mention_roles", "attachments", "embeds")

    type: MessageTypeField
    content: StrictStr
    timestamp: Timestamp
    edited_timestamp: Timestamp | None = None
    mentions: tuple[User, ...] = ()
    mention_roles: tuple[Snowflake, ...] = ()
    attachments: tuple[Attachment, ...] = ()
    embeds: tuple[Embed, ...] = ()
    flags: MessageFlagsField | None = None
    components: tuple[Union[MessageActionRow, UnknownComponent], ...] | None = None
    sticker_items: tuple[StickerItem, ...] | None = None
    stickers: tuple[Opaque, ...] | None = None

    @field_validator("components", mode="before")
    @classmethod
    def _dispatch_rows(cls, value: Any) -> Any:
        with nested_decode():
            return parse_each(value, functools.partial(parse_action_row, context=ComponentContext.MESSAGE))


class MessageSnapshotFields(_MessageContent):
    pass


class MessageSnapshot(WireModel):
    message: MessageSnapshotFields
    # no longer sent; kept when present
    guild_id: Snowflake | None = None


class Message(_MessageContent):
    id: Snowflake
    channel_id: Snowflake
    author: User
    tts: StrictBool
    mention_everyone: StrictBool
    mention_channels: tuple[ChannelMention, ...] | None = None
    # emitted only when present on the wire
    reactions: tuple[Reaction, ...] = ()
    nonce: StrictInt | StrictStr | None = None
    pinned: StrictBool
    webhook_id: Snowflake | None = None
    activity: MessageActivity | None = None
    application: Opaque | None = None
    application_id: Snowflake | None = None
    message_reference: MessageReference | None = None
    # null means the referenced message was deleted; absent means it was not fetched
    referenced_message: Message | None = None
    interaction_metadata: Opaque | None = None
    interaction: Opaque | None = None
    thread: Channel | None = None
    position: StrictInt | None = None
    role_subscription_data: RoleSubscriptionData | None = None
    resolved: Opaque | None = None
    poll: Opaque | None = None
    message_snapshots: tuple[MessageSnapshot, ...] | None = None
    call: MessageCall | None = None

    @model_validator(mode="before")
    @classmethod
    def _bound_reference_chain(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            with nested_decode():
                check_reference_depth(data, config.settings.max_reference_depth)
        return data

    @field_validator("thread", mode="before")
    @classmethod
    def _dispatch_thread(cls, value: Any) -> Any:
        with nested_decode():
            return parse_channel(value)

    @property
    def effective_interaction(self) -> dict[str, Any] | None:
        """Interaction info, preferring ``interaction_metadata`` over the deprecated ``interaction``."""
        if self.interaction_metadata is not None:
            return self.interaction_metadata
        return self.interaction

    @property
    def is_reply_deleted(self) -> bool:
        return self.has("referenced_message") and self.referenced_message is None


def check_reference_depth(payload: Mapping[str, Any], limit: int) -> None:
    """Walk the ``referenced_message`` chain and reject it past ``limit`` levels."""
    depth = 0
    current: Any = payload.get("referenced_message")
    while isinstance(current, (Mapping, Message)):
        depth += 1
        if depth > limit:
            path = join_path(*["referenced_message"] * depth)
            raise RecursionLimitExceeded(limit, path=path, what="referenced_message chain")
        if isinstance(current, Message):
            current = current.referenced_message
        else:
            current = current.get("referenced_message")


Message.model_rebuild()

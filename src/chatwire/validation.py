"""Checks for limits and field combinations the wire shape does not enforce.

Decoding accepts anything shaped correctly. The functions here inspect an
already decoded object and list what the platform would refuse or what makes
no sense for the message type. An empty list means nothing was found.
"""

from __future__ import annotations

from dataclasses import dataclass

from chatwire.errors import join_path
from chatwire.schemas.channel import Channel, ForumChannel, GuildTextChannel, MediaChannel, Overwrite, ThreadChannel, VoiceChannel
from chatwire.schemas.component import (
    BUTTONS,
    SELECTS,
    Component,
    InteractiveButton,
    LinkButton,
    MessageActionRow,
    MessageLeaf,
    ModalActionRow,
    StringSelect,
    TextInput,
    UnknownComponent,
)
from chatwire.schemas.embed import Embed
from chatwire.schemas.enums import MessageType
from chatwire.schemas.flags import MessageFlags
from chatwire.schemas.message import Message

CHANNEL_NAME_MAX = 100
CHANNEL_TOPIC_MAX = 1024
THREAD_ONLY_TOPIC_MAX = 4096
RATE_LIMIT_MAX = 21600
FORUM_TAGS_MAX = 20

EMBED_TITLE_MAX = 256
EMBED_DESCRIPTION_MAX = 4096
EMBED_FIELDS_MAX = 25
EMBED_FIELD_NAME_MAX = 256
EMBED_FIELD_VALUE_MAX = 1024
EMBED_FOOTER_MAX = 2048
EMBED_AUTHOR_MAX = 256
EMBED_TOTAL_MAX = 6000

MESSAGE_CONTENT_MAX = 2000
MESSAGE_EMBEDS_MAX = 10
MESSAGE_ROWS_MAX = 5

ROW_BUTTONS_MAX = 5
CUSTOM_ID_MAX = 100
BUTTON_LABEL_MAX = 80
SELECT_OPTIONS_MAX = 25
SELECT_VALUES_MAX = 25
TEXT_INPUT_LENGTH_MAX = 4000

REPLY_TYPES = frozenset({MessageType.REPLY, MessageType.THREAD_STARTER_MESSAGE})
POLL_TYPES = frozenset({MessageType.DEFAULT, MessageType.REPLY})


@dataclass(frozen=True)
class Violation:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


def _too_long(violations: list[Violation], path: str, text: str | None, limit: int) -> None:
    if text is not None and len(text) > limit:
        violations.append(Violation(path, f"longer than {limit} characters ({len(text)})"))


def _out_of_range(violations: list[Violation], path: str, value: int | None, low: int, high: int) -> None:
    if value is not None and not low <= value <= high:
        violations.append(Violation(path, f"must be between {low} and {high}, got {value}"))


def validate_overwrite(overwrite: Overwrite, path: str = "") -> list[Violation]:
    overlap = overwrite.allow & overwrite.deny
    if not overlap:
        return []
    return [Violation(path, f"allow and deny share bits {int(overlap)} for {overwrite.id}")]


def validate_channel(channel: Channel) -> list[Violation]:
    violations: list[Violation] = []
    if channel.name is not None and not 1 <= len(channel.name) <= CHANNEL_NAME_MAX:
        violations.append(Violation("name", f"must be 1 to {CHANNEL_NAME_MAX} characters"))

    if isinstance(channel, (ForumChannel, MediaChannel)):
        _too_long(violations, "topic", channel.topic, THREAD_ONLY_TOPIC_MAX)
        if len(channel.available_tags) > FORUM_TAGS_MAX:
            violations.append(Violation("available_tags", f"more than {FORUM_TAGS_MAX} tags"))
    elif isinstance(channel, GuildTextChannel):
        _too_long(violations, "topic", channel.topic, CHANNEL_TOPIC_MAX)

    if isinstance(channel, (GuildTextChannel, VoiceChannel, ThreadChannel, ForumChannel, MediaChannel)):
        _out_of_range(violations, "rate_limit_per_user", channel.rate_limit_per_user, 0, RATE_LIMIT_MAX)

    for index, overwrite in enumerate(getattr(channel, "permission_overwrites", None) or ()):
        violations.extend(validate_overwrite(overwrite, join_path("permission_overwrites", index)))
    return violations


def validate_embed(embed: Embed, path: str = "") -> list[Violation]:
    violations: list[Violation] = []
    _too_long(violations, join_path(path, "title"), embed.title, EMBED_TITLE_MAX)
    _too_long(violations, join_path(path, "description"), embed.description, EMBED_DESCRIPTION_MAX)
    fields = embed.fields or ()
    if len(fields) > EMBED_FIELDS_MAX:
        violations.append(Violation(join_path(path, "fields"), f"more than {EMBED_FIELDS_MAX} fields"))
    for index, field in enumerate(fields):
        _too_long(violations, join_path(path, "fields", index, "name"), field.name, EMBED_FIELD_NAME_MAX)
        _too_long(violations, join_path(path, "fields", index, "value"), field.value, EMBED_FIELD_VALUE_MAX)
    if embed.footer is not None:
        _too_long(violations, join_path(path, "footer", "text"), embed.footer.text, EMBED_FOOTER_MAX)
    if embed.author is not None:
        _too_long(violations, join_path(path, "author", "name"), embed.author.name, EMBED_AUTHOR_MAX)
    total = embed.text_length()
    if total > EMBED_TOTAL_MAX:
        violations.append(Violation(path, f"embed text totals {total} characters, limit is {EMBED_TOTAL_MAX}"))
    return violations


def _validate_leaf(leaf: MessageLeaf | TextInput, path: str) -> list[Violation]:
    if isinstance(leaf, UnknownComponent):
        return []
    violations: list[Violation] = []
    _too_long(violations, join_path(path, "custom_id"), getattr(leaf, "custom_id", None), CUSTOM_ID_MAX)

    if isinstance(leaf, (InteractiveButton, LinkButton)):
        _too_long(violations, join_path(path, "label"), leaf.label, BUTTON_LABEL_MAX)
    if isinstance(leaf, SELECTS):
        _out_of_range(violations, join_path(path, "min_values"), leaf.min_values, 0, SELECT_VALUES_MAX)
        _out_of_range(violations, join_path(path, "max_values"), leaf.max_values, 0, SELECT_VALUES_MAX)
        if leaf.min_values is not None and leaf.max_values is not None and leaf.min_values > leaf.max_values:
            violations.append(Violation(path, "min_values is greater than max_values"))
    if isinstance(leaf, StringSelect) and len(leaf.options) > SELECT_OPTIONS_MAX:
        violations.append(Violation(join_path(path, "options"), f"more than {SELECT_OPTIONS_MAX} options"))
    if isinstance(leaf, TextInput):
        _out_of_range(violations, join_path(path, "min_length"), leaf.min_length, 0, TEXT_INPUT_LENGTH_MAX)
        _out_of_range(violations, join_path(path, "max_length"), leaf.max_length, 0, TEXT_INPUT_LENGTH_MAX)
        if leaf.min_length is not None and leaf.max_length is not None and leaf.min_length > leaf.max_length:
            violations.append(Violation(path, "min_length is greater than max_length"))
    return violations


def validate_component(component: Component, path: str = "") -> list[Violation]:
    if not isinstance(component, (MessageActionRow, ModalActionRow)):
        return _validate_leaf(component, path)

    violations: list[Violation] = []
    children = component.components
    known = [child for child in children if not isinstance(child, UnknownComponent)]
    buttons = [child for child in known if isinstance(child, BUTTONS)]
    selects = [child for child in known if isinstance(child, SELECTS)]
    if len(buttons) > ROW_BUTTONS_MAX:
        violations.append(Violation(join_path(path, "components"), f"more than {ROW_BUTTONS_MAX} buttons in a row"))
    if selects and len(known) > 1:
        violations.append(Violation(join_path(path, "components"), "a select menu must be alone in its row"))
    for index, child in enumerate(children):
        violations.extend(_validate_leaf(child, join_path(path, "components", index)))
    return violations


def validate_message(message: Message) -> list[Violation]:
    violations: list[Violation] = []
    _too_long(violations, "content", message.content, MESSAGE_CONTENT_MAX)
    if len(message.embeds) > MESSAGE_EMBEDS_MAX:
        violations.append(Violation("embeds", f"more than {MESSAGE_EMBEDS_MAX} embeds"))
    for index, embed in enumerate(message.embeds):
        violations.extend(validate_embed(embed, join_path("embeds", index)))

    rows = message.components or ()
    if len(rows) > MESSAGE_ROWS_MAX:
        violations.append(Violation("components", f"more than {MESSAGE_ROWS_MAX} action rows"))
    for index, row in enumerate(rows):
        violations.extend(validate_component(row, join_path("components", index)))

    flags = message.flags if message.flags is not None else MessageFlags(0)
    if message.has("referenced_message") and message.type not in REPLY_TYPES:
        violations.append(Violation("referenced_message", "only replies and thread starters reference a message"))
    if message.has("thread") and MessageFlags.HAS_THREAD not in flags:
        violations.append(Violation("flags", "thread is set but HAS_THREAD is not"))
    if message.has("call") and message.type != MessageType.CALL:
        violations.append(Violation("call", "only call messages carry call data"))
    if message.has("role_subscription_data") and message.type != MessageType.ROLE_SUBSCRIPTION_PURCHASE:
        violations.append(Violation("role_subscription_data", "only role subscription purchases carry this"))
    if message.message_snapshots and MessageFlags.HAS_SNAPSHOT not in flags:
        violations.append(Violation("flags", "message_snapshots is set but HAS_SNAPSHOT is not"))
    if message.has("poll") and message.type not in POLL_TYPES:
        violations.append(Violation("poll", "polls only appear on user-authored messages"))
    return violations

"""Interactive message and modal components.

Components form a two-level tree: an action row owns leaf components, and a
row never contains another row. The same row shape appears in two contexts
with different legal children, so it is modelled as two types:

* ``MessageActionRow``: buttons and select menus,
* ``ModalActionRow``: text inputs.

Buttons are dispatched a second time by ``style``, which decides which one of
``custom_id``, ``url`` or ``sku_id`` the button carries.
"""

from __future__ import annotations

import functools
from collections.abc import Mapping
from enum import StrEnum
from typing import Any, ClassVar, Union

from pydantic import StrictBool, StrictInt, StrictStr, field_validator, model_validator

from chatwire.errors import InvalidVariantCombination, RecursionLimitExceeded
from chatwire.utils.logger_util import get_logger

from .base import Snowflake, WireModel, nested_decode, parse_each, read_discriminant, validate_as
from .common import PartialEmoji
from .enums import (
    ButtonStyle,
    ButtonStyleField,
    ChannelTypeField,
    ComponentType,
    ComponentTypeField,
    SelectMenuDefaultValueType,
    SelectMenuDefaultValueTypeField,
    TextInputStyleField,
)

logger = get_logger(__name__)

# row -> leaf
MAX_COMPONENT_DEPTH = 2

BUTTON_IDENTITY_FIELDS = ("custom_id", "url", "sku_id")

# 17 is accepted as a string select tag alongside 3
STRING_SELECT_TYPES = frozenset({ComponentType.STRING_SELECT, 17})
KNOWN_COMPONENT_TYPES = frozenset(int(member) for member in ComponentType) | STRING_SELECT_TYPES


class ComponentContext(StrEnum):
    MESSAGE = "message"
    MODAL = "modal"


class _ComponentBase(WireModel):
    component_types: ClassVar[frozenset[int]] = frozenset()

    type: ComponentTypeField

    @field_validator("type")
    @classmethod
    def _type_matches_variant(cls, value: ComponentType) -> ComponentType:
        if cls.component_types and int(value) not in cls.component_types:
            raise ValueError(f"{cls.__name__} does not accept component type {int(value)}")
        return value


class _ButtonBase(_ComponentBase):
    component_types = frozenset({ComponentType.BUTTON})
    button_styles: ClassVar[frozenset[int]] = frozenset()
    identity_field: ClassVar[str] = ""
    forbidden_fields: ClassVar[tuple[str, ...]] = ()

    style: ButtonStyleField
    disabled: StrictBool | None = None

    @model_validator(mode="before")
    @classmethod
    def _identity_matches_style(cls, data: Any) -> Any:
        if isinstance(data, Mapping):
            with nested_decode():
                check_button_identity(cls, data)
        return data


def check_button_identity(variant: type[_ButtonBase], data: Mapping[str, Any]) -> None:
    style = data.get("style")
    if isinstance(style, int) and not isinstance(style, bool) and style not in variant.button_styles:
        raise InvalidVariantCombination(f"{variant.__name__} cannot have style {style}", path="style")
    present = [name for name in BUTTON_IDENTITY_FIELDS if name in data]
    if present != [variant.identity_field]:
        raise InvalidVariantCombination(
            f"button style {style} requires exactly {variant.identity_field!r}, got {present or 'none'}"
        )
    for name in variant.forbidden_fields:
        if name in data:
            raise InvalidVariantCombination(f"{variant.__name__} cannot carry {name!r}", path=name)


class InteractiveButton(_ButtonBase):
    """Primary, secondary, success or danger button; clicking sends an interaction."""

    button_styles = frozenset({ButtonStyle.PRIMARY, ButtonStyle.SECONDARY, ButtonStyle.SUCCESS, ButtonStyle.DANGER})
    identity_field = "custom_id"

    custom_id: StrictStr
    label: StrictStr | None = None
    emoji: PartialEmoji | None = None


class LinkButton(_ButtonBase):
    button_styles = frozenset({ButtonStyle.LINK})
    identity_field = "url"

    url: StrictStr
    label: StrictStr | None = None
    emoji: PartialEmoji | None = None


class PremiumButton(_ButtonBase):
    button_styles = frozenset({ButtonStyle.PREMIUM})
    identity_field = "sku_id"
    forbidden_fields = ("label", "emoji")

    sku_id: Snowflake


class SelectOption(WireModel):
    label: StrictStr
    value: StrictStr
    description: StrictStr | None = None
    emoji: PartialEmoji | None = None
    default: StrictBool | None = None


class SelectDefaultValue(WireModel):
    id: Snowflake
    type: SelectMenuDefaultValueTypeField


class StringSelect(_ComponentBase):
    component_types = STRING_SELECT_TYPES

    custom_id: StrictStr
    options: tuple[SelectOption, ...]
    placeholder: StrictStr | None = None
    min_values: StrictInt | None = None
    max_values: StrictInt | None = None
    disabled: StrictBool | None = None


class _AutoPopulatedSelect(_ComponentBase):
    """Select menu whose options the client fills in (users, roles, channels)."""

    default_value_types: ClassVar[frozenset[SelectMenuDefaultValueType]] = frozenset()

    custom_id: StrictStr
    placeholder: StrictStr | None = None
    min_values: StrictInt | None = None
    max_values: StrictInt | None = None
    disabled: StrictBool | None = None
    default_values: tuple[SelectDefaultValue, ...] | None = None

    @model_validator(mode="after")
    def _default_values_match_kind(self):
        with nested_decode():
            for index, default in enumerate(self.default_values or ()):
                if default.type not in self.default_value_types:
                    allowed = ", ".join(sorted(t.value for t in self.default_value_types))
                    raise InvalidVariantCombination(
                        f"{type(self).__name__} default values must be of type {allowed}, got {default.type.value!r}",
                        path=f"default_values.{index}.type",
                    )
        return self


class UserSelect(_AutoPopulatedSelect):
    component_types = frozenset({ComponentType.USER_SELECT})
    default_value_types = frozenset({SelectMenuDefaultValueType.USER})


class RoleSelect(_AutoPopulatedSelect):
    component_types = frozenset({ComponentType.ROLE_SELECT})
    default_value_types = frozenset({SelectMenuDefaultValueType.ROLE})


class MentionableSelect(_AutoPopulatedSelect):
    component_types = frozenset({ComponentType.MENTIONABLE_SELECT})
    default_value_types = frozenset({SelectMenuDefaultValueType.USER, SelectMenuDefaultValueType.ROLE})


class ChannelSelect(_AutoPopulatedSelect):
    component_types = frozenset({ComponentType.CHANNEL_SELECT})
    default_value_types = frozenset({SelectMenuDefaultValueType.CHANNEL})

    channel_types: tuple[ChannelTypeField, ...] | None = None


class TextInput(_ComponentBase):
    component_types = frozenset({ComponentType.TEXT_INPUT})

    style: TextInputStyleField
    custom_id: StrictStr
    label: StrictStr
    placeholder: StrictStr | None = None
    value: StrictStr | None = None
    min_length: StrictInt | None = None
    max_length: StrictInt | None = None
    required: StrictBool | None = None


class UnknownComponent(_ComponentBase):
    """Component type (or button style) this catalogue does not know; kept verbatim."""


MessageLeaf = Union[
    InteractiveButton,
    LinkButton,
    PremiumButton,
    StringSelect,
    UserSelect,
    RoleSelect,
    MentionableSelect,
    ChannelSelect,
    UnknownComponent,
]
ModalLeaf = Union[TextInput, UnknownComponent]

BUTTONS = (InteractiveButton, LinkButton, PremiumButton)
SELECTS = (StringSelect, UserSelect, RoleSelect, MentionableSelect, ChannelSelect)


class MessageActionRow(_ComponentBase):
    component_types = frozenset({ComponentType.ACTION_ROW})
    context: ClassVar[ComponentContext] = ComponentContext.MESSAGE

    components: tuple[MessageLeaf, ...]

    @field_validator("components", mode="before")
    @classmethod
    def _dispatch_children(cls, value: Any) -> Any:
        with nested_decode():
            return parse_each(value, functools.partial(parse_leaf, context=cls.context))


class ModalActionRow(_ComponentBase):
    component_types = frozenset({ComponentType.ACTION_ROW})
    context: ClassVar[ComponentContext] = ComponentContext.MODAL

    components: tuple[ModalLeaf, ...]

    @field_validator("components", mode="before")
    @classmethod
    def _dispatch_children(cls, value: Any) -> Any:
        with nested_decode():
            return parse_each(value, functools.partial(parse_leaf, context=cls.context))


MessageComponent = Union[MessageActionRow, MessageLeaf]
ModalComponent = Union[ModalActionRow, ModalLeaf]
Component = Union[MessageActionRow, ModalActionRow, MessageLeaf, TextInput]

ROW_VARIANTS: dict[ComponentContext, type[_ComponentBase]] = {
    ComponentContext.MESSAGE: MessageActionRow,
    ComponentContext.MODAL: ModalActionRow,
}

BUTTON_VARIANTS: dict[int, type[_ButtonBase]] = {
    int(style): variant
    for variant in (InteractiveButton, LinkButton, PremiumButton)
    for style in variant.button_styles
}

LEAF_VARIANTS: dict[int, type[_ComponentBase]] = {
    int(component_type): variant
    for variant in (StringSelect, TextInput, UserSelect, RoleSelect, MentionableSelect, ChannelSelect)
    for component_type in variant.component_types
}

CONTEXT_LEAF_TYPES: dict[ComponentContext, frozenset[int]] = {
    ComponentContext.MESSAGE: frozenset(
        {
            ComponentType.BUTTON,
            ComponentType.USER_SELECT,
            ComponentType.ROLE_SELECT,
            ComponentType.MENTIONABLE_SELECT,
            ComponentType.CHANNEL_SELECT,
        }
        | STRING_SELECT_TYPES
    ),
    ComponentContext.MODAL: frozenset({ComponentType.TEXT_INPUT}),
}


def _leaf_variant(payload: Mapping[str, Any], component_type: int) -> type[_ComponentBase]:
    if component_type == ComponentType.BUTTON:
        style = read_discriminant(payload, "style")
        return BUTTON_VARIANTS.get(style, UnknownComponent)
    return LEAF_VARIANTS.get(component_type, UnknownComponent)


def parse_leaf(payload: Any, context: ComponentContext) -> Any:
    """Decode a component that sits inside a row of the given context."""
    if isinstance(payload, _ComponentBase) and not isinstance(payload, (MessageActionRow, ModalActionRow)):
        payload = payload.to_wire()
    component_type = read_discriminant(payload)
    if component_type == ComponentType.ACTION_ROW:
        raise RecursionLimitExceeded(MAX_COMPONENT_DEPTH, what="component nesting")
    if component_type in KNOWN_COMPONENT_TYPES and component_type not in CONTEXT_LEAF_TYPES[context]:
        raise InvalidVariantCombination(
            f"component type {component_type} is not allowed in a {context.value} action row", path="type"
        )
    variant = _leaf_variant(payload, component_type)
    if variant is UnknownComponent:
        logger.debug("keeping unknown component type=%s style=%s", component_type, payload.get("style"))
    return validate_as(variant, payload)


def parse_component(payload: Any, context: ComponentContext | str) -> Any:
    """Decode a top-level component (a row or a bare leaf) in ``context``."""
    context = ComponentContext(context)
    if isinstance(payload, (MessageActionRow, ModalActionRow)):
        payload = payload.to_wire()
    component_type = read_discriminant(payload)
    if component_type == ComponentType.ACTION_ROW:
        return validate_as(ROW_VARIANTS[context], payload)
    return parse_leaf(payload, context)


def parse_action_row(payload: Any, context: ComponentContext = ComponentContext.MESSAGE) -> Any:
    """Decode an entry of a ``components`` array, which must be a row.

    Unknown component types are kept as ``UnknownComponent`` since newer
    top-level layouts may appear there.
    """
    component_type = read_discriminant(payload)
    if component_type == ComponentType.ACTION_ROW:
        return validate_as(ROW_VARIANTS[context], payload)
    if component_type in KNOWN_COMPONENT_TYPES:
        raise InvalidVariantCombination(
            f"top-level components must be action rows, got type {component_type}", path="type"
        )
    return validate_as(UnknownComponent, payload)

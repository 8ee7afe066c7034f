from __future__ import annotations

from pydantic import StrictBool, StrictInt, StrictStr

from .base import Snowflake, WireModel


class User(WireModel):
    # user payloads carry many more keys; they are preserved as extras
    id: Snowflake
    username: StrictStr
    discriminator: StrictStr | None = None
    global_name: StrictStr | None = None
    avatar: StrictStr | None = None
    bot: StrictBool | None = None
    system: StrictBool | None = None
    public_flags: StrictInt | None = None


class PartialEmoji(WireModel):
    """Custom emoji (``id`` set) or unicode emoji (``name`` only)."""

    id: Snowflake | None = None
    name: StrictStr | None = None
    animated: StrictBool | None = None

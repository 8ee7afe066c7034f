"""Rich embeds.

Length limits (title 256, description 4096, 25 fields, ...) are not part of the
shape; ``chatwire.validation.validate_embed`` checks them.
"""

from __future__ import annotations

from pydantic import StrictBool, StrictInt, StrictStr

from .base import Timestamp, WireModel
from .enums import EmbedTypeField


class EmbedFooter(WireModel):
    text: StrictStr
    icon_url: StrictStr | None = None
    proxy_icon_url: StrictStr | None = None


class EmbedImage(WireModel):
    url: StrictStr
    proxy_url: StrictStr | None = None
    height: StrictInt | None = None
    width: StrictInt | None = None


class EmbedThumbnail(WireModel):
    url: StrictStr
    proxy_url: StrictStr | None = None
    height: StrictInt | None = None
    width: StrictInt | None = None


class EmbedVideo(WireModel):
    url: StrictStr | None = None
    proxy_url: StrictStr | None = None
    height: StrictInt | None = None
    width: StrictInt | None = None


class EmbedProvider(WireModel):
    name: StrictStr | None = None
    url: StrictStr | None = None


class EmbedAuthor(WireModel):
    name: StrictStr
    url: StrictStr | None = None
    icon_url: StrictStr | None = None
    proxy_icon_url: StrictStr | None = None


class EmbedField(WireModel):
    name: StrictStr
    value: StrictStr
    inline: StrictBool | None = None


class Embed(WireModel):
    title: StrictStr | None = None
    # always "rich" for webhook embeds
    type: EmbedTypeField | None = None
    description: StrictStr | None = None
    url: StrictStr | None = None
    timestamp: Timestamp | None = None
    color: StrictInt | None = None
    footer: EmbedFooter | None = None
    image: EmbedImage | None = None
    thumbnail: EmbedThumbnail | None = None
    video: EmbedVideo | None = None
    provider: EmbedProvider | None = None
    author: EmbedAuthor | None = None
    fields: tuple[EmbedField, ...] | None = None

    def text_length(self) -> int:
        """Characters counted against the 6000 character embed total."""
        total = len(self.title or "") + len(self.description or "")
        for field in self.fields or ():
            total += len(field.name) + len(field.value)
        if self.footer is not None:
            total += len(self.footer.text)
        if self.author is not None:
            total += len(self.author.name)
        return total

"""Typed wire models for channels, messages, embeds and components.

Models are frozen and keep unknown keys, so a decoded object re-encodes to the
value it came from.
"""

__all__ = ["base", "channel", "common", "component", "embed", "enums", "flags", "message"]

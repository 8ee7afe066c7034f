import copy
from typing import Any, Callable, Dict

import pytest

# tests/conftest.py

from chatwire import config

USER = {"id": "80351110224678912", "username": "nelly", "global_name": "Nelly", "avatar": None}
TIMESTAMP = "2024-05-01T12:30:00.000000+00:00"


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch):
    """
    Keep CHATWIRE_* settings stable across tests. Individual tests replace
    ``config.settings`` or set env vars through ``monkeypatch`` themselves.
    """
    for name in ("CHATWIRE_LOG_LEVEL", "CHATWIRE_LOG_DIR", "CHATWIRE_MAX_REFERENCE_DEPTH"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "settings", config.Settings())
    yield


@pytest.fixture
def make_message() -> Callable[..., Dict[str, Any]]:
    """
    Return a helper that builds a minimal valid message payload.
    Usage: payload = make_message(type=19, referenced_message=None)
    """
    def _make(**overrides: Any) -> Dict[str, Any]:
        payload = {
            "id": "1234567890123456789",
            "channel_id": "41771983423143937",
            "author": copy.deepcopy(USER),
            "content": "hello world",
            "timestamp": TIMESTAMP,
            "edited_timestamp": None,
            "tts": False,
            "mention_everyone": False,
            "mentions": [],
            "mention_roles": [],
            "attachments": [],
            "embeds": [],
            "pinned": False,
            "type": 0,
        }
        payload.update(overrides)
        return payload
    return _make


@pytest.fixture
def make_button() -> Callable[..., Dict[str, Any]]:
    """
    Return a helper that builds a button payload whose identity field matches
    its style. Usage: make_button(style=5) -> link button with a url.
    """
    def _make(style: int = 1, **overrides: Any) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"type": 2, "style": style}
        if style == 5:
            payload["url"] = "https://example.com"
        elif style == 6:
            payload["sku_id"] = "1180218955160375406"
        else:
            payload["custom_id"] = f"btn-{style}"
        if style != 6:
            payload["label"] = "Click"
        payload.update(overrides)
        return payload
    return _make


@pytest.fixture
def make_row() -> Callable[..., Dict[str, Any]]:
    def _make(*children: Dict[str, Any]) -> Dict[str, Any]:
        return {"type": 1, "components": list(children)}
    return _make


@pytest.fixture
def text_input() -> Dict[str, Any]:
    return {"type": 4, "style": 1, "custom_id": "name", "label": "Your name", "min_length": 1, "max_length": 32}


@pytest.fixture
def forum_payload() -> Dict[str, Any]:
    return {
        "id": "1100000000000000001",
        "type": 15,
        "guild_id": "290926798626357999",
        "name": "help",
        "position": 3,
        "topic": "ask here",
        "available_tags": [
            {"id": "1100000000000000010", "name": "solved", "moderated": True, "emoji_id": None, "emoji_name": "✅"},
        ],
        "default_reaction_emoji": None,
        "default_sort_order": None,
        "default_forum_layout": 1,
    }


@pytest.fixture
def deep_json() -> Callable[[int], Any]:
    """
    Return a helper that builds an array nested ``depth`` levels deep.
    Built with a loop so the test itself never recurses.
    """
    def _make(depth: int = 900) -> Any:
        value: Any = []
        for _ in range(depth - 1):
            value = [value]
        return value
    return _make

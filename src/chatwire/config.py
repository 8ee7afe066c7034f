"""Runtime configuration for the wire model.

Values come from the environment (optionally seeded from a ``.env`` file) and
are read once at import time.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import dotenv

dotenv.load_dotenv()


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return max(minimum, value)


def _env_level(name: str, default: str) -> str:
    level = os.getenv(name, "").strip().upper()
    if level not in logging.getLevelNamesMapping():
        return default
    return level


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    # no file handler when unset
    log_dir: str | None = None
    # how many nested ``referenced_message`` objects a message may carry
    max_reference_depth: int = 2

    @classmethod
    def from_env(cls) -> "Settings":
        log_dir = os.getenv("CHATWIRE_LOG_DIR") or None
        return cls(
            log_level=_env_level("CHATWIRE_LOG_LEVEL", cls.log_level),
            log_dir=log_dir,
            max_reference_depth=_env_int("CHATWIRE_MAX_REFERENCE_DEPTH", cls.max_reference_depth),
        )


settings = Settings.from_env()

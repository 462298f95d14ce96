from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_GENERAL_CATEGORY_NAME = "General"


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime settings read from the process environment."""

    database_url: str | None
    log_level: str
    general_category_name: str


def get_settings() -> Settings:
    return Settings(
        database_url=os.environ.get("DATABASE_URL") or None,
        log_level=os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        general_category_name=os.environ.get(
            "GENERAL_CATEGORY_NAME", DEFAULT_GENERAL_CATEGORY_NAME
        ),
    )


def get_general_category_name() -> str:
    return get_settings().general_category_name

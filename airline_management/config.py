"""Runtime settings for the airline management console."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

DEFAULT_DB_URL = "sqlite+pysqlite:///airline.db"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    db_url: str = DEFAULT_DB_URL
    log_level: str = "WARNING"
    echo_sql: bool = False


def load_settings(*, dotenv: bool = True) -> Settings:
    """Build settings from the environment, reading ``.env`` first when present."""

    if dotenv:
        load_dotenv(find_dotenv(usecwd=True))
    return Settings(
        db_url=os.environ.get("AIRLINE_DB_URL", DEFAULT_DB_URL),
        log_level=os.environ.get("AIRLINE_LOG_LEVEL", "WARNING").upper(),
        echo_sql=os.environ.get("AIRLINE_ECHO_SQL", "").strip().lower() in _TRUTHY,
    )

# cinedb/core/config.py
import json
import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

VERSION = "1.0.0"

CONFIG_ENV = "CINEDB_CONFIG"
DSN_ENV = "CINEDB_DB_DSN"

_DURATION_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_UNIT_SECONDS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


def parse_duration(value: str) -> float:
    """
    Convert a duration string such as "15m", "90s" or "1h30m" to seconds.
    """
    text = value.strip()
    if not text:
        raise ValueError(f"invalid duration {value!r}")
    pos = 0
    total = 0.0
    for m in _DURATION_RE.finditer(text):
        if m.start() != pos:
            break
        total += float(m.group(1)) * _UNIT_SECONDS[m.group(2)]
        pos = m.end()
    if pos != len(text):
        raise ValueError(f"invalid duration {value!r}")
    return total


# ─── Validated settings models ───────────────────────────────────────────────
class DatabaseSettings(BaseModel):
    dsn: str = ""
    max_open_conns: int = Field(25, ge=1, description="Pool max size")
    max_idle_conns: int = Field(25, ge=0, description="Connections kept warm")
    max_idle_time: str = Field("15m", description="Idle lifetime before a pooled connection is closed")
    query_timeout: float = Field(3.0, gt=0, description="Per-operation deadline (seconds)")
    connect_timeout: float = Field(5.0, gt=0, description="Startup ping deadline (seconds)")

    @field_validator("max_idle_time")
    @classmethod
    def _check_duration(cls, v: str) -> str:
        parse_duration(v)
        return v

    @property
    def max_idle_seconds(self) -> float:
        return parse_duration(self.max_idle_time)


class Settings(BaseModel):
    port: int = Field(4000, ge=1, le=65535)
    env: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    db: DatabaseSettings = Field(default_factory=DatabaseSettings)

    enable_testcontainers: bool = Field(
        False,
        description="Start a throwaway PostgreSQL Docker container instead of using db.dsn",
    )
    testcontainers_image: str = "postgres:16-alpine"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {v!r}")
        return level


# ─── Loaders ─────────────────────────────────────────────────────────────────
def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Build Settings from an optional JSON file, falling back to defaults.
    The DSN may also come from the CINEDB_DB_DSN environment variable.
    """
    if path is None and os.getenv(CONFIG_ENV):
        path = Path(os.environ[CONFIG_ENV])

    data: dict = {}
    if path is not None:
        with Path(path).open(encoding="utf-8") as f:
            data = json.load(f)

    db = data.setdefault("db", {})
    if not db.get("dsn") and os.getenv(DSN_ENV):
        db["dsn"] = os.environ[DSN_ENV]
    return Settings(**data)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide Settings, read once and cached."""
    return load_settings()


def reload_settings() -> None:
    """Clear the cache so the next get_settings() re-reads the file."""
    get_settings.cache_clear()

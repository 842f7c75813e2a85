"""Process-wide configuration for record models.

Table prefixing, primary-key naming and timestamp stamping are static
process configuration rather than per-call arguments. ``RecordSettings``
reads them from ``RECORDSPINE_*`` environment variables (or a ``.env`` file)
and validates them once at startup.

Examples:
    >>> import os
    >>> os.environ["RECORDSPINE_TABLE_PREFIX"] = "app_"
    >>> RecordSettings().table_prefix
    'app_'

Class attributes declared on a :class:`~recordspine.model.RecordModel`
subclass take precedence over these values.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DateFormat = Literal["int", "datetime", "date"]


class RecordSettings(BaseSettings):
    """Settings shared by every record model in the process.

    Fields
    ──────
    table_prefix     : Prepended to every table name by ``model.table()``
    primary_key      : Default primary-key column
    date_format      : Rendering of auto-stamped timestamps
    created_field    : Column stamped on insert
    modified_field   : Column stamped on update
    skip_validation  : Instance-wide default for write calls
    database_url     : Used by ``create_storage()`` when no engine is given
    log_level        : Structlog log level
    log_json         : JSON renderer (None = auto-detect from tty)
    """

    model_config = SettingsConfigDict(
        env_prefix="RECORDSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Tables ───────────────────────────────────────────────────
    table_prefix: str = ""
    primary_key: str = Field(default="id", min_length=1)

    # ── Stamping ─────────────────────────────────────────────────
    date_format: DateFormat = "datetime"
    created_field: str = "created_on"
    modified_field: str = "modified_on"

    # ── Validation ───────────────────────────────────────────────
    skip_validation: bool = False

    # ── Storage ──────────────────────────────────────────────────
    database_url: str = "sqlite:///recordspine.db"

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None


@lru_cache(maxsize=1)
def get_settings() -> RecordSettings:
    """Return the cached process settings."""
    return RecordSettings()


__all__ = [
    "DateFormat",
    "RecordSettings",
    "get_settings",
]

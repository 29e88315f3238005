"""Pydantic models for the embed resolver."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from embedengine.clock import as_utc


class CacheEntry(BaseModel):
    """A cached resolution for one source URL.

    Serialized as ``{"url": ..., "timestamp": ...}``; the source URL is the
    key of the record in the cache file, not a field of it.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source_url: str = Field(exclude=True)
    resolved_url: str = Field(alias="url")
    resolved_at: datetime = Field(alias="timestamp")

    @field_validator("resolved_at")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class SourceConfig(BaseModel):
    """Persisted user configuration: which source page to resolve."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    default_video_url: str = Field(default="", alias="defaultVideoUrl")

"""Process settings and the persisted source-URL configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from pydantic import ValidationError

from embedengine.cache import CorruptCachePolicy
from embedengine.exceptions import StorageError
from embedengine.logger import get_logger
from embedengine.models import SourceConfig

log = get_logger(__name__)


@dataclass
class Settings:
    """Settings loaded from ``EMBED_*`` environment variables."""

    cache_file: Path = Path("video_cache.json")
    config_file: Path = Path("config.json")
    cache_ttl_seconds: int = 3600
    launch_timeout_ms: int = 30_000
    navigation_timeout_ms: int = 20_000
    frame_marker: str = "rutube"
    source_url_prefix: str = "https://yandex.ru/video/preview/"
    corrupt_cache_policy: CorruptCachePolicy = CorruptCachePolicy.RAISE
    headless: bool = True
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    log_format: str = "console"

    def __post_init__(self) -> None:
        if self.navigation_timeout_ms >= self.launch_timeout_ms:
            raise ValueError(
                "navigation_timeout_ms must be shorter than launch_timeout_ms"
            )
        if self.cache_ttl_seconds <= 0:
            raise ValueError("cache_ttl_seconds must be positive")

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(seconds=self.cache_ttl_seconds)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        return cls(
            cache_file=Path(os.environ.get("EMBED_CACHE_FILE", "video_cache.json")),
            config_file=Path(os.environ.get("EMBED_CONFIG_FILE", "config.json")),
            cache_ttl_seconds=int(os.environ.get("EMBED_CACHE_TTL", "3600")),
            launch_timeout_ms=int(os.environ.get("EMBED_LAUNCH_TIMEOUT_MS", "30000")),
            navigation_timeout_ms=int(
                os.environ.get("EMBED_NAVIGATION_TIMEOUT_MS", "20000")
            ),
            frame_marker=os.environ.get("EMBED_FRAME_MARKER", "rutube"),
            source_url_prefix=os.environ.get(
                "EMBED_SOURCE_URL_PREFIX", "https://yandex.ru/video/preview/"
            ),
            corrupt_cache_policy=CorruptCachePolicy(
                os.environ.get("EMBED_CORRUPT_CACHE_POLICY", "raise").lower()
            ),
            headless=os.environ.get("EMBED_HEADLESS", "true").lower() == "true",
            host=os.environ.get("EMBED_HOST", "0.0.0.0"),
            port=int(os.environ.get("EMBED_PORT", "3000")),
            log_level=os.environ.get("EMBED_LOG_LEVEL", "INFO").upper(),
            log_format=os.environ.get("EMBED_LOG_FORMAT", "console").lower(),
        )


class ConfigStore:
    """Reads and writes the source-URL configuration file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read(self) -> SourceConfig:
        """Load the configuration, or defaults if the file does not exist."""
        if not self.path.exists():
            return SourceConfig()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return SourceConfig.model_validate(data)
        except OSError as exc:
            raise StorageError(str(self.path), f"Cannot read config: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            raise StorageError(str(self.path), f"Invalid config: {exc}") from exc

    def write(self, config: SourceConfig) -> None:
        """Persist the configuration, replacing the previous file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                config.model_dump_json(indent=2, by_alias=True),
                encoding="utf-8",
            )
        except OSError as exc:
            raise StorageError(str(self.path), f"Cannot write config: {exc}") from exc
        log.info("config_saved", path=str(self.path))

    def source_url(self) -> str:
        """The currently configured source URL (empty if unset)."""
        return self.read().default_video_url

    def set_source_url(self, url: str) -> SourceConfig:
        """Update the source URL, keeping any other stored keys."""
        config = self.read()
        config.default_video_url = url
        self.write(config)
        return config

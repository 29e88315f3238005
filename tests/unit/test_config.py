"""Tests for settings and the source-URL config store."""

import json
from datetime import timedelta
from pathlib import Path

import pytest

from embedengine.cache import CorruptCachePolicy
from embedengine.config import ConfigStore, Settings
from embedengine.exceptions import StorageError
from embedengine.models import SourceConfig


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.cache_file == Path("video_cache.json")
        assert settings.config_file == Path("config.json")
        assert settings.cache_ttl == timedelta(hours=1)
        assert settings.launch_timeout_ms == 30_000
        assert settings.navigation_timeout_ms == 20_000
        assert settings.frame_marker == "rutube"
        assert settings.port == 3000
        assert settings.corrupt_cache_policy is CorruptCachePolicy.RAISE

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EMBED_CACHE_FILE", "/tmp/cache.json")
        monkeypatch.setenv("EMBED_CACHE_TTL", "60")
        monkeypatch.setenv("EMBED_FRAME_MARKER", "vk.com")
        monkeypatch.setenv("EMBED_CORRUPT_CACHE_POLICY", "RESET")
        monkeypatch.setenv("EMBED_HEADLESS", "false")
        monkeypatch.setenv("EMBED_PORT", "8080")
        monkeypatch.setenv("EMBED_LOG_FORMAT", "JSON")

        settings = Settings.from_env()

        assert settings.cache_file == Path("/tmp/cache.json")
        assert settings.cache_ttl == timedelta(seconds=60)
        assert settings.frame_marker == "vk.com"
        assert settings.corrupt_cache_policy is CorruptCachePolicy.RESET
        assert settings.headless is False
        assert settings.port == 8080
        assert settings.log_format == "json"

    def test_navigation_timeout_must_be_below_launch_timeout(self) -> None:
        with pytest.raises(ValueError, match="navigation_timeout_ms"):
            Settings(launch_timeout_ms=10_000, navigation_timeout_ms=10_000)

    def test_ttl_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="cache_ttl_seconds"):
            Settings(cache_ttl_seconds=0)

    def test_unknown_corrupt_policy_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EMBED_CORRUPT_CACHE_POLICY", "ignore")
        with pytest.raises(ValueError):
            Settings.from_env()


class TestConfigStore:
    def test_missing_file_gives_empty_url(self, tmp_path: Path) -> None:
        store = ConfigStore(tmp_path / "config.json")
        assert store.read() == SourceConfig()
        assert store.source_url() == ""

    def test_reads_original_key(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps({"defaultVideoUrl": "https://yandex.ru/video/preview/42"}),
            encoding="utf-8",
        )
        assert ConfigStore(path).source_url() == "https://yandex.ru/video/preview/42"

    def test_set_source_url_round_trips(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        store = ConfigStore(path)
        store.set_source_url("https://yandex.ru/video/preview/7")

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == {"defaultVideoUrl": "https://yandex.ru/video/preview/7"}
        assert ConfigStore(path).source_url() == "https://yandex.ru/video/preview/7"

    def test_set_source_url_keeps_other_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps({"defaultVideoUrl": "old", "theme": "dark"}),
            encoding="utf-8",
        )
        ConfigStore(path).set_source_url("new")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == {"defaultVideoUrl": "new", "theme": "dark"}

    def test_corrupt_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("not json", encoding="utf-8")
        with pytest.raises(StorageError, match="Invalid config"):
            ConfigStore(path).read()

    def test_unwritable_path_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")
        with pytest.raises(StorageError, match="Cannot write config"):
            ConfigStore(blocker / "config.json").write(SourceConfig())

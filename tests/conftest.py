"""Shared test fixtures for the embed resolver."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from embedengine.browser import BrowserSession
from embedengine.cache import CacheStore
from embedengine.clock import FixedClock
from embedengine.exceptions import NavigationError, SessionStartupError

# Path to test fixtures
FIXTURES_DIR = Path(__file__).parent / "fixtures"
PAGES_DIR = FIXTURES_DIR / "pages"

SOURCE_URL = "https://yandex.ru/video/preview/123456789"
EMBED_URL = "https://rutube.ru/play/embed/abc123"

_SRC_CONTAINS = re.compile(r'src\*="([^"]+)"')


class FakeElement:
    """Element handle with a fixed attribute map."""

    def __init__(self, attrs: dict[str, str]) -> None:
        self.attrs = attrs

    async def get_attribute(self, name: str) -> str | None:
        return self.attrs.get(name)


class FakeSession(BrowserSession):
    """Browser session over an in-memory set of documents.

    Each document is a list of frame attribute maps.
    """

    def __init__(self, spy: SessionSpy) -> None:
        self._spy = spy
        self._frames: list[dict[str, str]] | None = None

    async def start(self) -> None:
        self._spy.opened += 1
        if self._spy.startup_error:
            raise SessionStartupError(self._spy.startup_error)

    async def navigate(self, url: str) -> None:
        self._spy.navigated.append(url)
        if url not in self._spy.pages:
            raise NavigationError("net::ERR_NAME_NOT_RESOLVED", source_url=url)
        self._frames = self._spy.pages[url]

    async def query_selector(self, selector: str) -> FakeElement | None:
        self._spy.selectors.append(selector)
        markers = _SRC_CONTAINS.findall(selector)
        for attrs in self._frames or []:
            src = attrs.get("src", "")
            if any(marker in src for marker in markers):
                return FakeElement(attrs)
        return None

    async def close(self) -> None:
        self._spy.closed += 1


class SessionSpy:
    """Session factory that counts opened and closed sessions."""

    def __init__(self, pages: dict[str, list[dict[str, str]]] | None = None) -> None:
        self.pages = pages or {}
        self.startup_error: str | None = None
        self.opened = 0
        self.closed = 0
        self.navigated: list[str] = []
        self.selectors: list[str] = []

    def __call__(self) -> FakeSession:
        return FakeSession(self)


class CountingResolver:
    """Resolver stand-in returning a canned value or raising an error."""

    def __init__(self, result: str = EMBED_URL, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[str] = []

    async def resolve(self, source_url: str) -> str:
        self.calls.append(source_url)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def pages_dir() -> Path:
    """Path to static HTML source pages."""
    return PAGES_DIR


@pytest.fixture
def t0() -> datetime:
    return datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(t0: datetime) -> FixedClock:
    return FixedClock(t0)


@pytest.fixture
def cache_path(tmp_path: Path) -> Path:
    return tmp_path / "video_cache.json"


@pytest.fixture
def cache(cache_path: Path) -> CacheStore:
    return CacheStore(cache_path)


@pytest.fixture
def session_spy() -> SessionSpy:
    """Session factory knowing one source page with a provider frame."""
    return SessionSpy(
        pages={
            SOURCE_URL: [
                {"src": "https://ads.example.com/banner"},
                {"src": EMBED_URL, "allowfullscreen": ""},
            ],
        }
    )


@pytest.fixture
def make_resolver() -> Any:
    def _make(result: str = EMBED_URL, error: Exception | None = None) -> CountingResolver:
        return CountingResolver(result=result, error=error)

    return _make


@pytest.fixture
def source_url() -> str:
    return SOURCE_URL


@pytest.fixture
def embed_url() -> str:
    return EMBED_URL


@pytest.fixture
def make_spy() -> Any:
    def _make(pages: dict[str, list[dict[str, str]]] | None = None) -> SessionSpy:
        return SessionSpy(pages=pages)

    return _make

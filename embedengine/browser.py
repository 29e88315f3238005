"""Browser sessions used to load source pages."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from playwright.async_api import (
    Browser,
    BrowserContext,
    ElementHandle,
    Page,
    Playwright,
    Route,
    async_playwright,
)
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from embedengine.exceptions import ExtractionError, NavigationError, SessionStartupError
from embedengine.logger import get_logger

log = get_logger(__name__)

LAUNCH_TIMEOUT_MS = 30_000
NAVIGATION_TIMEOUT_MS = 20_000
LAUNCH_ARGS = ("--no-sandbox", "--disable-setuid-sandbox")

# Frame navigations are reported as "document"; "iframe" is kept for engines
# that tag them separately.
ALLOWED_RESOURCE_TYPES = frozenset({"document", "iframe"})


class ElementLike(Protocol):
    """The part of an element handle the resolver needs."""

    async def get_attribute(self, name: str) -> str | None: ...


class BrowserSession(ABC):
    """A short-lived, isolated browser session.

    Use as an async context manager: ``start`` runs on entry and ``close``
    on every exit path. A ``start`` that fails half-way releases whatever it
    already acquired before raising.
    """

    @abstractmethod
    async def start(self) -> None:
        """Launch the engine and open a filtered page."""

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """Load ``url`` until its DOM is parsed."""

    @abstractmethod
    async def query_selector(self, selector: str) -> ElementLike | None:
        """Return the first element matching ``selector``, or None."""

    @abstractmethod
    async def close(self) -> None:
        """Release every resource held by the session. Never raises."""

    async def __aenter__(self) -> BrowserSession:
        try:
            await self.start()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()


async def filter_request(route: Route) -> None:
    """Let documents and frames through, abort every other request."""
    if route.request.resource_type in ALLOWED_RESOURCE_TYPES:
        await route.continue_()
    else:
        await route.abort()


class PlaywrightElement:
    """Element handle whose reads raise :class:`ExtractionError`."""

    def __init__(self, handle: ElementHandle, source_url: str | None = None) -> None:
        self.handle = handle
        self.source_url = source_url

    async def get_attribute(self, name: str) -> str | None:
        try:
            return await self.handle.get_attribute(name)
        except PlaywrightError as exc:
            raise ExtractionError(exc.message, source_url=self.source_url) from exc


class PlaywrightSession(BrowserSession):
    """Headless Chromium session that only loads markup."""

    def __init__(
        self,
        headless: bool = True,
        launch_timeout_ms: int = LAUNCH_TIMEOUT_MS,
        navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS,
    ) -> None:
        self._headless = headless
        self._launch_timeout_ms = launch_timeout_ms
        self._navigation_timeout_ms = navigation_timeout_ms
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None
        self._url: str | None = None

    async def start(self) -> None:
        """Launch browser, open a context and a page with request filtering."""
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._headless,
                args=list(LAUNCH_ARGS),
                timeout=self._launch_timeout_ms,
            )
            self._context = await self._browser.new_context()
            self._page = await self._context.new_page()
            await self._page.route("**/*", filter_request)
            log.info("browser_started", headless=self._headless)
        except Exception as exc:
            raise SessionStartupError(str(exc)) from exc

    async def navigate(self, url: str) -> None:
        page = self._require_page()
        self._url = url
        try:
            response = await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self._navigation_timeout_ms,
            )
        except PlaywrightTimeoutError as exc:
            raise NavigationError(
                f"Timed out after {self._navigation_timeout_ms} ms", source_url=url
            ) from exc
        except PlaywrightError as exc:
            raise NavigationError(exc.message, source_url=url) from exc
        log.debug(
            "page_loaded",
            url=url,
            status=response.status if response is not None else None,
        )

    async def query_selector(self, selector: str) -> ElementLike | None:
        page = self._require_page()
        try:
            handle = await page.query_selector(selector)
        except PlaywrightError as exc:
            # e.g. a redirect after DOMContentLoaded destroys the context
            raise ExtractionError(exc.message, source_url=self._url) from exc
        if handle is None:
            return None
        return PlaywrightElement(handle, source_url=self._url)

    async def close(self) -> None:
        """Close page, context, browser and driver, each independently."""
        closers: list[tuple[str, Callable[[], Awaitable[None]]]] = []
        if self._page and not self._page.is_closed():
            closers.append(("page", self._page.close))
        if self._context:
            closers.append(("context", self._context.close))
        if self._browser:
            closers.append(("browser", self._browser.close))
        if self._playwright:
            closers.append(("playwright", self._playwright.stop))

        for resource, closer in closers:
            try:
                await closer()
            except Exception as exc:
                log.warning("browser_stop_error", resource=resource, error=str(exc))

        self._page = None
        self._url = None
        self._context = None
        self._browser = None
        self._playwright = None
        if closers:
            log.info("browser_stopped")

    def _require_page(self) -> Page:
        if self._page is None or self._page.is_closed():
            raise SessionStartupError("Browser session not started")
        return self._page

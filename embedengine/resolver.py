"""Resolve a source page to the embedded player URL it contains."""

from __future__ import annotations

import time
from collections.abc import Callable

from embedengine.browser import BrowserSession, PlaywrightSession
from embedengine.exceptions import ExtractionError
from embedengine.logger import get_logger

log = get_logger(__name__)

DEFAULT_FRAME_MARKER = "rutube"


def frame_selector(marker: str) -> str:
    """CSS selector for frame elements whose src contains ``marker``."""
    escaped = marker.replace("\\", "\\\\").replace('"', '\\"')
    return f'iframe[src*="{escaped}"], frame[src*="{escaped}"]'


class EmbedResolver:
    """Loads a source page in a fresh browser session and extracts the
    ``src`` of the provider frame.

    Every call opens its own session and closes it before returning or
    raising. Errors are not retried.
    """

    def __init__(
        self,
        session_factory: Callable[[], BrowserSession] | None = None,
        frame_marker: str = DEFAULT_FRAME_MARKER,
    ) -> None:
        if not frame_marker:
            raise ValueError("frame_marker must not be empty")
        self._session_factory = session_factory or PlaywrightSession
        self.frame_marker = frame_marker
        self._selector = frame_selector(frame_marker)

    async def resolve(self, source_url: str) -> str:
        """Return the embedded frame URL found in ``source_url``.

        Raises:
            SessionStartupError: If the browser cannot be launched.
            NavigationError: If the page cannot be loaded in time.
            ExtractionError: If no usable provider frame is on the page.
        """
        start = time.monotonic()
        async with self._session_factory() as session:
            await session.navigate(source_url)

            element = await session.query_selector(self._selector)
            if element is None:
                raise ExtractionError("target frame not found", source_url=source_url)

            src = await element.get_attribute("src")
            if not src:
                raise ExtractionError(
                    "target frame has no src attribute", source_url=source_url
                )

        log.info(
            "embed_resolved",
            source_url=source_url,
            resolved_url=src,
            duration_ms=round((time.monotonic() - start) * 1000, 1),
        )
        return src

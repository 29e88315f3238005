"""Embed resolver exception hierarchy."""

from __future__ import annotations


class EmbedResolverError(Exception):
    """Base exception for all embed resolver errors."""


class StorageError(EmbedResolverError):
    """Raised when a backing file cannot be read, written or parsed."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Storage error for '{path}': {detail}")


class ConfigError(EmbedResolverError):
    """Raised when the process configuration cannot be used."""


class ResolutionError(EmbedResolverError):
    """Base exception for a failed resolution attempt.

    ``source_url`` is ``None`` when the failure happened before a URL was
    involved, e.g. while launching the browser.
    """

    prefix = "Resolution failed"

    def __init__(self, detail: str, source_url: str | None = None) -> None:
        self.detail = detail
        self.source_url = source_url
        msg = self.prefix
        if source_url:
            msg += f" for '{source_url}'"
        super().__init__(f"{msg}: {detail}")


class SessionStartupError(ResolutionError):
    """Raised when the browser engine fails to launch."""

    prefix = "Browser failed to start"


class NavigationError(ResolutionError):
    """Raised on a timeout or network failure reaching the source page."""

    prefix = "Navigation failed"


class ExtractionError(ResolutionError):
    """Raised when the page loaded but the target frame is absent or empty."""

    prefix = "Extraction failed"

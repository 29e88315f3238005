"""Find embedded players in source pages and cache them."""

from embedengine.cache import DEFAULT_TTL, CacheStore, CorruptCachePolicy
from embedengine.clock import Clock, FixedClock, SystemClock
from embedengine.config import ConfigStore, Settings
from embedengine.exceptions import (
    ConfigError,
    EmbedResolverError,
    ExtractionError,
    NavigationError,
    ResolutionError,
    SessionStartupError,
    StorageError,
)
from embedengine.models import CacheEntry, SourceConfig
from embedengine.resolver import EmbedResolver
from embedengine.service import EmbedService

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_TTL",
    "CacheEntry",
    "CacheStore",
    "Clock",
    "ConfigError",
    "ConfigStore",
    "CorruptCachePolicy",
    "EmbedResolver",
    "EmbedResolverError",
    "EmbedService",
    "ExtractionError",
    "FixedClock",
    "NavigationError",
    "ResolutionError",
    "SessionStartupError",
    "Settings",
    "SourceConfig",
    "StorageError",
    "SystemClock",
    "__version__",
]

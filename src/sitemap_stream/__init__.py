"""Streaming sitemap generator with size-capped segments and a sitemap index."""

from .config import SitemapSettings, load_settings
from .entry import SitemapEntry, normalize_entry
from .errors import InvalidConfigError, InvalidEntryError, SessionFailedError, SitemapError
from .events import Drain, IndexCreated, SegmentCreated, SessionDone, StreamError
from .stream import SitemapStream

__version__ = "0.1.0"

__all__ = [
    "Drain",
    "IndexCreated",
    "InvalidConfigError",
    "InvalidEntryError",
    "SegmentCreated",
    "SessionDone",
    "SessionFailedError",
    "SitemapEntry",
    "SitemapError",
    "SitemapSettings",
    "SitemapStream",
    "StreamError",
    "load_settings",
    "normalize_entry",
]

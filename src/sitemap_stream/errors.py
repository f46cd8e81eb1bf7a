"""Exception types raised by the sitemap stream."""


class SitemapError(Exception):
    """Base class for sitemap stream errors."""


class InvalidConfigError(SitemapError, ValueError):
    """Raised when session settings fail validation."""


class InvalidEntryError(SitemapError, ValueError):
    """Raised when an injected entry is malformed."""


class SessionFailedError(SitemapError):
    """Raised by join() when an asynchronous write or compression failed."""

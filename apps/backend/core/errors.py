"""
Crawl error taxonomy.

Fatal errors abort the whole run; ItemSkipped only drops a single item.
"""
from typing import Optional


class CrawlError(Exception):
    """Base class for all crawl errors."""
    pass


class InvalidInput(CrawlError):
    """Raised when the run input is missing required values."""
    pass


class NoLocationFound(CrawlError):
    """Raised when the location lookup returns no candidates."""

    def __init__(self, location: str):
        self.location = location
        super().__init__(f"No locations found for {location!r}")


class BudgetUnresolvable(CrawlError):
    """Raised when the total result count cannot be read from the first page."""

    def __init__(self, raw_value: Optional[str]):
        self.raw_value = raw_value
        super().__init__(f"Failed to parse results count from {raw_value!r}")


class NoResultsFound(CrawlError):
    """Raised when the listing stage produced nothing to enrich."""
    pass


class FetchError(CrawlError):
    """Raised for any non-2xx response, or a body that cannot be decoded."""

    def __init__(self, url: str, status_code: int, reason: Optional[str] = None):
        self.url = url
        self.status_code = status_code
        self.reason = reason
        message = f"GET {url} failed with status {status_code}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ServiceOverloaded(FetchError):
    """Raised when the site answers with its rate-limit status."""
    pass


class ItemSkipped(CrawlError):
    """Raised by item handlers for recoverable, per-item problems."""
    pass

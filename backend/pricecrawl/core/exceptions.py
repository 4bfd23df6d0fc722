"""Custom exception classes for the crawler."""


class PriceCrawlException(Exception):
    """Base exception for all pricecrawl errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class SourceNotFoundError(PriceCrawlException):
    """Raised when a requested crawl source is not registered."""

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"Crawl source '{source}' not found")


class FetchError(PriceCrawlException):
    """Raised when a catalog page cannot be fetched."""

    def __init__(self, source: str, url: str, message: str):
        self.source = source
        self.url = url
        super().__init__(f"Fetch error for {source} ({url}): {message}")

"""Exception types raised by collectors, parsers and workflows."""


class ScorerError(Exception):
    """Base class for all errors raised by this package."""


class CollectorError(ScorerError):
    """An external collaborator (page fetch, DNS, LLM) failed for one item."""


class ScrapeError(CollectorError):
    """A product page could not be fetched or returned a non-2xx status."""

    def __init__(self, url: str, message: str):
        super().__init__(f"Failed to fetch {url}: {message}")
        self.url = url


class LLMResponseError(ScorerError):
    """The LLM reply was not well-formed JSON after fence stripping."""


class InputValidationError(ScorerError, ValueError):
    """Missing target, malformed URL or empty target list."""

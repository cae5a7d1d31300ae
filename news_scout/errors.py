"""
Error taxonomy for the resolution + extraction pipeline.

Every error carries the HTTP status code the orchestrator reports for it.
Fetch errors additionally record the URL, how many attempts were made and
whether the executor is allowed to retry them.

Hierarchy:
- NewsScoutError
  - InputError (400)
  - FetchError
    - NetworkError (500, 400 on DNS failure)
    - FetchTimeoutError (408)
    - BlockedError (403)
    - NotFoundError (404)
    - HttpStatusError (500)
  - ResolutionFailure (soft, 200)
  - ExtractionInsufficient (soft, 200)
  - DiscoveryError (500 or the status of the chained fetch error)
"""

from __future__ import annotations


class NewsScoutError(Exception):
    """Base class for all pipeline errors."""

    status_code: int = 500
    retriable: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputError(NewsScoutError):
    """Malformed or missing request input (bad URL, bad limit, ...)."""

    status_code = 400


class FetchError(NewsScoutError):
    """A fetch that did not produce a usable response body.

    Attributes:
        url: The URL that was requested
        attempts: Number of attempts made before giving up
    """

    def __init__(self, message: str, url: str, attempts: int = 1):
        super().__init__(message)
        self.url = url
        self.attempts = attempts


class NetworkError(FetchError):
    """Connection-level failure (DNS, refused connection, reset, TLS)."""

    retriable = True

    def __init__(self, message: str, url: str, attempts: int = 1, dns_failure: bool = False):
        super().__init__(message, url, attempts)
        self.dns_failure = dns_failure

    @property
    def status_code(self) -> int:  # type: ignore[override]
        return 400 if self.dns_failure else 500


class FetchTimeoutError(FetchError):
    status_code = 408
    retriable = True


class BlockedError(FetchError):
    """The target site refused us (HTTP 403 or a blocking page)."""

    status_code = 403
    retriable = True

    def __init__(self, message: str, url: str, attempts: int = 1, marker: str | None = None):
        super().__init__(message, url, attempts)
        self.marker = marker


class NotFoundError(FetchError):
    status_code = 404


class HttpStatusError(FetchError):
    """Any other non-success HTTP status.

    429 and 5xx responses are treated as transient and retried; other
    4xx statuses abort immediately.
    """

    def __init__(self, message: str, url: str, status: int, attempts: int = 1):
        super().__init__(message, url, attempts)
        self.status = status
        self.retriable = status == 429 or status >= 500


class ResolutionFailure(NewsScoutError):
    """An aggregator link could not be de-indirected."""

    status_code = 200


class ExtractionInsufficient(NewsScoutError):
    """The page was fetched but yielded too little content."""

    status_code = 200


class DiscoveryError(NewsScoutError):
    """Candidate discovery failed for every configured source."""

    @property
    def status_code(self) -> int:  # type: ignore[override]
        cause = self.__cause__
        if isinstance(cause, NewsScoutError):
            return cause.status_code
        return 500


def status_for_error(exc: BaseException) -> int:
    """Map any exception to the HTTP status reported to the caller."""
    if isinstance(exc, NewsScoutError):
        return exc.status_code
    return 500
